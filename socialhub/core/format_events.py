"""Event Formatting — pure builders for enriched records and channel frames.

Invariants:
    - Wire keys are camelCase; timestamps are ISO-8601 strings
    - Enriched records carry exactly {id, username, name, profilePicture} of the actor
    - Builders never mutate their inputs

Design Decisions:
    - Plain dicts over Pydantic response models: frames are sent as-is through
      send_json and returned as-is from REST routes (one shape for both paths)
    - Duck-typed inputs: ORM rows and test doubles both work
"""

from datetime import datetime, timezone

from socialhub.core.domain_types import ChannelEventType
from socialhub.core.repository_protocols import PublicUser


def _iso(value: datetime | str) -> str:
    if isinstance(value, str):
        return value
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def public_profile(user: PublicUser) -> dict:
    """Minimal public projection of a user."""
    return {
        "id": user.id,
        "username": user.username,
        "name": user.name,
        "profilePicture": user.profile_picture or "",
    }


def serialize_message(message, sender: PublicUser) -> dict:
    """Message + sender projection (EnrichedMessage)."""
    return {
        "id": message.id,
        "senderId": message.sender_id,
        "receiverId": message.receiver_id,
        "content": message.content,
        "read": message.read,
        "createdAt": _iso(message.created_at),
        "sender": public_profile(sender),
    }


def serialize_notification(notification, actor: PublicUser) -> dict:
    """Notification + actor projection (EnrichedNotification)."""
    return {
        "id": notification.id,
        "userId": notification.user_id,
        "actorId": notification.actor_id,
        "type": notification.type,
        "entityId": notification.entity_id,
        "read": notification.read,
        "createdAt": _iso(notification.created_at),
        "actor": public_profile(actor),
    }


def message_sent_event(message: dict) -> dict:
    return {"type": ChannelEventType.MESSAGE_SENT.value, "message": message}


def message_received_event(message: dict) -> dict:
    return {"type": ChannelEventType.MESSAGE_RECEIVED.value, "message": message}


def notification_event(notification: dict) -> dict:
    return {"type": ChannelEventType.NOTIFICATION.value, "notification": notification}
