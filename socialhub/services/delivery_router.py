"""Delivery Router — persist, acknowledge, route and notify for every inbound event.

Invariants:
    - Persistence happens-before any push; a rejected send pushes nothing
    - Malformed channel payloads are dropped with a log entry and no acknowledgment
    - Gateway rejections (validation, persistence) answer the sender with an error ack
    - The sender's ack carries the persisted, enriched message (same id the receiver sees)
    - Offline receivers are a silent branch: nothing is queued, the next fetch recovers it
    - Notifications are skipped when actor == target
    - Delivery-side failures (push errors, notification errors) never roll back the message

Design Decisions:
    - Router holds only the ConnectionRegistry; the gateway is passed per call
      because it is bound to a per-request/per-event DB session
    - One pipeline for channel and REST sends; they differ only in how the ack
      travels (channel frame vs HTTP response body)
    - A push whose send raises unregisters that channel (it is dead)
"""

import logging
from dataclasses import dataclass

from pydantic import ValidationError

from socialhub.core.conversations import should_notify
from socialhub.core.domain_types import (
    DeliveryState, NotificationType, PostId, UserId,
)
from socialhub.core.errors import (
    AlreadyFollowingError, NotFollowingError, ResourceNotFoundError,
    SelfFollowError, SocialHubError,
)
from socialhub.core.format_events import (
    message_received_event, message_sent_event, notification_event,
)
from socialhub.core.repository_protocols import Channel
from socialhub.infrastructure.connection_registry import ConnectionRegistry
from socialhub.schemas.realtime import SendFrame
from socialhub.services.persistence_gateway import PersistenceGateway
from socialhub.services.social_graph import SocialGraphStore

logger = logging.getLogger(__name__)


@dataclass
class DeliveryResult:
    """Where one send ended up in the pipeline."""
    state: DeliveryState
    message: dict | None = None
    pushed: bool = False
    notification: dict | None = None
    error: SocialHubError | None = None

    @property
    def accepted(self) -> bool:
        return self.state != DeliveryState.REJECTED


class DeliveryRouter:
    """Fans persisted events out to online recipients."""

    def __init__(self, registry: ConnectionRegistry):
        self.registry = registry

    # ─── Push primitive ─────────────────────────────────────────

    async def push(self, user_id: UserId, event: dict) -> bool:
        """Send event to user_id's live channel. False when offline or the send failed."""
        channel = self.registry.lookup(user_id)
        if channel is None or not channel.is_open:
            logger.debug(
                f"User {user_id} offline, {event.get('type')} not pushed",
                extra={"user_id": user_id, "event_type": event.get("type")},
            )
            return False
        return await self._send(channel, event, user_id)

    async def _send(self, channel: Channel, event: dict, user_id: UserId | None) -> bool:
        try:
            await channel.send_json(event)
            return True
        except Exception as e:
            logger.warning(
                f"Push of {event.get('type')} failed: {e}",
                extra={"user_id": user_id, "event_type": event.get("type")},
            )
            self.registry.unregister(channel)
            return False

    # ─── Chat sends ─────────────────────────────────────────────

    async def handle_channel_send(
        self, gateway: PersistenceGateway, channel: Channel, payload: dict,
    ) -> DeliveryResult:
        """Full pipeline for a send frame arriving on the sender's own channel."""
        try:
            frame = SendFrame.model_validate(payload)
        except ValidationError as e:
            logger.warning(
                f"Dropped malformed send payload: {e.error_count()} error(s)",
                extra={"event_type": "message"},
            )
            return DeliveryResult(DeliveryState.REJECTED)

        try:
            message = await gateway.create_message(
                frame.user_id, frame.receiver_id, frame.content,
            )
        except SocialHubError as e:
            logger.warning(
                f"Send rejected: {e.message}",
                extra={"user_id": frame.user_id, "error_code": e.code},
            )
            await self._send(channel, e.to_ws_event(), frame.user_id)
            return DeliveryResult(DeliveryState.REJECTED, error=e)

        enriched = await self._enrich_or_none(gateway, message)
        if enriched is None:
            return DeliveryResult(DeliveryState.PERSISTED)
        await self._send(channel, message_sent_event(enriched), frame.user_id)
        return await self._route_and_notify(
            gateway, enriched, DeliveryResult(DeliveryState.ACKNOWLEDGED, enriched),
        )

    async def send_message(
        self,
        gateway: PersistenceGateway,
        sender_id: UserId,
        receiver_id: UserId,
        content: str,
    ) -> DeliveryResult:
        """REST pipeline: errors propagate so the route answers 400/503; the
        returned message is the synchronous acknowledgment."""
        message = await gateway.create_message(sender_id, receiver_id, content)
        enriched = await gateway.enrich_message(message)
        return await self._route_and_notify(
            gateway, enriched, DeliveryResult(DeliveryState.ACKNOWLEDGED, enriched),
        )

    async def _enrich_or_none(self, gateway: PersistenceGateway, message) -> dict | None:
        try:
            return await gateway.enrich_message(message)
        except SocialHubError as e:
            logger.error(
                f"Message {message.id} persisted but could not be enriched: {e.message}",
                extra={"message_id": message.id, "error_code": e.code},
            )
            return None

    async def _route_and_notify(
        self, gateway: PersistenceGateway, enriched: dict, result: DeliveryResult,
    ) -> DeliveryResult:
        receiver_id = enriched["receiverId"]
        result.pushed = await self.push(receiver_id, message_received_event(enriched))
        result.state = DeliveryState.ROUTED
        result.notification = await self.notify(
            gateway, receiver_id, enriched["senderId"],
            NotificationType.MESSAGE, enriched["id"],
        )
        result.state = DeliveryState.NOTIFIED
        return result

    # ─── Notifications ──────────────────────────────────────────

    async def notify(
        self,
        gateway: PersistenceGateway,
        user_id: UserId,
        actor_id: UserId,
        type: NotificationType,
        entity_id: int | None = None,
    ) -> dict | None:
        """Create a notification for user_id and push it if they are online.

        Returns the enriched notification, or None when skipped or failed.
        """
        if not should_notify(actor_id, user_id):
            return None
        try:
            notification = await gateway.create_notification(
                user_id, actor_id, type, entity_id,
            )
            enriched = await gateway.enrich_notification(notification)
        except SocialHubError as e:
            logger.error(
                f"Notification for user {user_id} not created: {e.message}",
                extra={"user_id": user_id, "error_code": e.code},
            )
            return None
        await self.push(user_id, notification_event(enriched))
        return enriched

    # ─── Social actions (REST-triggered) ────────────────────────

    async def like_post(
        self,
        gateway: PersistenceGateway,
        graph: SocialGraphStore,
        actor_id: UserId,
        post_id: PostId,
    ) -> dict | None:
        """Increment likes, then notify the post owner. Repeated likes are not deduplicated."""
        post = await graph.get_post(post_id)
        if post is None:
            raise ResourceNotFoundError("Post", str(post_id))
        await graph.like_post(post_id)
        return await self.notify(
            gateway, post.user_id, actor_id, NotificationType.LIKE, post_id,
        )

    async def follow_user(
        self,
        gateway: PersistenceGateway,
        graph: SocialGraphStore,
        actor_id: UserId,
        target_id: UserId,
    ) -> dict | None:
        """Create the follow edge, then notify the followed user."""
        if actor_id == target_id:
            raise SelfFollowError()
        if await gateway.get_user(target_id) is None:
            raise ResourceNotFoundError("User", str(target_id))
        if await graph.is_following(actor_id, target_id):
            raise AlreadyFollowingError()
        await graph.follow(actor_id, target_id)
        return await self.notify(
            gateway, target_id, actor_id, NotificationType.FOLLOW,
        )

    async def unfollow_user(
        self, graph: SocialGraphStore, actor_id: UserId, target_id: UserId,
    ) -> None:
        if not await graph.unfollow(actor_id, target_id):
            raise NotFollowingError()
