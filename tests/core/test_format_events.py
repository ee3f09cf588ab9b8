"""Event Formatting — enriched records and channel frames keep the wire contract."""

from datetime import datetime, timezone
from types import SimpleNamespace

from socialhub.core.format_events import (
    message_received_event, message_sent_event, notification_event,
    public_profile, serialize_message, serialize_notification,
)

ALICE = SimpleNamespace(
    id=1, username="alice", name="Alice", profile_picture=None, bio="secret",
)


def test_public_profile_exposes_only_public_fields():
    assert public_profile(ALICE) == {
        "id": 1, "username": "alice", "name": "Alice", "profilePicture": "",
    }


def test_serialize_message_is_camel_case_with_iso_timestamp():
    message = SimpleNamespace(
        id=10, sender_id=1, receiver_id=2, content="hi", read=False,
        created_at=datetime(2026, 3, 1, 9, 30),
    )
    data = serialize_message(message, ALICE)

    assert data["senderId"] == 1
    assert data["receiverId"] == 2
    assert data["createdAt"] == "2026-03-01T09:30:00+00:00"
    assert data["sender"]["username"] == "alice"


def test_serialize_notification_carries_actor():
    notification = SimpleNamespace(
        id=3, user_id=2, actor_id=1, type="follow", entity_id=None, read=False,
        created_at=datetime(2026, 3, 1, tzinfo=timezone.utc),
    )
    data = serialize_notification(notification, ALICE)

    assert data["userId"] == 2
    assert data["actorId"] == 1
    assert data["entityId"] is None
    assert data["actor"]["name"] == "Alice"


def test_event_envelopes():
    payload = {"id": 1}
    assert message_sent_event(payload) == {"type": "message_sent", "message": payload}
    assert message_received_event(payload) == {"type": "message_received", "message": payload}
    assert notification_event(payload) == {"type": "notification", "notification": payload}
