"""Notification Feed — pushes trigger targeted refetches and toast text."""

import pytest

from socialhub.client.notification_feed import NotificationFeed, describe_notification
from tests.client.doubles import FakeApi


def _notification(type, name="Alice"):
    return {"id": 1, "type": type, "actor": {"id": 1, "username": "alice", "name": name}}


@pytest.mark.parametrize("type,text", [
    ("like", "Alice liked your post"),
    ("comment", "Alice commented on your post"),
    ("follow", "Alice started following you"),
    ("message", "Alice sent you a message"),
    ("poke", "New notification from Alice"),
])
def test_describe_notification(type, text):
    assert describe_notification(_notification(type)) == text


async def test_notification_event_refetches_list_and_counts():
    api = FakeApi()
    api.notifications = [_notification("follow")]
    api.counts = {"notifications": 1, "messages": 0}
    feed = NotificationFeed(api)
    toasts = []
    feed.on_toast(lambda text, n: toasts.append(text))

    await feed.handle_event({"type": "notification", "notification": _notification("follow")})

    assert api.calls == ["get_notifications", "get_unread_counts"]
    assert feed.unread_counts == {"notifications": 1, "messages": 0}
    assert feed.notifications == api.notifications
    assert toasts == ["Alice started following you"]


async def test_message_event_refetches_conversations():
    api = FakeApi()
    feed = NotificationFeed(api)

    await feed.handle_event({"type": "message_received", "message": {}})

    assert api.calls == ["get_conversations", "get_unread_counts"]


async def test_unrelated_events_do_nothing():
    api = FakeApi()
    await NotificationFeed(api).handle_event({"type": "error", "error": {"code": "X"}})
    assert api.calls == []
