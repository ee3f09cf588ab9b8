"""Notification Feed — client-side badges, notification list and toasts.

Invariants:
    - A pushed notification triggers a refetch of the list and unread counts;
      the push itself is only a hint, the REST read is the state
    - A pushed message (sent or received) triggers a refetch of conversation
      previews and unread counts
    - Toast text is derived from the notification type and actor display name
"""

import logging
from typing import Callable

from socialhub.client.api_client import SocialHubClient
from socialhub.core.domain_types import ChannelEventType, NotificationType

logger = logging.getLogger(__name__)

_TOAST_SUFFIX = {
    NotificationType.LIKE.value: "liked your post",
    NotificationType.COMMENT.value: "commented on your post",
    NotificationType.FOLLOW.value: "started following you",
    NotificationType.MESSAGE.value: "sent you a message",
}


def describe_notification(notification: dict) -> str:
    """Human-readable toast line for one enriched notification."""
    actor = notification.get("actor") or {}
    name = actor.get("name") or actor.get("username") or "Someone"
    suffix = _TOAST_SUFFIX.get(notification.get("type"))
    if suffix is None:
        return f"New notification from {name}"
    return f"{name} {suffix}"


class NotificationFeed:
    """Keeps unread counts, notifications and conversation previews fresh."""

    def __init__(self, api: SocialHubClient):
        self.api = api
        self.notifications: list[dict] = []
        self.conversations: list[dict] = []
        self.unread_counts: dict = {"notifications": 0, "messages": 0}
        self._toast_listeners: list[Callable[[str, dict], None]] = []

    def on_toast(self, listener: Callable[[str, dict], None]) -> Callable[[], None]:
        self._toast_listeners.append(listener)
        return lambda: self._toast_listeners.remove(listener)

    async def refresh(self) -> None:
        """Initial load: everything the badges and lists display."""
        await self.refresh_notifications()
        await self.refresh_conversations()

    async def refresh_counts(self) -> None:
        self.unread_counts = await self.api.get_unread_counts()

    async def refresh_notifications(self) -> None:
        self.notifications = await self.api.get_notifications()
        await self.refresh_counts()

    async def refresh_conversations(self) -> None:
        self.conversations = await self.api.get_conversations()
        await self.refresh_counts()

    async def mark_read(self, notification_id: int) -> None:
        await self.api.mark_notification_read(notification_id)
        await self.refresh_notifications()

    async def handle_event(self, event: dict) -> None:
        """React to one pushed channel event."""
        event_type = event.get("type")
        if event_type == ChannelEventType.NOTIFICATION.value:
            notification = event.get("notification") or {}
            await self.refresh_notifications()
            text = describe_notification(notification)
            for listener in list(self._toast_listeners):
                listener(text, notification)
        elif event_type in (
            ChannelEventType.MESSAGE_SENT.value,
            ChannelEventType.MESSAGE_RECEIVED.value,
        ):
            await self.refresh_conversations()
        elif event_type == ChannelEventType.ERROR.value:
            logger.warning(f"Server rejected a channel frame: {event.get('error')}")
