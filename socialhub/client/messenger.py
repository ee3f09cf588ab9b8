"""Messenger Session — wires REST, the push channel and the client views together.

Invariants:
    - A message is sent over exactly one path: the channel when open, REST otherwise
    - REST-sent messages are merged into the open conversation immediately;
      channel-sent ones arrive through the message_sent acknowledgment
    - Every pushed event reaches both the open conversation and the feed
    - Each channel (re)open refetches the open conversation and the feed, so
      messages persisted while offline appear without a manual reload
"""

import logging

from socialhub.client.api_client import SocialHubClient
from socialhub.client.config import ClientSettings
from socialhub.client.conversation_view import ConversationView
from socialhub.client.notification_feed import NotificationFeed
from socialhub.client.realtime_connection import RealtimeConnection

logger = logging.getLogger(__name__)


class MessengerSession:
    """Client-side state for one signed-in user."""

    def __init__(
        self,
        api: SocialHubClient,
        connection: RealtimeConnection,
        feed: NotificationFeed | None = None,
    ):
        self.api = api
        self.connection = connection
        self.feed = feed or NotificationFeed(api)
        self.conversation: ConversationView | None = None
        connection.add_listener(self.handle_event)
        connection.add_open_listener(self.resync)

    @classmethod
    def from_settings(cls, user_id: int, settings: ClientSettings | None = None):
        settings = settings or ClientSettings()
        api = SocialHubClient(
            settings.base_url, user_id, timeout=settings.request_timeout_seconds,
        )
        connection = RealtimeConnection(
            settings.ws_url, user_id, reconnect_interval=settings.reconnect_interval_seconds,
        )
        return cls(api, connection)

    @property
    def user_id(self) -> int:
        return self.api.user_id

    async def open_conversation(self, other_user_id: int) -> ConversationView:
        """Load a thread via REST; pushes merge into it from then on."""
        view = ConversationView(self.user_id, other_user_id)
        self.conversation = view
        view.seed(await self.api.get_messages(other_user_id))
        return view

    def close_conversation(self) -> None:
        self.conversation = None

    async def resync(self) -> None:
        """Refetch what pushes may have missed while the channel was down."""
        view = self.conversation
        if view is not None:
            view.seed(await self.api.get_messages(view.other_user_id))
        await self.feed.refresh()
        logger.info("Client state resynced after channel open", extra={"user_id": self.user_id})

    async def handle_event(self, event: dict) -> None:
        if self.conversation is not None:
            self.conversation.apply_event(event)
        await self.feed.handle_event(event)

    async def send(self, receiver_id: int, content: str) -> dict | None:
        """Send a message. Returns the stored message when REST was used."""
        if await self.connection.send_message(receiver_id, content):
            return None
        logger.info(
            "Channel unavailable, sending over REST",
            extra={"user_id": self.user_id, "receiver_id": receiver_id},
        )
        message = await self.api.send_message(receiver_id, content)
        if self.conversation is not None:
            self.conversation.merge(message)
        return message

    async def close(self) -> None:
        await self.connection.stop()
        await self.api.aclose()
