"""Conversation View — the client's ordered, de-duplicated copy of one thread.

Invariants:
    - Each message id appears at most once, whichever path delivered it first
    - Messages are kept in (createdAt, id) ascending order
    - Messages not between the two participants are ignored
    - Naive timestamps are read as UTC

Design Decisions:
    - Messages stay plain camelCase dicts as the server sends them: the view
      reconciles, it does not re-model
    - A REST refetch is authoritative for fields that change (read flag), so
      seed() replaces existing entries; pushes never overwrite
"""

import bisect
import logging
from datetime import datetime
from typing import Callable

from socialhub.core.conversations import as_utc
from socialhub.core.domain_types import ChannelEventType

logger = logging.getLogger(__name__)

Listener = Callable[[list[dict]], None]

_MESSAGE_EVENTS = (
    ChannelEventType.MESSAGE_SENT.value,
    ChannelEventType.MESSAGE_RECEIVED.value,
)


def parse_timestamp(value: str | datetime) -> datetime:
    if isinstance(value, datetime):
        return as_utc(value)
    return as_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))


def _order_key(message: dict) -> tuple[datetime, int]:
    return parse_timestamp(message["createdAt"]), int(message["id"])


class ConversationView:
    """Live message list between `user_id` and `other_user_id`."""

    def __init__(self, user_id: int, other_user_id: int):
        self.user_id = user_id
        self.other_user_id = other_user_id
        self._messages: list[dict] = []
        self._index: dict[int, dict] = {}
        self._listeners: list[Listener] = []

    @property
    def messages(self) -> list[dict]:
        return list(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def __contains__(self, message_id: int) -> bool:
        return message_id in self._index

    def on_change(self, listener: Listener) -> Callable[[], None]:
        """Subscribe to list changes. Returns the unsubscribe callable."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def belongs(self, message: dict) -> bool:
        pair = {self.user_id, self.other_user_id}
        return {message.get("senderId"), message.get("receiverId")} == pair

    def seed(self, messages: list[dict]) -> None:
        """Fold a REST fetch into the view."""
        changed = False
        for message in messages:
            if not self.belongs(message):
                continue
            existing = self._index.get(message["id"])
            if existing is None:
                self._insert(message)
            else:
                existing.update(message)
            changed = True
        if changed:
            self._notify()

    def merge(self, message: dict) -> bool:
        """Add one message. False when it is a duplicate or foreign to this pair."""
        if not self.belongs(message):
            logger.debug(f"Ignored message {message.get('id')} outside conversation")
            return False
        if message["id"] in self._index:
            return False
        self._insert(message)
        self._notify()
        return True

    def apply_event(self, event: dict) -> bool:
        """Merge a pushed message_sent / message_received event."""
        if event.get("type") not in _MESSAGE_EVENTS:
            return False
        message = event.get("message")
        if not isinstance(message, dict):
            return False
        return self.merge(message)

    def _insert(self, message: dict) -> None:
        entry = dict(message)
        bisect.insort(self._messages, entry, key=_order_key)
        self._index[entry["id"]] = entry

    def _notify(self) -> None:
        snapshot = self.messages
        for listener in list(self._listeners):
            listener(snapshot)
