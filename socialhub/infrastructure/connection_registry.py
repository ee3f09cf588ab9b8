"""Connection Registry — maps a user id to at most one live channel.

Invariants:
    - At most one channel per user; a new registration replaces the old one (last wins)
    - unregister(channel) removes only the entry still pointing at that channel,
      so a stale close never evicts a newer registration
    - unregister of an unknown channel is a no-op (double close is harmless)
    - Only this object's map is mutated; no IO happens while the lock is held

Design Decisions:
    - threading.Lock around a dict: register/unregister run from connect/disconnect
      handlers while lookups run from every other sender's delivery path
    - Injected object with explicit lifecycle (created in the FastAPI lifespan,
      closed at shutdown) instead of module-level state
"""

import logging
import threading

from socialhub.core.domain_types import UserId
from socialhub.core.repository_protocols import Channel

logger = logging.getLogger(__name__)


class ConnectionRegistry:
    """Thread-safe userId → channel map for push delivery."""

    def __init__(self) -> None:
        self._channels: dict[UserId, Channel] = {}
        self._lock = threading.Lock()

    def register(self, user_id: UserId, channel: Channel) -> Channel | None:
        """Bind user_id to channel. Returns the replaced channel, if any."""
        with self._lock:
            previous = self._channels.get(user_id)
            self._channels[user_id] = channel
        if previous is not None and previous is not channel:
            logger.info(
                f"Channel replaced for user {user_id}",
                extra={"user_id": user_id},
            )
            return previous
        if previous is None:
            logger.info(
                f"Channel registered for user {user_id}",
                extra={"user_id": user_id},
            )
        return None

    def lookup(self, user_id: UserId) -> Channel | None:
        with self._lock:
            return self._channels.get(user_id)

    def unregister(self, channel: Channel) -> UserId | None:
        """Remove the entry bound to channel. Returns its user id, or None."""
        with self._lock:
            for user_id, registered in self._channels.items():
                if registered is channel:
                    del self._channels[user_id]
                    break
            else:
                return None
        logger.info(
            f"Channel unregistered for user {user_id}",
            extra={"user_id": user_id},
        )
        return user_id

    def online_user_ids(self) -> set[UserId]:
        with self._lock:
            return set(self._channels)

    def __len__(self) -> int:
        with self._lock:
            return len(self._channels)

    def __contains__(self, user_id: object) -> bool:
        with self._lock:
            return user_id in self._channels

    async def close_all(self, code: int = 1001) -> None:
        """Shutdown teardown: close every channel and empty the map."""
        with self._lock:
            channels = list(self._channels.values())
            self._channels.clear()
        for channel in channels:
            try:
                await channel.close(code)
            except Exception as e:
                logger.warning(f"Failed to close channel on shutdown: {e}")
        logger.info(f"Connection registry closed ({len(channels)} channels)")
