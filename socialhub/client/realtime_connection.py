"""Realtime Connection — a self-healing push channel for one signed-in user.

Invariants:
    - On every (re)open the first frame sent is {"userId": <id>}
    - After any close or failed attempt a reconnect is retried every
      reconnect_interval seconds, indefinitely, until stop() is called
    - While a channel is open no retry is pending
    - Inbound frames are parsed as JSON objects and handed to every listener;
      anything else is dropped with a warning
    - Open listeners run after each registration, so state missed while offline
      can be refetched

Design Decisions:
    - connect is injectable (defaults to websockets.connect) so tests drive the
      loop with in-memory sockets
    - send_message returns False instead of raising when offline: callers
      fall back to REST
"""

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable

import websockets
from websockets.exceptions import WebSocketException

from socialhub.core.domain_types import ChannelEventType

logger = logging.getLogger(__name__)

EventListener = Callable[[dict], Awaitable[None]]
OpenListener = Callable[[], Awaitable[None]]


class RealtimeConnection:
    """Maintains the channel, re-registers on reconnect, dispatches events."""

    def __init__(
        self,
        url: str,
        user_id: int,
        reconnect_interval: float = 5.0,
        connect: Callable[[str], Any] = websockets.connect,
    ):
        self.url = url
        self.user_id = user_id
        self.reconnect_interval = reconnect_interval
        self._connect = connect
        self._listeners: list[EventListener] = []
        self._open_listeners: list[OpenListener] = []
        self._ws = None
        self._stopped = asyncio.Event()
        self.connected = asyncio.Event()
        self.attempts = 0

    @property
    def is_connected(self) -> bool:
        return self._ws is not None and self.connected.is_set()

    def add_listener(self, listener: EventListener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def add_open_listener(self, listener: OpenListener) -> Callable[[], None]:
        """Called after every (re)registration, before inbound frames are read."""
        self._open_listeners.append(listener)
        return lambda: self._open_listeners.remove(listener)

    async def run(self) -> None:
        """Connect and keep reconnecting until stop()."""
        while not self._stopped.is_set():
            self.attempts += 1
            try:
                async with self._connect(self.url) as ws:
                    await self._serve(ws)
            except (OSError, asyncio.TimeoutError, WebSocketException) as e:
                logger.warning(
                    f"Realtime channel failed: {e}", extra={"user_id": self.user_id},
                )
            finally:
                self._ws = None
                self.connected.clear()

            if self._stopped.is_set():
                break
            logger.info(
                f"Reconnecting in {self.reconnect_interval}s",
                extra={"user_id": self.user_id},
            )
            try:
                await asyncio.wait_for(self._stopped.wait(), timeout=self.reconnect_interval)
            except asyncio.TimeoutError:
                pass

    async def _serve(self, ws) -> None:
        await ws.send(json.dumps({"userId": self.user_id}))
        self._ws = ws
        self.connected.set()
        logger.info("Realtime channel open", extra={"user_id": self.user_id})
        await self._opened()
        async for raw in ws:
            await self._dispatch(raw)
        logger.info("Realtime channel closed", extra={"user_id": self.user_id})

    async def _opened(self) -> None:
        for listener in list(self._open_listeners):
            try:
                await listener()
            except Exception as e:
                logger.error(
                    f"Open listener failed: {e}",
                    extra={"user_id": self.user_id}, exc_info=True,
                )

    async def _dispatch(self, raw: str | bytes) -> None:
        try:
            event = json.loads(raw)
        except ValueError:
            logger.warning("Dropped non-JSON frame from server")
            return
        if not isinstance(event, dict):
            logger.warning("Dropped non-object frame from server")
            return
        for listener in list(self._listeners):
            try:
                await listener(event)
            except Exception as e:
                logger.error(
                    f"Listener failed on {event.get('type')} event: {e}",
                    extra={"user_id": self.user_id, "event_type": event.get("type")},
                    exc_info=True,
                )

    async def send_message(self, receiver_id: int, content: str) -> bool:
        """Send over the channel. False when there is no open channel."""
        if not self.is_connected:
            return False
        frame = {
            "type": ChannelEventType.MESSAGE.value,
            "userId": self.user_id,
            "receiverId": receiver_id,
            "content": content,
        }
        try:
            await self._ws.send(json.dumps(frame))
        except WebSocketException as e:
            logger.warning(f"Channel send failed: {e}", extra={"user_id": self.user_id})
            return False
        return True

    async def stop(self) -> None:
        self._stopped.set()
        ws = self._ws
        if ws is not None:
            await ws.close()
