"""Realtime Channel — one task per WebSocket owning its receive loop.

Invariants:
    - Frames of one connection are handled serially (per-sender FIFO); different
      connections interleave freely on the event loop
    - A channel binds to the first userId it registers; any frame carrying that
      userId (re-)registers it, frames claiming another user are dropped
    - Non-JSON, non-object or binary frames are dropped with a warning, never answered
    - Each send frame gets its own DB session: a stalled write stalls only this channel
    - On disconnect or loop failure the channel is unregistered (no-op if already replaced)

Design Decisions:
    - ChannelSession is an explicit object with a run() loop instead of nested
      callbacks; the route only accepts the socket and starts it
    - WebSocketChannel adapts Starlette's WebSocket to the Channel protocol so
      the router and registry never see framework types
    - A failing frame is logged and the loop continues: one bad event must not
      disconnect the user
"""

import json
import logging
from contextlib import AbstractAsyncContextManager
from typing import Callable

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.websockets import WebSocketState

from socialhub.config import get_settings
from socialhub.core.domain_types import ChannelEventType, UserId
from socialhub.core.errors import SocialHubError
from socialhub.infrastructure.database import get_db_manager
from socialhub.schemas.realtime import RegisterFrame
from socialhub.services.delivery_router import DeliveryRouter
from socialhub.services.persistence_gateway import PersistenceGateway

logger = logging.getLogger(__name__)
router = APIRouter(tags=["realtime"])

SessionScope = Callable[[], AbstractAsyncContextManager[AsyncSession]]


class WebSocketChannel:
    """Channel protocol over a Starlette WebSocket."""

    def __init__(self, websocket: WebSocket):
        self._ws = websocket
        self._closed = False

    @property
    def is_open(self) -> bool:
        return (
            not self._closed
            and self._ws.client_state == WebSocketState.CONNECTED
            and self._ws.application_state == WebSocketState.CONNECTED
        )

    async def receive_frame(self) -> str | None:
        """Next text frame, or None for a binary one. Raises WebSocketDisconnect on close."""
        message = await self._ws.receive()
        if message["type"] == "websocket.disconnect":
            raise WebSocketDisconnect(message.get("code", 1000), message.get("reason"))
        return message.get("text")

    async def send_json(self, data: dict) -> None:
        await self._ws.send_text(json.dumps(data))

    async def close(self, code: int = 1000) -> None:
        if self._closed:
            return
        self._closed = True
        if self._ws.application_state == WebSocketState.CONNECTED:
            await self._ws.close(code)

    def mark_closed(self) -> None:
        self._closed = True


class ChannelSession:
    """Receive loop for one live connection, dispatching into the delivery router."""

    def __init__(
        self,
        channel: WebSocketChannel,
        delivery: DeliveryRouter,
        session_scope: SessionScope,
    ):
        self.channel = channel
        self.delivery = delivery
        self.session_scope = session_scope
        self.user_id: UserId | None = None

    async def run(self) -> None:
        try:
            while True:
                raw = await self.channel.receive_frame()
                if raw is None:
                    logger.warning(
                        "Dropped binary channel frame", extra={"user_id": self.user_id},
                    )
                    continue
                await self._handle_safely(raw)
        except WebSocketDisconnect as e:
            logger.info(
                f"Channel closed for user {self.user_id}",
                extra={"user_id": self.user_id, "close_code": e.code},
            )
        finally:
            self.channel.mark_closed()
            self.delivery.registry.unregister(self.channel)

    async def _handle_safely(self, raw: str) -> None:
        try:
            await self.handle_frame(raw)
        except SocialHubError as e:
            logger.error(
                f"Channel frame failed: {e.message}",
                extra={"user_id": self.user_id, "error_code": e.code},
            )
        except Exception as e:
            logger.error(
                f"Unexpected error handling channel frame: {e}",
                extra={"user_id": self.user_id}, exc_info=True,
            )

    async def handle_frame(self, raw: str) -> None:
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Dropped non-JSON channel frame", extra={"user_id": self.user_id})
            return
        if not isinstance(data, dict):
            logger.warning("Dropped non-object channel frame", extra={"user_id": self.user_id})
            return

        if "userId" in data and not self._register(data):
            return

        if data.get("type") == ChannelEventType.MESSAGE.value:
            if self.user_id is None:
                logger.warning("Dropped send on unregistered channel")
                return
            async with self.session_scope() as db:
                await self.delivery.handle_channel_send(
                    PersistenceGateway(db), self.channel, data,
                )

    def _register(self, data: dict) -> bool:
        """Bind/refresh the channel's user. False when the frame must be dropped."""
        try:
            frame = RegisterFrame.model_validate(data)
        except ValidationError:
            logger.warning(
                "Dropped frame with invalid userId", extra={"user_id": self.user_id},
            )
            return False
        if self.user_id is not None and frame.user_id != self.user_id:
            logger.warning(
                f"Dropped frame claiming user {frame.user_id} on a channel bound to {self.user_id}",
                extra={"user_id": self.user_id},
            )
            return False
        self.user_id = UserId(frame.user_id)
        self.delivery.registry.register(self.user_id, self.channel)
        return True


@router.websocket(get_settings().ws_path)
async def channel_endpoint(websocket: WebSocket):
    """Accept the connection and run its receive loop until it closes."""
    await websocket.accept()
    session = ChannelSession(
        WebSocketChannel(websocket),
        DeliveryRouter(websocket.app.state.connection_registry),
        get_db_manager().session,
    )
    await session.run()
