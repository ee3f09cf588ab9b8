"""Test Doubles — in-memory channels and WebSockets for delivery and channel tests.

Invariants:
    - FakeChannel satisfies the Channel protocol (is_open, send_json, close)
    - FakeWebSocket replays scripted inbound frames (text or binary), then disconnects
    - scripted_websocket wraps a real Starlette WebSocket for ASGI-level checks
    - Everything sent is recorded as decoded JSON for assertions
"""

import json

from starlette.websockets import WebSocket, WebSocketState


class FakeChannel:
    """Records pushed events; can be made to fail like a dead socket."""

    def __init__(self, fail: bool = False):
        self.sent: list[dict] = []
        self.fail = fail
        self.open = True
        self.close_code: int | None = None

    @property
    def is_open(self) -> bool:
        return self.open

    async def send_json(self, data: dict) -> None:
        if self.fail:
            raise ConnectionResetError("socket gone")
        self.sent.append(data)

    async def close(self, code: int = 1000) -> None:
        self.open = False
        self.close_code = code

    def of_type(self, event_type: str) -> list[dict]:
        return [e for e in self.sent if e.get("type") == event_type]


class FakeWebSocket:
    """Minimal Starlette WebSocket stand-in driven by a list of raw frames."""

    def __init__(self, frames: list[str | bytes] | None = None):
        self._frames = list(frames or [])
        self.client_state = WebSocketState.CONNECTED
        self.application_state = WebSocketState.CONNECTED
        self.sent: list[dict] = []
        self.close_code: int | None = None

    def feed(self, *frames: str | bytes) -> None:
        self._frames.extend(frames)

    async def receive(self) -> dict:
        """ASGI receive messages: str frames as text, bytes frames as binary."""
        if not self._frames:
            self.client_state = WebSocketState.DISCONNECTED
            return {"type": "websocket.disconnect", "code": 1000}
        data = self._frames.pop(0)
        if isinstance(data, bytes):
            return {"type": "websocket.receive", "bytes": data}
        return {"type": "websocket.receive", "text": data}

    async def send_text(self, data: str) -> None:
        self.sent.append(json.loads(data))

    async def close(self, code: int = 1000) -> None:
        self.application_state = WebSocketState.DISCONNECTED
        self.close_code = code

    def of_type(self, event_type: str) -> list[dict]:
        return [e for e in self.sent if e.get("type") == event_type]


async def scripted_websocket(*frames: str | bytes) -> tuple[WebSocket, list[dict]]:
    """An accepted Starlette WebSocket fed scripted ASGI messages, then a disconnect.

    Returns the socket and the list of ASGI messages it sends.
    """
    inbound = [{"type": "websocket.connect"}]
    for data in frames:
        key = "bytes" if isinstance(data, bytes) else "text"
        inbound.append({"type": "websocket.receive", key: data})
    inbound.append({"type": "websocket.disconnect", "code": 1000})
    outbound: list[dict] = []

    async def receive() -> dict:
        return inbound.pop(0)

    async def send(message: dict) -> None:
        outbound.append(message)

    ws = WebSocket({"type": "websocket", "path": "/ws", "headers": []}, receive, send)
    await ws.accept()
    return ws, outbound


def frame(**data) -> str:
    return json.dumps(data)


def as_user(user) -> dict:
    """Session identity header for REST calls."""
    return {"X-User-Id": str(user.id)}
