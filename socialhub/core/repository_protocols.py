"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - Live connections and user projections are accessed through Protocol types
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy; test
      doubles (fake channels) satisfy the contract without subclassing
    - Async in Protocol: boundary methods are async because implementations do IO
"""

from typing import Protocol


class Channel(Protocol):
    """A live bidirectional connection to one client (WebSocket in production)."""

    @property
    def is_open(self) -> bool: ...

    async def send_json(self, data: dict) -> None: ...

    async def close(self, code: int = 1000) -> None: ...


class PublicUser(Protocol):
    """Structural contract for the user fields exposed on enriched records."""
    id: int
    username: str
    name: str
    profile_picture: str | None
