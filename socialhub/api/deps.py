"""API Dependencies — session identity, gateway, router and registry injection.

Invariants:
    - Every authenticated handler receives a SessionIdentity resolved against the
      user directory; an absent or unknown identity is a 401, never a guess
    - The ConnectionRegistry and DeliveryRouter come from app.state (lifespan-owned)

Design Decisions:
    - Identity travels as the X-User-Id header: password/session authentication
      is an external collaborator that sits in front of this API and stamps it
    - Frozen dataclass for the identity: handlers cannot mutate who is calling
"""

from dataclasses import dataclass

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from socialhub.core.domain_types import UserId
from socialhub.core.errors import AuthenticationError
from socialhub.infrastructure.connection_registry import ConnectionRegistry
from socialhub.infrastructure.database import get_db
from socialhub.services.delivery_router import DeliveryRouter
from socialhub.services.persistence_gateway import PersistenceGateway
from socialhub.services.social_graph import SocialGraphStore


@dataclass(frozen=True)
class SessionIdentity:
    """The validated caller of a request."""
    user_id: UserId
    username: str


def get_gateway(db: AsyncSession = Depends(get_db)) -> PersistenceGateway:
    return PersistenceGateway(db)


def get_social_graph(db: AsyncSession = Depends(get_db)) -> SocialGraphStore:
    return SocialGraphStore(db)


def get_registry(request: Request) -> ConnectionRegistry:
    return request.app.state.connection_registry


def get_delivery_router(
    registry: ConnectionRegistry = Depends(get_registry),
) -> DeliveryRouter:
    return DeliveryRouter(registry)


async def get_current_identity(
    x_user_id: int | None = Header(None, alias="X-User-Id"),
    gateway: PersistenceGateway = Depends(get_gateway),
) -> SessionIdentity:
    """Resolve the caller; 401 when missing or unknown."""
    if x_user_id is None:
        raise AuthenticationError()
    user = await gateway.get_user(UserId(x_user_id))
    if user is None:
        raise AuthenticationError("Unknown session user")
    return SessionIdentity(user_id=UserId(user.id), username=user.username)
