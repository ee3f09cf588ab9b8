"""Social Routes — like/follow/unfollow actions that fan out notifications.

Invariants:
    - The action is persisted before its notification is created or pushed
    - Follow rejects self-follow and duplicates (400); like is not deduplicated
"""

from fastapi import APIRouter, Depends

from socialhub.api.deps import (
    SessionIdentity, get_current_identity, get_delivery_router, get_gateway,
    get_social_graph,
)
from socialhub.core.domain_types import PostId, UserId
from socialhub.services.delivery_router import DeliveryRouter
from socialhub.services.persistence_gateway import PersistenceGateway
from socialhub.services.social_graph import SocialGraphStore

router = APIRouter(prefix="/api/v1", tags=["social"])


@router.post("/posts/{post_id}/like")
async def like_post(
    post_id: int,
    identity: SessionIdentity = Depends(get_current_identity),
    gateway: PersistenceGateway = Depends(get_gateway),
    graph: SocialGraphStore = Depends(get_social_graph),
    delivery: DeliveryRouter = Depends(get_delivery_router),
):
    await delivery.like_post(gateway, graph, identity.user_id, PostId(post_id))
    return {"message": "Post liked successfully"}


@router.post("/users/{user_id}/follow")
async def follow_user(
    user_id: int,
    identity: SessionIdentity = Depends(get_current_identity),
    gateway: PersistenceGateway = Depends(get_gateway),
    graph: SocialGraphStore = Depends(get_social_graph),
    delivery: DeliveryRouter = Depends(get_delivery_router),
):
    await delivery.follow_user(gateway, graph, identity.user_id, UserId(user_id))
    return {"message": "User followed successfully"}


@router.post("/users/{user_id}/unfollow")
async def unfollow_user(
    user_id: int,
    identity: SessionIdentity = Depends(get_current_identity),
    graph: SocialGraphStore = Depends(get_social_graph),
    delivery: DeliveryRouter = Depends(get_delivery_router),
):
    await delivery.unfollow_user(graph, identity.user_id, UserId(user_id))
    return {"message": "User unfollowed successfully"}
