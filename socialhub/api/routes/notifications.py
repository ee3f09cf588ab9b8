"""Notification Routes — list, mark-read, and unread badge counts.

Invariants:
    - /unread-count is declared before /{notification_id}/read-style paths so it
      is never captured as an id
    - Mark-read is idempotent (stale ids are a no-op)
"""

from fastapi import APIRouter, Depends

from socialhub.api.deps import SessionIdentity, get_current_identity, get_gateway
from socialhub.core.domain_types import NotificationId
from socialhub.schemas.messages import UnreadCounts
from socialhub.services.persistence_gateway import PersistenceGateway

router = APIRouter(prefix="/api/v1/notifications", tags=["notifications"])


@router.get("/unread-count", response_model=UnreadCounts)
async def unread_count(
    identity: SessionIdentity = Depends(get_current_identity),
    gateway: PersistenceGateway = Depends(get_gateway),
):
    return await gateway.unread_count(identity.user_id)


@router.get("")
async def list_notifications(
    identity: SessionIdentity = Depends(get_current_identity),
    gateway: PersistenceGateway = Depends(get_gateway),
):
    """The caller's notifications, newest first."""
    return await gateway.get_notifications(identity.user_id)


@router.post("/{notification_id}/read")
async def mark_notification_read(
    notification_id: int,
    identity: SessionIdentity = Depends(get_current_identity),
    gateway: PersistenceGateway = Depends(get_gateway),
):
    updated = await gateway.mark_notification_read(NotificationId(notification_id))
    return {"message": "Notification marked as read", "updated": updated}
