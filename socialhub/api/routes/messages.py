"""Message Routes — REST fallback for conversation history and sends.

Invariants:
    - Caller identity always comes from SessionIdentity, never from the body
    - GET /messages/{other} marks the caller's unread messages from `other` read
      before listing, so the returned rows reflect the flip
    - POST /messages/{other} runs the same delivery pipeline as a channel send;
      the 201 body is the sender's acknowledgment
    - POST /messages/{id}/read is idempotent (stale ids are a no-op)
"""

import logging

from fastapi import APIRouter, Depends, status

from socialhub.api.deps import (
    SessionIdentity, get_current_identity, get_delivery_router, get_gateway,
)
from socialhub.core.domain_types import MessageId, UserId
from socialhub.schemas.messages import MessageCreate
from socialhub.services.delivery_router import DeliveryRouter
from socialhub.services.persistence_gateway import PersistenceGateway

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["messages"])


@router.get("/conversations")
async def list_conversations(
    identity: SessionIdentity = Depends(get_current_identity),
    gateway: PersistenceGateway = Depends(get_gateway),
):
    """Conversation previews, most recent first."""
    return await gateway.get_conversations(identity.user_id)


@router.get("/messages/{other_user_id}")
async def get_conversation_messages(
    other_user_id: int,
    identity: SessionIdentity = Depends(get_current_identity),
    gateway: PersistenceGateway = Depends(get_gateway),
):
    """Pair history, oldest first. Marks the caller's received messages read."""
    other = UserId(other_user_id)
    flipped = await gateway.mark_conversation_read(identity.user_id, other)
    if flipped:
        logger.info(
            f"Marked {flipped} message(s) from {other} read",
            extra={"user_id": identity.user_id},
        )
    return await gateway.get_messages_for_pair(identity.user_id, other)


@router.post("/messages/{other_user_id}", status_code=status.HTTP_201_CREATED)
async def send_message(
    other_user_id: int,
    body: MessageCreate,
    identity: SessionIdentity = Depends(get_current_identity),
    gateway: PersistenceGateway = Depends(get_gateway),
    delivery: DeliveryRouter = Depends(get_delivery_router),
):
    """Persist, push to the receiver if online, notify. Returns the enriched message."""
    result = await delivery.send_message(
        gateway, identity.user_id, UserId(other_user_id), body.content,
    )
    return result.message


@router.post("/messages/{message_id}/read")
async def mark_message_read(
    message_id: int,
    identity: SessionIdentity = Depends(get_current_identity),
    gateway: PersistenceGateway = Depends(get_gateway),
):
    updated = await gateway.mark_message_read(MessageId(message_id))
    return {"message": "Message marked as read", "updated": updated}
