"""Persistence Gateway — durable store for messages and notifications.

Invariants:
    - Writes commit before returning: a row is durable before any push is attempted
    - Messages are append-only; only `read` flips, and only False → True
    - create_message stores content stripped and rejects empty or over-length
      content and unknown users with MessageValidationError
    - Mark-read on an unknown or already-read id is a logged no-op (returns False)
    - Pair history is (created_at, id) ascending; notifications are newest first
    - unread_count computes notifications and messages independently
    - Every SQLAlchemy failure surfaces as PersistenceError (session rolled back)

Design Decisions:
    - Bound to one AsyncSession per request/channel event: the caller owns the
      session lifecycle (get_db or db_manager.session())
    - Sender/actor profiles joined by batch id lookup instead of ORM relationships:
      rows created in the same session are enriched without lazy loads
    - Bulk mark-read uses UPDATE with synchronize_session="evaluate" so objects
      already in the session reflect the flip
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Iterable

from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from socialhub.core.conversations import build_conversation_previews
from socialhub.core.domain_types import (
    MAX_MESSAGE_LENGTH, MessageId, NotificationId, NotificationType, UserId,
)
from socialhub.core.errors import MessageValidationError, PersistenceError
from socialhub.core.format_events import serialize_message, serialize_notification
from socialhub.models.message import Message
from socialhub.models.notification import Notification
from socialhub.models.user import User

logger = logging.getLogger(__name__)


class PersistenceGateway:
    """Message/notification storage API consumed by the delivery router and REST routes."""

    def __init__(self, db: AsyncSession):
        self._db = db

    @asynccontextmanager
    async def _guard(self, operation: str) -> AsyncGenerator[None, None]:
        """Map SQLAlchemy failures to PersistenceError after rolling back."""
        try:
            yield
        except SQLAlchemyError as e:
            await self._db.rollback()
            logger.error(f"Persistence failure during {operation}: {e}")
            raise PersistenceError("Store unavailable", operation)

    # ─── Users ──────────────────────────────────────────────────

    async def get_user(self, user_id: UserId) -> User | None:
        """User-identity lookup."""
        async with self._guard("user lookup"):
            return await self._db.get(User, user_id)

    async def _users_by_id(self, user_ids: Iterable[int]) -> dict[int, User]:
        ids = set(user_ids)
        if not ids:
            return {}
        result = await self._db.execute(select(User).where(User.id.in_(ids)))
        return {user.id: user for user in result.scalars().all()}

    # ─── Messages ───────────────────────────────────────────────

    async def create_message(
        self, sender_id: UserId, receiver_id: UserId, content: str,
    ) -> Message:
        """Append a message with read=False, server-assigned id and timestamp.

        Content is stored stripped; both send paths get the same limits here.
        """
        if not isinstance(content, str) or not content.strip():
            raise MessageValidationError("Message content cannot be empty", "content")
        content = content.strip()
        if len(content) > MAX_MESSAGE_LENGTH:
            raise MessageValidationError(
                f"Message content exceeds {MAX_MESSAGE_LENGTH} characters", "content",
            )
        async with self._guard("message insert"):
            users = await self._users_by_id((sender_id, receiver_id))
            if sender_id not in users:
                raise MessageValidationError(
                    f"Sender {sender_id} does not exist", "senderId",
                )
            if receiver_id not in users:
                raise MessageValidationError(
                    f"Receiver {receiver_id} does not exist", "receiverId",
                )
            message = Message(
                sender_id=sender_id,
                receiver_id=receiver_id,
                content=content,
                read=False,
            )
            self._db.add(message)
            await self._db.commit()
        logger.info(
            f"Message {message.id} persisted",
            extra={
                "message_id": message.id,
                "user_id": sender_id,
                "receiver_id": receiver_id,
            },
        )
        return message

    async def enrich_message(self, message: Message) -> dict:
        """Message + sender public projection."""
        sender = await self.get_user(message.sender_id)
        return serialize_message(message, sender)

    async def get_messages_for_pair(
        self, user_a: UserId, user_b: UserId,
    ) -> list[dict]:
        """Every message exchanged between the pair, oldest first."""
        async with self._guard("pair history"):
            result = await self._db.execute(
                select(Message)
                .where(or_(
                    and_(Message.sender_id == user_a, Message.receiver_id == user_b),
                    and_(Message.sender_id == user_b, Message.receiver_id == user_a),
                ))
                .order_by(Message.created_at.asc(), Message.id.asc()),
            )
            messages = result.scalars().all()
            users = await self._users_by_id(m.sender_id for m in messages)
        return [serialize_message(m, users[m.sender_id]) for m in messages]

    async def get_conversations(self, user_id: UserId) -> list[dict]:
        """One ConversationPreview per counterpart, newest conversation first."""
        async with self._guard("conversation list"):
            result = await self._db.execute(
                select(Message).where(or_(
                    Message.sender_id == user_id, Message.receiver_id == user_id,
                )),
            )
            messages = result.scalars().all()
            ids = {user_id}
            for m in messages:
                ids.add(m.sender_id)
                ids.add(m.receiver_id)
            users = await self._users_by_id(ids)
        return build_conversation_previews(user_id, list(messages), users)

    async def mark_message_read(self, message_id: MessageId) -> bool:
        """Flip read on one message. False when unknown or already read."""
        async with self._guard("message mark-read"):
            message = await self._db.get(Message, message_id)
            if message is None or message.read:
                logger.debug(
                    f"Stale read receipt for message {message_id}",
                    extra={"message_id": message_id},
                )
                return False
            message.read = True
            await self._db.commit()
        return True

    async def mark_conversation_read(
        self, reader_id: UserId, other_id: UserId,
    ) -> int:
        """Mark every unread message from other_id to reader_id read. Returns rows flipped."""
        async with self._guard("conversation mark-read"):
            result = await self._db.execute(
                update(Message)
                .where(
                    Message.receiver_id == reader_id,
                    Message.sender_id == other_id,
                    Message.read == False,  # noqa: E712
                )
                .values(read=True)
                .execution_options(synchronize_session="evaluate"),
            )
            await self._db.commit()
        return result.rowcount or 0

    # ─── Notifications ──────────────────────────────────────────

    async def create_notification(
        self,
        user_id: UserId,
        actor_id: UserId,
        type: NotificationType,
        entity_id: int | None = None,
    ) -> Notification:
        """Append one notification row (no coalescing)."""
        try:
            kind = NotificationType(type)
        except ValueError:
            raise MessageValidationError(f"Unknown notification type {type!r}", "type")
        async with self._guard("notification insert"):
            notification = Notification(
                user_id=user_id,
                actor_id=actor_id,
                type=kind.value,
                entity_id=entity_id,
                read=False,
            )
            self._db.add(notification)
            await self._db.commit()
        logger.info(
            f"Notification {notification.id} ({kind.value}) persisted",
            extra={
                "notification_id": notification.id,
                "user_id": user_id,
                "event_type": kind.value,
            },
        )
        return notification

    async def enrich_notification(self, notification: Notification) -> dict:
        """Notification + actor public projection."""
        actor = await self.get_user(notification.actor_id)
        return serialize_notification(notification, actor)

    async def get_notifications(self, user_id: UserId) -> list[dict]:
        """All notifications for user_id, newest first."""
        async with self._guard("notification list"):
            result = await self._db.execute(
                select(Notification)
                .where(Notification.user_id == user_id)
                .order_by(Notification.created_at.desc(), Notification.id.desc()),
            )
            notifications = result.scalars().all()
            actors = await self._users_by_id(n.actor_id for n in notifications)
        return [
            serialize_notification(n, actors[n.actor_id])
            for n in notifications if n.actor_id in actors
        ]

    async def mark_notification_read(self, notification_id: NotificationId) -> bool:
        """Flip read on one notification. False when unknown or already read."""
        async with self._guard("notification mark-read"):
            notification = await self._db.get(Notification, notification_id)
            if notification is None or notification.read:
                logger.debug(
                    f"Stale read receipt for notification {notification_id}",
                    extra={"notification_id": notification_id},
                )
                return False
            notification.read = True
            await self._db.commit()
        return True

    # ─── Counts ─────────────────────────────────────────────────

    async def unread_count(self, user_id: UserId) -> dict:
        """{"notifications": n, "messages": m} for the user's badges."""
        async with self._guard("unread count"):
            notifications = await self._db.scalar(
                select(func.count()).select_from(Notification).where(
                    Notification.user_id == user_id,
                    Notification.read == False,  # noqa: E712
                ),
            )
            messages = await self._db.scalar(
                select(func.count()).select_from(Message).where(
                    Message.receiver_id == user_id,
                    Message.read == False,  # noqa: E712
                ),
            )
        return {"notifications": notifications or 0, "messages": messages or 0}
