"""Message ORM — durable record of one direct message.

Invariants:
    - id is monotonic (autoincrement); (created_at, id) is the display order
    - content is non-empty (validated by the gateway before insert)
    - read starts False and only ever flips to True
    - Rows are never deleted by the messaging core

Design Decisions:
    - Composite indexes on (sender_id, receiver_id) and (receiver_id, read):
      pair history and unread counts are the two hot queries
"""

from datetime import datetime, timezone

from sqlalchemy import Text, Integer, Boolean, DateTime, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column

from socialhub.db.base import Base


class Message(Base):
    """Message entity — one row per send, persisted exactly once."""
    __tablename__ = "messages"
    __table_args__ = (
        Index("ix_messages_pair", "sender_id", "receiver_id"),
        Index("ix_messages_receiver_read", "receiver_id", "read"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sender_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
    )
    receiver_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
