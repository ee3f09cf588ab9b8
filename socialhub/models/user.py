"""User ORM — the minimal identity record the messaging core joins against.

Invariants:
    - username is unique
    - password material never lives here (authentication is an external collaborator)

Design Decisions:
    - Integer autoincrement ids: clients address users by number on the wire
"""

from datetime import datetime, timezone

from sqlalchemy import String, Text, Integer, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from socialhub.db.base import Base


class User(Base):
    """User entity — public profile fields only."""
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    bio: Mapped[str] = mapped_column(Text, nullable=False, default="")
    profile_picture: Mapped[str] = mapped_column(
        String(2000), nullable=False, default="",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
