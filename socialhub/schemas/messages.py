"""Message Schemas — Pydantic models for REST message bodies.

Invariants:
    - MessageCreate.content: 1-5000 chars after stripping

Design Decisions:
    - field_validator for side-effect-free transforms (strip) — keeps models pure
"""

from pydantic import BaseModel, Field, field_validator

from socialhub.core.domain_types import MAX_MESSAGE_LENGTH


class MessageCreate(BaseModel):
    """REST send body — the receiver comes from the path, the sender from the session."""
    content: str = Field(min_length=1, max_length=MAX_MESSAGE_LENGTH)

    @field_validator("content")
    @classmethod
    def strip_content(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("content cannot be empty or whitespace")
        return v


class UnreadCounts(BaseModel):
    """Unread badge counts, computed independently per kind."""
    notifications: int = Field(ge=0)
    messages: int = Field(ge=0)
