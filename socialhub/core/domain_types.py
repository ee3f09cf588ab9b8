"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - UserId, MessageId, NotificationId, PostId wrap ints — never mix them up in domain logic
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders (channel frames are JSON)
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", int)
MessageId = NewType("MessageId", int)
NotificationId = NewType("NotificationId", int)
PostId = NewType("PostId", int)


# ─── Limits ──────────────────────────────────────────────────────

MAX_MESSAGE_LENGTH = 5000  # characters, after stripping surrounding whitespace


# ─── Enums ───────────────────────────────────────────────────────

class NotificationType(str, Enum):
    """What triggered a notification — maps to DB `type` column."""
    LIKE = "like"
    COMMENT = "comment"
    FOLLOW = "follow"
    MESSAGE = "message"


class ChannelEventType(str, Enum):
    """`type` discriminator of frames exchanged over a live channel."""
    MESSAGE = "message"                    # client → server send
    MESSAGE_SENT = "message_sent"          # server → sender ack
    MESSAGE_RECEIVED = "message_received"  # server → receiver push
    NOTIFICATION = "notification"          # server → target push
    ERROR = "error"                        # server → sender rejection


class DeliveryState(str, Enum):
    """Delivery pipeline states for one inbound send.

    RECEIVED → PERSISTED → ACKNOWLEDGED → ROUTED → NOTIFIED, or REJECTED.
    """
    RECEIVED = "received"
    PERSISTED = "persisted"
    ACKNOWLEDGED = "acknowledged"
    ROUTED = "routed"
    NOTIFIED = "notified"
    REJECTED = "rejected"
