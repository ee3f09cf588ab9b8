"""Conversation Ordering — pure derivation of display order and conversation previews.

Invariants:
    - Display order within a pair is (created_at, id) ascending — the store is the source of truth
    - One preview per distinct counterpart; previews ordered newest lastMessage first
    - unreadCount counts only unread messages whose receiver is the viewing user,
      so it never exceeds the messages received in that pair
    - Self-referential actions (actor == target) never produce notifications

Design Decisions:
    - Previews derived in Python from the user's message rows: one query, no
      per-dialect window functions (SQLite in tests, PostgreSQL in production)
"""

from datetime import datetime, timezone

from socialhub.core.format_events import public_profile, serialize_message


def as_utc(value: datetime) -> datetime:
    """Naive timestamps (SQLite round-trips) are treated as UTC."""
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def message_sort_key(message) -> tuple:
    """Ascending display key: creation time, ties broken by id."""
    return (as_utc(message.created_at), message.id)


def counterpart_id(message, user_id: int) -> int:
    """The other participant of a message, as seen by user_id."""
    return message.receiver_id if message.sender_id == user_id else message.sender_id


def should_notify(actor_id: int, target_id: int) -> bool:
    """Notifications are skipped for self-referential actions."""
    return actor_id != target_id


def build_conversation_previews(
    user_id: int, messages: list, users_by_id: dict,
) -> list[dict]:
    """Group a user's messages into ConversationPreview dicts.

    messages: every Message row where user_id is sender or receiver.
    users_by_id: id → user row for the user and all counterparts.
    """
    last_by_other: dict[int, object] = {}
    unread_by_other: dict[int, int] = {}
    for message in messages:
        other_id = counterpart_id(message, user_id)
        current = last_by_other.get(other_id)
        if current is None or message_sort_key(message) > message_sort_key(current):
            last_by_other[other_id] = message
        if message.receiver_id == user_id and not message.read:
            unread_by_other[other_id] = unread_by_other.get(other_id, 0) + 1
        else:
            unread_by_other.setdefault(other_id, 0)

    ordered = sorted(
        last_by_other.items(),
        key=lambda item: message_sort_key(item[1]),
        reverse=True,
    )
    previews = []
    for other_id, last in ordered:
        other = users_by_id.get(other_id)
        sender = users_by_id.get(last.sender_id)
        if other is None or sender is None:
            continue
        previews.append({
            "user": public_profile(other),
            "lastMessage": serialize_message(last, sender),
            "unreadCount": unread_by_other[other_id],
        })
    return previews
