"""Conversation View — pushed and fetched copies collapse to one ordered list.

Invariants:
    - Duplicate ids (push then refetch, or ack then REST response) render once
    - Order is (createdAt, id) regardless of arrival order
    - Messages outside the pair are ignored
"""

from socialhub.client.conversation_view import ConversationView, parse_timestamp
from tests.client.doubles import message


def _view():
    return ConversationView(1, 2)


def test_push_then_refetch_renders_once():
    view = _view()
    pushed = message(10, 2, 1, "2026-01-01T12:00:00+00:00")
    view.apply_event({"type": "message_received", "message": pushed})

    view.seed([dict(pushed, read=True)])

    assert [m["id"] for m in view.messages] == [10]
    assert view.messages[0]["read"] is True


def test_ack_then_rest_merge_is_deduplicated():
    view = _view()
    sent = message(11, 1, 2, "2026-01-01T12:00:00+00:00")

    assert view.apply_event({"type": "message_sent", "message": sent}) is True
    assert view.merge(sent) is False
    assert len(view) == 1


def test_out_of_order_arrivals_are_sorted():
    view = _view()
    view.merge(message(3, 1, 2, "2026-01-01T12:02:00+00:00"))
    view.merge(message(1, 2, 1, "2026-01-01T12:00:00+00:00"))
    view.merge(message(5, 2, 1, "2026-01-01T12:01:00Z"))
    view.merge(message(4, 1, 2, "2026-01-01T12:01:00+00:00"))

    assert [m["id"] for m in view.messages] == [1, 4, 5, 3]


def test_naive_timestamps_read_as_utc():
    assert parse_timestamp("2026-01-01T12:00:00") == parse_timestamp("2026-01-01T12:00:00Z")


def test_foreign_and_irrelevant_events_ignored():
    view = _view()

    assert view.merge(message(1, 3, 1, "2026-01-01T12:00:00+00:00")) is False
    assert view.apply_event({"type": "notification", "notification": {}}) is False
    assert view.apply_event({"type": "message_received"}) is False
    assert len(view) == 0


def test_listeners_fire_on_change_only():
    view = _view()
    renders = []
    unsubscribe = view.on_change(renders.append)
    m = message(1, 1, 2, "2026-01-01T12:00:00+00:00")

    view.merge(m)
    view.merge(m)
    unsubscribe()
    view.merge(message(2, 1, 2, "2026-01-01T12:01:00+00:00"))

    assert len(renders) == 1
    assert 1 in view and 2 in view
