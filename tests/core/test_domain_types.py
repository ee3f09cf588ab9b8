"""Domain Types — verifies rich type definitions and enum values.

Tests:
    - NewType wrappers exist and are callable
    - Enums have the expected members and wire values
    - Delivery pipeline has exactly one terminal failure state
"""

from socialhub.core.domain_types import (
    UserId, MessageId, NotificationId, PostId,
    NotificationType, ChannelEventType, DeliveryState,
)


def test_identity_types_wrap_int():
    assert UserId(7) == 7
    assert MessageId(8) == 8
    assert NotificationId(9) == 9
    assert PostId(10) == 10


def test_notification_type_has_four_kinds():
    assert {t.value for t in NotificationType} == {"like", "comment", "follow", "message"}


def test_channel_event_types_match_wire_names():
    assert ChannelEventType.MESSAGE.value == "message"
    assert ChannelEventType.MESSAGE_SENT.value == "message_sent"
    assert ChannelEventType.MESSAGE_RECEIVED.value == "message_received"
    assert ChannelEventType.NOTIFICATION.value == "notification"
    assert ChannelEventType.ERROR.value == "error"


def test_delivery_states_in_pipeline_order():
    assert [s.value for s in DeliveryState] == [
        "received", "persisted", "acknowledged", "routed", "notified", "rejected",
    ]


def test_str_enum_compares_to_raw_string():
    assert NotificationType.LIKE == "like"
    assert NotificationType("follow") is NotificationType.FOLLOW
