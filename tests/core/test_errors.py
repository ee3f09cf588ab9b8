"""Error Hierarchy — codes, statuses and both envelope shapes."""

from socialhub.core.errors import (
    AlreadyFollowingError, AuthenticationError, ErrorCategory, ErrorContext,
    MessageValidationError, PersistenceError, ResourceNotFoundError,
    SelfFollowError,
)


def test_validation_error_is_400_with_field():
    e = MessageValidationError("Message content cannot be empty", "content")
    assert e.http_status == 400
    assert e.code == "VALIDATION_ERROR"
    assert e.field == "content"


def test_rest_envelope_shape():
    body = ResourceNotFoundError("Post", "42").to_response()
    assert body["error"]["code"] == "RESOURCE_NOT_FOUND"
    assert body["error"]["message"] == "Post '42' not found"
    assert body["error"]["category"] == "resource_not_found"
    assert "timestamp" in body["error"]


def test_ws_envelope_prefers_user_message():
    e = PersistenceError(
        "boom", "message insert", ErrorContext(user_message="Try again later"),
    )
    event = e.to_ws_event()
    assert event["type"] == "error"
    assert event["error"]["message"] == "Try again later"
    assert event["error"]["recoverable"] is True


def test_social_errors_keep_user_facing_messages():
    assert SelfFollowError().message == "Cannot follow yourself"
    assert AlreadyFollowingError().message == "Already following this user"
    assert AlreadyFollowingError().category == ErrorCategory.CONFLICT


def test_authentication_error_is_401():
    assert AuthenticationError().http_status == 401
    assert PersistenceError("x", "commit").http_status == 503


def test_categories_cover_raised_errors_only():
    assert {c.value for c in ErrorCategory} == {
        "validation", "authentication", "business_rule", "resource_not_found",
        "persistence", "external_api", "conflict",
    }


def test_context_carries_timestamp_and_user_message():
    context = ErrorContext(user_message="Try again later")
    assert context.timestamp.tzinfo is not None
    assert set(vars(context)) == {"timestamp", "user_message"}
