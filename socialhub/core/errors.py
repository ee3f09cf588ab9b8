"""Error Hierarchy — typed, categorized exceptions for all SocialHub failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - to_response() produces REST envelope; to_ws_event() produces channel envelope
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with SocialHubError base: FastAPI global handler catches all
    - RecipientOffline and StaleRead are NOT errors: they are silent, logged branches
    - ErrorContext as dataclass: timestamp and user-facing text travel with the error
"""

from dataclasses import dataclass, field
from enum import Enum
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    PERSISTENCE = "persistence"
    EXTERNAL_API = "external_api"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """When the error happened and what the user should be told."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_message: str | None = None


class SocialHubError(Exception):
    """Base exception for all SocialHub errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
            }
        }

    def to_ws_event(self) -> dict:
        """Convert to channel error acknowledgment."""
        return {
            "type": "error",
            "error": {
                "code": self.code,
                "message": self.context.user_message or self.message,
                "recoverable": self.severity in (
                    ErrorSeverity.INFO, ErrorSeverity.WARNING,
                ) or self.category == ErrorCategory.PERSISTENCE,
            },
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class MessageValidationError(SocialHubError):
    """Send payload rejected: empty content or unresolvable user id."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field


class AuthenticationError(SocialHubError):
    """No valid session identity on the request."""
    def __init__(self, message: str = "Unauthorized", context: ErrorContext | None = None):
        super().__init__(
            message, "UNAUTHORIZED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class SelfFollowError(SocialHubError):
    """A user tried to follow themselves."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Cannot follow yourself", "SELF_FOLLOW",
            ErrorCategory.BUSINESS_RULE, ErrorSeverity.WARNING, context, 400,
        )


class AlreadyFollowingError(SocialHubError):
    """Follow edge already exists."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Already following this user", "ALREADY_FOLLOWING",
            ErrorCategory.CONFLICT, ErrorSeverity.WARNING, context, 400,
        )


class NotFollowingError(SocialHubError):
    """Unfollow requested without an existing follow edge."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Not following this user", "NOT_FOLLOWING",
            ErrorCategory.CONFLICT, ErrorSeverity.WARNING, context, 400,
        )


class ResourceNotFoundError(SocialHubError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class PersistenceError(SocialHubError):
    """Store unavailable or write failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "PERSISTENCE_ERROR", ErrorCategory.PERSISTENCE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class ApiRequestError(SocialHubError):
    """A REST call made by the client layer failed."""
    def __init__(
        self, message: str, status_code: int | None = None, context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "API_REQUEST_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR, context, 502,
        )
        self.status_code = status_code
