"""Error Hierarchy: typed, categorized exceptions for all community failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are scoped to one request; infrastructure errors are critical
    - TokenInvalidError and IdentityNotFoundError render the same public envelope
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with CommunitiesError base: FastAPI global handler catches all
    - ErrorContext as dataclass: rich observability without coupling to logging framework
    - Community absence is NOT an exception inside the core (stores return None/False);
      ResourceNotFoundError is raised only at the route boundary
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    AUTHENTICATION = "authentication"
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    community_id: str | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None


class CommunitiesError(Exception):
    """Base exception for all community service errors."""

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
                "message": self.context.user_message or self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "community_id": self.context.community_id,
                },
            }
        }


# ─── Identity Errors ────────────────────────────────────────────

class UnauthenticatedError(CommunitiesError):
    """Credential header missing or not using the bearer scheme."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Missing or malformed bearer credential",
            "UNAUTHENTICATED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class IdentityResolutionError(CommunitiesError):
    """Credential was well-formed but did not resolve to a known user.

    Subclasses differ only in ``reason``, which is logged and never rendered.
    """
    reason = "unresolved"

    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Identity not found",
            "IDENTITY_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.WARNING, context, 404,
        )


class TokenInvalidError(IdentityResolutionError):
    """Token expired, malformed, wrongly signed, or without a subject."""
    reason = "token_invalid"


class IdentityNotFoundError(IdentityResolutionError):
    """Token subject has no record in the user directory."""
    reason = "user_missing"


# ─── Domain Errors (400-level) ──────────────────────────────────

class CommunityValidationError(CommunitiesError):
    """Community input validation failed."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field


class ResourceNotFoundError(CommunitiesError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


class ConcurrencyError(CommunitiesError):
    """Concurrent modification detected."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CONCURRENCY_CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )


# ─── Internal / Infrastructure Errors (500-level) ───────────────

class ImmutableFieldError(CommunitiesError):
    """A mutation tried to change a field fixed at creation."""
    def __init__(self, field: str, context: ErrorContext | None = None):
        super().__init__(
            f"Community field '{field}' cannot change after creation",
            "IMMUTABLE_FIELD", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.field = field


class DatabaseError(CommunitiesError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
