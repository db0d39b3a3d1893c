"""Error Hierarchy — typed, categorized exceptions for every failure mode of the service.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - InputValidationError never reaches the store; StoreError always reaches the caller
    - CacheError and PublishError are contained inside the data access service
    - to_response() produces the REST envelope; no internal details in messages

Design Decisions:
    - Single hierarchy with UserItemsError base: one FastAPI handler catches all
    - StoreError.reason picks the HTTP status (constraint 500, unavailable 503, deadline 504)
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
    VALIDATION = "validation"
    DATABASE = "database"
    CACHE = "cache"
    PUBLISH = "publish"
    INTERNAL = "internal"
    TIMEOUT = "timeout"


class StoreFailure(str, Enum):
    """Why a store transaction failed."""
    CONSTRAINT = "constraint"
    UNAVAILABLE = "unavailable"
    DEADLINE_EXCEEDED = "deadline_exceeded"
    UNKNOWN = "unknown"


_STORE_HTTP_STATUS = {
    StoreFailure.CONSTRAINT: 500,
    StoreFailure.UNAVAILABLE: 503,
    StoreFailure.DEADLINE_EXCEEDED: 504,
    StoreFailure.UNKNOWN: 500,
}


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: str | None = None
    item_id: str | None = None
    transaction_tag: str | None = None
    debug_info: dict[str, Any] | None = None


class UserItemsError(Exception):
    """Base exception for all service errors."""

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
                "context": {
                    "user_id": self.context.user_id,
                    "item_id": self.context.item_id,
                    "transaction_tag": self.context.transaction_tag,
                },
            }
        }


# ─── Client Errors (400-level) ──────────────────────────────────

class InputValidationError(UserItemsError):
    """Input parameters violated one or more declared constraints."""
    def __init__(
        self, violations: list[dict], context: ErrorContext | None = None,
    ):
        fields = ", ".join(v["field"] for v in violations)
        super().__init__(
            f"Invalid parameters: {fields}",
            "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.violations = violations

    def to_response(self) -> dict:
        body = super().to_response()
        body["error"]["details"] = self.violations
        return body


# ─── Infrastructure Errors (500-level) ──────────────────────────

class StoreError(UserItemsError):
    """Store transaction failed; the write had no effect."""
    def __init__(
        self,
        message: str,
        operation: str,
        reason: StoreFailure = StoreFailure.UNKNOWN,
        context: ErrorContext | None = None,
    ):
        category = (
            ErrorCategory.TIMEOUT
            if reason is StoreFailure.DEADLINE_EXCEEDED
            else ErrorCategory.DATABASE
        )
        super().__init__(
            f"Store {operation} failed: {message}",
            "STORE_" + reason.value.upper(), category,
            ErrorSeverity.CRITICAL, context, _STORE_HTTP_STATUS[reason],
        )
        self.operation = operation
        self.reason = reason


class CacheError(UserItemsError):
    """Cache get/set/decode failed. Always absorbed, never surfaced."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Cache {operation} failed: {message}",
            "CACHE_ERROR", ErrorCategory.CACHE,
            ErrorSeverity.WARNING, context, 500,
        )
        self.operation = operation


class PublishError(UserItemsError):
    """Event delivery failed. Logged only."""
    def __init__(self, message: str, topic: str, context: ErrorContext | None = None):
        super().__init__(
            f"Publish to {topic} failed: {message}",
            "PUBLISH_ERROR", ErrorCategory.PUBLISH,
            ErrorSeverity.WARNING, context, 500,
        )
        self.topic = topic
