"""Error Hierarchy — typed, categorized exceptions for every Access System sync failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - IntegrationDisabled is a mode, not a failure: the only kind callers may swallow
    - ValidationError is never retryable; UpstreamError always is
    - IntegrationInconsistency is distinct from "not yet approved" (which is None, not an error)
    - to_response() produces the REST envelope; no internal details leaked

Design Decisions:
    - Single hierarchy with GateSyncError base: FastAPI global handler catches all
    - ErrorContext as dataclass: correlation key and entity name travel with the error
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    MODE = "mode"
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    UPSTREAM = "upstream"
    INCONSISTENCY = "inconsistency"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Operation context attached to every sync error."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    correlation_key: str | None = None
    entity_name: str | None = None
    operation: str | None = None
    debug_info: dict[str, Any] | None = None

    def as_log_extra(self) -> dict[str, Any]:
        return {
            "correlation_key": self.correlation_key,
            "entity_name": self.entity_name,
            "operation": self.operation,
        }


class GateSyncError(Exception):
    """Base exception for all gate sync errors."""

    retryable: bool = False

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

    def with_context(self, context: ErrorContext) -> "GateSyncError":
        """Fill in context fields the raiser did not know about."""
        if self.context.correlation_key is None:
            self.context.correlation_key = context.correlation_key
        if self.context.entity_name is None:
            self.context.entity_name = context.entity_name
        if self.context.operation is None:
            self.context.operation = context.operation
        return self

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "retryable": self.retryable,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "correlation_key": self.context.correlation_key,
                    "entity_name": self.context.entity_name,
                },
            }
        }


# ─── Mode ───────────────────────────────────────────────────────

class IntegrationDisabled(GateSyncError):
    """Access System endpoint/credential not configured."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Access System integration is not configured",
            "INTEGRATION_DISABLED", ErrorCategory.MODE,
            ErrorSeverity.INFO, context, 503,
        )


# ─── Domain Errors (400-level) ──────────────────────────────────

class ValidationError(GateSyncError):
    """Malformed input. Never retried."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field

    def to_response(self) -> dict:
        body = super().to_response()
        body["error"]["field"] = self.field
        return body


class NotYetApprovedError(GateSyncError):
    """Sync request missing or still awaiting human approval."""
    def __init__(self, correlation_key: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.correlation_key = ctx.correlation_key or correlation_key
        super().__init__(
            f"'{correlation_key}' has no approved Access System entity yet",
            "NOT_YET_APPROVED", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, ctx, 409,
        )


class ResourceNotFoundError(GateSyncError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


# ─── Store Errors ───────────────────────────────────────────────

class UniqueConflictError(GateSyncError):
    """A write lost a uniqueness race. Callers re-read and use the winner."""
    def __init__(self, operation: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.operation = ctx.operation or operation
        super().__init__(
            f"Unique constraint conflict during {operation}",
            "UNIQUE_CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, ctx, 409,
        )
        self.operation = operation


class UpstreamError(GateSyncError):
    """Network, store, or deadline failure. Safe for the caller to retry."""

    retryable = True

    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.operation = ctx.operation or operation
        super().__init__(
            f"Upstream {operation} failed: {message}",
            "UPSTREAM_ERROR", ErrorCategory.UPSTREAM,
            ErrorSeverity.CRITICAL, ctx, 503,
        )
        self.operation = operation


class IntegrationInconsistency(GateSyncError):
    """Approved sync request with no approved entity behind it."""
    def __init__(self, correlation_key: str, request_id: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.correlation_key = ctx.correlation_key or correlation_key
        super().__init__(
            f"Sync request {request_id} for '{correlation_key}' is approved "
            "but has no approved entity",
            "INTEGRATION_INCONSISTENCY", ErrorCategory.INCONSISTENCY,
            ErrorSeverity.CRITICAL, ctx, 409,
        )
        self.request_id = request_id
