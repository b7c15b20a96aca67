"""Error Hierarchy — typed, categorized exceptions for all cookgov failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) abort the requested operation before any commit
    - Infrastructure errors (500-level) are critical
    - to_response() produces the REST envelope; no internal details leak into messages

Design Decisions:
    - Single hierarchy with CookGovError base: the FastAPI global handler catches all
    - ErrorContext as dataclass: rich observability without coupling to the logging setup
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
    INSUFFICIENT_DATA = "insufficient_data"
    STATE_CONFLICT = "state_conflict"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    team_id: str | None = None
    entity_id: str | None = None
    entity_type: str | None = None
    debug_info: dict[str, Any] | None = None


class CookGovError(Exception):
    """Base exception for all cookgov errors."""

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
                    "team_id": self.context.team_id,
                    "entity_id": self.context.entity_id,
                    "entity_type": self.context.entity_type,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class ValidationError(CookGovError):
    """Malformed configuration or arguments (negative cap, zero seats, unknown rule)."""
    def __init__(
        self, message: str, field: str | None = None, context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field


class InsufficientDataError(CookGovError):
    """Not enough data to compute: empty pool, no contributors."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INSUFFICIENT_DATA", ErrorCategory.INSUFFICIENT_DATA,
            ErrorSeverity.ERROR, context, 422,
        )


class StateConflictError(CookGovError):
    """Invalid workflow transition for the entity's current status."""
    def __init__(
        self,
        message: str,
        current_status: str | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "STATE_CONFLICT", ErrorCategory.STATE_CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )
        self.current_status = current_status


class NotFoundError(CookGovError):
    """Requested team, proposal, voting or service term does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.entity_id = ctx.entity_id or resource_id
        ctx.entity_type = ctx.entity_type or resource_type
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, ctx, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


# ─── Infrastructure Errors (500-level) ──────────────────────────

class LotteryVerificationError(CookGovError):
    """A lottery result failed independent verification and was discarded."""
    def __init__(self, attempts: int, context: ErrorContext | None = None):
        super().__init__(
            f"Lottery result failed verification after {attempts} attempt(s)",
            "LOTTERY_VERIFICATION_FAILED", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.attempts = attempts


class DatabaseError(CookGovError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
