"""Error Hierarchy — typed, categorized exceptions for all FormFlow failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - to_response() produces the REST envelope
    - No internal details leaked in user-facing messages
    - Field-level validation failures are NOT exceptions: they travel inside Reject

Design Decisions:
    - Single hierarchy with FormFlowError base: FastAPI global handler catches all (ADR: uniform error shape)
    - ErrorContext as dataclass: rich observability without coupling to logging framework
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
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    PERSISTENCE = "persistence"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    flow_id: str | None = None
    step: int | None = None
    entity_id: str | None = None
    debug_info: dict[str, Any] | None = None


class FormFlowError(Exception):
    """Base exception for all FormFlow errors."""

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
                    "flow_id": self.context.flow_id,
                    "step": self.context.step,
                    "entity_id": self.context.entity_id,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class StepOutOfSequenceError(FormFlowError):
    """Submission targets a step other than the flow's current one."""
    def __init__(
        self, submitted: int, current: int, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Step {submitted} cannot be submitted; flow is at step {current}.",
            "STEP_OUT_OF_SEQUENCE", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 409,
        )
        self.submitted = submitted
        self.current = current


class FlowAlreadyCommittedError(FormFlowError):
    """Submission arrived after the flow committed its entity."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Flow already committed; start a new flow to make further changes.",
            "FLOW_ALREADY_COMMITTED", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )


class UnknownFormError(FormFlowError):
    """Requested form name is not registered."""
    def __init__(self, form_name: str, context: ErrorContext | None = None):
        super().__init__(
            f"Form '{form_name}' is not registered",
            "UNKNOWN_FORM", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )
        self.form_name = form_name


class ResourceNotFoundError(FormFlowError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


class PersistenceError(FormFlowError):
    """Entity could not be written at commit time (e.g. uniqueness violated)."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "PERSISTENCE_ERROR", ErrorCategory.PERSISTENCE,
            ErrorSeverity.WARNING, context, 409,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(FormFlowError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
