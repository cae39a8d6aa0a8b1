"""Error Hierarchy — typed, categorized exceptions for all catalog failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Caller errors (400-level) never commit; store/internal errors are 500-level
    - to_response() produces the REST envelope used by the route layer
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with RecipesError base: the FastAPI global handler catches all
    - A point read that finds no row is reported as NotFoundError, never StoreFailure
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
    RESOURCE_NOT_FOUND = "resource_not_found"
    INVALID_REFERENCE = "invalid_reference"
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Where an error happened, for logs and the response envelope."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    entity: str | None = None
    recipe_id: int | None = None
    version_id: int | None = None
    debug_info: dict[str, Any] | None = None


class RecipesError(Exception):
    """Base exception for all catalog errors."""

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
                    "entity": self.context.entity,
                    "recipe_id": self.context.recipe_id,
                    "version_id": self.context.version_id,
                },
            }
        }


# ─── Caller Errors (400-level) ──────────────────────────────────

class NotFoundError(RecipesError):
    """Fetch target does not exist or is hidden."""
    def __init__(
        self, entity: str, entity_id: object, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.entity = ctx.entity or entity
        super().__init__(
            f"{entity} '{entity_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, ctx, 404,
        )
        self.entity = entity
        self.entity_id = entity_id


class InvalidReferenceError(RecipesError):
    """A supplied foreign identifier does not resolve to an existing row."""
    def __init__(
        self, entity: str, entity_id: object, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.entity = ctx.entity or entity
        super().__init__(
            f"Invalid {entity.lower()} reference: {entity_id}",
            "INVALID_REFERENCE", ErrorCategory.INVALID_REFERENCE,
            ErrorSeverity.ERROR, ctx, 400,
        )
        self.entity = entity
        self.entity_id = entity_id


class InvalidValueError(RecipesError):
    """A supplied value cannot be stored so that it reads back unchanged."""
    def __init__(
        self, field_name: str, value: object, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Invalid {field_name}: {value} is out of range",
            "INVALID_VALUE", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field_name = field_name
        self.value = value


# ─── Server Errors (500-level) ──────────────────────────────────

class InternalError(RecipesError):
    """Invariant violated by stored data, not by caller input."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            f"Internal error: {message}",
            "INTERNAL_ERROR", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, context, 500,
        )


class StoreFailure(RecipesError):
    """Connectivity or query failure reported by the storage engine."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "STORE_FAILURE", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.operation = operation
