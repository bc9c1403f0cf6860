"""Error Hierarchy - typed, categorized exceptions for all fulfillment failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - to_response() produces the REST envelope
    - No internal details leaked in user-facing messages
    - "Order not found" is NOT an exception (typed None result from process_order)

Design Decisions:
    - Single hierarchy with FulfillmentError base: FastAPI global handler catches all
    - ErrorContext as dataclass: rich observability without coupling to logging framework
    - OperationCancelledError is distinct from DatabaseError so callers can tell
      a cooperative abort from a store failure
"""

from dataclasses import dataclass, field
from enum import Enum
from datetime import datetime, timezone

from fulfillment.core.domain_types import OrderId, ProductId


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
    DATABASE = "database"
    CANCELLED = "cancelled"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    order_id: OrderId | None = None
    product_id: ProductId | None = None
    user_message: str | None = None


class FulfillmentError(Exception):
    """Base exception for all fulfillment errors."""

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
                    "order_id": self.context.order_id,
                    "product_id": self.context.product_id,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class InvalidProductStateError(FulfillmentError):
    """Product is missing data its category policy requires."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_PRODUCT_STATE", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 422,
        )
        self.field = field


class OperationCancelledError(FulfillmentError):
    """Caller requested cancellation before processing completed."""
    def __init__(self, stage: str, context: ErrorContext | None = None):
        super().__init__(
            f"Operation cancelled during {stage}",
            "OPERATION_CANCELLED", ErrorCategory.CANCELLED,
            ErrorSeverity.WARNING, context, 499,
        )
        self.stage = stage


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(FulfillmentError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
