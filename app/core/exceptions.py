"""
Base exception classes for application-wide error handling.

Every domain error raised by the order and payment services derives from
BaseApplicationError so callers get one shape to report:
- a human-readable message
- a machine-readable error code
- a details dict with whatever context the raiser had

Exception Hierarchy:
    BaseApplicationError (base)
    ├── ValidationError - Input or business-rule validation failures
    ├── NotFoundError - Resource not found
    └── ConflictError - State conflicts (concurrent modifications, locks)
        ├── StaleRecordError - Optimistic locking conflict
        └── LockAcquisitionError - Distributed lock timeout

Usage:
    from core.exceptions import NotFoundError

    raise NotFoundError(
        "Order not found",
        error_code="ORDER_NOT_FOUND",
        details={"order_id": str(order_id)},
    )

    # Convert to dict for an API response
    try:
        ...
    except BaseApplicationError as e:
        return Response(e.to_dict(), status=400)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context
    """

    default_error_code: str = "APPLICATION_ERROR"

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for API response.

        Returns:
            Dict with error, error_code, and (when present) details keys
        """
        result: dict[str, Any] = {
            "error": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class ValidationError(BaseApplicationError):
    """
    Raised when input or a business rule fails validation.

    Example:
        if not order.items.exists():
            raise ValidationError("Order has no items", error_code="EMPTY_ORDER")
    """

    default_error_code: str = "VALIDATION_ERROR"


class NotFoundError(BaseApplicationError):
    """Raised when a requested resource is not found."""

    default_error_code: str = "NOT_FOUND"


class ConflictError(BaseApplicationError):
    """
    Raised when an operation conflicts with current resource state.

    HTTP 409 Conflict is the appropriate status for these errors.
    """

    default_error_code: str = "CONFLICT"


class StaleRecordError(ConflictError):
    """
    Raised when optimistic locking detects concurrent modification.

    The record changed between read and write. The caller should
    re-read and decide again, or abort.

    Attributes:
        details: Contains pk, expected_version, and current_version
    """

    default_error_code: str = "STALE_RECORD"


class LockAcquisitionError(ConflictError):
    """
    Raised when a distributed lock cannot be acquired.

    Attributes:
        details: Contains key and (for blocking locks) timeout
    """

    default_error_code: str = "LOCK_ACQUISITION_FAILED"
