"""
Order domain exceptions.

Exception Hierarchy:
    NotFoundError (core)
    └── NoActiveOrderError - Customer has no active order to pay for
    ValidationError (core)
    └── InvalidOrderError - Active order cannot be charged (no items)
"""

from __future__ import annotations

from core.exceptions import NotFoundError, ValidationError


class NoActiveOrderError(NotFoundError):
    """
    Raised when a customer has no active order.

    Also raised by the commit step when the order stopped being active
    (or its version moved on) after validation.
    """

    default_error_code: str = "NO_ACTIVE_ORDER"


class InvalidOrderError(ValidationError):
    """Raised when the active order cannot be charged."""

    default_error_code: str = "INVALID_ORDER"
