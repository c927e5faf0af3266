"""
Payment-specific exceptions for order payment operations.

Exception Hierarchy:
    PaymentError (base for payment domain)
    ├── InsufficientBalanceError - Customer balance below the order amount
    ├── InvalidPaymentStatusError - Confirmed intent did not succeed
    └── PaymentProviderError - Provider call failed or timed out
        ├── StripeCardDeclinedError - Card declined (permanent)
        ├── StripeInvalidRequestError - Invalid request params (permanent)
        ├── StripeRateLimitError - Rate limited (transient)
        ├── StripeAPIUnavailableError - API unavailable (transient)
        └── StripeTimeoutError - Request timeout (transient)

CustomerEmailRequiredError is a ValidationError: the customer has no email
to look up a Stripe customer by.

None of these are retried inside the payment flow. A retryable error means
the caller may safely run the whole payment again.

Usage:
    from payments.exceptions import InsufficientBalanceError, PaymentProviderError

    try:
        orchestrator.create_order_payment(customer, selection)
    except PaymentProviderError as e:
        if e.is_retryable:
            ...
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.exceptions import BaseApplicationError, ValidationError

if TYPE_CHECKING:
    from typing import Any


# =============================================================================
# Payment Domain Exceptions
# =============================================================================


class PaymentError(BaseApplicationError):
    """
    Base exception for all payment operations.

    Example:
        try:
            orchestrator.create_order_payment(customer, selection)
        except PaymentError as e:
            logger.error(f"Payment failed: {e}")
            return Response(e.to_dict(), status=402)
    """

    default_error_code: str = "PAYMENT_ERROR"


class InsufficientBalanceError(PaymentError):
    """
    Raised when the remote customer's balance cannot cover the payment.

    The message states both amounts in major units; details carry the
    same values in minor units.
    """

    default_error_code: str = "INSUFFICIENT_BALANCE"


class InvalidPaymentStatusError(PaymentError):
    """
    Raised when a confirmed payment intent is not in the succeeded state.

    Attributes:
        details: Contains payment_intent_id and status
    """

    default_error_code: str = "INVALID_PAYMENT_STATUS"


class CustomerEmailRequiredError(ValidationError):
    """
    Raised when a customer without an email tries to pay.

    The email is the key for the Stripe customer, so a blank one would
    match whichever Stripe customer was created with a blank email.
    """

    default_error_code: str = "CUSTOMER_EMAIL_REQUIRED"


# =============================================================================
# Provider Exceptions
# =============================================================================


class PaymentProviderError(PaymentError):
    """
    Base exception for payment provider (Stripe) failures.

    Provides common attributes for provider error handling:
    - stripe_code: Stripe's error code
    - decline_code: Card decline code (if applicable)
    - is_retryable: Whether running the payment again may succeed

    Example:
        except PaymentProviderError as e:
            if e.is_retryable:
                ask_user_to_try_again()
            else:
                notify_user_permanent_failure(e)
    """

    default_error_code: str = "PAYMENT_PROVIDER_ERROR"
    is_retryable: bool = False

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        stripe_code: str | None = None,
        decline_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if stripe_code:
            details["stripe_code"] = stripe_code
        if decline_code:
            details["decline_code"] = decline_code
        super().__init__(message, error_code=error_code, details=details)
        self.stripe_code = stripe_code
        self.decline_code = decline_code


# -----------------------------------------------------------------------------
# Permanent Errors
# -----------------------------------------------------------------------------


class StripeCardDeclinedError(PaymentProviderError):
    """
    Card was declined by the issuing bank.

    The decline_code attribute contains the specific reason
    (generic_decline, expired_card, incorrect_cvc, ...).
    """

    default_error_code: str = "CARD_DECLINED"
    is_retryable: bool = False


class StripeInvalidRequestError(PaymentProviderError):
    """
    Invalid request sent to Stripe.

    Never succeeds with the same parameters. Also used for authentication
    failures, which need an operator to fix the API key.
    """

    default_error_code: str = "INVALID_STRIPE_REQUEST"
    is_retryable: bool = False


# -----------------------------------------------------------------------------
# Transient Errors
# -----------------------------------------------------------------------------


class StripeRateLimitError(PaymentProviderError):
    """Rate limited by the Stripe API."""

    default_error_code: str = "STRIPE_RATE_LIMITED"
    is_retryable: bool = True


class StripeAPIUnavailableError(PaymentProviderError):
    """
    Stripe could not be reached or returned a server error.

    Covers connection errors, 5xx responses and unexpected SDK failures.
    """

    default_error_code: str = "STRIPE_UNAVAILABLE"
    is_retryable: bool = True


class StripeTimeoutError(PaymentProviderError):
    """
    A Stripe request exceeded STRIPE_API_TIMEOUT_SECONDS.

    The outcome of the request is unknown: the provider may have applied
    it. Check the PaymentAttempt for the last completed step before
    retrying.
    """

    default_error_code: str = "STRIPE_TIMEOUT"
    is_retryable: bool = True
