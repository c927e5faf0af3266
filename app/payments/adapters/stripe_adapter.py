"""
Stripe API adapter for order payments.

This module provides the StripeAdapter class which encapsulates all
Stripe API interactions. All Stripe calls should go through this
adapter to ensure consistent error handling, timeouts, idempotency,
and observability.

Features:
- Configurable timeout on every API call
- Automatic error translation to domain exceptions
- Structured logging with timing metrics
- Idempotency keys on every write

Configuration (via settings):
- STRIPE_SECRET_KEY: Stripe API secret key
- STRIPE_API_TIMEOUT_SECONDS: API call timeout (default: 10)
- STRIPE_MAX_RETRIES: SDK-level network retries (default: 0)
- STRIPE_DEFAULT_CURRENCY: Currency for customers that have none (default: usd)

Usage:
    from payments.adapters import StripeAdapter

    adapter = StripeAdapter()
    customer = adapter.find_customer_by_email("jane@example.com")
    intent = adapter.create_payment_intent(
        customer_id=customer.id,
        amount_cents=2500,
        currency=customer.currency,
        idempotency_key="create_intent:attempt_123:1:a1b2c3d4",
    )
"""

from __future__ import annotations

import hashlib
import logging
import time
import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING

import stripe
from django.conf import settings

from payments.adapters.base import BalanceTransaction, PaymentIntent, RemoteCustomer
from payments.exceptions import (
    StripeAPIUnavailableError,
    StripeCardDeclinedError,
    StripeInvalidRequestError,
    StripeRateLimitError,
    StripeTimeoutError,
)

if TYPE_CHECKING:
    from typing import Any


# =============================================================================
# Idempotency Key Generator
# =============================================================================


class IdempotencyKeyGenerator:
    """
    Generate idempotency keys for Stripe API calls.

    Format: "{operation}:{entity_id}:{attempt}:{hash}"

    The hash component ties the key to this deployment's SECRET_KEY
    while the structured format aids debugging and correlation.

    Example:
        key = IdempotencyKeyGenerator.generate(
            operation="create_intent",
            entity_id=payment_attempt.id,
        )
        # Result: "create_intent:550e8400-e29b-41d4-a716-446655440000:1:a1b2c3d4"
    """

    @staticmethod
    def generate(
        operation: str,
        entity_id: uuid.UUID | str | int,
        attempt: int = 1,
    ) -> str:
        """
        Generate a deterministic idempotency key.

        Args:
            operation: The Stripe operation (create_customer, create_intent, ...)
            entity_id: The domain entity ID (customer pk, payment attempt id)
            attempt: Attempt number (default: 1)

        Returns:
            Formatted idempotency key string
        """
        entity_str = str(entity_id)
        hash_input = f"{operation}:{entity_str}:{attempt}:{settings.SECRET_KEY}"
        short_hash = hashlib.sha256(hash_input.encode()).hexdigest()[:8]

        return f"{operation}:{entity_str}:{attempt}:{short_hash}"


# =============================================================================
# Stripe Adapter
# =============================================================================


class StripeAdapter:
    """
    ProviderClient implementation backed by the Stripe API.

    Holds no per-call state, so one instance can be shared.

    Usage:
        adapter = StripeAdapter()
        intent = adapter.confirm_payment_intent("pi_xxx", "pm_card_visa")
    """

    # =========================================================================
    # Configuration
    # =========================================================================

    @staticmethod
    def _configure_stripe() -> None:
        """Configure Stripe client with API key, timeout and retries."""
        stripe.api_key = settings.STRIPE_SECRET_KEY
        stripe.max_network_retries = getattr(settings, "STRIPE_MAX_RETRIES", 0)
        timeout = getattr(settings, "STRIPE_API_TIMEOUT_SECONDS", 10)
        stripe.default_http_client = stripe.RequestsClient(timeout=timeout)

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """Get logger for this adapter."""
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    # =========================================================================
    # Customers
    # =========================================================================

    def find_customer_by_email(self, email: str) -> RemoteCustomer | None:
        """
        Look up a Stripe customer by email.

        Returns:
            The first matching customer, or None if there is none

        Raises:
            PaymentProviderError: On any Stripe failure
        """
        self._configure_stripe()
        logger = self.get_logger()

        log_context = {
            "operation": "find_customer_by_email",
            "email": email,
        }

        start_time = time.time()
        logger.info("Starting Stripe operation", extra=log_context)

        try:
            customers = stripe.Customer.list(email=email, limit=1)

            duration_ms = (time.time() - start_time) * 1000
            if not customers.data:
                logger.info(
                    "No Stripe customer found",
                    extra={**log_context, "duration_ms": duration_ms},
                )
                return None

            customer = self._to_remote_customer(customers.data[0])
            logger.info(
                "Stripe operation completed",
                extra={
                    **log_context,
                    "customer_id": customer.id,
                    "currency": customer.currency,
                    "duration_ms": duration_ms,
                },
            )
            return customer

        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            self._handle_stripe_error(e, log_context, duration_ms)
            raise

    def create_customer(
        self,
        email: str,
        payment_method: str,
        initial_balance_cents: int,
        idempotency_key: str | None = None,
    ) -> RemoteCustomer:
        """
        Create a Stripe customer with a payment method and opening balance.

        The payment method is also kept in the customer's metadata so it
        can be read back on later lookups.

        Raises:
            StripeInvalidRequestError: Invalid email or payment method
            StripeAPIUnavailableError: Stripe service unavailable
            StripeTimeoutError: Request timed out
        """
        self._configure_stripe()
        logger = self.get_logger()

        log_context = {
            "operation": "create_customer",
            "email": email,
            "payment_method": payment_method,
            "initial_balance_cents": initial_balance_cents,
            "idempotency_key": idempotency_key,
        }

        start_time = time.time()
        logger.info("Starting Stripe operation", extra=log_context)

        try:
            customer = stripe.Customer.create(
                email=email,
                payment_method=payment_method,
                balance=initial_balance_cents,
                metadata={"payment_method": payment_method},
                idempotency_key=idempotency_key,
            )

            duration_ms = (time.time() - start_time) * 1000
            logger.info(
                "Stripe operation completed",
                extra={
                    **log_context,
                    "customer_id": customer.id,
                    "duration_ms": duration_ms,
                },
            )

            return self._to_remote_customer(customer)

        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            self._handle_stripe_error(e, log_context, duration_ms)
            raise

    def retrieve_customer(self, customer_id: str) -> RemoteCustomer:
        """
        Retrieve a Stripe customer by ID.

        Raises:
            StripeInvalidRequestError: Customer not found
        """
        self._configure_stripe()
        logger = self.get_logger()

        log_context = {
            "operation": "retrieve_customer",
            "customer_id": customer_id,
        }

        start_time = time.time()
        logger.debug("Starting Stripe operation", extra=log_context)

        try:
            customer = stripe.Customer.retrieve(customer_id)

            duration_ms = (time.time() - start_time) * 1000
            logger.debug(
                "Stripe operation completed",
                extra={
                    **log_context,
                    "balance_cents": customer.balance,
                    "duration_ms": duration_ms,
                },
            )

            return self._to_remote_customer(customer)

        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            self._handle_stripe_error(e, log_context, duration_ms)
            raise

    # =========================================================================
    # Payment Intents
    # =========================================================================

    def create_payment_intent(
        self,
        customer_id: str,
        amount_cents: int,
        currency: str,
        idempotency_key: str | None = None,
    ) -> PaymentIntent:
        """
        Create a PaymentIntent for a customer.

        Automatic payment methods are enabled without redirects, so the
        intent can be confirmed server-side in one call.

        Raises:
            StripeInvalidRequestError: Invalid parameters
            StripeAPIUnavailableError: Stripe service unavailable
            StripeTimeoutError: Request timed out
        """
        self._configure_stripe()
        logger = self.get_logger()

        log_context = {
            "operation": "create_payment_intent",
            "customer_id": customer_id,
            "amount_cents": amount_cents,
            "currency": currency,
            "idempotency_key": idempotency_key,
        }

        start_time = time.time()
        logger.info("Starting Stripe operation", extra=log_context)

        try:
            intent = stripe.PaymentIntent.create(
                customer=customer_id,
                amount=amount_cents,
                currency=currency,
                automatic_payment_methods={
                    "enabled": True,
                    "allow_redirects": "never",
                },
                idempotency_key=idempotency_key,
            )

            duration_ms = (time.time() - start_time) * 1000
            logger.info(
                "Stripe operation completed",
                extra={
                    **log_context,
                    "payment_intent_id": intent.id,
                    "status": intent.status,
                    "duration_ms": duration_ms,
                },
            )

            return self._to_payment_intent(intent)

        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            self._handle_stripe_error(e, log_context, duration_ms)
            raise

    def confirm_payment_intent(
        self,
        payment_intent_id: str,
        payment_method: str,
        idempotency_key: str | None = None,
    ) -> PaymentIntent:
        """
        Confirm a PaymentIntent with a payment method.

        Returns:
            The intent as Stripe reports it after confirmation

        Raises:
            StripeCardDeclinedError: Card was declined
            StripeInvalidRequestError: Intent cannot be confirmed
            StripeTimeoutError: Request timed out
        """
        self._configure_stripe()
        logger = self.get_logger()

        log_context = {
            "operation": "confirm_payment_intent",
            "payment_intent_id": payment_intent_id,
            "payment_method": payment_method,
            "idempotency_key": idempotency_key,
        }

        start_time = time.time()
        logger.info("Starting Stripe operation", extra=log_context)

        try:
            intent = stripe.PaymentIntent.confirm(
                payment_intent_id,
                payment_method=payment_method,
                idempotency_key=idempotency_key,
            )

            duration_ms = (time.time() - start_time) * 1000
            logger.info(
                "Stripe operation completed",
                extra={
                    **log_context,
                    "status": intent.status,
                    "amount_cents": intent.amount,
                    "duration_ms": duration_ms,
                },
            )

            return self._to_payment_intent(intent)

        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            self._handle_stripe_error(e, log_context, duration_ms)
            raise

    # =========================================================================
    # Customer Balance
    # =========================================================================

    def debit_balance(
        self,
        customer_id: str,
        amount_cents: int,
        currency: str,
        idempotency_key: str | None = None,
    ) -> BalanceTransaction:
        """
        Debit a customer's balance with a negative balance transaction.

        Args:
            customer_id: Stripe customer ID (cus_xxx)
            amount_cents: Positive amount to remove from the balance
            currency: Currency of the customer balance
            idempotency_key: Unique key for idempotent debit

        Raises:
            StripeInvalidRequestError: Invalid customer or currency
            StripeTimeoutError: Request timed out
        """
        self._configure_stripe()
        logger = self.get_logger()

        log_context = {
            "operation": "debit_balance",
            "customer_id": customer_id,
            "amount_cents": amount_cents,
            "currency": currency,
            "idempotency_key": idempotency_key,
        }

        start_time = time.time()
        logger.info("Starting Stripe operation", extra=log_context)

        try:
            txn = stripe.Customer.create_balance_transaction(
                customer_id,
                amount=-amount_cents,
                currency=currency,
                idempotency_key=idempotency_key,
            )

            duration_ms = (time.time() - start_time) * 1000
            logger.info(
                "Stripe operation completed",
                extra={
                    **log_context,
                    "balance_transaction_id": txn.id,
                    "ending_balance_cents": txn.ending_balance,
                    "duration_ms": duration_ms,
                },
            )

            return BalanceTransaction(
                id=txn.id,
                amount_cents=txn.amount,
                ending_balance_cents=txn.ending_balance,
                currency=txn.currency,
                customer_id=txn.customer,
                created_at=datetime.fromtimestamp(txn.created, tz=timezone.utc),
                raw_response=txn.to_dict(),
            )

        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            self._handle_stripe_error(e, log_context, duration_ms)
            raise

    # =========================================================================
    # Response Mapping
    # =========================================================================

    @staticmethod
    def _to_remote_customer(customer: Any) -> RemoteCustomer:
        metadata = dict(customer.metadata or {})
        invoice_settings = customer.invoice_settings or {}
        payment_method = metadata.get("payment_method") or invoice_settings.get(
            "default_payment_method"
        )
        return RemoteCustomer(
            id=customer.id,
            email=customer.email,
            currency=customer.currency or settings.STRIPE_DEFAULT_CURRENCY,
            balance_cents=customer.balance or 0,
            payment_method=payment_method,
            raw_response=customer.to_dict(),
        )

    @staticmethod
    def _to_payment_intent(intent: Any) -> PaymentIntent:
        return PaymentIntent(
            id=intent.id,
            status=intent.status,
            amount_cents=intent.amount,
            currency=intent.currency,
            customer_id=intent.customer,
            payment_method=intent.payment_method,
            raw_response=intent.to_dict(),
        )

    # =========================================================================
    # Error Handling
    # =========================================================================

    @classmethod
    def _handle_stripe_error(
        cls,
        error: Exception,
        log_context: dict[str, Any],
        duration_ms: float,
    ) -> None:
        """
        Translate Stripe exceptions to domain exceptions.

        Always raises; every branch maps to a PaymentProviderError subclass.

        Raises:
            StripeCardDeclinedError: Card was declined
            StripeInvalidRequestError: Invalid request, idempotency key reuse or authentication
            StripeRateLimitError: Rate limited
            StripeTimeoutError: Request timed out
            StripeAPIUnavailableError: API unavailable or unexpected error
        """
        logger = cls.get_logger()

        log_context = {**log_context, "duration_ms": duration_ms}

        if isinstance(error, stripe.CardError):
            decline_code = getattr(error, "decline_code", None)
            logger.warning(
                "Card error from Stripe",
                extra={**log_context, "decline_code": decline_code},
            )
            raise StripeCardDeclinedError(
                str(error.user_message or error),
                stripe_code=error.code,
                decline_code=decline_code,
            ) from error

        elif isinstance(error, stripe.InvalidRequestError):
            logger.error(
                "Invalid request to Stripe",
                extra={**log_context, "stripe_code": error.code},
            )
            raise StripeInvalidRequestError(
                str(error.user_message or error),
                stripe_code=error.code,
            ) from error

        elif isinstance(error, stripe.IdempotencyError):
            # Key reused with different parameters; a retry sends the same key
            logger.error(
                "Stripe rejected idempotency key",
                extra={**log_context, "stripe_code": error.code},
            )
            raise StripeInvalidRequestError(
                str(error.user_message or error),
                stripe_code=error.code or "idempotency_error",
            ) from error

        elif isinstance(error, stripe.RateLimitError):
            logger.warning(
                "Rate limited by Stripe",
                extra=log_context,
            )
            raise StripeRateLimitError(
                "Stripe rate limit exceeded. Please retry.",
                stripe_code="rate_limit",
            ) from error

        elif isinstance(error, stripe.APIConnectionError):
            if "timed out" in str(error).lower() or "timeout" in str(error).lower():
                logger.error(
                    "Stripe request timed out",
                    extra=log_context,
                )
                raise StripeTimeoutError(
                    "Stripe request timed out. The outcome is unknown.",
                    stripe_code="timeout",
                ) from error

            logger.error(
                "Connection error to Stripe",
                extra=log_context,
                exc_info=True,
            )
            raise StripeAPIUnavailableError(
                "Could not connect to Stripe. Please retry.",
                stripe_code="api_connection_error",
            ) from error

        elif isinstance(error, stripe.APIError):
            logger.error(
                "Stripe API error",
                extra=log_context,
                exc_info=True,
            )
            raise StripeAPIUnavailableError(
                "Stripe service error. Please retry.",
                stripe_code="api_error",
            ) from error

        elif isinstance(error, stripe.AuthenticationError):
            # Invalid API key - permanent, operational issue
            logger.critical(
                "Stripe authentication failed - check API key",
                extra=log_context,
            )
            raise StripeInvalidRequestError(
                "Stripe authentication failed",
                stripe_code="authentication_error",
            ) from error

        else:
            logger.error(
                f"Unexpected error from Stripe: {type(error).__name__}",
                extra=log_context,
                exc_info=True,
            )
            raise StripeAPIUnavailableError(
                f"Unexpected Stripe error: {error}",
                stripe_code="unknown_error",
            ) from error
