"""
Payment orchestrator: turns a customer's active order into a paid order.

The orchestrator is the entry point for the order payment flow. It runs
the steps in a fixed order and stops at the first failure:

    1. OrderLifecycleManager.ensure_chargeable   (no provider calls yet)
    2. CustomerProvisioner.resolve
    3. PaymentIntentManager.create_intent
    4. PaymentIntentManager.confirm
    5. PaymentIntentManager.verify_succeeded
    6. BalanceTransferService.debit
    7. OrderLifecycleManager.commit
    8. Build the PaymentReceipt

Provider-side effects are never compensated. Each completed step is
recorded on a PaymentAttempt, so a payment that Stripe took but the order
did not record shows up in PaymentAttempt.objects.needing_reconciliation().

Usage:
    from payments.services import PaymentOrchestrator, PaymentSelection

    receipt = PaymentOrchestrator().create_order_payment(
        customer=request.user,
        selection=PaymentSelection(payment_method="pm_card_visa"),
    )
    receipt.amount  # Decimal("20.00")
"""

from __future__ import annotations

import contextlib
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from django.conf import settings

from core.exceptions import BaseApplicationError
from core.locks import DistributedLock
from core.services import BaseService
from orders.services import OrderLifecycleManager
from payments.adapters import IdempotencyKeyGenerator, StripeAdapter
from payments.models import PaymentAttempt
from payments.money import minor_to_major
from payments.services.balance_transfer import BalanceTransferService
from payments.services.customer_provisioner import CustomerProvisioner
from payments.services.payment_intents import PaymentIntentManager

if TYPE_CHECKING:
    import uuid
    from contextlib import AbstractContextManager
    from datetime import datetime
    from decimal import Decimal

    from django.contrib.auth.models import AbstractBaseUser

    from payments.adapters import ProviderClient


# =============================================================================
# Parameter and Result Types
# =============================================================================


@dataclass
class PaymentSelection:
    """
    The customer's choice of how to pay.

    Attributes:
        payment_method: Stripe payment method token (e.g., "pm_card_visa")
    """

    payment_method: str

    def __post_init__(self) -> None:
        if not self.payment_method:
            raise ValueError("payment_method is required")


@dataclass
class PaymentReceipt:
    """
    Result of a successful order payment.

    Attributes:
        created_at: When Stripe recorded the balance debit
        amount: Amount charged, in major units
        ending_balance: Customer balance after the debit, in major units
        order_id: The order that was delivered
        payment_intent_id: Stripe PaymentIntent ID (pi_xxx)
    """

    created_at: datetime
    amount: Decimal
    ending_balance: Decimal
    order_id: uuid.UUID
    payment_intent_id: str


def single_flight_lock(customer: AbstractBaseUser) -> AbstractContextManager:
    """
    Serialize payments of one customer across processes.

    Returns a no-op context when ORDER_PAYMENT_SINGLE_FLIGHT is off.
    """
    if not settings.ORDER_PAYMENT_SINGLE_FLIGHT:
        return contextlib.nullcontext()
    return DistributedLock(
        f"order-payment:{customer.pk}",
        ttl=settings.ORDER_PAYMENT_LOCK_TTL_SECONDS,
        blocking=True,
        timeout=settings.ORDER_PAYMENT_LOCK_TIMEOUT_SECONDS,
    )


# =============================================================================
# Payment Orchestrator
# =============================================================================


class PaymentOrchestrator(BaseService):
    """
    Coordinates the order payment flow.

    Collaborators default to their production implementations, all sharing
    one provider client. Pass them in to substitute fakes in tests.

    Args:
        provider: Payment provider client, StripeAdapter by default
        lifecycle: Order-side validation and commit
        provisioner: Local to Stripe customer mapping
        intents: Payment intent create/confirm/verify
        balance: Customer balance debit
        lock_factory: Callable returning a context manager that guards one
            customer's payment; single_flight_lock by default
    """

    def __init__(
        self,
        provider: ProviderClient | None = None,
        lifecycle: OrderLifecycleManager | None = None,
        provisioner: CustomerProvisioner | None = None,
        intents: PaymentIntentManager | None = None,
        balance: BalanceTransferService | None = None,
        lock_factory: Callable[[AbstractBaseUser], AbstractContextManager] | None = None,
    ) -> None:
        provider = provider or StripeAdapter()
        self.lifecycle = lifecycle or OrderLifecycleManager()
        self.provisioner = provisioner or CustomerProvisioner(provider=provider)
        self.intents = intents or PaymentIntentManager(provider=provider)
        self.balance = balance or BalanceTransferService(provider=provider)
        self.lock_factory = lock_factory or single_flight_lock

    def create_order_payment(
        self,
        customer: AbstractBaseUser,
        selection: PaymentSelection,
    ) -> PaymentReceipt:
        """
        Charge the customer for their active order and deliver it.

        Args:
            customer: Customer paying for their active order
            selection: Payment method to charge

        Returns:
            PaymentReceipt for the completed payment

        Raises:
            NoActiveOrderError: No active order, or it changed during payment
            InvalidOrderError: The active order has no items
            CustomerEmailRequiredError: The customer has no email
            PaymentProviderError: A Stripe call failed or timed out
            InvalidPaymentStatusError: The confirmed intent did not succeed
            InsufficientBalanceError: The customer balance is too low
            LockAcquisitionError: Another payment for the customer is running
        """
        with self.lock_factory(customer):
            return self._run(customer, selection)

    def _run(
        self,
        customer: AbstractBaseUser,
        selection: PaymentSelection,
    ) -> PaymentReceipt:
        logger = self.get_logger()
        payment_method = selection.payment_method

        order = self.lifecycle.ensure_chargeable(customer)
        amount = order.total

        attempt = PaymentAttempt.objects.create(
            customer=customer,
            order=order,
            payment_method=payment_method,
        )
        log_context = {
            "payment_attempt_id": str(attempt.id),
            "order_id": str(order.pk),
            "customer_id": str(customer.pk),
        }
        logger.info(
            "Order payment started",
            extra={**log_context, "amount": str(amount), "payment_method": payment_method},
        )

        try:
            remote = self.provisioner.resolve(customer, payment_method)

            intent = self.intents.create_intent(
                remote,
                amount,
                idempotency_key=IdempotencyKeyGenerator.generate(
                    "create_intent", attempt.id
                ),
            )
            attempt.record_intent(
                remote_customer_id=remote.id,
                payment_intent_id=intent.id,
                amount_cents=intent.amount_cents,
                currency=intent.currency,
            )
            attempt.save()

            confirmed = self.intents.confirm(
                intent,
                payment_method,
                idempotency_key=IdempotencyKeyGenerator.generate(
                    "confirm_intent", attempt.id
                ),
            )
            self.intents.verify_succeeded(confirmed)
            attempt.record_confirmation()
            attempt.save()

            transaction = self.balance.debit(
                confirmed.customer_id,
                confirmed.amount_cents,
                idempotency_key=IdempotencyKeyGenerator.generate(
                    "debit_balance", attempt.id
                ),
            )
            attempt.record_debit(balance_transaction_id=transaction.id)
            attempt.save()

            charged = minor_to_major(confirmed.amount_cents)
            self.lifecycle.commit(order, payment_method, charged)
            attempt.record_commit()
            attempt.save()

        except Exception as e:
            self._mark_failed(attempt, e)
            raise

        logger.info(
            "Order payment completed",
            extra={
                **log_context,
                "payment_intent_id": confirmed.id,
                "balance_transaction_id": transaction.id,
                "amount": str(charged),
            },
        )

        return PaymentReceipt(
            created_at=transaction.created_at,
            amount=charged,
            ending_balance=minor_to_major(transaction.ending_balance_cents),
            order_id=order.pk,
            payment_intent_id=confirmed.id,
        )

    def _mark_failed(self, attempt: PaymentAttempt, error: Exception) -> None:
        """
        Record the failure on the attempt.

        A failure to save the marker is logged and does not replace the
        original error.
        """
        logger = self.get_logger()

        if isinstance(error, BaseApplicationError):
            error_code, reason = error.error_code, error.message
        else:
            error_code, reason = type(error).__name__, str(error)

        log_context = {
            "payment_attempt_id": str(attempt.id),
            "failed_from": attempt.state,
            "error_code": error_code,
        }

        try:
            attempt.fail(error_code=error_code, reason=reason)
            attempt.save()
        except Exception:
            logger.exception("Could not record payment attempt failure", extra=log_context)
            return

        if attempt.needs_reconciliation:
            logger.error(
                "Order payment failed after Stripe took payment",
                extra=log_context,
            )
        else:
            logger.warning("Order payment failed", extra=log_context)
