"""
Payment Intent Manager: creates, confirms and verifies Stripe intents.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.conf import settings

from core.services import BaseService
from payments.adapters import StripeAdapter
from payments.exceptions import InvalidPaymentStatusError
from payments.money import major_to_minor
from payments.state_machines import PaymentIntentStatus

if TYPE_CHECKING:
    from decimal import Decimal

    from payments.adapters import PaymentIntent, ProviderClient, RemoteCustomer


class PaymentIntentManager(BaseService):
    """
    Wraps the intent half of a payment.

    Amounts come in as major-unit Decimals and are truncated to whole
    minor units before they reach the provider.
    """

    def __init__(self, provider: ProviderClient | None = None) -> None:
        self.provider = provider or StripeAdapter()

    def create_intent(
        self,
        remote_customer: RemoteCustomer,
        amount: Decimal,
        idempotency_key: str | None = None,
    ) -> PaymentIntent:
        """
        Create an intent for amount in the remote customer's currency.

        Raises:
            PaymentProviderError: If the Stripe call fails
        """
        currency = remote_customer.currency or settings.STRIPE_DEFAULT_CURRENCY
        intent = self.provider.create_payment_intent(
            customer_id=remote_customer.id,
            amount_cents=major_to_minor(amount),
            currency=currency,
            idempotency_key=idempotency_key,
        )

        self.get_logger().info(
            "Payment intent created",
            extra={
                "payment_intent_id": intent.id,
                "remote_customer_id": remote_customer.id,
                "amount_cents": intent.amount_cents,
                "currency": currency,
            },
        )
        return intent

    def confirm(
        self,
        intent: PaymentIntent,
        payment_method: str,
        idempotency_key: str | None = None,
    ) -> PaymentIntent:
        """Confirm the intent with payment_method and return its new state."""
        return self.provider.confirm_payment_intent(
            payment_intent_id=intent.id,
            payment_method=payment_method,
            idempotency_key=idempotency_key,
        )

    def verify_succeeded(self, intent: PaymentIntent) -> PaymentIntent:
        """
        Raises:
            InvalidPaymentStatusError: Unless the intent status is succeeded
        """
        if intent.status != PaymentIntentStatus.SUCCEEDED:
            self.get_logger().warning(
                "Payment intent did not succeed",
                extra={"payment_intent_id": intent.id, "status": intent.status},
            )
            raise InvalidPaymentStatusError(
                "Something went wrong during payment confirmation!",
                details={"payment_intent_id": intent.id, "status": intent.status},
            )
        return intent
