"""
Balance Transfer Service: debits a Stripe customer's balance.

The balance is read fresh from Stripe before every debit. The check and
the debit are two separate calls, so a concurrent payment for the same
Stripe customer can still overdraw it; the payment flow serializes
payments per customer to avoid that.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.services import BaseService
from payments.adapters import StripeAdapter
from payments.exceptions import InsufficientBalanceError
from payments.money import format_major

if TYPE_CHECKING:
    from payments.adapters import BalanceTransaction, ProviderClient


class BalanceTransferService(BaseService):
    """Move funds out of a Stripe customer's balance."""

    def __init__(self, provider: ProviderClient | None = None) -> None:
        self.provider = provider or StripeAdapter()

    def debit(
        self,
        remote_customer_id: str,
        amount_cents: int,
        idempotency_key: str | None = None,
    ) -> BalanceTransaction:
        """
        Debit amount_cents from the customer's balance.

        Args:
            remote_customer_id: Stripe customer ID (cus_xxx)
            amount_cents: Amount to debit in minor units
            idempotency_key: Key for the balance transaction call

        Returns:
            The balance transaction, including the ending balance

        Raises:
            InsufficientBalanceError: If the balance is below amount_cents
            PaymentProviderError: If a Stripe call fails
        """
        logger = self.get_logger()

        remote = self.provider.retrieve_customer(remote_customer_id)
        if amount_cents > remote.balance_cents:
            logger.info(
                "Insufficient customer balance",
                extra={
                    "remote_customer_id": remote_customer_id,
                    "amount_cents": amount_cents,
                    "balance_cents": remote.balance_cents,
                },
            )
            raise InsufficientBalanceError(
                "You don't have enough money to make this payment. "
                f"Amount required: {format_major(amount_cents)}. "
                f"Your balance: {format_major(remote.balance_cents)}.",
                details={
                    "remote_customer_id": remote_customer_id,
                    "amount_cents": amount_cents,
                    "balance_cents": remote.balance_cents,
                },
            )

        transaction = self.provider.debit_balance(
            customer_id=remote_customer_id,
            amount_cents=amount_cents,
            currency=remote.currency,
            idempotency_key=idempotency_key,
        )

        logger.info(
            "Customer balance debited",
            extra={
                "remote_customer_id": remote_customer_id,
                "balance_transaction_id": transaction.id,
                "amount_cents": amount_cents,
                "ending_balance_cents": transaction.ending_balance_cents,
            },
        )
        return transaction
