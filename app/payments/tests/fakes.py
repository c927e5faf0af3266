"""
In-memory ProviderClient for payment service tests.

FakeProviderClient keeps customers and intents in dicts and records every
call, so tests can assert which provider operations ran and in what order.

Usage:
    provider = FakeProviderClient()
    provider.add_customer("customer0@example.com", balance_cents=5000)
    provider.fail_on("debit_balance", StripeTimeoutError("timed out"))
"""

from __future__ import annotations

import itertools
from typing import Any

from django.utils import timezone

from payments.adapters import BalanceTransaction, PaymentIntent, RemoteCustomer
from payments.state_machines import PaymentIntentStatus


class FakeProviderClient:
    """
    ProviderClient backed by dictionaries.

    Attributes:
        calls: (operation, kwargs) tuples in call order
        confirm_status: Status an intent gets when confirmed
    """

    def __init__(self, currency: str = "usd") -> None:
        self.currency = currency
        self.customers: dict[str, RemoteCustomer] = {}
        self.intents: dict[str, PaymentIntent] = {}
        self.transactions: list[BalanceTransaction] = []
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.confirm_status = PaymentIntentStatus.SUCCEEDED
        self._errors: dict[str, Exception] = {}
        self._ids = itertools.count(1)

    # -------------------------------------------------------------------------
    # Test helpers
    # -------------------------------------------------------------------------

    def add_customer(
        self,
        email: str,
        balance_cents: int = 0,
        payment_method: str | None = "pm_card_visa",
    ) -> RemoteCustomer:
        customer = RemoteCustomer(
            id=f"cus_fake{next(self._ids)}",
            email=email,
            currency=self.currency,
            balance_cents=balance_cents,
            payment_method=payment_method,
        )
        self.customers[customer.id] = customer
        return customer

    def fail_on(self, operation: str, error: Exception) -> None:
        """Make the next and every later call to operation raise error."""
        self._errors[operation] = error

    def clear_failure(self, operation: str) -> None:
        self._errors.pop(operation, None)

    @property
    def operations(self) -> list[str]:
        return [name for name, _ in self.calls]

    def _record(self, operation: str, **kwargs: Any) -> None:
        self.calls.append((operation, kwargs))
        if operation in self._errors:
            raise self._errors[operation]

    # -------------------------------------------------------------------------
    # ProviderClient
    # -------------------------------------------------------------------------

    def find_customer_by_email(self, email: str) -> RemoteCustomer | None:
        self._record("find_customer_by_email", email=email)
        for customer in self.customers.values():
            if customer.email == email:
                return customer
        return None

    def create_customer(
        self,
        email: str,
        payment_method: str,
        initial_balance_cents: int,
        idempotency_key: str | None = None,
    ) -> RemoteCustomer:
        self._record(
            "create_customer",
            email=email,
            payment_method=payment_method,
            initial_balance_cents=initial_balance_cents,
            idempotency_key=idempotency_key,
        )
        return self.add_customer(email, initial_balance_cents, payment_method)

    def retrieve_customer(self, customer_id: str) -> RemoteCustomer:
        self._record("retrieve_customer", customer_id=customer_id)
        return self.customers[customer_id]

    def create_payment_intent(
        self,
        customer_id: str,
        amount_cents: int,
        currency: str,
        idempotency_key: str | None = None,
    ) -> PaymentIntent:
        self._record(
            "create_payment_intent",
            customer_id=customer_id,
            amount_cents=amount_cents,
            currency=currency,
            idempotency_key=idempotency_key,
        )
        intent = PaymentIntent(
            id=f"pi_fake{next(self._ids)}",
            status=PaymentIntentStatus.REQUIRES_CONFIRMATION,
            amount_cents=amount_cents,
            currency=currency,
            customer_id=customer_id,
        )
        self.intents[intent.id] = intent
        return intent

    def confirm_payment_intent(
        self,
        payment_intent_id: str,
        payment_method: str,
        idempotency_key: str | None = None,
    ) -> PaymentIntent:
        self._record(
            "confirm_payment_intent",
            payment_intent_id=payment_intent_id,
            payment_method=payment_method,
            idempotency_key=idempotency_key,
        )
        intent = self.intents[payment_intent_id]
        intent.status = self.confirm_status
        intent.payment_method = payment_method
        return intent

    def debit_balance(
        self,
        customer_id: str,
        amount_cents: int,
        currency: str,
        idempotency_key: str | None = None,
    ) -> BalanceTransaction:
        self._record(
            "debit_balance",
            customer_id=customer_id,
            amount_cents=amount_cents,
            currency=currency,
            idempotency_key=idempotency_key,
        )
        customer = self.customers[customer_id]
        customer.balance_cents -= amount_cents
        transaction = BalanceTransaction(
            id=f"cbtxn_fake{next(self._ids)}",
            amount_cents=-amount_cents,
            ending_balance_cents=customer.balance_cents,
            currency=currency,
            customer_id=customer_id,
            created_at=timezone.now(),
        )
        self.transactions.append(transaction)
        return transaction
