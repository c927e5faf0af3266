"""
Provider-neutral types for the payment provider client.

The payment services depend on the ProviderClient protocol and these
result types, never on the Stripe SDK directly. StripeAdapter is the
production implementation; tests use an in-memory fake.

Amounts are always integers in minor units (cents).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from datetime import datetime
    from typing import Any


# =============================================================================
# Data Types
# =============================================================================


@dataclass
class RemoteCustomer:
    """
    A customer as the payment provider sees it.

    Attributes:
        id: Provider customer ID (cus_xxx)
        email: Email the customer was registered with
        currency: Currency of the customer balance
        balance_cents: Available balance in minor units
        payment_method: Payment method the customer was created with
        raw_response: Full provider response dict (for debugging)
    """

    id: str
    email: str
    currency: str
    balance_cents: int
    payment_method: str | None = None
    raw_response: dict[str, Any] = field(default_factory=dict)


@dataclass
class PaymentIntent:
    """
    Result from payment intent operations.

    Attributes:
        id: PaymentIntent ID (pi_xxx)
        status: Provider status (requires_confirmation, succeeded, ...)
        amount_cents: Amount in minor units
        currency: Currency code
        customer_id: Provider customer the intent charges
        payment_method: Payment method attached to the intent, if any
        raw_response: Full provider response dict
    """

    id: str
    status: str
    amount_cents: int
    currency: str
    customer_id: str
    payment_method: str | None = None
    raw_response: dict[str, Any] = field(default_factory=dict)


@dataclass
class BalanceTransaction:
    """
    Result from a customer balance adjustment.

    Attributes:
        id: Balance transaction ID (cbtxn_xxx)
        amount_cents: Signed amount; negative for a debit
        ending_balance_cents: Customer balance after the adjustment
        currency: Currency code
        customer_id: Provider customer that was adjusted
        created_at: When the provider recorded the transaction
        raw_response: Full provider response dict
    """

    id: str
    amount_cents: int
    ending_balance_cents: int
    currency: str
    customer_id: str
    created_at: datetime
    raw_response: dict[str, Any] = field(default_factory=dict)


# =============================================================================
# Provider Protocol
# =============================================================================


@runtime_checkable
class ProviderClient(Protocol):
    """
    Protocol for payment provider clients.

    Every method raises a PaymentProviderError subclass on failure,
    including timeouts.

    Example:
        class FakeProviderClient:
            def find_customer_by_email(self, email): ...
            ...

        provisioner = CustomerProvisioner(provider=FakeProviderClient())
    """

    def find_customer_by_email(self, email: str) -> RemoteCustomer | None:
        """Return the first customer registered with this email, or None."""
        ...

    def create_customer(
        self,
        email: str,
        payment_method: str,
        initial_balance_cents: int,
        idempotency_key: str | None = None,
    ) -> RemoteCustomer:
        """Create a customer with a payment method and an opening balance."""
        ...

    def retrieve_customer(self, customer_id: str) -> RemoteCustomer:
        """Fetch the current state of a customer, including its balance."""
        ...

    def create_payment_intent(
        self,
        customer_id: str,
        amount_cents: int,
        currency: str,
        idempotency_key: str | None = None,
    ) -> PaymentIntent:
        """Create a payment intent for the customer."""
        ...

    def confirm_payment_intent(
        self,
        payment_intent_id: str,
        payment_method: str,
        idempotency_key: str | None = None,
    ) -> PaymentIntent:
        """Confirm an intent with a payment method and return its new state."""
        ...

    def debit_balance(
        self,
        customer_id: str,
        amount_cents: int,
        currency: str,
        idempotency_key: str | None = None,
    ) -> BalanceTransaction:
        """Reduce the customer balance by amount_cents."""
        ...
