"""
Payment adapters for external services.

The payment services depend on the ProviderClient protocol defined in
payments.adapters.base. StripeAdapter is the production implementation.
All Stripe API calls should go through it to ensure consistent error
handling, timeouts, idempotency, and observability.

Usage:
    from payments.adapters import StripeAdapter

    adapter = StripeAdapter()
    customer = adapter.retrieve_customer("cus_xxx")
"""

from payments.adapters.base import (
    BalanceTransaction,
    PaymentIntent,
    ProviderClient,
    RemoteCustomer,
)
from payments.adapters.stripe_adapter import (
    IdempotencyKeyGenerator,
    StripeAdapter,
)

__all__ = [
    "BalanceTransaction",
    "IdempotencyKeyGenerator",
    "PaymentIntent",
    "ProviderClient",
    "RemoteCustomer",
    "StripeAdapter",
]
