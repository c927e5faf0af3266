"""
Initial balance policies for newly provisioned provider customers.

When the Customer Provisioner has to create a Stripe customer it seeds the
customer's balance from one of these policies. The policy in use is named
by the PAYMENT_INITIAL_BALANCE_POLICY setting (a dotted path).

Available Policies:
    RandomInitialBalancePolicy: Uniform random balance between two bounds
    FixedInitialBalancePolicy: The same balance for every customer

Usage:
    from payments.provisioning import get_initial_balance_policy

    policy = get_initial_balance_policy()
    balance_cents = policy.initial_balance_cents(customer_id=user.pk)
"""

from __future__ import annotations

import random
from typing import Protocol, runtime_checkable

from django.conf import settings
from django.utils.module_loading import import_string


@runtime_checkable
class InitialBalancePolicy(Protocol):
    """Protocol for initial balance policies."""

    def initial_balance_cents(self, customer_id) -> int:
        """Return the opening balance for a new customer, in minor units.

        Must return the same value every time for the same customer_id, so
        a retried create sends Stripe the same parameters.
        """
        ...


class RandomInitialBalancePolicy:
    """
    Uniform random balance between min_cents and max_cents (inclusive).

    The draw is seeded with the customer id, so one customer always gets
    the same balance while different customers get different ones.

    Defaults come from PAYMENT_INITIAL_BALANCE_MIN_CENTS and
    PAYMENT_INITIAL_BALANCE_MAX_CENTS (2,000.00 to 5,000.00).

    Args:
        min_cents: Lower bound in minor units
        max_cents: Upper bound in minor units
        rng: Random source used instead of the per-customer seed

    Raises:
        ValueError: If the bounds are negative or inverted
    """

    def __init__(
        self,
        min_cents: int | None = None,
        max_cents: int | None = None,
        rng: random.Random | None = None,
    ) -> None:
        if min_cents is None:
            min_cents = settings.PAYMENT_INITIAL_BALANCE_MIN_CENTS
        if max_cents is None:
            max_cents = settings.PAYMENT_INITIAL_BALANCE_MAX_CENTS
        if min_cents < 0:
            raise ValueError("min_cents must not be negative")
        if min_cents > max_cents:
            raise ValueError("min_cents must not exceed max_cents")

        self.min_cents = min_cents
        self.max_cents = max_cents
        self.rng = rng

    def initial_balance_cents(self, customer_id) -> int:
        rng = self.rng or random.Random(f"initial-balance:{customer_id}")
        return rng.randint(self.min_cents, self.max_cents)


class FixedInitialBalancePolicy:
    """
    Every new customer starts with the same balance.

    Defaults to PAYMENT_INITIAL_BALANCE_MIN_CENTS when no amount is given.
    """

    def __init__(self, amount_cents: int | None = None) -> None:
        if amount_cents is None:
            amount_cents = settings.PAYMENT_INITIAL_BALANCE_MIN_CENTS
        if amount_cents < 0:
            raise ValueError("amount_cents must not be negative")
        self.amount_cents = amount_cents

    def initial_balance_cents(self, customer_id) -> int:
        return self.amount_cents


def get_initial_balance_policy() -> InitialBalancePolicy:
    """Build the policy named by PAYMENT_INITIAL_BALANCE_POLICY."""
    policy_class = import_string(settings.PAYMENT_INITIAL_BALANCE_POLICY)
    return policy_class()
