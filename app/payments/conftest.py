"""
Pytest fixtures shared by all payments tests.

Usage:
    def test_happy_path(orchestrator, customer, active_order, fake_provider):
        fake_provider.add_customer(customer.email, balance_cents=5000)
        receipt = orchestrator.create_order_payment(customer, selection)
"""

import pytest

from payments.provisioning import FixedInitialBalancePolicy
from payments.tests.fakes import FakeProviderClient


# =============================================================================
# Provider Fixtures
# =============================================================================


@pytest.fixture
def fake_provider():
    """In-memory provider client that records calls."""
    return FakeProviderClient()


@pytest.fixture
def fixed_balance_policy():
    """Opening balance of 50.00 for every created customer."""
    return FixedInitialBalancePolicy(amount_cents=5000)
