"""
Root pytest configuration for the Django project.

This module configures pytest-django and provides project-wide fixtures.
Customer and order fixtures shared by the orders and payments tests live
here; provider fixtures are in payments/conftest.py.
"""

import os
from decimal import Decimal

import django
import pytest

# Ensure Django settings are configured before any tests run
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")


def pytest_configure():
    """Configure Django settings before tests run."""
    django.setup()

    from django.conf import settings

    # Use fast password hasher for tests (PBKDF2 is too slow with 870K iterations)
    settings.PASSWORD_HASHERS = [
        "django.contrib.auth.hashers.MD5PasswordHasher",
    ]

    # Payments run without the Redis single-flight lock unless a test opts in
    settings.ORDER_PAYMENT_SINGLE_FLIGHT = False

    # Never talk to Stripe from tests
    settings.STRIPE_SECRET_KEY = "sk_test_dummy"


def pytest_collection_modifyitems(items):
    """
    Auto-mark tests based on filename patterns.

    Mapping:
    - test_integration.py → e2e (full payment journeys)
    - test_views.py, test_services.py, test_orchestrator.py, etc. → integration
    - test_models.py, test_money.py, test_locks.py, etc. → unit
    - Unmatched files → integration (safe default for Django)

    Explicit markers on test functions/classes take precedence.
    """
    # Filename patterns for each category
    e2e_patterns = ["test_integration.py"]

    integration_patterns = [
        "test_views.py",
        "test_services.py",
        "test_stores.py",
        "test_orchestrator.py",
        "test_customer_provisioner.py",
        "test_payment_intents.py",
        "test_balance_transfer.py",
    ]

    unit_patterns = [
        "test_models.py",
        "test_serializers.py",
        "test_money.py",
        "test_provisioning.py",
        "test_exceptions.py",
        "test_stripe_adapter.py",
        "test_locks.py",
    ]

    for item in items:
        # Skip if test already has unit/integration/e2e marker
        existing_markers = {m.name for m in item.iter_markers()}
        if existing_markers & {"unit", "integration", "e2e"}:
            continue

        filepath = str(item.fspath)
        filename = filepath.split("/")[-1]

        # Check patterns in priority order
        if any(pattern in filename for pattern in e2e_patterns):
            item.add_marker(pytest.mark.e2e)
        elif any(pattern in filename for pattern in integration_patterns):
            item.add_marker(pytest.mark.integration)
        elif any(pattern in filename for pattern in unit_patterns):
            item.add_marker(pytest.mark.unit)
        else:
            # Default: integration (safe for Django where most tests hit DB)
            item.add_marker(pytest.mark.integration)


# =============================================================================
# Shared Fixtures
# =============================================================================


@pytest.fixture
def customer(db):
    """Create a test customer."""
    from orders.tests.factories import UserFactory

    return UserFactory()


@pytest.fixture
def empty_order(db, customer):
    """Create an active order with no items."""
    from orders.tests.factories import OrderFactory

    return OrderFactory(customer=customer)


@pytest.fixture
def active_order(db, customer):
    """Create an active order with one line of 2 x 10.00 (total 20.00)."""
    from orders.tests.factories import OrderFactory, OrderItemFactory

    order = OrderFactory(customer=customer)
    OrderItemFactory(order=order, product__unit_price=Decimal("10.00"), quantity=2)
    return order
