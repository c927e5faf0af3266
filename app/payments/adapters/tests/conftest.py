"""
Pytest fixtures for Stripe adapter tests.

This module provides fixtures for testing the Stripe adapter, including
mock Stripe API responses and error conditions.

Sections:
    - Mock Stripe Response Fixtures
    - Mock Stripe Error Fixtures
    - Mock Stripe Client Fixtures
"""

import uuid
from dataclasses import dataclass
from typing import Any
from unittest.mock import patch

import pytest
import stripe


@pytest.fixture
def idempotency_key():
    """Generate an idempotency key for testing."""
    return f"test-{uuid.uuid4()}"


# =============================================================================
# Mock Stripe Response Fixtures
# =============================================================================


@dataclass
class MockStripeObject:
    """Mock Stripe API object with to_dict support."""

    data: dict[str, Any]

    def __getattr__(self, name: str) -> Any:
        if name == "data":
            return self.__dict__["data"]
        return self.data.get(name)

    def to_dict(self) -> dict[str, Any]:
        return self.data


@dataclass
class MockStripeList:
    """Mock Stripe list response with data attribute."""

    items: list[MockStripeObject]
    has_more: bool = False

    @property
    def data(self) -> list[MockStripeObject]:
        return self.items


@pytest.fixture
def mock_customer():
    """Create a mock Customer response."""

    def _create(
        id: str = "cus_test123456",
        email: str = "customer@example.com",
        balance: int = 5000,
        currency: str | None = "usd",
        metadata: dict | None = None,
        invoice_settings: dict | None = None,
    ) -> MockStripeObject:
        return MockStripeObject(
            {
                "id": id,
                "object": "customer",
                "email": email,
                "balance": balance,
                "currency": currency,
                "metadata": {"payment_method": "pm_card_visa"}
                if metadata is None
                else metadata,
                "invoice_settings": invoice_settings or {},
            }
        )

    return _create


@pytest.fixture
def mock_payment_intent():
    """Create a mock PaymentIntent response."""

    def _create(
        id: str = "pi_test123456",
        status: str = "requires_confirmation",
        amount: int = 2000,
        currency: str = "usd",
        customer: str = "cus_test123456",
        payment_method: str | None = None,
    ) -> MockStripeObject:
        return MockStripeObject(
            {
                "id": id,
                "object": "payment_intent",
                "status": status,
                "amount": amount,
                "currency": currency,
                "customer": customer,
                "payment_method": payment_method,
            }
        )

    return _create


@pytest.fixture
def mock_balance_transaction():
    """Create a mock customer balance transaction response."""

    def _create(
        id: str = "cbtxn_test123456",
        amount: int = -2000,
        ending_balance: int = 3000,
        currency: str = "usd",
        customer: str = "cus_test123456",
        created: int = 1_700_000_000,
    ) -> MockStripeObject:
        return MockStripeObject(
            {
                "id": id,
                "object": "customer_balance_transaction",
                "amount": amount,
                "ending_balance": ending_balance,
                "currency": currency,
                "customer": customer,
                "created": created,
            }
        )

    return _create


# =============================================================================
# Mock Stripe Error Fixtures
# =============================================================================


@pytest.fixture
def card_error():
    """Create a Stripe CardError."""

    def _create(
        message: str = "Your card was declined.",
        code: str = "card_declined",
        decline_code: str | None = "generic_decline",
    ) -> stripe.CardError:
        error = stripe.CardError(
            message=message,
            param=None,
            code=code,
        )
        error.decline_code = decline_code
        return error

    return _create


@pytest.fixture
def invalid_request_error():
    """Create a Stripe InvalidRequestError."""
    return stripe.InvalidRequestError(
        message="No such customer: 'cus_missing'",
        param="customer",
        code="resource_missing",
    )


@pytest.fixture
def rate_limit_error():
    """Create a Stripe RateLimitError."""
    return stripe.RateLimitError(
        message="Too many requests hit the API too quickly.",
    )


@pytest.fixture
def api_connection_error():
    """Create a Stripe APIConnectionError."""
    return stripe.APIConnectionError(
        message="Could not connect to Stripe.",
    )


@pytest.fixture
def timeout_error():
    """Create the APIConnectionError Stripe raises on a read timeout."""
    return stripe.APIConnectionError(
        message="Request timed out after 10 seconds.",
    )


@pytest.fixture
def api_error():
    """Create a Stripe APIError."""
    return stripe.APIError(
        message="Something went wrong on Stripe's end.",
    )


@pytest.fixture
def idempotency_error():
    """Create a Stripe IdempotencyError."""
    return stripe.IdempotencyError(
        message="Keys for idempotent requests can only be used with the same "
        "parameters they were first used with.",
        code="idempotency_key_in_use",
    )


@pytest.fixture
def authentication_error():
    """Create a Stripe AuthenticationError."""
    return stripe.AuthenticationError(
        message="Invalid API Key provided.",
    )


# =============================================================================
# Mock Stripe Client Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def mock_stripe_http_client():
    """Mock stripe.RequestsClient so no HTTP client is built."""
    with patch("stripe.RequestsClient") as mock:
        yield mock


@pytest.fixture
def mock_stripe_customer(mock_customer, mock_balance_transaction):
    """Mock stripe.Customer API."""
    with patch("stripe.Customer") as mock:
        mock.list.return_value = MockStripeList(items=[mock_customer()])
        mock.create.return_value = mock_customer()
        mock.retrieve.return_value = mock_customer()
        mock.create_balance_transaction.return_value = mock_balance_transaction()
        yield mock


@pytest.fixture
def mock_stripe_payment_intent(mock_payment_intent):
    """Mock stripe.PaymentIntent API."""
    with patch("stripe.PaymentIntent") as mock:
        mock.create.return_value = mock_payment_intent()
        mock.confirm.return_value = mock_payment_intent(
            status="succeeded", payment_method="pm_card_visa"
        )
        yield mock
