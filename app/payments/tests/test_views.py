"""
Tests for the order payment endpoint.

POST /api/v1/payments/order-payment/
"""

from decimal import Decimal

import pytest
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from core.exceptions import LockAcquisitionError
from orders.models import Order
from orders.states import OrderStatus
from orders.tests.factories import OrderFactory, OrderItemFactory, UserFactory
from payments.exceptions import StripeAPIUnavailableError
from payments.services import CustomerProvisioner, PaymentOrchestrator
from payments.state_machines import PaymentIntentStatus
from payments.views import OrderPaymentView


@pytest.fixture
def url():
    return reverse("payments:order-payment")


@pytest.fixture
def api_client(customer):
    client = APIClient()
    client.force_authenticate(user=customer)
    return client


@pytest.fixture(autouse=True)
def orchestrator(mocker, fake_provider, fixed_balance_policy):
    """Route the view to an orchestrator backed by the fake provider."""
    orchestrator = PaymentOrchestrator(
        provider=fake_provider,
        provisioner=CustomerProvisioner(
            provider=fake_provider,
            balance_policy=fixed_balance_policy,
        ),
    )
    mocker.patch.object(OrderPaymentView, "orchestrator_class", return_value=orchestrator)
    return orchestrator


class TestOrderPaymentView:
    """Tests for OrderPaymentView."""

    def test_requires_authentication(self, db, url):
        response = APIClient().post(url, {"payment_method": "pm_card_visa"}, format="json")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_rejects_unknown_payment_method(self, api_client, url, active_order):
        response = api_client.post(url, {"payment_method": "pm_card_bogus"}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "payment_method" in response.data

    def test_successful_payment(self, api_client, url, active_order, fake_provider, customer):
        fake_provider.add_customer(customer.email, balance_cents=5000)

        response = api_client.post(url, {"payment_method": "pm_card_visa"}, format="json")

        assert response.status_code == status.HTTP_200_OK
        assert Decimal(response.data["amount"]) == Decimal("20.00")
        assert Decimal(response.data["ending_balance"]) == Decimal("30.00")
        assert response.data["order_id"] == str(active_order.pk)
        assert response.data["created_at"]
        assert Order.objects.get(pk=active_order.pk).status == OrderStatus.DELIVERED

    def test_no_active_order(self, api_client, url):
        response = api_client.post(url, {"payment_method": "pm_card_visa"}, format="json")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data["error_code"] == "NO_ACTIVE_ORDER"
        assert response.data["error"] == "No active order found"

    def test_empty_order(self, api_client, url, empty_order):
        response = api_client.post(url, {"payment_method": "pm_card_visa"}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "INVALID_ORDER"

    def test_customer_without_email(self, db, url, fake_provider):
        """Two customers with blank emails are never charged from one balance."""
        blank = fake_provider.add_customer("", balance_cents=5000)
        customer = UserFactory(email="")
        order = OrderFactory(customer=customer)
        OrderItemFactory(order=order, product__unit_price=Decimal("10.00"), quantity=2)
        client = APIClient()
        client.force_authenticate(user=customer)

        response = client.post(url, {"payment_method": "pm_card_visa"}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "CUSTOMER_EMAIL_REQUIRED"
        assert fake_provider.calls == []
        assert blank.balance_cents == 5000
        assert Order.objects.get(pk=order.pk).status == OrderStatus.ACTIVE

    def test_insufficient_balance(
        self, api_client, url, active_order, fake_provider, customer
    ):
        fake_provider.add_customer(customer.email, balance_cents=1000)

        response = api_client.post(url, {"payment_method": "pm_card_visa"}, format="json")

        assert response.status_code == status.HTTP_402_PAYMENT_REQUIRED
        assert response.data["error_code"] == "INSUFFICIENT_BALANCE"

    def test_invalid_payment_status(
        self, api_client, url, active_order, fake_provider, customer
    ):
        fake_provider.add_customer(customer.email, balance_cents=5000)
        fake_provider.confirm_status = PaymentIntentStatus.REQUIRES_ACTION

        response = api_client.post(url, {"payment_method": "pm_card_visa"}, format="json")

        assert response.status_code == status.HTTP_402_PAYMENT_REQUIRED
        assert response.data["error_code"] == "INVALID_PAYMENT_STATUS"

    def test_provider_error(self, api_client, url, active_order, fake_provider):
        fake_provider.fail_on(
            "find_customer_by_email",
            StripeAPIUnavailableError("Could not connect to Stripe. Please retry."),
        )

        response = api_client.post(url, {"payment_method": "pm_card_visa"}, format="json")

        assert response.status_code == status.HTTP_502_BAD_GATEWAY
        assert response.data["error_code"] == "STRIPE_UNAVAILABLE"

    def test_lock_conflict(self, api_client, url, active_order, orchestrator):
        def busy_lock(customer):
            raise LockAcquisitionError("Lock 'order-payment' is already held")

        orchestrator.lock_factory = busy_lock

        response = api_client.post(url, {"payment_method": "pm_card_visa"}, format="json")

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data["error_code"] == "LOCK_ACQUISITION_FAILED"
