"""
Tests for order models.

Tests totals, FSM transitions, constraints and the immutability of
order history records.
"""

from decimal import Decimal

import pytest
from django.db import IntegrityError, transaction
from django_fsm import TransitionNotAllowed

from core.exceptions import ValidationError
from orders.models import Order, OrderHistory
from orders.states import OrderStatus
from orders.tests.factories import (
    OrderFactory,
    OrderItemFactory,
    ProductFactory,
)
from payments.state_machines import PaymentMethod


# =============================================================================
# Order Total Tests
# =============================================================================


class TestOrderTotal:
    """Tests for the derived Order.total."""

    def test_total_of_empty_order_is_zero(self, empty_order):
        """An order without items totals 0.00."""
        assert empty_order.total == Decimal("0.00")

    def test_total_sums_price_times_quantity(self, empty_order):
        """Total is the sum of unit price x quantity over all items."""
        OrderItemFactory(order=empty_order, product__unit_price=Decimal("10.00"), quantity=2)
        OrderItemFactory(order=empty_order, product__unit_price=Decimal("2.50"), quantity=3)

        assert empty_order.total == Decimal("27.50")

    def test_total_uses_current_product_price(self, active_order):
        """Total is recomputed from the price in effect when read."""
        product = active_order.items.get().product
        product.unit_price = Decimal("12.00")
        product.save()

        assert active_order.total == Decimal("24.00")


# =============================================================================
# Order State Transition Tests
# =============================================================================


class TestOrderTransitions:
    """Tests for Order FSM transitions."""

    def test_default_status_is_pending(self, customer):
        """New orders start as pending with version 1."""
        order = Order.objects.create(customer=customer)

        assert order.status == OrderStatus.PENDING
        assert order.version == 1

    def test_activate_from_pending(self, customer):
        """activate() moves pending to active and stamps ordered_at."""
        order = Order.objects.create(customer=customer)

        order.activate()
        order.save()

        assert order.status == OrderStatus.ACTIVE
        assert order.ordered_at is not None

    def test_deliver_from_active(self, active_order):
        """deliver() moves active to delivered and stamps delivered_at."""
        active_order.deliver()
        active_order.save()

        fetched = Order.objects.get(pk=active_order.pk)
        assert fetched.status == OrderStatus.DELIVERED
        assert fetched.delivered_at is not None

    def test_cannot_deliver_pending_order(self, customer):
        """A pending order cannot be delivered."""
        order = Order.objects.create(customer=customer)

        with pytest.raises(TransitionNotAllowed):
            order.deliver()

    def test_delivered_is_terminal(self, active_order):
        """A delivered order cannot be delivered again."""
        active_order.deliver()

        with pytest.raises(TransitionNotAllowed):
            active_order.deliver()

    def test_status_cannot_be_assigned_directly(self, active_order):
        """Status is protected; only transitions may change it."""
        with pytest.raises(AttributeError):
            active_order.status = OrderStatus.DELIVERED

    def test_save_increments_version(self, active_order):
        """Every update bumps the version."""
        assert active_order.version == 1

        active_order.save()
        assert active_order.version == 2

        active_order.save()
        assert active_order.version == 3


# =============================================================================
# Constraint Tests
# =============================================================================


class TestOrderConstraints:
    """Tests for database constraints on orders."""

    def test_one_active_order_per_customer(self, active_order):
        """A customer cannot have two active orders."""
        with pytest.raises(IntegrityError):
            with transaction.atomic():
                OrderFactory(customer=active_order.customer)

    def test_several_delivered_orders_allowed(self, customer):
        """Only the active status is unique per customer."""
        OrderFactory(customer=customer, status=OrderStatus.DELIVERED)
        OrderFactory(customer=customer, status=OrderStatus.DELIVERED)
        OrderFactory(customer=customer, status=OrderStatus.ACTIVE)

        assert Order.objects.filter(customer=customer).count() == 3

    def test_product_price_must_be_positive(self, db):
        """Products cannot have a zero price."""
        with pytest.raises(IntegrityError):
            with transaction.atomic():
                ProductFactory(unit_price=Decimal("0.00"))


# =============================================================================
# OrderHistory Tests
# =============================================================================


class TestOrderHistory:
    """Tests for OrderHistory immutability."""

    def _create_history(self, order):
        return OrderHistory.objects.create(
            order=order,
            customer=order.customer,
            payment_method=PaymentMethod.VISA,
            payment_amount=Decimal("20.00"),
        )

    def test_create_history(self, active_order):
        """A history record stores the payment snapshot."""
        history = self._create_history(active_order)

        assert history.order_status == OrderStatus.DELIVERED
        assert history.payment_amount == Decimal("20.00")
        assert history.paid_at is not None
        assert active_order.history == history

    def test_history_cannot_be_modified(self, active_order):
        """Saving an existing record raises ValidationError."""
        history = self._create_history(active_order)
        history.payment_amount = Decimal("1.00")

        with pytest.raises(ValidationError) as exc_info:
            history.save()

        assert exc_info.value.error_code == "ORDER_HISTORY_IMMUTABLE"
        assert OrderHistory.objects.get(pk=history.pk).payment_amount == Decimal("20.00")

    def test_one_history_per_order(self, active_order):
        """An order has at most one history record."""
        self._create_history(active_order)

        with pytest.raises(IntegrityError):
            with transaction.atomic():
                self._create_history(active_order)
