"""
Order models: products, orders, order items and order history.

An Order moves pending -> active -> delivered. Its total is never stored;
Order.total recomputes it from the items every time it is read so the
amount charged always matches the current contents of the order.

Usage:
    from orders.models import Order, OrderHistory
    from orders.states import OrderStatus

    order = Order.objects.create(customer=user)
    order.activate()  # pending -> active
    order.save()

    order.total  # Decimal("25.00")
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from django_fsm import FSMField, transition

from core.exceptions import ValidationError
from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel, VersionedModel
from orders.states import OrderStatus
from payments.state_machines import PaymentMethod


class Product(BaseModel):
    """
    A product that can be added to an order.

    Only the fields needed to price an order live here.
    """

    name = models.CharField(max_length=255)
    unit_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
        help_text="Price of one unit in major currency units",
    )

    class Meta:
        ordering = ["name"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(unit_price__gt=0),
                name="product_unit_price_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.unit_price})"


class Order(UUIDPrimaryKeyMixin, VersionedModel):
    """
    A customer's order.

    Uses django-fsm for the status lifecycle and the inherited version
    field for optimistic locking.

    State Flow:
        PENDING -> ACTIVE -> DELIVERED

    Fields:
        customer: User who owns the order
        status: Current FSM state
        ordered_at: When the order became active
        delivered_at: When the order was paid and delivered
        version: Optimistic locking version
    """

    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders",
        help_text="Customer who owns this order",
    )

    status = FSMField(
        default=OrderStatus.PENDING,
        choices=OrderStatus.choices,
        db_index=True,
        protected=True,  # Prevent direct assignment outside transitions
        help_text="Current state of the order (managed by FSM)",
    )

    ordered_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the order became active",
    )

    delivered_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the order was paid and delivered",
    )

    class Meta(VersionedModel.Meta):
        verbose_name = "Order"
        verbose_name_plural = "Orders"
        indexes = [
            models.Index(
                fields=["customer", "status"],
                name="order_customer_status_idx",
            ),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["customer"],
                condition=models.Q(status=OrderStatus.ACTIVE),
                name="order_one_active_per_customer",
            ),
        ]

    def __str__(self) -> str:
        return f"Order({self.id}, {self.status})"

    @property
    def total(self) -> Decimal:
        """Sum of unit price times quantity over all items, in major units."""
        return sum(
            (item.line_total for item in self.items.select_related("product")),
            Decimal("0.00"),
        )

    # ==========================================================================
    # State Transitions (django-fsm)
    # ==========================================================================

    @transition(
        field=status,
        source=OrderStatus.PENDING,
        target=OrderStatus.ACTIVE,
    )
    def activate(self):
        """
        Make this the customer's active order.

        Transition: PENDING -> ACTIVE
        """
        self.ordered_at = timezone.now()

    @transition(
        field=status,
        source=OrderStatus.ACTIVE,
        target=OrderStatus.DELIVERED,
    )
    def deliver(self):
        """
        Mark the order as paid and delivered.

        Transition: ACTIVE -> DELIVERED
        """
        self.delivered_at = timezone.now()


class OrderItem(BaseModel):
    """A product and quantity within an order."""

    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name="items",
    )
    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="order_items",
    )
    quantity = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
    )

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gt=0),
                name="order_item_quantity_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.quantity} x {self.product.name}"

    @property
    def line_total(self) -> Decimal:
        return self.product.unit_price * self.quantity


class OrderHistory(UUIDPrimaryKeyMixin, BaseModel):
    """
    Immutable record of a paid order.

    Written exactly once, in the same transaction that moves the order to
    delivered. Updating an existing record is refused.

    Fields:
        order: The paid order
        customer: Customer who paid
        payment_method: Payment method used for the charge
        payment_amount: Amount charged, in major units
        paid_at: When the payment was recorded
        order_status: Status of the order at the time of payment
    """

    order = models.OneToOneField(
        Order,
        on_delete=models.PROTECT,
        related_name="history",
    )
    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="order_history",
    )
    payment_method = models.CharField(
        max_length=64,
        choices=PaymentMethod.choices,
    )
    payment_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text="Amount charged in major currency units",
    )
    paid_at = models.DateTimeField(default=timezone.now)
    order_status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.DELIVERED,
    )

    class Meta:
        ordering = ["-paid_at"]
        verbose_name = "Order History"
        verbose_name_plural = "Order History"
        indexes = [
            models.Index(
                fields=["customer", "paid_at"],
                name="orderhist_customer_paid_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"OrderHistory({self.order_id}, {self.payment_amount})"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError(
                "Order history records cannot be modified",
                error_code="ORDER_HISTORY_IMMUTABLE",
                details={"order_history_id": str(self.pk)},
            )
        super().save(*args, **kwargs)
