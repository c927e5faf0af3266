"""
Order Lifecycle Manager.

Owns the order-side half of a payment: deciding whether the customer's
active order can be charged, and committing a paid order as delivered
together with its history record. It never talks to the payment provider.

Usage:
    from orders.services import OrderLifecycleManager

    lifecycle = OrderLifecycleManager()
    order = lifecycle.ensure_chargeable(customer)
    ...
    history = lifecycle.commit(order, "pm_card_visa", Decimal("25.00"))
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.exceptions import NotFoundError, StaleRecordError
from core.services import BaseService
from orders.exceptions import InvalidOrderError, NoActiveOrderError
from orders.models import OrderHistory
from orders.states import OrderStatus
from orders.stores import DjangoOrderHistoryStore, DjangoOrderStore

if TYPE_CHECKING:
    from decimal import Decimal

    from django.contrib.auth.models import AbstractBaseUser

    from orders.models import Order
    from orders.stores import OrderHistoryStore, OrderStore


class OrderLifecycleManager(BaseService):
    """
    Validates and commits orders around a payment.

    State Flow:
        ACTIVE -> DELIVERED (on commit)

    Args:
        order_store: Order persistence, DjangoOrderStore by default
        history_store: History persistence, DjangoOrderHistoryStore by default
    """

    def __init__(
        self,
        order_store: OrderStore | None = None,
        history_store: OrderHistoryStore | None = None,
    ) -> None:
        self.order_store = order_store or DjangoOrderStore()
        self.history_store = history_store or DjangoOrderHistoryStore()

    def ensure_chargeable(self, customer: AbstractBaseUser) -> Order:
        """
        Return the customer's active order if it can be charged.

        Raises:
            NoActiveOrderError: If the customer has no active order
            InvalidOrderError: If the active order has no items
        """
        order = self.order_store.find_active_order(customer.pk)
        if order is None:
            raise NoActiveOrderError(
                "No active order found",
                details={"customer_id": str(customer.pk)},
            )

        if not order.items.exists():
            raise InvalidOrderError(
                "Invalid order: The order does not contain any items",
                details={"order_id": str(order.pk)},
            )

        return order

    def commit(
        self,
        order: Order,
        payment_method: str,
        amount: Decimal,
    ) -> OrderHistory:
        """
        Mark a paid order as delivered and write its history record.

        Both writes happen in one transaction. The order is re-read under a
        row lock at the version seen by ensure_chargeable(), so a concurrent
        commit of the same order fails here instead of writing twice.

        Args:
            order: Order returned by ensure_chargeable()
            payment_method: Payment method that was charged
            amount: Amount charged, in major units

        Raises:
            NoActiveOrderError: If the order changed, vanished or is no
                longer active
        """
        logger = self.get_logger()

        with self.atomic():
            try:
                locked = self.order_store.lock_for_update(order)
            except (StaleRecordError, NotFoundError) as e:
                logger.warning(
                    "Order changed before commit",
                    extra={"order_id": str(order.pk), "error_code": e.error_code},
                )
                raise NoActiveOrderError(
                    "No active order found",
                    details={"order_id": str(order.pk), "reason": e.error_code},
                ) from e

            if locked.status != OrderStatus.ACTIVE:
                raise NoActiveOrderError(
                    "No active order found",
                    details={"order_id": str(order.pk), "status": locked.status},
                )

            locked.deliver()
            self.order_store.save(locked)

            history = self.history_store.save(
                OrderHistory(
                    order=locked,
                    customer_id=locked.customer_id,
                    payment_method=payment_method,
                    payment_amount=amount,
                    order_status=locked.status,
                )
            )

        logger.info(
            "Order delivered",
            extra={
                "order_id": str(locked.pk),
                "order_history_id": str(history.pk),
                "payment_amount": str(amount),
            },
        )
        return history
