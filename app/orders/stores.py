"""
Persistence collaborators for the Order Lifecycle Manager.

The manager talks to these protocols rather than to the ORM directly so
tests can substitute in-memory stores. The Django implementations are the
defaults everywhere else.

Available Protocols:
    OrderStore: Find, lock and save orders
    OrderHistoryStore: Persist order history records

Usage:
    from orders.stores import DjangoOrderStore

    store = DjangoOrderStore()
    order = store.find_active_order(customer.pk)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from core.locks import check_version
from orders.models import Order, OrderHistory
from orders.states import OrderStatus

if TYPE_CHECKING:
    from typing import Any


@runtime_checkable
class OrderStore(Protocol):
    """Protocol for order persistence."""

    def find_active_order(self, customer_id: Any) -> Order | None:
        """Return the customer's active order, or None if there is none."""
        ...

    def lock_for_update(self, order: Order) -> Order:
        """
        Re-read the order under a row lock, verifying its version.

        Raises:
            StaleRecordError: If the order changed since it was read
            NotFoundError: If the order no longer exists
        """
        ...

    def save(self, order: Order) -> Order:
        """Persist the order and return it."""
        ...


@runtime_checkable
class OrderHistoryStore(Protocol):
    """Protocol for order history persistence."""

    def save(self, record: OrderHistory) -> OrderHistory:
        """Insert the history record and return it."""
        ...


class DjangoOrderStore:
    """OrderStore backed by the Django ORM."""

    def find_active_order(self, customer_id: Any) -> Order | None:
        return Order.objects.filter(
            customer_id=customer_id,
            status=OrderStatus.ACTIVE,
        ).first()

    def lock_for_update(self, order: Order) -> Order:
        return check_version(Order, order.pk, order.version)

    def save(self, order: Order) -> Order:
        order.save()
        return order


class DjangoOrderHistoryStore:
    """OrderHistoryStore backed by the Django ORM."""

    def save(self, record: OrderHistory) -> OrderHistory:
        record.save(force_insert=True)
        return record
