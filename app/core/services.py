"""
Base service layer patterns for business logic encapsulation.

Services hold business logic separate from views and models.
Views handle HTTP concerns, models handle data, services handle logic.
Expected failures are raised as typed errors from core.exceptions and
propagate to the caller unchanged.

Usage:
    from core.services import BaseService

    class OrderService(BaseService):
        def deliver(self, order):
            with self.atomic():
                order.deliver()
                order.save()

            self.get_logger().info("Delivered order", extra={"order_id": str(order.id)})
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

from django.db import transaction

if TYPE_CHECKING:
    from collections.abc import Generator


class BaseService:
    """
    Base class for service layer classes.

    Provides:
    - Logging setup per service
    - Database transaction management

    Design Notes:
        - Collaborators are passed to __init__ so tests can substitute fakes
        - Services keep no per-call state on the instance
        - Raise typed exceptions for failures
    """

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """
        Get logger for this service.

        Returns a logger named after the service class for
        easy filtering in logs.
        """
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @classmethod
    @contextmanager
    def atomic(cls) -> Generator[None, None, None]:
        """
        Execute operations in a database transaction.

        If any operation inside the block fails, all changes are
        rolled back.

        Example:
            with cls.atomic():
                order.save()
                OrderHistory.objects.create(order=order, ...)
                # If the history write fails, the order save is rolled back
        """
        with transaction.atomic():
            yield
