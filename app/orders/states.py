"""
State enums for order models.

Order States:
    pending -> active -> delivered

Only one order per customer may be active at a time. Delivered is
terminal once the order has been paid and recorded in history.
"""

from django.db import models


class OrderStatus(models.TextChoices):
    """
    States for the Order model lifecycle.

    State Flow:
        PENDING -> ACTIVE -> DELIVERED
    """

    PENDING = "pending", "Pending"
    ACTIVE = "active", "Active"
    DELIVERED = "delivered", "Delivered"
