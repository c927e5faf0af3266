"""
Payments app configuration.

This app provides the order payment flow on top of Stripe:
- Stripe customer provisioning and balance debits
- Payment intent creation and confirmation
- Payment attempt tracking
"""

from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    """Configuration for the payments application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "payments"
    verbose_name = "Payments"
