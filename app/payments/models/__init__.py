"""
Payment domain models.

This module contains the payment-related models:
- PaymentAttempt: Progress marker for one run of the order payment flow
"""

from payments.models.payment_attempt import PaymentAttempt, PaymentAttemptQuerySet

__all__ = [
    "PaymentAttempt",
    "PaymentAttemptQuerySet",
]
