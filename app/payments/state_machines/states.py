"""
State enums for payment models.

This module defines the enums used by the payment flow. They are Django
TextChoices for database storage and admin integration.

PaymentAttempt States:
    started -> intent_created -> confirmed -> debited -> committed
    any non-terminal state -> failed

PaymentIntentStatus mirrors the statuses Stripe reports for an intent.
Only SUCCEEDED lets a payment proceed to the balance debit.
"""

from django.db import models


class PaymentMethod(models.TextChoices):
    """
    Payment methods accepted for an order payment.

    These are Stripe's test payment method tokens; each one resolves to a
    card of the named brand.
    """

    VISA = "pm_card_visa", "Visa"
    VISA_DEBIT = "pm_card_visa_debit", "Visa (debit)"
    MASTERCARD = "pm_card_mastercard", "Mastercard"
    MASTERCARD_DEBIT = "pm_card_mastercard_debit", "Mastercard (debit)"
    MASTERCARD_PREPAID = "pm_card_mastercard_prepaid", "Mastercard (prepaid)"
    AMEX = "pm_card_amex", "American Express"
    DISCOVER = "pm_card_discover", "Discover"
    DINERS = "pm_card_diners", "Diners Club"
    JCB = "pm_card_jcb", "JCB"
    UNIONPAY = "pm_card_unionpay", "UnionPay"


class PaymentIntentStatus(models.TextChoices):
    """Statuses of a Stripe PaymentIntent."""

    REQUIRES_PAYMENT_METHOD = "requires_payment_method", "Requires Payment Method"
    REQUIRES_CONFIRMATION = "requires_confirmation", "Requires Confirmation"
    REQUIRES_ACTION = "requires_action", "Requires Action"
    PROCESSING = "processing", "Processing"
    REQUIRES_CAPTURE = "requires_capture", "Requires Capture"
    CANCELED = "canceled", "Canceled"
    SUCCEEDED = "succeeded", "Succeeded"


class PaymentAttemptState(models.TextChoices):
    """
    States for the PaymentAttempt progress marker.

    Each state names the last step that completed. FAILED records the
    state the attempt was in when it failed (see PaymentAttempt.failed_from).

    State Flow:
        STARTED -> INTENT_CREATED -> CONFIRMED -> DEBITED -> COMMITTED
        STARTED/INTENT_CREATED/CONFIRMED/DEBITED -> FAILED

    Terminal states: COMMITTED, FAILED
    """

    STARTED = "started", "Started"
    INTENT_CREATED = "intent_created", "Intent Created"
    CONFIRMED = "confirmed", "Confirmed"
    DEBITED = "debited", "Debited"
    COMMITTED = "committed", "Committed"
    FAILED = "failed", "Failed"
