"""
PaymentAttempt model: durable progress marker for one order payment.

The Stripe calls of a payment cannot be rolled back, so every completed
step is written down as it happens. A payment that failed after Stripe
confirmed the intent (or after the balance debit) is then visible via
PaymentAttempt.objects.needing_reconciliation().

Usage:
    from payments.models import PaymentAttempt

    attempt = PaymentAttempt.objects.create(
        customer=user,
        order=order,
        payment_method=PaymentMethod.VISA,
    )
    attempt.record_intent(remote_customer_id="cus_x", payment_intent_id="pi_x",
                          amount_cents=2000, currency="usd")
    attempt.save()
"""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.utils import timezone

from django_fsm import FSMField, transition

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel
from payments.state_machines import PaymentAttemptState, PaymentMethod

# States after which Stripe may have moved money for the attempt
SETTLEMENT_PENDING_STATES = [
    PaymentAttemptState.CONFIRMED,
    PaymentAttemptState.DEBITED,
]

ACTIVE_STATES = [
    PaymentAttemptState.STARTED,
    PaymentAttemptState.INTENT_CREATED,
    PaymentAttemptState.CONFIRMED,
    PaymentAttemptState.DEBITED,
]


class PaymentAttemptQuerySet(models.QuerySet):
    """QuerySet with lookups for unfinished or unsettled attempts."""

    def needing_reconciliation(self) -> PaymentAttemptQuerySet:
        """
        Attempts where Stripe took payment but the order was not recorded.

        Includes attempts stuck in DEBITED and failed attempts whose
        failure happened after confirmation.
        """
        return self.filter(
            models.Q(state=PaymentAttemptState.DEBITED)
            | models.Q(
                state=PaymentAttemptState.FAILED,
                failed_from__in=SETTLEMENT_PENDING_STATES,
            )
        )


class PaymentAttempt(UUIDPrimaryKeyMixin, BaseModel):
    """
    One run of the order payment flow.

    State Flow:
        STARTED -> INTENT_CREATED -> CONFIRMED -> DEBITED -> COMMITTED
        any non-terminal state -> FAILED

    Fields:
        customer: Customer paying
        order: Order being paid for
        payment_method: Payment method selected by the customer
        state: Last completed step (managed by FSM)
        failed_from: State the attempt was in when it failed
        remote_customer_id: Stripe customer ID (cus_xxx)
        payment_intent_id: Stripe PaymentIntent ID (pi_xxx)
        balance_transaction_id: Stripe balance transaction ID (cbtxn_xxx)
        amount_cents: Amount charged in minor units
        currency: ISO 4217 currency code
        error_code/failure_reason: Error details if the attempt failed
        completed_at: When the attempt reached a terminal state
    """

    # ==========================================================================
    # Relationships
    # ==========================================================================

    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="payment_attempts",
        help_text="Customer making the payment",
    )

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.PROTECT,
        related_name="payment_attempts",
        help_text="Order being paid for",
    )

    payment_method = models.CharField(
        max_length=64,
        choices=PaymentMethod.choices,
        help_text="Payment method selected for this attempt",
    )

    # ==========================================================================
    # State
    # ==========================================================================

    state = FSMField(
        default=PaymentAttemptState.STARTED,
        choices=PaymentAttemptState.choices,
        db_index=True,
        protected=True,
        help_text="Last completed step of the payment (managed by FSM)",
    )

    failed_from = models.CharField(
        max_length=20,
        choices=PaymentAttemptState.choices,
        blank=True,
        default="",
        help_text="State the attempt was in when it failed",
    )

    # ==========================================================================
    # Stripe Integration
    # ==========================================================================

    remote_customer_id = models.CharField(
        max_length=255,
        blank=True,
        default="",
        help_text="Stripe Customer ID (cus_xxx)",
    )

    payment_intent_id = models.CharField(
        max_length=255,
        blank=True,
        default="",
        db_index=True,
        help_text="Stripe PaymentIntent ID (pi_xxx)",
    )

    balance_transaction_id = models.CharField(
        max_length=255,
        blank=True,
        default="",
        help_text="Stripe customer balance transaction ID (cbtxn_xxx)",
    )

    amount_cents = models.PositiveBigIntegerField(
        null=True,
        blank=True,
        help_text="Amount charged in smallest currency unit (e.g., cents)",
    )

    currency = models.CharField(
        max_length=3,
        blank=True,
        default="",
        help_text="ISO 4217 currency code (lowercase)",
    )

    # ==========================================================================
    # Outcome
    # ==========================================================================

    error_code = models.CharField(
        max_length=64,
        blank=True,
        default="",
        help_text="Machine-readable code of the error that failed the attempt",
    )

    failure_reason = models.TextField(
        blank=True,
        default="",
        help_text="Detailed reason if the attempt failed",
    )

    completed_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the attempt was committed or failed",
    )

    objects = PaymentAttemptQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Payment Attempt"
        verbose_name_plural = "Payment Attempts"
        indexes = [
            models.Index(
                fields=["state", "failed_from"],
                name="payattempt_state_failed_idx",
            ),
            models.Index(
                fields=["customer", "created_at"],
                name="payattempt_customer_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"PaymentAttempt({self.id}, {self.state})"

    @property
    def needs_reconciliation(self) -> bool:
        if self.state == PaymentAttemptState.DEBITED:
            return True
        return (
            self.state == PaymentAttemptState.FAILED
            and self.failed_from in SETTLEMENT_PENDING_STATES
        )

    # ==========================================================================
    # State Transitions (django-fsm)
    # ==========================================================================

    @transition(
        field=state,
        source=PaymentAttemptState.STARTED,
        target=PaymentAttemptState.INTENT_CREATED,
    )
    def record_intent(
        self,
        remote_customer_id: str,
        payment_intent_id: str,
        amount_cents: int,
        currency: str,
    ):
        """
        Record the PaymentIntent created for this attempt.

        Transition: STARTED -> INTENT_CREATED
        """
        self.remote_customer_id = remote_customer_id
        self.payment_intent_id = payment_intent_id
        self.amount_cents = amount_cents
        self.currency = currency

    @transition(
        field=state,
        source=PaymentAttemptState.INTENT_CREATED,
        target=PaymentAttemptState.CONFIRMED,
    )
    def record_confirmation(self):
        """
        Record that Stripe confirmed the intent as succeeded.

        Transition: INTENT_CREATED -> CONFIRMED
        """

    @transition(
        field=state,
        source=PaymentAttemptState.CONFIRMED,
        target=PaymentAttemptState.DEBITED,
    )
    def record_debit(self, balance_transaction_id: str):
        """
        Record the balance transaction that debited the customer.

        Transition: CONFIRMED -> DEBITED
        """
        self.balance_transaction_id = balance_transaction_id

    @transition(
        field=state,
        source=PaymentAttemptState.DEBITED,
        target=PaymentAttemptState.COMMITTED,
    )
    def record_commit(self):
        """
        Record that the order was delivered and written to history.

        Transition: DEBITED -> COMMITTED
        """
        self.completed_at = timezone.now()

    @transition(
        field=state,
        source=ACTIVE_STATES,
        target=PaymentAttemptState.FAILED,
    )
    def fail(self, error_code: str, reason: str = ""):
        """
        Mark the attempt as failed, remembering the step it failed after.

        Transition: STARTED/INTENT_CREATED/CONFIRMED/DEBITED -> FAILED
        """
        self.failed_from = self.state
        self.error_code = error_code
        self.failure_reason = reason
        self.completed_at = timezone.now()
