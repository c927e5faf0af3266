import uuid

import django.db.models.deletion
import django_fsm
from django.conf import settings
from django.db import migrations, models


ATTEMPT_STATE_CHOICES = [
    ("started", "Started"),
    ("intent_created", "Intent Created"),
    ("confirmed", "Confirmed"),
    ("debited", "Debited"),
    ("committed", "Committed"),
    ("failed", "Failed"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("orders", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="PaymentAttempt",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique identifier for this record",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "payment_method",
                    models.CharField(
                        choices=[
                            ("pm_card_visa", "Visa"),
                            ("pm_card_visa_debit", "Visa (debit)"),
                            ("pm_card_mastercard", "Mastercard"),
                            ("pm_card_mastercard_debit", "Mastercard (debit)"),
                            ("pm_card_mastercard_prepaid", "Mastercard (prepaid)"),
                            ("pm_card_amex", "American Express"),
                            ("pm_card_discover", "Discover"),
                            ("pm_card_diners", "Diners Club"),
                            ("pm_card_jcb", "JCB"),
                            ("pm_card_unionpay", "UnionPay"),
                        ],
                        help_text="Payment method selected for this attempt",
                        max_length=64,
                    ),
                ),
                (
                    "state",
                    django_fsm.FSMField(
                        choices=ATTEMPT_STATE_CHOICES,
                        db_index=True,
                        default="started",
                        help_text="Last completed step of the payment (managed by FSM)",
                        max_length=50,
                        protected=True,
                    ),
                ),
                (
                    "failed_from",
                    models.CharField(
                        blank=True,
                        choices=ATTEMPT_STATE_CHOICES,
                        default="",
                        help_text="State the attempt was in when it failed",
                        max_length=20,
                    ),
                ),
                (
                    "remote_customer_id",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Stripe Customer ID (cus_xxx)",
                        max_length=255,
                    ),
                ),
                (
                    "payment_intent_id",
                    models.CharField(
                        blank=True,
                        db_index=True,
                        default="",
                        help_text="Stripe PaymentIntent ID (pi_xxx)",
                        max_length=255,
                    ),
                ),
                (
                    "balance_transaction_id",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Stripe customer balance transaction ID (cbtxn_xxx)",
                        max_length=255,
                    ),
                ),
                (
                    "amount_cents",
                    models.PositiveBigIntegerField(
                        blank=True,
                        help_text="Amount charged in smallest currency unit (e.g., cents)",
                        null=True,
                    ),
                ),
                (
                    "currency",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="ISO 4217 currency code (lowercase)",
                        max_length=3,
                    ),
                ),
                (
                    "error_code",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Machine-readable code of the error that failed the attempt",
                        max_length=64,
                    ),
                ),
                (
                    "failure_reason",
                    models.TextField(
                        blank=True,
                        default="",
                        help_text="Detailed reason if the attempt failed",
                    ),
                ),
                (
                    "completed_at",
                    models.DateTimeField(
                        blank=True,
                        help_text="When the attempt was committed or failed",
                        null=True,
                    ),
                ),
                (
                    "customer",
                    models.ForeignKey(
                        help_text="Customer making the payment",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payment_attempts",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "order",
                    models.ForeignKey(
                        help_text="Order being paid for",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payment_attempts",
                        to="orders.order",
                    ),
                ),
            ],
            options={
                "verbose_name": "Payment Attempt",
                "verbose_name_plural": "Payment Attempts",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["state", "failed_from"],
                        name="payattempt_state_failed_idx",
                    ),
                    models.Index(
                        fields=["customer", "created_at"],
                        name="payattempt_customer_idx",
                    ),
                ],
            },
        ),
    ]
