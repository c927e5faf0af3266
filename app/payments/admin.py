"""
Payment admin configuration.

Payment attempts are read-only in the admin. They are written only by the
payment flow and serve as its audit trail.
"""

from django.contrib import admin

from payments.models import PaymentAttempt
from payments.money import format_major


@admin.register(PaymentAttempt)
class PaymentAttemptAdmin(admin.ModelAdmin):
    """
    Admin configuration for PaymentAttempt.

    Provides visibility into payment progress and failures that need
    reconciliation.
    """

    list_display = [
        "id",
        "customer",
        "order",
        "amount_display",
        "state",
        "failed_from",
        "error_code",
        "created_at",
    ]
    list_filter = ["state", "failed_from", "payment_method", "created_at"]
    search_fields = [
        "id",
        "payment_intent_id",
        "remote_customer_id",
        "balance_transaction_id",
        "customer__email",
    ]
    readonly_fields = [
        "id",
        "customer",
        "order",
        "payment_method",
        "state",
        "failed_from",
        "remote_customer_id",
        "payment_intent_id",
        "balance_transaction_id",
        "amount_cents",
        "currency",
        "error_code",
        "failure_reason",
        "completed_at",
        "created_at",
        "updated_at",
    ]
    date_hierarchy = "created_at"
    ordering = ["-created_at"]

    fieldsets = (
        (
            None,
            {
                "fields": ("id", "customer", "order", "payment_method", "state"),
            },
        ),
        (
            "Stripe",
            {
                "fields": (
                    "remote_customer_id",
                    "payment_intent_id",
                    "balance_transaction_id",
                    "amount_cents",
                    "currency",
                ),
            },
        ),
        (
            "Failure",
            {
                "fields": ("failed_from", "error_code", "failure_reason"),
            },
        ),
        (
            "Timestamps",
            {
                "fields": ("created_at", "updated_at", "completed_at"),
            },
        ),
    )

    def amount_display(self, obj: PaymentAttempt) -> str:
        """Display the amount formatted as currency."""
        if obj.amount_cents is None:
            return "-"
        return f"${format_major(obj.amount_cents)} {obj.currency.upper()}"

    amount_display.short_description = "Amount"

    def has_add_permission(self, request) -> bool:
        """Disable adding payment attempts through admin."""
        return False

    def has_delete_permission(self, request, obj=None) -> bool:
        """Disable delete for payment attempts (audit trail)."""
        return False
