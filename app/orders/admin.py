"""
Order admin configuration.

Orders are read-mostly here: status changes go through the lifecycle
manager, and order history is never edited.
"""

from django.contrib import admin

from orders.models import Order, OrderHistory, OrderItem, Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ["name", "unit_price", "created_at"]
    search_fields = ["name"]


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    raw_id_fields = ["product"]


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """Admin configuration for Order."""

    list_display = ["id", "customer", "status", "ordered_at", "delivered_at"]
    list_filter = ["status"]
    search_fields = ["id", "customer__email"]
    readonly_fields = [
        "id",
        "status",
        "version",
        "ordered_at",
        "delivered_at",
        "created_at",
        "updated_at",
    ]
    inlines = [OrderItemInline]
    ordering = ["-created_at"]


@admin.register(OrderHistory)
class OrderHistoryAdmin(admin.ModelAdmin):
    """Admin configuration for OrderHistory (read-only)."""

    list_display = ["order", "customer", "payment_method", "payment_amount", "paid_at"]
    list_filter = ["payment_method", "order_status"]
    search_fields = ["order__id", "customer__email"]
    ordering = ["-paid_at"]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
