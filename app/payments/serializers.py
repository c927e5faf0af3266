"""
DRF serializers for the order payment endpoint.

This module provides serializers for:
- Order payment requests (payment method selection)
- Payment receipts

Usage:
    serializer = OrderPaymentRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
"""

from __future__ import annotations

from rest_framework import serializers

from payments.state_machines import PaymentMethod


class OrderPaymentRequestSerializer(serializers.Serializer):
    """
    Request body for paying the active order.

    Fields:
        payment_method: Stripe test payment method token
    """

    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices)


class PaymentReceiptSerializer(serializers.Serializer):
    """
    Receipt returned after a successful order payment.

    Amounts are in major units.
    """

    created_at = serializers.DateTimeField(read_only=True)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    ending_balance = serializers.DecimalField(
        max_digits=12, decimal_places=2, read_only=True
    )
    order_id = serializers.UUIDField(read_only=True)
    payment_intent_id = serializers.CharField(read_only=True)


class ErrorResponseSerializer(serializers.Serializer):
    """Error body produced by BaseApplicationError.to_dict()."""

    error = serializers.CharField()
    error_code = serializers.CharField()
    details = serializers.DictField(required=False)
