"""
DRF views for the payments app.

Endpoints:
    POST /api/v1/payments/order-payment/ - Pay for the active order

Security:
    - Requires authentication (JWT or session)
    - Always charges the authenticated user's own active order
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import BaseApplicationError, ConflictError
from orders.exceptions import InvalidOrderError, NoActiveOrderError
from payments.exceptions import (
    CustomerEmailRequiredError,
    InsufficientBalanceError,
    InvalidPaymentStatusError,
    PaymentProviderError,
)
from payments.serializers import (
    ErrorResponseSerializer,
    OrderPaymentRequestSerializer,
    PaymentReceiptSerializer,
)
from payments.services import PaymentOrchestrator, PaymentSelection

# Checked in order; the first matching class wins
ERROR_STATUS_CODES: list[tuple[type[BaseApplicationError], int]] = [
    (NoActiveOrderError, status.HTTP_404_NOT_FOUND),
    (InvalidOrderError, status.HTTP_400_BAD_REQUEST),
    (CustomerEmailRequiredError, status.HTTP_400_BAD_REQUEST),
    (InsufficientBalanceError, status.HTTP_402_PAYMENT_REQUIRED),
    (InvalidPaymentStatusError, status.HTTP_402_PAYMENT_REQUIRED),
    (PaymentProviderError, status.HTTP_502_BAD_GATEWAY),
    (ConflictError, status.HTTP_409_CONFLICT),
]


def error_status_code(error: BaseApplicationError) -> int:
    for error_class, status_code in ERROR_STATUS_CODES:
        if isinstance(error, error_class):
            return status_code
    return status.HTTP_400_BAD_REQUEST


class OrderPaymentView(APIView):
    """
    Pay for the authenticated customer's active order.

    POST /api/v1/payments/order-payment/

    Request body:
        {"payment_method": "pm_card_visa"}

    Response:
        200 OK: Payment receipt
        400 Bad Request: Invalid payment method, empty order or no email
        402 Payment Required: Insufficient balance or payment not succeeded
        404 Not Found: No active order
        409 Conflict: Another payment for the customer is in progress
        502 Bad Gateway: Stripe failed or timed out
    """

    permission_classes = [IsAuthenticated]
    orchestrator_class = PaymentOrchestrator

    @extend_schema(
        operation_id="create_order_payment",
        summary="Pay for the active order",
        description=(
            "Charges the customer's Stripe balance for the total of their active "
            "order and marks the order as delivered."
        ),
        request=OrderPaymentRequestSerializer,
        responses={
            200: OpenApiResponse(
                response=PaymentReceiptSerializer,
                description="Payment completed",
            ),
            400: OpenApiResponse(
                response=ErrorResponseSerializer,
                description="Invalid payment method or order without items",
            ),
            402: OpenApiResponse(
                response=ErrorResponseSerializer,
                description="Insufficient balance or payment confirmation failed",
            ),
            404: OpenApiResponse(
                response=ErrorResponseSerializer,
                description="No active order",
            ),
            409: OpenApiResponse(
                response=ErrorResponseSerializer,
                description="Payment already in progress",
            ),
            502: OpenApiResponse(
                response=ErrorResponseSerializer,
                description="Payment provider error",
            ),
        },
        tags=["Payments"],
    )
    def post(self, request):
        serializer = OrderPaymentRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        selection = PaymentSelection(
            payment_method=serializer.validated_data["payment_method"]
        )

        try:
            receipt = self.orchestrator_class().create_order_payment(
                customer=request.user,
                selection=selection,
            )
        except BaseApplicationError as e:
            return Response(e.to_dict(), status=error_status_code(e))

        return Response(PaymentReceiptSerializer(receipt).data)
