"""
URL configuration for the payments app.

Routes:
    - POST /order-payment/ - Pay for the active order

All routes are prefixed with /api/v1/payments/ when included in the main URLconf.
"""

from django.urls import path

from payments.views import OrderPaymentView

app_name = "payments"

urlpatterns = [
    path("order-payment/", OrderPaymentView.as_view(), name="order-payment"),
]
