"""
URL configuration for the order payment service.

URL Structure:
    /                              - ReDoc API documentation
    /admin/                        - Django admin interface
    /schema/                       - OpenAPI schema (YAML)
    /api/v1/payments/              - Payment endpoints
        order-payment/             - Pay for the active order (POST)

For more information, see:
https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView

# =============================================================================
# API v1 Routes
# =============================================================================
api_v1_patterns = [
    path("payments/", include("payments.urls")),
]

urlpatterns = [
    # Documentation
    path("", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    # Admin
    path("admin/", admin.site.urls),
    # API v1
    path("api/v1/", include(api_v1_patterns)),
]

admin.site.site_header = "Order Payments Admin"
admin.site.site_title = "Order Payments"
