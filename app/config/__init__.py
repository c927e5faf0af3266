# =============================================================================
# Django Project Configuration Package
# =============================================================================
# Settings, root URL configuration and the WSGI/ASGI entry points.
# =============================================================================
