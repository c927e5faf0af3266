"""
Payments app for the order payment flow.

This app handles:
- Stripe customer lookup and creation
- Payment intent creation, confirmation and verification
- Customer balance debits
- Payment attempt tracking for reconciliation

Related apps:
    - orders: Active order validation and delivery

Usage:
    from payments.services import PaymentOrchestrator, PaymentSelection

    receipt = PaymentOrchestrator().create_order_payment(
        customer=user,
        selection=PaymentSelection(payment_method="pm_card_visa"),
    )
"""
