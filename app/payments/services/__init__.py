"""
Payment services for the order payment flow.

This module provides:
- PaymentOrchestrator: Entry point, runs the whole order payment
- CustomerProvisioner: Finds or creates the Stripe customer
- PaymentIntentManager: Creates, confirms and verifies payment intents
- BalanceTransferService: Debits the Stripe customer balance

Usage:
    from payments.services import PaymentOrchestrator, PaymentSelection

    receipt = PaymentOrchestrator().create_order_payment(
        customer=user,
        selection=PaymentSelection(payment_method="pm_card_visa"),
    )
"""

from payments.services.balance_transfer import BalanceTransferService
from payments.services.customer_provisioner import CustomerProvisioner
from payments.services.payment_intents import PaymentIntentManager
from payments.services.payment_orchestrator import (
    PaymentOrchestrator,
    PaymentReceipt,
    PaymentSelection,
    single_flight_lock,
)

__all__ = [
    "BalanceTransferService",
    "CustomerProvisioner",
    "PaymentIntentManager",
    "PaymentOrchestrator",
    "PaymentReceipt",
    "PaymentSelection",
    "single_flight_lock",
]
