"""
Customer Provisioner: maps a local customer to a Stripe customer.

The local customer's email is the lookup key. The first Stripe customer
registered with that email is reused; otherwise a new one is created with
the selected payment method and an opening balance from the configured
InitialBalancePolicy.

Usage:
    from payments.services import CustomerProvisioner

    remote = CustomerProvisioner().resolve(user, PaymentMethod.VISA)
    remote.id  # "cus_xxx"
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.services import BaseService
from payments.adapters import IdempotencyKeyGenerator, StripeAdapter
from payments.exceptions import CustomerEmailRequiredError
from payments.provisioning import get_initial_balance_policy

if TYPE_CHECKING:
    from django.contrib.auth.models import AbstractBaseUser

    from payments.adapters import ProviderClient, RemoteCustomer
    from payments.provisioning import InitialBalancePolicy


class CustomerProvisioner(BaseService):
    """
    Find or create the Stripe customer for a local customer.

    Args:
        provider: Payment provider client, StripeAdapter by default
        balance_policy: Opening balance for created customers, from
            PAYMENT_INITIAL_BALANCE_POLICY by default
    """

    def __init__(
        self,
        provider: ProviderClient | None = None,
        balance_policy: InitialBalancePolicy | None = None,
    ) -> None:
        self.provider = provider or StripeAdapter()
        self.balance_policy = balance_policy or get_initial_balance_policy()

    def resolve(
        self,
        customer: AbstractBaseUser,
        payment_method: str,
    ) -> RemoteCustomer:
        """
        Return the Stripe customer for this local customer.

        Only the first customer with a matching email is considered. Its
        payment method is left as it is, even when payment_method differs.

        The create call is keyed on the customer, the payment method and
        the opening balance, so a retry with the same parameters returns
        the customer Stripe already created.

        Raises:
            CustomerEmailRequiredError: If the customer has no email
            PaymentProviderError: If a Stripe call fails
        """
        logger = self.get_logger()

        email = (customer.email or "").strip()
        if not email:
            raise CustomerEmailRequiredError(
                "A customer email is required to make a payment",
                details={"customer_id": str(customer.pk)},
            )

        remote = self.provider.find_customer_by_email(email)
        if remote is not None:
            logger.debug(
                "Reusing Stripe customer",
                extra={"customer_id": str(customer.pk), "remote_customer_id": remote.id},
            )
            return remote

        balance_cents = self.balance_policy.initial_balance_cents(customer_id=customer.pk)
        remote = self.provider.create_customer(
            email=email,
            payment_method=payment_method,
            initial_balance_cents=balance_cents,
            idempotency_key=IdempotencyKeyGenerator.generate(
                operation="create_customer",
                entity_id=f"{customer.pk}:{payment_method}:{balance_cents}",
            ),
        )

        logger.info(
            "Stripe customer created",
            extra={
                "customer_id": str(customer.pk),
                "remote_customer_id": remote.id,
                "initial_balance_cents": balance_cents,
            },
        )
        return remote
