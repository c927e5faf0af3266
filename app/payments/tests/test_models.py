"""
Tests for the PaymentAttempt model.

Tests the FSM transitions that record payment progress and the
needing_reconciliation() lookup.
"""

import uuid

import pytest
from django_fsm import TransitionNotAllowed

from payments.models import PaymentAttempt
from payments.state_machines import PaymentAttemptState, PaymentMethod


@pytest.fixture
def attempt(db, customer, active_order):
    return PaymentAttempt.objects.create(
        customer=customer,
        order=active_order,
        payment_method=PaymentMethod.VISA,
    )


def _advance(attempt, to_state):
    """Walk the attempt forward through the happy path up to to_state."""
    steps = [
        (
            PaymentAttemptState.INTENT_CREATED,
            lambda: attempt.record_intent(
                remote_customer_id="cus_test",
                payment_intent_id="pi_test",
                amount_cents=2000,
                currency="usd",
            ),
        ),
        (PaymentAttemptState.CONFIRMED, attempt.record_confirmation),
        (PaymentAttemptState.DEBITED, lambda: attempt.record_debit("cbtxn_test")),
        (PaymentAttemptState.COMMITTED, attempt.record_commit),
    ]
    for state, step in steps:
        if attempt.state == to_state:
            break
        step()
        attempt.save()
    return attempt


# =============================================================================
# Transition Tests
# =============================================================================


class TestPaymentAttemptTransitions:
    """Tests for PaymentAttempt state transitions."""

    def test_create_defaults(self, attempt):
        """New attempts start in STARTED with no Stripe ids."""
        assert isinstance(attempt.pk, uuid.UUID)
        assert attempt.state == PaymentAttemptState.STARTED
        assert attempt.payment_intent_id == ""
        assert attempt.amount_cents is None
        assert attempt.completed_at is None

    def test_happy_path_records_ids(self, attempt):
        """Each step stores the Stripe id it produced."""
        _advance(attempt, PaymentAttemptState.COMMITTED)

        fetched = PaymentAttempt.objects.get(pk=attempt.pk)
        assert fetched.state == PaymentAttemptState.COMMITTED
        assert fetched.remote_customer_id == "cus_test"
        assert fetched.payment_intent_id == "pi_test"
        assert fetched.balance_transaction_id == "cbtxn_test"
        assert fetched.amount_cents == 2000
        assert fetched.currency == "usd"
        assert fetched.completed_at is not None

    def test_cannot_skip_confirmation(self, attempt):
        """A debit cannot be recorded before the intent is confirmed."""
        _advance(attempt, PaymentAttemptState.INTENT_CREATED)

        with pytest.raises(TransitionNotAllowed):
            attempt.record_debit("cbtxn_test")

    def test_fail_remembers_previous_state(self, attempt):
        """fail() records the state the attempt failed from."""
        _advance(attempt, PaymentAttemptState.CONFIRMED)

        attempt.fail(error_code="STRIPE_TIMEOUT", reason="timed out")
        attempt.save()

        fetched = PaymentAttempt.objects.get(pk=attempt.pk)
        assert fetched.state == PaymentAttemptState.FAILED
        assert fetched.failed_from == PaymentAttemptState.CONFIRMED
        assert fetched.error_code == "STRIPE_TIMEOUT"
        assert fetched.failure_reason == "timed out"

    def test_committed_attempt_cannot_fail(self, attempt):
        """COMMITTED is terminal."""
        _advance(attempt, PaymentAttemptState.COMMITTED)

        with pytest.raises(TransitionNotAllowed):
            attempt.fail(error_code="ANY")


# =============================================================================
# Reconciliation Lookup Tests
# =============================================================================


class TestNeedingReconciliation:
    """Tests for PaymentAttempt.objects.needing_reconciliation()."""

    def _attempt(self, customer, order, to_state, fail=False):
        attempt = PaymentAttempt.objects.create(
            customer=customer,
            order=order,
            payment_method=PaymentMethod.VISA,
        )
        _advance(attempt, to_state)
        if fail:
            attempt.fail(error_code="ERROR")
            attempt.save()
        return attempt

    def test_lists_only_unsettled_attempts(self, customer, active_order):
        """Debited, or failed after Stripe confirmed, needs reconciliation."""
        started_failed = self._attempt(
            customer, active_order, PaymentAttemptState.STARTED, fail=True
        )
        intent_failed = self._attempt(
            customer, active_order, PaymentAttemptState.INTENT_CREATED, fail=True
        )
        confirmed_failed = self._attempt(
            customer, active_order, PaymentAttemptState.CONFIRMED, fail=True
        )
        debited_failed = self._attempt(
            customer, active_order, PaymentAttemptState.DEBITED, fail=True
        )
        debited = self._attempt(customer, active_order, PaymentAttemptState.DEBITED)
        committed = self._attempt(customer, active_order, PaymentAttemptState.COMMITTED)

        result = set(PaymentAttempt.objects.needing_reconciliation())

        assert result == {confirmed_failed, debited_failed, debited}
        assert started_failed.needs_reconciliation is False
        assert intent_failed.needs_reconciliation is False
        assert committed.needs_reconciliation is False
        assert debited_failed.needs_reconciliation is True
