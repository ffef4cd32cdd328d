"""Tests for the order payment status state machine."""

import pytest
from ordering.exceptions import ValidationError
from ordering.order.order import OrderStatus


class TestMarkAsPaid:
    def test_pending_to_paid(self, order):
        order.mark_as_paid("stripe_abc")
        assert order.payment_status == OrderStatus.PAID
        assert order.transaction_id == "stripe_abc"
        assert order.is_paid

    def test_paid_requires_a_transaction_id(self, order):
        with pytest.raises(ValidationError) as exc:
            order.mark_as_paid("")
        assert "transaction_id" in exc.value.messages
        assert order.payment_status == OrderStatus.PENDING

    def test_paid_is_not_reenterable(self, order):
        order.mark_as_paid("stripe_abc")
        with pytest.raises(ValidationError) as exc:
            order.mark_as_paid("stripe_def")
        assert exc.value.messages == {"payment_status": ["Cannot transition from paid to paid"]}
        assert order.transaction_id == "stripe_abc"

    def test_failed_cannot_become_paid(self, order):
        order.mark_as_failed()
        with pytest.raises(ValidationError):
            order.mark_as_paid("stripe_abc")


class TestMarkAsFailed:
    def test_pending_to_failed(self, order):
        order.mark_as_failed()
        assert order.payment_status == OrderStatus.FAILED
        assert order.transaction_id == ""

    def test_failed_keeps_existing_transaction_id(self, order):
        order.transaction_id = "pre_assigned"
        order.mark_as_failed()
        assert order.transaction_id == "pre_assigned"

    def test_failed_records_supplied_transaction_id(self, order):
        order.mark_as_failed("declined_123")
        assert order.transaction_id == "declined_123"

    def test_paid_cannot_fail(self, order):
        order.mark_as_paid("stripe_abc")
        with pytest.raises(ValidationError):
            order.mark_as_failed()


class TestMarkAsRefunded:
    def test_paid_to_refunded_keeps_transaction_id(self, order):
        order.mark_as_paid("stripe_abc")
        order.mark_as_refunded()
        assert order.payment_status == OrderStatus.REFUNDED
        assert order.transaction_id == "stripe_abc"

    def test_refunded_records_supplied_transaction_id(self, order):
        order.mark_as_paid("stripe_abc")
        order.mark_as_refunded("refund_123")
        assert order.transaction_id == "refund_123"

    def test_pending_cannot_be_refunded(self, order):
        with pytest.raises(ValidationError):
            order.mark_as_refunded()

    def test_refunded_is_not_reenterable(self, order):
        order.mark_as_paid("stripe_abc")
        order.mark_as_refunded()
        with pytest.raises(ValidationError):
            order.mark_as_refunded()
