"""Tests for restoring and exporting persisted orders."""

from datetime import UTC, datetime
from decimal import Decimal

from ordering.order.order import Order, OrderStatus


class TestToDict:
    def test_row_shape(self, order):
        order.order_date = datetime(2026, 10, 18, 9, 30, 0, tzinfo=UTC)
        order.payment_provider = "stripe"
        order.mark_as_paid("stripe_abc")
        assert order.to_dict() == {
            "user_id": 1,
            "total_amount": "25.00",
            "payment_provider": "stripe",
            "payment_status": "paid",
            "transaction_id": "stripe_abc",
            "order_date": "2026-10-18 09:30:00",
        }


class TestFromDict:
    def test_restores_any_status(self):
        order = Order.from_dict(
            {
                "id": "12",
                "user_id": 3,
                "total_amount": "40.5",
                "payment_provider": "paypal",
                "payment_status": "refunded",
                "transaction_id": "paypal_ABC",
                "order_date": "2026-10-18 09:30:00",
            }
        )
        assert order.id == 12
        assert order.total_amount == Decimal("40.50")
        assert order.payment_status == OrderStatus.REFUNDED
        assert order.transaction_id == "paypal_ABC"
        assert order.order_date == datetime(2026, 10, 18, 9, 30, tzinfo=UTC)

    def test_defaults_for_missing_columns(self):
        order = Order.from_dict({})
        assert order.id is None
        assert order.payment_status == OrderStatus.PENDING
        assert order.transaction_id == ""
        assert order.order_date is not None

    def test_restores_items(self):
        order = Order.from_dict({"items": [{"product_id": 1, "title": "A", "price": "2.00", "quantity": 3}]})
        assert order.calculate_total() == Decimal("6.00")
