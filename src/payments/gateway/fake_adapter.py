"""Configurable fake payment gateway for development and testing.

This adapter simulates a payment processor without any external calls.
It can be configured at runtime to succeed, fail, be unavailable, stall, or
raise a processor error from ``charge``, and it records every call it
receives so tests can assert on what the payment service actually invoked.
"""

import time
from decimal import Decimal
from uuid import uuid4

from payments.gateway.port import PaymentGateway, PaymentResult


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self, name: str = "fake", display_name: str = "Fake Gateway", available: bool = True) -> None:
        self._name = name
        self._display_name = display_name
        self.available = available
        self.should_succeed: bool = True
        self.failure_reason: str = "Card declined"
        self.charge_error: Exception | None = None
        self.delay: float = 0.0
        self.checkout_url: str | None = None
        self.calls: list[dict] = []

    def __repr__(self) -> str:
        return f"FakeGateway(name={self._name!r})"

    @property
    def name(self) -> str:
        return self._name

    @property
    def display_name(self) -> str:
        return self._display_name

    def configure(self, should_succeed: bool, failure_reason: str = "Card declined") -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def calls_to(self, method: str) -> list[dict]:
        return [call for call in self.calls if call["method"] == method]

    def is_available(self) -> bool:
        return self.available

    def charge(self, order, payment_details) -> PaymentResult:
        self.calls.append({"method": "charge", "order": order, "payment_details": payment_details})

        if self.delay:
            time.sleep(self.delay)
        if self.charge_error is not None:
            raise self.charge_error

        if self.should_succeed:
            return PaymentResult.success(
                transaction_id=f"{self._name}_txn_{uuid4().hex[:12]}",
                message="Charge successful",
                metadata={"provider": self._name, "amount": order.total_amount, "currency": "USD"},
            )
        return PaymentResult.failure(self.failure_reason)

    def refund(self, transaction_id: str, amount: Decimal) -> PaymentResult:
        self.calls.append({"method": "refund", "transaction_id": transaction_id, "amount": amount})

        if self.delay:
            time.sleep(self.delay)

        if self.should_succeed:
            return PaymentResult.success(
                transaction_id=f"{self._name}_ref_{uuid4().hex[:12]}",
                message=f"Refunded ${amount}",
                metadata={"original_transaction": transaction_id, "amount": amount},
            )
        return PaymentResult.failure(self.failure_reason)

    def verify_payment(self, payload) -> PaymentResult:
        self.calls.append({"method": "verify_payment", "payload": payload})

        transaction_id = (payload or {}).get("transaction_id", "")
        if not transaction_id:
            return PaymentResult.failure("Invalid webhook payload: missing 'transaction_id'")
        return PaymentResult.success(transaction_id=transaction_id, message="Payment verified")

    def get_checkout_url(self, order) -> str | None:
        return self.checkout_url
