"""Shared implementation for hosted payment providers.

Stripe, PayPal and Razorpay differ only in configuration: which fields they
read from payment details and webhook payloads, how their transaction ids
look, their default currency, and whether they redirect the buyer. That
configuration lives in a ``ProviderProfile``; ``ProviderGateway`` implements
the gateway contract once on top of it.

Each gateway is constructed either in sandbox mode, where results are
synthesized locally, or in live mode. Live calls go through
``_live_charge`` / ``_live_refund``; until a provider SDK is wired in there
they report that the API is not configured.
"""

import secrets
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

import structlog

from payments.gateway.port import PaymentGateway, PaymentResult

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ProviderProfile:
    """Static description of one payment provider."""

    name: str
    display_name: str
    currency: str
    transaction_prefix: str
    refund_prefix: str
    transaction_id_bytes: int = 16
    refund_id_bytes: int = 8
    uppercase_ids: bool = False
    sandbox_flag: str = "test_mode"
    webhook_id_fields: tuple[str, ...] = ("id",)
    required_live_detail: str | None = None
    # payment detail field -> default echoed into charge metadata
    detail_metadata: dict[str, Any] = field(default_factory=dict)
    sandbox_checkout_url: str | None = None
    charge_message: str = ""
    refund_message: str = ""
    verified_message: str = "Payment verified"
    invalid_payload_message: str = "Invalid webhook payload"


class ProviderGateway(PaymentGateway):
    """Gateway driven entirely by its ``profile``."""

    profile: ProviderProfile

    def __init__(self, public_key: str = "", secret_key: str = "", sandbox: bool = True) -> None:
        self.public_key = public_key
        self.secret_key = secret_key
        self.sandbox = sandbox

    def __repr__(self) -> str:
        return f"{type(self).__name__}(sandbox={self.sandbox})"

    @property
    def name(self) -> str:
        return self.profile.name

    @property
    def display_name(self) -> str:
        return self.profile.display_name

    def is_available(self) -> bool:
        return bool(self.public_key) or self.sandbox

    # -------------------------------------------------------------------
    # Charge
    # -------------------------------------------------------------------
    def charge(self, order, payment_details: dict[str, Any]) -> PaymentResult:
        payment_details = payment_details or {}
        try:
            required = self.profile.required_live_detail
            if required and not self.sandbox and not payment_details.get(required):
                return PaymentResult.failure(f"Payment {required} is required")
            if self.sandbox:
                return self._sandbox_charge(order, payment_details)
            return self._live_charge(order, payment_details)
        except Exception as exc:
            logger.warning("Gateway charge raised", gateway=self.name, error=str(exc))
            return PaymentResult.failure(f"{self.display_name} error: {exc}")

    def _sandbox_charge(self, order, payment_details: dict[str, Any]) -> PaymentResult:
        metadata = {
            "provider": self.name,
            "amount": order.total_amount,
            "currency": self.profile.currency,
            self.profile.sandbox_flag: True,
        }
        for detail, default in self.profile.detail_metadata.items():
            metadata[detail] = payment_details.get(detail) or default

        return PaymentResult.success(
            transaction_id=self._generate_id(self.profile.transaction_prefix, self.profile.transaction_id_bytes),
            message=self.profile.charge_message or f"Payment processed successfully via {self.display_name}",
            metadata=metadata,
        )

    def _live_charge(self, order, payment_details: dict[str, Any]) -> PaymentResult:
        return PaymentResult.failure(f"{self.display_name} API not configured")

    # -------------------------------------------------------------------
    # Refund
    # -------------------------------------------------------------------
    def refund(self, transaction_id: str, amount: Decimal) -> PaymentResult:
        try:
            if self.sandbox:
                return self._sandbox_refund(transaction_id, amount)
            return self._live_refund(transaction_id, amount)
        except Exception as exc:
            logger.warning("Gateway refund raised", gateway=self.name, error=str(exc))
            return PaymentResult.failure(f"Refund failed: {exc}")

    def _sandbox_refund(self, transaction_id: str, amount: Decimal) -> PaymentResult:
        template = self.profile.refund_message or "Refunded ${amount} successfully via {display_name}"
        return PaymentResult.success(
            transaction_id=self._generate_id(self.profile.refund_prefix, self.profile.refund_id_bytes),
            message=template.format(amount=amount, display_name=self.display_name),
            metadata={
                "original_transaction": transaction_id,
                "provider": self.name,
                "amount": amount,
                "currency": self.profile.currency,
            },
        )

    def _live_refund(self, transaction_id: str, amount: Decimal) -> PaymentResult:
        return PaymentResult.failure(f"{self.display_name} API not configured for refunds")

    # -------------------------------------------------------------------
    # Webhooks and redirects
    # -------------------------------------------------------------------
    def verify_payment(self, payload: dict[str, Any]) -> PaymentResult:
        # TODO: check the provider signature (Stripe-Signature header, PayPal
        # webhook verification API, Razorpay HMAC) before any live use.
        try:
            transaction_id = self._extract_transaction_id(payload)
        except Exception as exc:
            return PaymentResult.failure(f"{self.profile.invalid_payload_message}: {exc}")

        if not transaction_id:
            fields = ", ".join(repr(f) for f in self.profile.webhook_id_fields)
            return PaymentResult.failure(f"{self.profile.invalid_payload_message}: missing {fields}")

        return PaymentResult.success(
            transaction_id=transaction_id,
            message=self.profile.verified_message,
            metadata={"provider": self.name},
        )

    def _extract_transaction_id(self, payload) -> str:
        if not hasattr(payload, "get"):
            raise TypeError(f"expected a mapping, got {type(payload).__name__}")
        for key in self.profile.webhook_id_fields:
            value = payload.get(key)
            if value:
                return str(value)
        return ""

    def get_checkout_url(self, order) -> str | None:
        if self.sandbox and self.profile.sandbox_checkout_url:
            return self.profile.sandbox_checkout_url.format(order_id=order.id)
        return None

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    def _generate_id(self, prefix: str, nbytes: int) -> str:
        token = secrets.token_hex(nbytes)
        return prefix + (token.upper() if self.profile.uppercase_ids else token)
