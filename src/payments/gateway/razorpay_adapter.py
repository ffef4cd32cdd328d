"""Razorpay payment gateway adapter.

Razorpay uses an embedded checkout: the page first creates a Razorpay order,
the buyer pays in the Razorpay widget, and the widget posts back
``razorpay_payment_id`` / ``razorpay_order_id`` / ``razorpay_signature``.
"""

import secrets
from decimal import ROUND_HALF_UP, Decimal

from payments.gateway.provider import ProviderGateway, ProviderProfile

RAZORPAY = ProviderProfile(
    name="razorpay",
    display_name="Razorpay",
    currency="INR",
    transaction_prefix="rzp_",
    refund_prefix="rzp_refund_",
    transaction_id_bytes=12,
    webhook_id_fields=("razorpay_payment_id",),
    detail_metadata={"razorpay_payment_id": ""},
    verified_message="Razorpay payment verified",
    invalid_payload_message="Invalid Razorpay payload",
)


class RazorpayGateway(ProviderGateway):
    profile = RAZORPAY

    def __init__(self, key_id: str = "", key_secret: str = "", test_mode: bool = True) -> None:
        super().__init__(public_key=key_id, secret_key=key_secret, sandbox=test_mode)

    @property
    def key_id(self) -> str:
        return self.public_key

    def create_order(self, amount, currency: str = "INR") -> dict:
        """Create the Razorpay order the checkout widget is opened with.

        Razorpay amounts are integers in the smallest currency unit (paise).
        """
        return {
            "id": f"order_{secrets.token_hex(8)}",
            "amount": int((Decimal(str(amount)) * 100).to_integral_value(rounding=ROUND_HALF_UP)),
            "currency": currency,
        }
