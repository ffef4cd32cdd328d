"""Stripe payment gateway adapter.

Card payments are collected with Stripe Elements on the checkout page, so
there is no redirect URL. A live charge needs the card ``token`` produced by
Elements; the live integration itself (PaymentIntents via stripe-python) is
not wired in yet and reports as not configured.
"""

from payments.gateway.provider import ProviderGateway, ProviderProfile

STRIPE = ProviderProfile(
    name="stripe",
    display_name="Stripe",
    currency="USD",
    transaction_prefix="stripe_",
    refund_prefix="refund_",
    transaction_id_bytes=16,
    webhook_id_fields=("payment_intent", "id"),
    required_live_detail="token",
    refund_message="Refunded ${amount} successfully",
)


class StripeGateway(ProviderGateway):
    profile = STRIPE

    def __init__(self, api_key: str = "", secret_key: str = "", test_mode: bool = True) -> None:
        super().__init__(public_key=api_key, secret_key=secret_key, sandbox=test_mode)

    @property
    def api_key(self) -> str:
        return self.public_key

    @property
    def test_mode(self) -> bool:
        return self.sandbox
