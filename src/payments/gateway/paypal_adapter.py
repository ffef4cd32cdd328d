"""PayPal payment gateway adapter.

PayPal is a redirect flow: the buyer approves the payment on PayPal and is
sent back with a token. In sandbox mode the approval URL points at the PayPal
sandbox with a mock token; live order creation is not wired in yet.
"""

from payments.gateway.provider import ProviderGateway, ProviderProfile

PAYPAL = ProviderProfile(
    name="paypal",
    display_name="PayPal",
    currency="USD",
    transaction_prefix="paypal_",
    refund_prefix="paypal_refund_",
    transaction_id_bytes=10,
    uppercase_ids=True,
    sandbox_flag="sandbox",
    webhook_id_fields=("txn_id", "id"),
    detail_metadata={"payer_email": "test@example.com"},
    sandbox_checkout_url="https://www.sandbox.paypal.com/checkoutnow?token=mock_{order_id}",
    verified_message="PayPal payment verified",
    invalid_payload_message="Invalid PayPal webhook payload",
)


class PayPalGateway(ProviderGateway):
    profile = PAYPAL

    def __init__(self, client_id: str = "", client_secret: str = "", sandbox: bool = True) -> None:
        super().__init__(public_key=client_id, secret_key=client_secret, sandbox=sandbox)

    @property
    def client_id(self) -> str:
        return self.public_key
