"""Payment gateway factory.

Builds the configured gateways and the ``PaymentService`` that dispatches to
them. The service is created once by the application and passed to whatever
needs it; there is no module-level instance.

- StripeGateway, PayPalGateway, RazorpayGateway for hosted providers
- FakeGateway for development and testing
"""

from payments.config import PaymentSettings
from payments.gateway.fake_adapter import FakeGateway
from payments.gateway.paypal_adapter import PayPalGateway
from payments.gateway.port import PaymentGateway, PaymentResult
from payments.gateway.razorpay_adapter import RazorpayGateway
from payments.gateway.stripe_adapter import StripeGateway

__all__ = [
    "FakeGateway",
    "PayPalGateway",
    "PaymentGateway",
    "PaymentResult",
    "RazorpayGateway",
    "StripeGateway",
    "build_gateways",
    "create_payment_service",
]


def build_gateways(settings: PaymentSettings) -> list[PaymentGateway]:
    """Instantiate the built-in gateways, Stripe first."""
    return [
        StripeGateway(
            api_key=settings.stripe_api_key,
            secret_key=settings.stripe_secret_key,
            test_mode=settings.stripe_test_mode,
        ),
        PayPalGateway(
            client_id=settings.paypal_client_id,
            client_secret=settings.paypal_client_secret,
            sandbox=settings.paypal_sandbox,
        ),
        RazorpayGateway(
            key_id=settings.razorpay_key_id,
            key_secret=settings.razorpay_key_secret,
            test_mode=settings.razorpay_test_mode,
        ),
    ]


def create_payment_service(settings: PaymentSettings | None = None):
    """Return a ``PaymentService`` with every built-in gateway registered."""
    from payments.service import PaymentService

    settings = settings or PaymentSettings()
    service = PaymentService(build_gateways(settings))
    if settings.payments_default_gateway:
        service.set_default(settings.payments_default_gateway)
    return service
