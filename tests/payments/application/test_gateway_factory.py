"""Tests for building gateways and the payment service from settings."""

import pytest
from payments.config import PaymentSettings
from payments.exceptions import GatewayNotFound
from payments.gateway import build_gateways, create_payment_service
from payments.gateway.paypal_adapter import PayPalGateway
from payments.gateway.razorpay_adapter import RazorpayGateway
from payments.gateway.stripe_adapter import StripeGateway


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for var in (
        "STRIPE_API_KEY",
        "STRIPE_SECRET_KEY",
        "STRIPE_TEST_MODE",
        "PAYPAL_CLIENT_ID",
        "PAYPAL_CLIENT_SECRET",
        "PAYPAL_SANDBOX",
        "RAZORPAY_KEY_ID",
        "RAZORPAY_KEY_SECRET",
        "RAZORPAY_TEST_MODE",
        "PAYMENTS_DEFAULT_GATEWAY",
        "PAYMENTS_GATEWAY_TIMEOUT",
    ):
        monkeypatch.delenv(var, raising=False)


def _settings(**overrides):
    return PaymentSettings(_env_file=None, **overrides)


class TestPaymentSettings:
    def test_defaults_to_sandbox_everywhere(self):
        settings = _settings()
        assert settings.stripe_test_mode is True
        assert settings.paypal_sandbox is True
        assert settings.razorpay_test_mode is True
        assert settings.payments_default_gateway is None
        assert settings.payments_gateway_timeout == 10.0

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("STRIPE_API_KEY", "pk_live_123")
        monkeypatch.setenv("STRIPE_TEST_MODE", "false")
        monkeypatch.setenv("PAYMENTS_GATEWAY_TIMEOUT", "2.5")
        settings = _settings()
        assert settings.stripe_api_key == "pk_live_123"
        assert settings.stripe_test_mode is False
        assert settings.payments_gateway_timeout == 2.5


class TestBuildGateways:
    def test_builds_all_providers_in_order(self):
        gateways = build_gateways(_settings())
        assert [type(g) for g in gateways] == [StripeGateway, PayPalGateway, RazorpayGateway]
        assert [g.name for g in gateways] == ["stripe", "paypal", "razorpay"]

    def test_credentials_are_passed_through(self):
        stripe, paypal, razorpay = build_gateways(
            _settings(
                stripe_api_key="pk",
                stripe_test_mode=False,
                paypal_client_id="client",
                paypal_sandbox=False,
                razorpay_key_id="rzp_key",
            )
        )
        assert stripe.api_key == "pk"
        assert stripe.test_mode is False
        assert paypal.client_id == "client"
        assert paypal.sandbox is False
        assert razorpay.key_id == "rzp_key"


class TestCreatePaymentService:
    def test_stripe_is_default(self):
        service = create_payment_service(_settings())
        assert service.names() == ["stripe", "paypal", "razorpay"]
        assert service.default_name == "stripe"

    def test_configured_default(self):
        service = create_payment_service(_settings(payments_default_gateway="razorpay"))
        assert service.default_name == "razorpay"

    def test_unknown_configured_default_raises(self):
        with pytest.raises(GatewayNotFound):
            create_payment_service(_settings(payments_default_gateway="bitcoin"))

    def test_live_gateways_without_credentials_are_not_offered(self):
        service = create_payment_service(_settings(stripe_test_mode=False, paypal_sandbox=False))
        assert list(service.available_names()) == ["razorpay"]
