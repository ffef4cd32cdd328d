"""Payment gateway configuration.

Credentials and sandbox flags are read from the environment (or a ``.env``
file) once, at startup, and passed to the gateway constructors. Gateways and
the payment service never read the environment themselves.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class PaymentSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    stripe_api_key: str = ""
    stripe_secret_key: str = ""
    stripe_test_mode: bool = True

    paypal_client_id: str = ""
    paypal_client_secret: str = ""
    paypal_sandbox: bool = True

    razorpay_key_id: str = ""
    razorpay_key_secret: str = ""
    razorpay_test_mode: bool = True

    # Gateway used when the buyer does not pick one; first registered if unset
    payments_default_gateway: str | None = None
    # Seconds a single gateway call may take before checkout gives up on it
    payments_gateway_timeout: float = 10.0
