"""Exceptions raised by the payment service registry.

Failed charges and refunds are not exceptions; they come back as
``PaymentResult.failure``. These cover configuration mistakes only.
"""


class PaymentsError(Exception):
    """Base class for payment service errors."""


class GatewayNotFound(PaymentsError, LookupError):
    """No gateway is registered under the requested name."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Payment gateway '{name}' not found")


class NoGatewaysRegistered(PaymentsError, RuntimeError):
    """A default gateway was requested from an empty registry."""

    def __init__(self) -> None:
        super().__init__("No payment gateways registered")
