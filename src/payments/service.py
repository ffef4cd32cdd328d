"""Payment service: registry, selector and dispatcher over payment gateways.

The checkout flow, the webhook handler and the refund admin all talk to one
``PaymentService`` instance created at startup and handed to them. Gateways
are looked up by name at call time, so the buyer can pick a processor
without the service knowing any concrete gateway type.

The registry is normally populated once at startup; it is still guarded by a
lock so a lookup never observes a half-applied ``register`` / ``remove``.
"""

import threading
from decimal import Decimal
from typing import Any

import structlog

from payments.exceptions import GatewayNotFound, NoGatewaysRegistered
from payments.gateway.port import PaymentGateway, PaymentResult

logger = structlog.get_logger(__name__)


class PaymentService:
    def __init__(self, gateways=()) -> None:
        self._gateways: dict[str, PaymentGateway] = {}
        self._default: str | None = None
        self._lock = threading.RLock()
        for gateway in gateways:
            self.register(gateway)

    # -------------------------------------------------------------------
    # Registry
    # -------------------------------------------------------------------
    def register(self, gateway: PaymentGateway) -> None:
        """Add a gateway, replacing any gateway registered under the same name.

        The first gateway ever registered becomes the default.
        """
        with self._lock:
            self._gateways[gateway.name] = gateway
            if self._default is None:
                self._default = gateway.name
        logger.info("Payment gateway registered", gateway=gateway.name, available=gateway.is_available())

    def remove(self, name: str) -> None:
        """Deregister ``name``; if it was the default, promote another gateway."""
        with self._lock:
            self._gateways.pop(name, None)
            if self._default == name:
                self._default = next(iter(self._gateways), None)
            new_default = self._default
        logger.info("Payment gateway removed", gateway=name, default=new_default)

    def gateway(self, name: str) -> PaymentGateway:
        with self._lock:
            try:
                return self._gateways[name]
            except KeyError:
                raise GatewayNotFound(name) from None

    def get_default(self) -> PaymentGateway:
        with self._lock:
            if self._default is None:
                raise NoGatewaysRegistered()
            return self._gateways[self._default]

    def set_default(self, name: str) -> None:
        with self._lock:
            if name not in self._gateways:
                raise GatewayNotFound(name)
            self._default = name

    @property
    def default_name(self) -> str | None:
        return self._default

    def has(self, name: str) -> bool:
        with self._lock:
            return name in self._gateways

    def __contains__(self, name: str) -> bool:
        return self.has(name)

    def __len__(self) -> int:
        return len(self._gateways)

    def names(self) -> list[str]:
        with self._lock:
            return list(self._gateways)

    def get_available(self) -> list[PaymentGateway]:
        """Registered gateways that report themselves available, in registration order."""
        with self._lock:
            gateways = list(self._gateways.values())
        return [gateway for gateway in gateways if gateway.is_available()]

    def available_names(self) -> dict[str, str]:
        """Map of available gateway name to display name, for payment method pickers."""
        return {gateway.name: gateway.display_name for gateway in self.get_available()}

    # -------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------
    def process_payment(
        self,
        order,
        payment_details: dict[str, Any],
        gateway_name: str | None = None,
    ) -> PaymentResult:
        """Charge ``order`` through ``gateway_name``, or the default gateway.

        An unavailable gateway is never called; the buyer gets a failure they
        can act on by choosing another payment method.
        """
        gateway = self.gateway(gateway_name) if gateway_name else self.get_default()

        if not gateway.is_available():
            logger.warning("Payment gateway unavailable", gateway=gateway.name, order_id=order.id)
            return PaymentResult.failure(f"Payment gateway '{gateway.display_name}' is not available")

        result = gateway.charge(order, payment_details)
        logger.info(
            "Payment processed",
            gateway=gateway.name,
            order_id=order.id,
            success=result.is_success,
            transaction_id=result.transaction_id,
        )
        return result

    def process_refund(self, transaction_id: str, amount: Decimal, gateway_name: str) -> PaymentResult:
        """Refund through the gateway that took the payment. No default is used."""
        gateway = self.gateway(gateway_name)
        result = gateway.refund(transaction_id, amount)
        logger.info(
            "Refund processed",
            gateway=gateway.name,
            original_transaction=transaction_id,
            amount=str(amount),
            success=result.is_success,
        )
        return result
