"""Payment gateway port (abstract interface) and its result type.

Defines the contract that every payment gateway adapter must implement.
The payment service and the checkout flow only ever see this interface, so
providers can be added or swapped without touching either of them.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any


@dataclass(frozen=True)
class PaymentResult:
    """Outcome of a charge, refund or verification.

    A successful result always carries a transaction id; a failed one never
    does. Use the ``success`` and ``failure`` constructors.
    """

    is_success: bool
    transaction_id: str = ""
    message: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.is_success and not self.transaction_id:
            raise ValueError("A successful payment result requires a transaction id")
        if not self.is_success and self.transaction_id:
            raise ValueError("A failed payment result cannot carry a transaction id")
        object.__setattr__(self, "metadata", dict(self.metadata))

    @classmethod
    def success(
        cls,
        transaction_id: str,
        message: str = "Payment successful",
        metadata: dict[str, Any] | None = None,
    ) -> "PaymentResult":
        return cls(is_success=True, transaction_id=transaction_id, message=message, metadata=metadata or {})

    @classmethod
    def failure(cls, message: str, metadata: dict[str, Any] | None = None) -> "PaymentResult":
        return cls(is_success=False, transaction_id="", message=message, metadata=metadata or {})

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.is_success,
            "transaction_id": self.transaction_id,
            "message": self.message,
            "metadata": dict(self.metadata),
        }


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Stable machine identifier, unique within a payment service."""
        ...

    @property
    @abstractmethod
    def display_name(self) -> str:
        """Human readable label shown to buyers."""
        ...

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the gateway has the credentials it needs or runs in sandbox mode."""
        ...

    @abstractmethod
    def charge(self, order, payment_details: dict[str, Any]) -> PaymentResult:
        """Charge ``order.total_amount``. Must not mutate the order."""
        ...

    @abstractmethod
    def refund(self, transaction_id: str, amount: Decimal) -> PaymentResult:
        """Refund a previous charge."""
        ...

    @abstractmethod
    def verify_payment(self, payload: dict[str, Any]) -> PaymentResult:
        """Confirm that a webhook or redirect payload references a transaction."""
        ...

    @abstractmethod
    def get_checkout_url(self, order) -> str | None:
        """Redirect URL for hosted checkout flows, ``None`` for embedded ones."""
        ...
