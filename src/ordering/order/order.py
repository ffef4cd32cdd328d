"""Order entity and its payment status state machine.

An order is created PENDING from the buyer's cart. The checkout flow applies
the outcome of the gateway charge to it; the payment subsystem itself never
mutates an order.

State Machine:
    PENDING → PAID      (gateway charge succeeded)
    PENDING → FAILED    (gateway charge failed)
    PAID    → REFUNDED  (refund succeeded)
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum

from ordering.cart.cart import CartItem
from ordering.exceptions import ValidationError
from ordering.shared.money import ZERO, format_money, to_money

_ROW_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_DISPLAY_DATE_FORMAT = "%b %d, %Y %I:%M %p"


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


# State machine transition map
_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PAID, OrderStatus.FAILED},
    OrderStatus.PAID: {OrderStatus.REFUNDED},
    OrderStatus.FAILED: set(),  # Terminal
    OrderStatus.REFUNDED: set(),  # Terminal
}


# ---------------------------------------------------------------------------
# Entity
# ---------------------------------------------------------------------------
@dataclass
class Order:
    user_id: int | str | None = None
    payment_provider: str = ""
    items: list[CartItem] = field(default_factory=list)
    order_date: datetime | None = None
    total_amount: Decimal = ZERO
    id: int | None = None
    payment_status: OrderStatus = field(default=OrderStatus.PENDING, init=False)
    transaction_id: str = field(default="", init=False)

    def __post_init__(self):
        self.total_amount = to_money(self.total_amount, field="total_amount")
        self.items = list(self.items)
        if self.order_date is None:
            self.order_date = datetime.now(UTC)

    # -------------------------------------------------------------------
    # Persistence shape
    # -------------------------------------------------------------------
    @classmethod
    def from_dict(cls, data: dict) -> "Order":
        """Restore an order from a persisted row.

        Unlike the constructor this accepts any status, since a stored order
        may already be paid, failed or refunded.
        """
        order_date = data.get("order_date")
        if isinstance(order_date, str):
            order_date = datetime.strptime(order_date, _ROW_DATE_FORMAT).replace(tzinfo=UTC)

        order = cls(
            id=int(data["id"]) if data.get("id") is not None else None,
            user_id=data.get("user_id"),
            total_amount=data.get("total_amount") or 0,
            payment_provider=data.get("payment_provider") or "",
            order_date=order_date,
            items=[CartItem.from_dict(row) for row in data.get("items", [])],
        )
        order.payment_status = OrderStatus(data.get("payment_status") or OrderStatus.PENDING.value)
        order.transaction_id = data.get("transaction_id") or ""
        return order

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "total_amount": str(self.total_amount),
            "payment_provider": self.payment_provider,
            "payment_status": self.payment_status.value,
            "transaction_id": self.transaction_id,
            "order_date": self.order_date.strftime(_ROW_DATE_FORMAT),
        }

    # -------------------------------------------------------------------
    # Items and totals
    # -------------------------------------------------------------------
    def add_item(self, item: CartItem) -> None:
        self.items.append(item)

    def calculate_total(self) -> Decimal:
        """Recompute ``total_amount`` from the items, replacing the old value."""
        self.total_amount = sum((item.subtotal for item in self.items), ZERO)
        return self.total_amount

    # -------------------------------------------------------------------
    # State transitions
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status: OrderStatus) -> None:
        current = self.payment_status
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError(
                {"payment_status": [f"Cannot transition from {current.value} to {target_status.value}"]}
            )

    def mark_as_paid(self, transaction_id: str) -> None:
        if not transaction_id:
            raise ValidationError({"transaction_id": ["A paid order requires a transaction id"]})
        self._assert_can_transition(OrderStatus.PAID)
        self.payment_status = OrderStatus.PAID
        self.transaction_id = transaction_id

    def mark_as_failed(self, transaction_id: str | None = None) -> None:
        self._assert_can_transition(OrderStatus.FAILED)
        self.payment_status = OrderStatus.FAILED
        if transaction_id:
            self.transaction_id = transaction_id

    def mark_as_refunded(self, transaction_id: str | None = None) -> None:
        self._assert_can_transition(OrderStatus.REFUNDED)
        self.payment_status = OrderStatus.REFUNDED
        if transaction_id:
            self.transaction_id = transaction_id

    @property
    def is_paid(self) -> bool:
        return self.payment_status == OrderStatus.PAID

    @property
    def is_pending(self) -> bool:
        return self.payment_status == OrderStatus.PENDING

    # -------------------------------------------------------------------
    # Display
    # -------------------------------------------------------------------
    @property
    def formatted_total(self) -> str:
        return format_money(self.total_amount)

    @property
    def formatted_date(self) -> str:
        if self.order_date is None:
            return "N/A"
        return self.order_date.strftime(_DISPLAY_DATE_FORMAT)
