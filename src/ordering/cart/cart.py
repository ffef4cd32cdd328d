"""Shopping cart and its line items.

A ``CartItem`` is a snapshot of a catalogue product taken when the buyer adds
it to the cart: the title and unit price are copied, not joined, so later
catalogue edits never change what the buyer saw at checkout. The ``Cart``
lives in the buyer's session and is turned into a PENDING ``Order`` when the
buyer checks out.
"""

from dataclasses import dataclass
from decimal import Decimal

from ordering.exceptions import ValidationError
from ordering.shared.money import ZERO, format_money, to_money


@dataclass
class CartItem:
    product_id: int | str
    title: str
    price: Decimal
    quantity: int = 1

    def __post_init__(self):
        self.price = to_money(self.price, field="price")
        if self.price < ZERO:
            raise ValidationError({"price": ["Price cannot be negative"]})
        self.quantity = max(1, int(self.quantity))

    # -------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------
    @classmethod
    def from_dict(cls, data: dict) -> "CartItem":
        """Build an item from session storage or a database row."""
        return cls(
            product_id=data.get("product_id", 0),
            title=data.get("title", ""),
            price=data.get("price", 0),
            quantity=data.get("quantity", 1),
        )

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "title": self.title,
            "price": str(self.price),
            "quantity": self.quantity,
        }

    def copy(self) -> "CartItem":
        return CartItem(
            product_id=self.product_id,
            title=self.title,
            price=self.price,
            quantity=self.quantity,
        )

    # -------------------------------------------------------------------
    # Quantity
    # -------------------------------------------------------------------
    def set_quantity(self, quantity: int) -> None:
        """Set the quantity, clamping anything below one up to one."""
        self.quantity = max(1, int(quantity))

    def increment_quantity(self, amount: int = 1) -> None:
        self.quantity = max(1, self.quantity + int(amount))

    # -------------------------------------------------------------------
    # Pricing
    # -------------------------------------------------------------------
    @property
    def subtotal(self) -> Decimal:
        return self.price * self.quantity

    @property
    def formatted_price(self) -> str:
        return format_money(self.price)

    @property
    def formatted_subtotal(self) -> str:
        return format_money(self.subtotal)


class Cart:
    """Line items selected by a buyer, keyed by product.

    Adding a product that is already in the cart increments its quantity
    instead of creating a second line.
    """

    def __init__(self, items=None):
        self._items: dict = {}
        for item in items or []:
            self.add_item(item)

    @classmethod
    def from_session(cls, rows: list[dict]) -> "Cart":
        return cls(CartItem.from_dict(row) for row in rows)

    def to_session(self) -> list[dict]:
        return [item.to_dict() for item in self.items]

    def add(self, product_id, title: str, price, quantity: int = 1) -> CartItem:
        return self.add_item(CartItem(product_id=product_id, title=title, price=price, quantity=quantity))

    def add_item(self, item: CartItem) -> CartItem:
        existing = self._items.get(item.product_id)
        if existing is not None:
            existing.increment_quantity(item.quantity)
            return existing

        self._items[item.product_id] = item
        return item

    def update_quantity(self, product_id, quantity: int) -> CartItem:
        item = self._items.get(product_id)
        if item is None:
            raise ValidationError({"product_id": [f"Product '{product_id}' is not in the cart"]})
        item.set_quantity(quantity)
        return item

    def remove(self, product_id) -> None:
        self._items.pop(product_id, None)

    def clear(self) -> None:
        self._items.clear()

    @property
    def items(self) -> list[CartItem]:
        return list(self._items.values())

    @property
    def total(self) -> Decimal:
        return sum((item.subtotal for item in self._items.values()), ZERO)

    @property
    def is_empty(self) -> bool:
        return not self._items

    def __len__(self) -> int:
        return len(self._items)

    def to_order(self, user_id, payment_provider: str = ""):
        """Snapshot the cart into a new PENDING order.

        Items are copied so later cart edits never reach the order.
        """
        from ordering.order.order import Order

        if self.is_empty:
            raise ValidationError({"cart": ["Cannot convert an empty cart to an order"]})

        order = Order(
            user_id=user_id,
            payment_provider=payment_provider,
            items=[item.copy() for item in self._items.values()],
        )
        order.calculate_total()
        return order
