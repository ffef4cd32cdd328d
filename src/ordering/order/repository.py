"""Order repository port and an in-memory adapter.

The checkout flow only depends on ``OrderRepository``. Durable storage is
supplied by the host application; ``InMemoryOrderRepository`` backs the tests
and the development app.
"""

import threading
from abc import ABC, abstractmethod
from copy import deepcopy
from decimal import Decimal
from itertools import count

from ordering.exceptions import OrderNotFound
from ordering.order.order import Order, OrderStatus
from ordering.shared.money import ZERO


class OrderRepository(ABC):
    """Abstract order persistence interface."""

    @abstractmethod
    def add(self, order: Order) -> Order:
        """Persist a new order and assign its id."""
        ...

    @abstractmethod
    def find(self, order_id: int) -> Order | None: ...

    @abstractmethod
    def find_by_transaction_id(self, transaction_id: str) -> Order | None: ...

    @abstractmethod
    def find_by_user_id(self, user_id) -> list[Order]:
        """Orders placed by ``user_id``, newest first."""
        ...

    @abstractmethod
    def find_by_status(self, status: OrderStatus) -> list[Order]: ...

    @abstractmethod
    def update(self, order: Order) -> None: ...

    @abstractmethod
    def update_status(self, order_id: int, status: OrderStatus, transaction_id: str | None = None) -> None:
        """Overwrite the stored status, and the transaction id when one is given."""
        ...

    @abstractmethod
    def delete(self, order_id: int) -> None: ...

    def get(self, order_id: int) -> Order:
        order = self.find(order_id)
        if order is None:
            raise OrderNotFound(order_id)
        return order

    def total_revenue(self) -> Decimal:
        return sum((order.total_amount for order in self.find_by_status(OrderStatus.PAID)), ZERO)

    def count_by_status(self, status: OrderStatus) -> int:
        return len(self.find_by_status(status))


class InMemoryOrderRepository(OrderRepository):
    """Dictionary-backed repository.

    Stores copies so callers holding an ``Order`` cannot change the stored
    state without going through ``update``.
    """

    def __init__(self) -> None:
        self._orders: dict[int, Order] = {}
        self._ids = count(1)
        self._lock = threading.Lock()

    def add(self, order: Order) -> Order:
        with self._lock:
            order.id = next(self._ids)
            self._orders[order.id] = deepcopy(order)
        return order

    def find(self, order_id: int) -> Order | None:
        with self._lock:
            order = self._orders.get(order_id)
            return deepcopy(order) if order is not None else None

    def find_by_transaction_id(self, transaction_id: str) -> Order | None:
        if not transaction_id:
            return None
        with self._lock:
            for order in self._orders.values():
                if order.transaction_id == transaction_id:
                    return deepcopy(order)
        return None

    def find_by_user_id(self, user_id) -> list[Order]:
        with self._lock:
            orders = [deepcopy(o) for o in self._orders.values() if o.user_id == user_id]
        return sorted(orders, key=lambda o: (o.order_date, o.id), reverse=True)

    def find_by_status(self, status: OrderStatus) -> list[Order]:
        with self._lock:
            orders = [deepcopy(o) for o in self._orders.values() if o.payment_status == status]
        return sorted(orders, key=lambda o: (o.order_date, o.id), reverse=True)

    def update(self, order: Order) -> None:
        with self._lock:
            if order.id not in self._orders:
                raise OrderNotFound(order.id)
            self._orders[order.id] = deepcopy(order)

    def update_status(self, order_id: int, status: OrderStatus, transaction_id: str | None = None) -> None:
        with self._lock:
            order = self._orders.get(order_id)
            if order is None:
                raise OrderNotFound(order_id)
            order.payment_status = status
            if transaction_id is not None:
                order.transaction_id = transaction_id

    def delete(self, order_id: int) -> None:
        with self._lock:
            self._orders.pop(order_id, None)

    def __len__(self) -> int:
        return len(self._orders)
