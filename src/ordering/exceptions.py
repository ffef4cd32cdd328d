"""Exceptions raised by the ordering context."""


class ValidationError(Exception):
    """A domain rule was violated.

    Carries a mapping of field name to a list of messages, so callers can
    render errors per field the same way for carts and orders.
    """

    def __init__(self, messages: dict[str, list[str]]) -> None:
        self.messages = messages
        super().__init__(messages)


class OrderNotFound(LookupError):
    """No order exists for the requested identifier."""

    def __init__(self, order_id) -> None:
        self.order_id = order_id
        super().__init__(f"Order '{order_id}' not found")
