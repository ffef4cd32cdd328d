from pathlib import Path

import pytest
from ordering.cart.cart import CartItem
from ordering.order.order import Order
from payments.gateway.fake_adapter import FakeGateway
from payments.service import PaymentService


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        # Get the test file path relative to the tests directory
        test_path = Path(item.fspath)

        # Mark tests based on their directory
        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


def _make_order(*lines, user_id=1):
    """Build a PENDING order from ``(price, quantity)`` pairs."""
    lines = lines or (("10.00", 2), ("5.00", 1))
    order = Order(user_id=user_id)
    for index, (price, quantity) in enumerate(lines, start=1):
        order.add_item(CartItem(product_id=index, title=f"Product {index}", price=price, quantity=quantity))
    order.calculate_total()
    return order


@pytest.fixture
def order_factory():
    return _make_order


@pytest.fixture
def order():
    return _make_order()


@pytest.fixture
def fake_gateway():
    return FakeGateway(name="fake", display_name="Fake Gateway")


@pytest.fixture
def payment_service(fake_gateway):
    return PaymentService([fake_gateway])
