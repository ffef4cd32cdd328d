"""Shared BDD fixtures and step definitions for the Ordering context."""

from decimal import Decimal

import pytest
from ordering.cart.cart import Cart
from ordering.checkout.service import CheckoutService
from ordering.exceptions import ValidationError
from ordering.order.repository import InMemoryOrderRepository
from pytest_bdd import given, parsers, then, when


@pytest.fixture
def context():
    return {}


@pytest.fixture
def checkout(payment_service):
    service = CheckoutService(payment_service, InMemoryOrderRepository(), timeout=5)
    yield service
    service.shutdown()


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("a cart with these items", target_fixture="cart")
def _cart(datatable):
    header, *rows = datatable
    cart = Cart()
    for row in rows:
        line = dict(zip(header, row))
        cart.add(int(line["product_id"]), line["title"], line["price"], int(line["quantity"]))
    return cart


@given("an order placed from the cart", target_fixture="order")
def _order_from_cart(cart):
    return cart.to_order(user_id=1, payment_provider="stripe")


@given(parsers.cfparse('the order was paid with transaction "{transaction_id}"'))
def _order_paid(order, transaction_id):
    order.mark_as_paid(transaction_id)


@given("the order failed")
def _order_failed(order):
    order.mark_as_failed()


@given("a checkout with the fake gateway")
def _checkout_ready(checkout):
    return checkout


@given(parsers.cfparse('the gateway declines with "{reason}"'))
def _gateway_declines(fake_gateway, reason):
    fake_gateway.configure(should_succeed=False, failure_reason=reason)


@given("the buyer checked out", target_fixture="order")
def _checked_out(checkout, cart, context):
    context["outcome"] = checkout.place_order(1, cart)
    return context["outcome"].order


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('the order is marked paid with transaction "{transaction_id}"'))
def _mark_paid(order, context, transaction_id):
    try:
        order.mark_as_paid(transaction_id)
    except ValidationError as exc:
        context["error"] = exc


@when("the order is marked failed")
def _mark_failed(order):
    order.mark_as_failed()


@when("the order is marked refunded")
def _mark_refunded(order, context):
    try:
        order.mark_as_refunded()
    except ValidationError as exc:
        context["error"] = exc


@when("the buyer checks out", target_fixture="order")
def _checks_out(checkout, cart, context):
    context["outcome"] = checkout.place_order(1, cart)
    return context["outcome"].order


@when("the order is refunded", target_fixture="order")
def _refunds(checkout, order, context):
    context["result"], refunded = checkout.refund_order(order.id)
    return refunded


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def _order_status(order, status):
    assert order.payment_status.value == status


@then(parsers.cfparse("the order total is {total}"))
def _order_total(order, total):
    assert order.total_amount == Decimal(total)


@then(parsers.cfparse('the order transaction is "{transaction_id}"'))
def _order_transaction(order, transaction_id):
    assert order.transaction_id == transaction_id


@then("the order has no transaction")
def _no_transaction(order):
    assert order.transaction_id == ""


@then("the transition is rejected")
def _transition_rejected(context):
    assert "payment_status" in context["error"].messages


@then("the cart is empty")
def _cart_empty(cart):
    assert cart.is_empty


@then(parsers.cfparse("the cart has {count:d} items"))
def _cart_count(cart, count):
    assert len(cart) == count


@then(parsers.cfparse('the payment message is "{message}"'))
def _payment_message(context, message):
    assert context["outcome"].result.message == message


@then(parsers.cfparse("the gateway refunded {amount}"))
def _gateway_refunded(fake_gateway, amount):
    assert fake_gateway.calls_to("refund")[-1]["amount"] == Decimal(amount)
