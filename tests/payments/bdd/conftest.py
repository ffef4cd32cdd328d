"""Shared BDD fixtures and step definitions for the Payments context."""

import pytest
from payments.exceptions import GatewayNotFound
from payments.gateway.fake_adapter import FakeGateway
from payments.service import PaymentService
from pytest_bdd import given, parsers, then, when

_DISPLAY_NAMES = {"stripe": "Stripe", "paypal": "PayPal"}


@pytest.fixture
def context():
    return {}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(
    parsers.cfparse('a payment service with gateways "{first}" and "{second}"'),
    target_fixture="service",
)
def _service(first, second):
    return PaymentService(FakeGateway(name, _DISPLAY_NAMES.get(name, name)) for name in (first, second))


@given(parsers.cfparse("a pending order totalling {total}"), target_fixture="pending_order")
def _pending_order(order_factory, total):
    return order_factory((total, 1))


@given(parsers.cfparse('gateway "{name}" declines with "{reason}"'))
def _declines(service, name, reason):
    service.gateway(name).configure(should_succeed=False, failure_reason=reason)


@given(parsers.cfparse('gateway "{name}" is unavailable'))
def _unavailable(service, name):
    service.gateway(name).available = False


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when("the order is charged")
def _charge_default(service, pending_order, context):
    context["result"] = service.process_payment(pending_order, {})


@when(parsers.cfparse('the order is charged through "{name}"'))
def _charge_named(service, pending_order, context, name):
    try:
        context["result"] = service.process_payment(pending_order, {}, name)
    except GatewayNotFound as exc:
        context["error"] = exc


@when(parsers.cfparse('gateway "{name}" is removed'))
def _remove(service, name):
    service.remove(name)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the default gateway is "{name}"'))
def _default_is(service, name):
    assert service.get_default().name == name


@then("the charge succeeds")
def _charge_succeeds(context):
    assert context["result"].is_success
    assert context["result"].transaction_id


@then(parsers.cfparse('the charge fails with "{message}"'))
def _charge_fails(context, message):
    assert not context["result"].is_success
    assert context["result"].message == message


@then(parsers.cfparse('gateway "{name}" was charged {count:d} time'))
@then(parsers.cfparse('gateway "{name}" was charged {count:d} times'))
def _charge_count(service, name, count):
    assert len(service.gateway(name).calls_to("charge")) == count


@then(parsers.cfparse('the available gateways are "{names}"'))
def _available(service, names):
    assert [g.name for g in service.get_available()] == names.split(",")


@then(parsers.cfparse('the lookup fails for gateway "{name}"'))
def _lookup_fails(context, name):
    assert isinstance(context["error"], GatewayNotFound)
    assert context["error"].name == name
