"""FastAPI routes for the Payments API: checkout, webhooks and refunds.

The routes share one ``CheckoutService`` stored on ``app.state`` by the
application factory.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, Request
from ordering.cart.cart import Cart, CartItem
from ordering.checkout.service import CheckoutService
from ordering.order.order import Order

from payments.api.schemas import (
    CartItemSchema,
    CheckoutRequest,
    CheckoutResponse,
    GatewaySchema,
    OrderSchema,
    PaymentResultSchema,
    RefundRequest,
    RefundResponse,
    WebhookResponse,
)


def get_checkout(request: Request) -> CheckoutService:
    return request.app.state.checkout


def _order_schema(order: Order) -> OrderSchema:
    return OrderSchema(
        id=order.id,
        user_id=order.user_id,
        total_amount=order.total_amount,
        payment_provider=order.payment_provider,
        payment_status=order.payment_status.value,
        transaction_id=order.transaction_id,
        order_date=order.order_date.isoformat(),
        items=[
            CartItemSchema(product_id=i.product_id, title=i.title, price=i.price, quantity=i.quantity)
            for i in order.items
        ],
    )


# ---------------------------------------------------------------------------
# Payment Router
# ---------------------------------------------------------------------------
payment_router = APIRouter(prefix="/payments", tags=["payments"])


@payment_router.get("/gateways", response_model=list[GatewaySchema])
async def list_gateways(checkout: CheckoutService = Depends(get_checkout)) -> list[GatewaySchema]:
    """List the payment methods the buyer can choose from."""
    default = checkout.payments.default_name
    return [
        GatewaySchema(name=name, display_name=display_name, is_default=name == default)
        for name, display_name in checkout.payments.available_names().items()
    ]


@payment_router.post("/checkout", status_code=201, response_model=CheckoutResponse)
def checkout_cart(body: CheckoutRequest, checkout: CheckoutService = Depends(get_checkout)) -> CheckoutResponse:
    """Create an order from the submitted cart and charge it.

    A declined charge is still a 201: the order exists, in FAILED state, and
    the result message is meant for the buyer. A gateway that has not answered
    in time leaves the order PENDING, and only then is a redirect URL returned.
    """
    cart = Cart(
        CartItem(product_id=i.product_id, title=i.title, price=i.price, quantity=i.quantity) for i in body.items
    )
    outcome = checkout.place_order(body.user_id, cart, body.payment_details, body.gateway)
    return CheckoutResponse(
        order=_order_schema(outcome.order),
        result=PaymentResultSchema(**outcome.result.to_dict()),
        checkout_url=checkout.checkout_url(outcome.order.id),
    )


@payment_router.post("/webhooks/{gateway_name}", response_model=WebhookResponse)
def process_webhook(
    gateway_name: str,
    payload: dict[str, Any] = Body(...),
    checkout: CheckoutService = Depends(get_checkout),
) -> WebhookResponse:
    """Accept a provider webhook or redirect callback."""
    result, order = checkout.confirm_payment(gateway_name, payload)
    return WebhookResponse(
        result=PaymentResultSchema(**result.to_dict()),
        order_id=order.id if order else None,
        payment_status=order.payment_status.value if order else None,
    )


@payment_router.get("/orders/{order_id}", response_model=OrderSchema)
async def get_order(order_id: int, checkout: CheckoutService = Depends(get_checkout)) -> OrderSchema:
    return _order_schema(checkout.orders.get(order_id))


@payment_router.post("/orders/{order_id}/refund", response_model=RefundResponse)
def refund_order(
    order_id: int,
    body: RefundRequest | None = None,
    checkout: CheckoutService = Depends(get_checkout),
) -> RefundResponse:
    """Refund a paid order through the gateway that charged it."""
    amount = body.amount if body else None
    result, order = checkout.refund_order(order_id, amount)
    return RefundResponse(result=PaymentResultSchema(**result.to_dict()), order=_order_schema(order))
