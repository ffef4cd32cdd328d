"""Pydantic request/response schemas for the Payments API.

These are external contracts, separate from the internal ``Order`` and
``PaymentResult`` types. ``PaymentResultSchema`` keeps the serialized result
field names exactly: ``success``, ``transaction_id``, ``message``,
``metadata``.
"""

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class CartItemSchema(BaseModel):
    product_id: int | str
    title: str
    price: Decimal = Field(ge=0)
    quantity: int = 1


class PaymentResultSchema(BaseModel):
    success: bool
    transaction_id: str
    message: str
    metadata: dict[str, Any] = {}


class OrderSchema(BaseModel):
    id: int | None
    user_id: int | str | None
    total_amount: Decimal
    payment_provider: str
    payment_status: str
    transaction_id: str
    order_date: str
    items: list[CartItemSchema] = []


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------
class CheckoutRequest(BaseModel):
    user_id: int | str
    items: list[CartItemSchema] = Field(min_length=1)
    gateway: str | None = None
    payment_details: dict[str, Any] = {}

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "user_id": 7,
                    "items": [
                        {"product_id": 1, "title": "Icon pack", "price": "10.00", "quantity": 2},
                        {"product_id": 2, "title": "Font bundle", "price": "5.00", "quantity": 1},
                    ],
                    "gateway": "stripe",
                    "payment_details": {"token": "tok_visa"},
                }
            ]
        }
    }


class RefundRequest(BaseModel):
    amount: Decimal | None = Field(default=None, gt=0)


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class GatewaySchema(BaseModel):
    name: str
    display_name: str
    is_default: bool


class CheckoutResponse(BaseModel):
    order: OrderSchema
    result: PaymentResultSchema
    checkout_url: str | None = None


class WebhookResponse(BaseModel):
    result: PaymentResultSchema
    order_id: int | None = None
    payment_status: str | None = None


class RefundResponse(BaseModel):
    result: PaymentResultSchema
    order: OrderSchema
