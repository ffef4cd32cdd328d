"""SellNow payments FastAPI application.

Builds the payment service from ``PaymentSettings`` once, at startup, and
shares it with the routes through ``app.state``.

Usage:
    uvicorn app:create_app --factory --app-dir src --port 8000 --reload
"""

from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from ordering.checkout.service import CheckoutService
from ordering.exceptions import OrderNotFound, ValidationError
from ordering.order.repository import InMemoryOrderRepository
from payments.api.routes import payment_router
from payments.config import PaymentSettings
from payments.exceptions import GatewayNotFound, NoGatewaysRegistered
from payments.gateway import create_payment_service
from payments.utils.logging import add_context, clear_context, configure_logging


def create_app(checkout: CheckoutService | None = None, settings: PaymentSettings | None = None) -> FastAPI:
    if checkout is None:
        configure_logging()
        settings = settings or PaymentSettings()
        checkout = CheckoutService(
            payments=create_payment_service(settings),
            orders=InMemoryOrderRepository(),
            timeout=settings.payments_gateway_timeout,
        )

    app = FastAPI(
        title="SellNow Payments API",
        description="Checkout, payment webhooks and refunds",
    )
    app.state.checkout = checkout

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next):
        """Tag every log line emitted while handling a request with its id."""
        request_id = request.headers.get("X-Request-ID") or str(uuid4())
        add_context(request_id=request_id)
        try:
            response = await call_next(request)
        finally:
            clear_context()
        response.headers["X-Request-ID"] = request_id
        return response

    # -----------------------------------------------------------------------
    # Error mapping
    # -----------------------------------------------------------------------
    @app.exception_handler(GatewayNotFound)
    async def gateway_not_found(request: Request, exc: GatewayNotFound):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(OrderNotFound)
    async def order_not_found(request: Request, exc: OrderNotFound):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(NoGatewaysRegistered)
    async def no_gateways(request: Request, exc: NoGatewaysRegistered):
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    @app.exception_handler(ValidationError)
    async def validation_error(request: Request, exc: ValidationError):
        return JSONResponse(status_code=409, content={"detail": exc.messages})

    app.include_router(payment_router)

    @app.get("/health")
    async def health():
        payments = app.state.checkout.payments
        return JSONResponse(
            content={
                "status": "ok",
                "gateways": payments.names(),
                "default_gateway": payments.default_name,
            }
        )

    return app
