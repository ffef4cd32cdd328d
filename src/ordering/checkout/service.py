"""Checkout flow: turns a cart into a paid order through the payment service.

This is the ordering side of the payment boundary:

    1. Cart → PENDING order, persisted so it has an id
    2. PaymentService.process_payment → PaymentResult
    3a. Success → PAID with the provider transaction id
    3b. Failure → FAILED, result message shown to the buyer
    3c. No answer in time → stays PENDING; the late result is applied when it lands
    4. Webhook/redirect payload → gateway.verify_payment → reconcile PENDING order
    5. Admin refund → PaymentService.process_refund → REFUNDED

Gateway calls block on network I/O in a live deployment, so each one runs
with a bounded timeout. A call still queued when the timeout expires is
cancelled and never reaches the gateway. A call already running cannot be
stopped, so its outcome is unknown: the order is left as it was and the
result is applied once the gateway answers.

Changes to one order (charge outcome, late results, refunds) are serialized
by a per-order lock, and the order is re-read from the repository under it.
"""

import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from decimal import Decimal

import structlog
from payments.gateway.port import PaymentResult
from payments.service import PaymentService

from ordering.cart.cart import Cart
from ordering.exceptions import ValidationError
from ordering.order.order import Order, OrderStatus
from ordering.order.repository import OrderRepository
from ordering.shared.money import to_money

logger = structlog.get_logger(__name__)

DEFAULT_GATEWAY_TIMEOUT = 10.0


@dataclass(frozen=True)
class CheckoutOutcome:
    order: Order
    result: PaymentResult

    @property
    def succeeded(self) -> bool:
        return self.result.is_success

    @property
    def awaiting_gateway(self) -> bool:
        """True when the gateway has not answered yet and the order is still PENDING."""
        return not self.result.is_success and self.order.is_pending


class CheckoutService:
    def __init__(
        self,
        payments: PaymentService,
        orders: OrderRepository,
        timeout: float = DEFAULT_GATEWAY_TIMEOUT,
        max_workers: int = 8,
    ) -> None:
        self.payments = payments
        self.orders = orders
        self.timeout = timeout
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="gateway")
        self._locks: dict[int, threading.RLock] = {}
        self._locks_guard = threading.Lock()
        self._refunds_in_flight: set[int] = set()
        self._unsettled: set[threading.Event] = set()

    def shutdown(self, wait: bool = False) -> None:
        self._executor.shutdown(wait=wait)

    def wait_for_late_results(self, timeout: float | None = None) -> bool:
        """Block until every timed-out gateway call has answered and been applied.

        Returns False if some are still outstanding after ``timeout`` seconds.
        """
        with self._locks_guard:
            pending = list(self._unsettled)
        return all(event.wait(timeout) for event in pending)

    # -------------------------------------------------------------------
    # Checkout
    # -------------------------------------------------------------------
    def place_order(
        self,
        user_id,
        cart: Cart,
        payment_details: dict | None = None,
        gateway_name: str | None = None,
    ) -> CheckoutOutcome:
        """Create an order from ``cart`` and charge it.

        The cart is cleared only when the charge succeeds, so a buyer whose
        card was declined can retry with another payment method.
        """
        gateway = self.payments.gateway(gateway_name) if gateway_name else self.payments.get_default()
        order = cart.to_order(user_id, payment_provider=gateway.name)
        self.orders.add(order)

        with self._order_lock(order.id):
            result, settled = self._call(
                "charge",
                self.payments.process_payment,
                order,
                payment_details or {},
                gateway.name,
                on_late_result=lambda late: self._apply_late_charge(order.id, late),
            )

            if result.is_success:
                order.mark_as_paid(result.transaction_id)
                cart.clear()
            elif settled:
                order.mark_as_failed()
            if settled:
                self.orders.update(order)

        logger.info(
            "Checkout completed",
            order_id=order.id,
            user_id=user_id,
            gateway=gateway.name,
            status=order.payment_status.value,
            total=str(order.total_amount),
        )
        return CheckoutOutcome(order=order, result=result)

    def checkout_url(self, order_id: int) -> str | None:
        """Redirect URL for the gateway that will take the payment.

        Only a PENDING order has one; paid or failed orders need no redirect.
        """
        order = self.orders.get(order_id)
        if not order.is_pending:
            return None
        return self.payments.gateway(order.payment_provider).get_checkout_url(order)

    def _apply_late_charge(self, order_id: int, result: PaymentResult) -> None:
        with self._order_lock(order_id):
            order = self.orders.get(order_id)
            if not order.is_pending:
                logger.warning(
                    "Late charge result for settled order",
                    order_id=order_id,
                    status=order.payment_status.value,
                    success=result.is_success,
                    transaction_id=result.transaction_id,
                )
                return

            if result.is_success:
                order.mark_as_paid(result.transaction_id)
            else:
                order.mark_as_failed()
            self.orders.update(order)
        logger.info(
            "Late charge result applied",
            order_id=order_id,
            status=order.payment_status.value,
            transaction_id=result.transaction_id,
        )

    # -------------------------------------------------------------------
    # Webhooks and redirect callbacks
    # -------------------------------------------------------------------
    def confirm_payment(self, gateway_name: str, payload: dict) -> tuple[PaymentResult, Order | None]:
        """Verify a provider payload and reconcile the order it refers to.

        Only a PENDING order is moved to PAID. Orders already paid are left
        alone, and failed or refunded orders are logged for manual review.
        """
        gateway = self.payments.gateway(gateway_name)
        result, _ = self._call("verify_payment", gateway.verify_payment, payload)
        if not result.is_success:
            logger.warning("Webhook rejected", gateway=gateway_name, reason=result.message)
            return result, None

        found = self.orders.find_by_transaction_id(result.transaction_id)
        if found is None:
            logger.warning("Webhook for unknown transaction", gateway=gateway_name, transaction_id=result.transaction_id)
            return result, None

        with self._order_lock(found.id):
            order = self.orders.get(found.id)
            if order.is_pending:
                order.mark_as_paid(result.transaction_id)
                self.orders.update(order)
                logger.info("Order reconciled from webhook", order_id=order.id, transaction_id=result.transaction_id)
            elif not order.is_paid:
                logger.warning(
                    "Webhook for order in terminal state",
                    order_id=order.id,
                    status=order.payment_status.value,
                )
        return result, order

    # -------------------------------------------------------------------
    # Refunds
    # -------------------------------------------------------------------
    def refund_order(self, order_id: int, amount=None) -> tuple[PaymentResult, Order]:
        """Refund a paid order through the gateway that charged it.

        ``amount`` defaults to the order total. It is not checked against the
        amount originally charged. Refunds of one order never overlap: a
        second request waits for the first, then finds the order REFUNDED.
        """
        with self._order_lock(order_id):
            order = self.orders.get(order_id)
            if order.payment_status != OrderStatus.PAID:
                raise ValidationError(
                    {"payment_status": [f"Only paid orders can be refunded, order is {order.payment_status.value}"]}
                )
            if order_id in self._refunds_in_flight:
                raise ValidationError({"payment_status": ["A refund for this order is already in progress"]})

            refund_amount: Decimal = order.total_amount if amount is None else to_money(amount)
            # Raises GatewayNotFound before anything is submitted.
            self.payments.gateway(order.payment_provider)
            self._refunds_in_flight.add(order_id)
            try:
                result, settled = self._call(
                    "refund",
                    self.payments.process_refund,
                    order.transaction_id,
                    refund_amount,
                    order.payment_provider,
                    on_late_result=lambda late: self._apply_late_refund(order_id, late),
                )
            except Exception:
                self._refunds_in_flight.discard(order_id)
                raise
            if settled:
                self._refunds_in_flight.discard(order_id)

            if result.is_success:
                order.mark_as_refunded()
                self.orders.update(order)

        logger.info(
            "Refund requested",
            order_id=order.id,
            amount=str(refund_amount),
            success=result.is_success,
            settled=settled,
            refund_id=result.transaction_id,
        )
        return result, order

    def _apply_late_refund(self, order_id: int, result: PaymentResult) -> None:
        with self._order_lock(order_id):
            self._refunds_in_flight.discard(order_id)
            if not result.is_success:
                logger.warning("Late refund failed", order_id=order_id, reason=result.message)
                return
            order = self.orders.get(order_id)
            if order.is_paid:
                order.mark_as_refunded()
                self.orders.update(order)
        logger.info("Late refund applied", order_id=order_id, refund_id=result.transaction_id)

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    def _order_lock(self, order_id: int) -> threading.RLock:
        with self._locks_guard:
            return self._locks.setdefault(order_id, threading.RLock())

    def _call(self, operation: str, fn, *args, on_late_result=None) -> tuple[PaymentResult, bool]:
        """Run a gateway call with the configured timeout.

        Returns the result and whether it is final. A call that is still
        running when the timeout expires reports ``settled=False``; its real
        result is handed to ``on_late_result`` when it arrives.
        """
        future = self._executor.submit(fn, *args)
        done, _ = wait([future], timeout=self.timeout)
        if done:
            return self._result_of(operation, future), True

        cancelled = future.cancel()
        logger.error(
            "Payment gateway timed out",
            operation=operation,
            timeout=self.timeout,
            cancelled=cancelled,
        )
        timed_out = PaymentResult.failure(
            f"Payment gateway did not respond within {self.timeout:g} seconds",
            metadata={"timeout": self.timeout, "operation": operation, "cancelled": cancelled},
        )
        if cancelled:
            return timed_out, True
        if on_late_result is not None:
            self._watch(operation, future, on_late_result)
        return timed_out, False

    def _result_of(self, operation: str, future: Future) -> PaymentResult:
        try:
            return future.result()
        except Exception as exc:
            logger.exception("Payment gateway raised", operation=operation)
            return PaymentResult.failure(f"Payment gateway error: {exc}", metadata={"operation": operation})

    def _watch(self, operation: str, future: Future, on_late_result) -> None:
        settled = threading.Event()
        with self._locks_guard:
            self._unsettled.add(settled)

        def _settle(done: Future) -> None:
            try:
                on_late_result(self._result_of(operation, done))
            finally:
                with self._locks_guard:
                    self._unsettled.discard(settled)
                settled.set()

        future.add_done_callback(_settle)
