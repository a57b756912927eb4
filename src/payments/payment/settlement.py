"""Settling an online payment once the gateway widget has reported back.

Two paths:
    Verification: the customer paid. The signature is checked with the
        backend and the outcome is recorded, but the order stands either
        way. Cart and stored payment data are cleared afterwards.
    Compensation: the customer closed the widget, or the gateway never
        came up. The backend reverts and soft-deletes the order, which puts
        items back in the cart and stock back on the shelf.
"""

from dataclasses import dataclass

import structlog

from ordering.cart.cart import CartService
from ordering.order.order import OrderService
from payments.gateway.port import GatewayPaymentResponse
from payments.payment.credentials import PaymentService
from shared.notifications import Notifier

logger = structlog.get_logger(__name__)

REASON_USER_CANCELLED = "user cancelled payment"
REASON_GATEWAY_FAILURE = "payment gateway failure"

_REASON_MESSAGES = {
    REASON_USER_CANCELLED: "Payment was cancelled. Your order has been cancelled and items returned to your cart.",
    REASON_GATEWAY_FAILURE: "Failed to load payment gateway. Please try again.",
}


def support_message(order_id: str) -> str:
    return (
        f"We could not cancel order {order_id} automatically. "
        "Please contact support so we can make sure you are not charged."
    )


@dataclass(frozen=True)
class VerificationOutcome:
    verified: bool
    message: str


@dataclass(frozen=True)
class CompensationOutcome:
    reverted: bool
    reason: str
    message: str


class PaymentSettlement:
    def __init__(
        self,
        payments: PaymentService,
        orders: OrderService,
        cart: CartService,
        notifier: Notifier,
    ) -> None:
        self._payments = payments
        self._orders = orders
        self._cart = cart
        self._notifier = notifier

    def verify(self, order_id: str, response: GatewayPaymentResponse) -> VerificationOutcome:
        self._payments.store_result(response)
        self._notifier.success("Payment completed! Verifying...")

        result = self._payments.verify(response)
        if result.success and result.data.verified:
            outcome = VerificationOutcome(verified=True, message=result.data.message)
            self._notifier.success("Payment verified successfully!")
        else:
            message = result.data.message if result.success else (result.message or "Payment verification failed")
            outcome = VerificationOutcome(verified=False, message=message)
            self._notifier.error("Payment received, but we could not verify it yet. Your order is confirmed.")

        logger.info(
            "Payment settled",
            order_id=order_id,
            gateway_order_id=response.razorpay_order_id,
            payment_id=response.razorpay_payment_id,
            verified=outcome.verified,
        )

        # The charge went through, so the cart is spent regardless of verification
        cleared = self._cart.clear()
        if not cleared.success:
            logger.warning("Cart could not be cleared after payment", order_id=order_id, message=cleared.message)
        self._payments.purge()
        return outcome

    def compensate(self, order_id: str, reason: str) -> CompensationOutcome:
        logger.warning("Compensating order", order_id=order_id, reason=reason)
        result = self._orders.revert_and_delete(order_id, reason, soft_delete=True)

        if not result.success:
            message = support_message(order_id)
            logger.error("Order revert failed", order_id=order_id, reason=reason, message=result.message)
            self._notifier.error(message)
            return CompensationOutcome(reverted=False, reason=reason, message=message)

        self._payments.purge()
        self._cart.refresh()
        message = _REASON_MESSAGES.get(reason, "Your order has been cancelled.")
        self._notifier.error(message)
        logger.info(
            "Order reverted",
            order_id=order_id,
            reason=reason,
            restored_items=len(result.data.restored_items),
        )
        return CompensationOutcome(reverted=True, reason=reason, message=message)
