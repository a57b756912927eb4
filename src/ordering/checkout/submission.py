"""Order submission: validates checkout preconditions, builds the order
payload and sends it to the COD or online order endpoint.
"""

from dataclasses import dataclass

import structlog

from identity.customer.addresses import Address
from ordering.cart.cart import CartSummary
from ordering.checkout.pricing import FREE_SHIPPING_THRESHOLD, Discount, PaymentMethod, shipping_cost
from ordering.checkout.shipping import ShippingRate
from ordering.order.order import Order, OrderPayload, OrderService
from shared.exceptions import ValidationError

logger = structlog.get_logger(__name__)

ORDER_FAILED_MESSAGE = "Failed to place order"


@dataclass(frozen=True)
class SubmissionResult:
    success: bool
    order: Order | None = None
    message: str | None = None
    refused: bool = False  # failed validation, nothing was sent


def ensure_ready(address: Address | None, rate: ShippingRate | None, cart: CartSummary) -> None:
    errors: dict[str, list[str]] = {}
    if address is None or address.id is None:
        errors["address"] = ["Please select a delivery address"]
    if rate is None:
        errors["shipping"] = ["Please select a shipping option"]
    if cart.is_empty:
        errors["cart"] = ["Your cart is empty"]
    if errors:
        raise ValidationError(errors)


def build_payload(
    address: Address,
    rate: ShippingRate,
    payment_method: PaymentMethod,
    subtotal: float,
    idempotency_key: str,
    notes: str | None = None,
    discount: Discount | None = None,
    threshold: float = FREE_SHIPPING_THRESHOLD,
) -> OrderPayload:
    formatted = address.formatted()
    return OrderPayload(
        shipping_address_id=address.id.value,
        shipping_address=formatted,
        billing_address=formatted,
        payment_method=payment_method.value,
        shipping_method=rate.name,
        carrier_name=rate.name,
        delivery_option=rate.name,
        delivery_cost=shipping_cost(subtotal, rate.price, threshold),
        idempotency_key=idempotency_key,
        order_notes=(notes or "").strip(),
        discount_code=discount.code if discount else None,
    )


class OrderSubmitter:
    def __init__(self, orders: OrderService, threshold: float = FREE_SHIPPING_THRESHOLD) -> None:
        self._orders = orders
        self._threshold = threshold

    def submit(
        self,
        address: Address | None,
        rate: ShippingRate | None,
        cart: CartSummary,
        payment_method: PaymentMethod,
        idempotency_key: str,
        notes: str | None = None,
        discount: Discount | None = None,
    ) -> SubmissionResult:
        try:
            ensure_ready(address, rate, cart)
        except ValidationError as exc:
            logger.info("Order submission refused", errors=exc.messages)
            return SubmissionResult(success=False, message=exc.first_message, refused=True)

        payload = build_payload(
            address,
            rate,
            payment_method,
            cart.subtotal,
            idempotency_key,
            notes=notes,
            discount=discount,
            threshold=self._threshold,
        )

        if payment_method is PaymentMethod.COD:
            result = self._orders.create_cod_order(payload)
        else:
            result = self._orders.create_online_order(payload)

        if not result.success:
            logger.error(
                "Order creation failed",
                payment_method=payment_method.value,
                message=result.message,
                idempotency_key=idempotency_key,
            )
            return SubmissionResult(success=False, message=result.message or ORDER_FAILED_MESSAGE)

        order = result.data
        logger.info(
            "Order created",
            order_id=order.id,
            payment_method=payment_method.value,
            delivery_cost=payload.delivery_cost,
        )
        return SubmissionResult(success=True, order=order, message="Order placed successfully!")
