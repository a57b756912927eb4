"""Checkout session: the per-browser-session checkout orchestrator.

Owns everything the checkout page shows between the cart and the
confirmation: addresses, the shipping resolver, payment method, applied
discount, notes and the current step. The order summary is derived from
that state on every read.

Steps:
    SHIPPING → PAYMENT → REVIEW → COMPLETE                (cash on delivery)
    SHIPPING → PAYMENT → REVIEW → AWAITING_PAYMENT → COMPLETE   (online)
    AWAITING_PAYMENT → REVIEW when the payment is cancelled or the gateway
    never opens (the order has been reverted by then).
"""

import threading
from dataclasses import dataclass
from enum import Enum
from uuid import uuid4

import structlog

from identity.customer.account import AuthService
from identity.customer.addresses import Address, AddressBook, AddressId
from ordering.cart.cart import CartService
from ordering.checkout.discounts import INVALID_CODE_MESSAGE, DiscountValidator, normalize_code
from ordering.checkout.pricing import Discount, OrderSummary, PaymentMethod, PricedLine, calculate_summary
from ordering.checkout.shipping import QuoteStatus, ShippingQuote, ShippingRate, ShippingRateResolver
from ordering.checkout.submission import OrderSubmitter
from payments.payment.bridge import PaymentGatewayBridge, PaymentOutcome, PaymentState
from shared.config import Settings
from shared.exceptions import ValidationError
from shared.notifications import Notifier
from shared.result import ServiceResult

logger = structlog.get_logger(__name__)

PAYMENT_IN_PROGRESS_MESSAGE = "A payment is already in progress"
ORDER_IN_PROGRESS_MESSAGE = "Your order is already being placed"


class CheckoutStep(Enum):
    SHIPPING = "shipping"
    PAYMENT = "payment"
    REVIEW = "review"
    AWAITING_PAYMENT = "awaiting_payment"
    COMPLETE = "complete"


_NEXT_STEP = {
    CheckoutStep.SHIPPING: CheckoutStep.PAYMENT,
    CheckoutStep.PAYMENT: CheckoutStep.REVIEW,
}

_PREVIOUS_STEP = {
    CheckoutStep.PAYMENT: CheckoutStep.SHIPPING,
    CheckoutStep.REVIEW: CheckoutStep.PAYMENT,
}


@dataclass(frozen=True)
class PlaceOrderResult:
    success: bool
    message: str | None
    step: CheckoutStep
    order_id: str | None = None
    payment: PaymentOutcome | None = None


def new_idempotency_key() -> str:
    return uuid4().hex


class CheckoutSession:
    def __init__(
        self,
        settings: Settings,
        cart: CartService,
        addresses: AddressBook,
        resolver: ShippingRateResolver,
        discounts: DiscountValidator,
        submitter: OrderSubmitter,
        bridge: PaymentGatewayBridge,
        notifier: Notifier,
        auth: AuthService | None = None,
    ) -> None:
        self._settings = settings
        self._cart = cart
        self._address_book = addresses
        self.resolver = resolver
        self._discounts = discounts
        self._submitter = submitter
        self._bridge = bridge
        self._notifier = notifier
        self._auth = auth

        self.addresses: list[Address] = []
        self.selected_address: Address | None = None
        self.payment_method = PaymentMethod.COD
        self.discount: Discount | None = None
        self.discount_message: str | None = None
        self.notes = ""
        self.step = CheckoutStep.SHIPPING
        self.order_id: str | None = None
        self.idempotency_key = new_idempotency_key()
        self._placing = threading.Lock()

        self._unsubscribe = bridge.add_listener(self._on_payment_outcome)

    def close(self) -> None:
        self._unsubscribe()

    # -----------------------------------------------------------------
    # Derived state
    # -----------------------------------------------------------------
    @property
    def selected_rate(self) -> ShippingRate | None:
        return self.resolver.selected

    @property
    def summary(self) -> OrderSummary:
        rate = self.resolver.selected
        lines = [
            PricedLine(price=line.unit_price, quantity=line.quantity, discounted_price=line.offer_price)
            for line in self._cart.current.items
        ]
        return calculate_summary(
            lines,
            rate_price=rate.price if rate else None,
            payment_method=self.payment_method,
            discount=self.discount,
            shipping_method=rate.name if rate else None,
            threshold=self._settings.free_shipping_threshold,
            online_rate=self._settings.online_discount_rate,
        )

    @property
    def shipping(self) -> ShippingQuote:
        return self.resolver.snapshot()

    # -----------------------------------------------------------------
    # Loading and address selection
    # -----------------------------------------------------------------
    def load(self) -> ServiceResult[None]:
        """Fetch cart and addresses, then price shipping for the default address."""
        cart = self._cart.summary()
        if not cart.success:
            self._notifier.error(cart.message or "Failed to fetch cart")
            return ServiceResult.failure(cart.message or "Failed to fetch cart")

        addresses = self._address_book.list_addresses()
        if not addresses.success:
            self._notifier.error(addresses.message or "Failed to fetch addresses")
            return ServiceResult.failure(addresses.message or "Failed to fetch addresses")

        self.addresses = addresses.data
        self.step = CheckoutStep.SHIPPING
        default = next((address for address in self.addresses if address.is_default), None)
        default = default or (self.addresses[0] if self.addresses else None)
        if default is not None:
            self.select_address(default.id)
        logger.info("Checkout loaded", items=self._cart.current.item_count, addresses=len(self.addresses))
        return ServiceResult.ok()

    def _find_address(self, address_id: AddressId) -> Address:
        address = next((address for address in self.addresses if address.id == address_id), None)
        if address is None:
            raise ValidationError({"address_id": [f"Address {address_id} not found"]})
        return address

    def _resolve_shipping(self) -> ShippingQuote:
        cart = self._cart.current
        quote = self.resolver.resolve(
            self.selected_address.id,
            total_weight=cart.item_count * self._settings.item_weight,
            amount=cart.subtotal,
            payment_method=self.payment_method,
        )
        if quote.status is QuoteStatus.UNSERVICEABLE:
            self._notifier.error(quote.message)
        return quote

    def select_address(self, address_id: AddressId | int | str) -> ShippingQuote:
        self.selected_address = self._find_address(AddressId.parse(address_id))
        return self._resolve_shipping()

    def retry_shipping(self) -> ShippingQuote:
        """Re-run the rate lookup for the selected address."""
        if self.selected_address is None:
            raise ValidationError({"address": ["Please select a delivery address"]})
        return self._resolve_shipping()

    def select_rate(self, rate_id: int) -> ShippingRate:
        return self.resolver.select(rate_id)

    # -----------------------------------------------------------------
    # Payment method, discount and notes
    # -----------------------------------------------------------------
    def set_payment_method(self, method: PaymentMethod | str) -> ShippingQuote | None:
        try:
            method = PaymentMethod.parse(method)
        except ValueError as exc:
            raise ValidationError({"payment_method": [str(exc)]}) from exc
        if method is self.payment_method:
            return None
        self.payment_method = method
        if self.selected_address is None:
            return None
        return self._resolve_shipping()

    def apply_discount(self, code: str) -> ServiceResult[Discount]:
        result = self._discounts.validate(normalize_code(code or ""))
        if result.success:
            self.discount = result.data
            self.discount_message = result.message
            self._notifier.success(result.message)
        else:
            self.discount = None
            self.discount_message = result.message or INVALID_CODE_MESSAGE
            self._notifier.error(self.discount_message)
        return result

    def remove_discount(self) -> None:
        if self.discount is not None:
            logger.info("Discount removed", code=self.discount.code)
        self.discount = None
        self.discount_message = None

    def set_notes(self, text: str) -> None:
        self.notes = (text or "").strip()

    # -----------------------------------------------------------------
    # Steps
    # -----------------------------------------------------------------
    def proceed(self) -> CheckoutStep:
        target = _NEXT_STEP.get(self.step)
        if target is None:
            raise ValidationError({"step": [f"Cannot continue from {self.step.value}"]})
        if self.step is CheckoutStep.SHIPPING:
            if self.selected_address is None:
                raise ValidationError({"address": ["Please select a delivery address"]})
            if self.resolver.selected is None:
                raise ValidationError({"shipping": ["Please select a shipping option"]})
        self.step = target
        return self.step

    def back(self) -> CheckoutStep:
        target = _PREVIOUS_STEP.get(self.step)
        if target is None:
            raise ValidationError({"step": [f"Cannot go back from {self.step.value}"]})
        self.step = target
        return self.step

    # -----------------------------------------------------------------
    # Placing the order
    # -----------------------------------------------------------------
    def _prefill(self) -> dict[str, str]:
        prefill: dict[str, str] = {}
        if self.selected_address is not None:
            prefill["name"] = self.selected_address.full_name
            if self.selected_address.phone:
                prefill["contact"] = self.selected_address.phone
        user = self._auth.current_user() if self._auth else None
        if user is not None:
            # Profile fields fill what the delivery address leaves blank
            if not prefill.get("name") and user.full_name:
                prefill["name"] = user.full_name
            if "contact" not in prefill and user.phone:
                prefill["contact"] = user.phone
            if user.email:
                prefill["email"] = user.email
        return prefill

    def place_order(self) -> PlaceOrderResult:
        # Routes run in a threadpool; one submission per session at a time
        if not self._placing.acquire(blocking=False):
            return PlaceOrderResult(success=False, message=ORDER_IN_PROGRESS_MESSAGE, step=self.step)
        try:
            return self._place_order()
        finally:
            self._placing.release()

    def _place_order(self) -> PlaceOrderResult:
        if self._bridge.busy:
            return PlaceOrderResult(success=False, message=PAYMENT_IN_PROGRESS_MESSAGE, step=self.step)

        submission = self._submitter.submit(
            self.selected_address,
            self.resolver.selected,
            self._cart.current,
            self.payment_method,
            self.idempotency_key,
            notes=self.notes,
            discount=self.discount,
        )
        if not submission.success:
            # The same key goes out again when the customer retries
            self._notifier.error(submission.message)
            return PlaceOrderResult(success=False, message=submission.message, step=self.step)

        order = submission.order
        self.order_id = order.id
        self.idempotency_key = new_idempotency_key()

        if self.payment_method is PaymentMethod.COD:
            self.step = CheckoutStep.COMPLETE
            cleared = self._cart.clear()
            if not cleared.success:
                logger.warning("Cart could not be cleared after order", order_id=order.id, message=cleared.message)
            self._notifier.success(submission.message)
            return PlaceOrderResult(success=True, message=submission.message, step=self.step, order_id=order.id)

        self.step = CheckoutStep.AWAITING_PAYMENT
        outcome = self._bridge.start(order, prefill=self._prefill())
        if outcome.pending:
            self._notifier.info(outcome.message)
        return PlaceOrderResult(
            success=outcome.state is not PaymentState.GATEWAY_LOAD_FAILED,
            message=outcome.message,
            step=self.step,
            order_id=self.order_id or order.id,
            payment=outcome,
        )

    def _on_payment_outcome(self, outcome: PaymentOutcome) -> None:
        if outcome.state is PaymentState.PAYMENT_SUCCEEDED:
            self.step = CheckoutStep.COMPLETE
        elif outcome.state in (PaymentState.PAYMENT_CANCELLED, PaymentState.GATEWAY_LOAD_FAILED):
            # Back to review with no placed order
            self.step = CheckoutStep.REVIEW
            self.order_id = None
        logger.info("Checkout payment outcome", state=outcome.state.value, step=self.step.value)
