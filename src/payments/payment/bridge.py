"""Gateway bridge: drives one online payment from order creation to settlement.

State Machine:
    IDLE → ORDER_CREATED → GATEWAY_LOADING → GATEWAY_OPEN →
        PAYMENT_SUCCEEDED | PAYMENT_CANCELLED
    GATEWAY_LOADING → GATEWAY_LOAD_FAILED

Credentials are requested only after the order exists, and the widget is
opened only after credentials and script are both in hand. Once the widget
is open the bridge can only react to it: success goes to verification,
dismissal and load failure go to compensation. Nothing is retried; the
customer starts a new online payment instead.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

import structlog

from ordering.order.order import Order
from payments.gateway.port import CheckoutGateway, CheckoutOptions, GatewayPaymentResponse
from payments.payment.credentials import PaymentService
from payments.payment.settlement import REASON_GATEWAY_FAILURE, REASON_USER_CANCELLED, PaymentSettlement
from shared.config import Settings
from shared.exceptions import ValidationError

logger = structlog.get_logger(__name__)


class PaymentState(Enum):
    IDLE = "idle"
    ORDER_CREATED = "order_created"
    GATEWAY_LOADING = "gateway_loading"
    GATEWAY_OPEN = "gateway_open"
    PAYMENT_SUCCEEDED = "payment_succeeded"
    PAYMENT_CANCELLED = "payment_cancelled"
    GATEWAY_LOAD_FAILED = "gateway_load_failed"


_VALID_TRANSITIONS = {
    PaymentState.IDLE: {PaymentState.ORDER_CREATED},
    PaymentState.ORDER_CREATED: {PaymentState.GATEWAY_LOADING},
    PaymentState.GATEWAY_LOADING: {PaymentState.GATEWAY_OPEN, PaymentState.GATEWAY_LOAD_FAILED},
    PaymentState.GATEWAY_OPEN: {PaymentState.PAYMENT_SUCCEEDED, PaymentState.PAYMENT_CANCELLED},
    PaymentState.PAYMENT_SUCCEEDED: set(),  # Terminal
    PaymentState.PAYMENT_CANCELLED: set(),  # Terminal
    PaymentState.GATEWAY_LOAD_FAILED: set(),  # Terminal
}

_TERMINAL_STATES = {
    PaymentState.PAYMENT_SUCCEEDED,
    PaymentState.PAYMENT_CANCELLED,
    PaymentState.GATEWAY_LOAD_FAILED,
}


@dataclass(frozen=True)
class PaymentOutcome:
    state: PaymentState
    order_id: str | None
    message: str
    verified: bool | None = None
    reverted: bool | None = None

    @property
    def paid(self) -> bool:
        return self.state is PaymentState.PAYMENT_SUCCEEDED

    @property
    def pending(self) -> bool:
        return self.state is PaymentState.GATEWAY_OPEN


OutcomeListener = Callable[[PaymentOutcome], None]


class PaymentGatewayBridge:
    def __init__(
        self,
        payments: PaymentService,
        gateway: CheckoutGateway,
        settlement: PaymentSettlement,
        settings: Settings,
    ) -> None:
        self._payments = payments
        self.gateway = gateway
        self._settlement = settlement
        self._settings = settings
        self._listeners: list[OutcomeListener] = []

        self.state = PaymentState.IDLE
        self.order_id: str | None = None
        self.options: CheckoutOptions | None = None
        self.outcome: PaymentOutcome | None = None

    def add_listener(self, listener: OutcomeListener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener) if listener in self._listeners else None

    def _transition(self, target: PaymentState) -> None:
        if target not in _VALID_TRANSITIONS[self.state]:
            raise ValidationError({"payment": [f"Cannot move payment from {self.state.value} to {target.value}"]})
        logger.debug("Payment state change", order_id=self.order_id, source=self.state.value, target=target.value)
        self.state = target

    def _finish(self, outcome: PaymentOutcome) -> PaymentOutcome:
        self.outcome = outcome
        for listener in list(self._listeners):
            listener(outcome)
        return outcome

    @property
    def busy(self) -> bool:
        return self.state not in _TERMINAL_STATES and self.state is not PaymentState.IDLE

    def reset(self) -> None:
        if self.busy:
            raise ValidationError({"payment": ["A payment is already in progress"]})
        self.state = PaymentState.IDLE
        self.order_id = None
        self.options = None
        self.outcome = None

    def start(self, order: Order, prefill: dict[str, str] | None = None) -> PaymentOutcome:
        """Request credentials for a freshly created online order and open the widget."""
        if self.state in _TERMINAL_STATES:
            self.reset()
        self._transition(PaymentState.ORDER_CREATED)
        self.order_id = order.id

        # The order exists from here on, so every way out must settle it
        try:
            options = self._prepare(order, prefill)
        except Exception as e:
            logger.error("Payment setup failed", order_id=order.id, error=str(e))
            options = None
        if options is None:
            return self._load_failed()

        self.options = options
        self._transition(PaymentState.GATEWAY_OPEN)
        outcome = self._finish(
            PaymentOutcome(
                state=PaymentState.GATEWAY_OPEN,
                order_id=order.id,
                message="Order created! Opening payment gateway...",
            )
        )
        self.gateway.open(self.options, on_success=self.handle_success, on_dismiss=self.handle_dismiss)
        # The widget may already have reported back
        return self.outcome or outcome

    def _prepare(self, order: Order, prefill: dict[str, str] | None) -> CheckoutOptions | None:
        credentials = self._payments.create_payment(order.id)
        self._transition(PaymentState.GATEWAY_LOADING)

        if not credentials.success or not credentials.data.complete:
            logger.error("Payment credentials missing", order_id=order.id, message=credentials.message)
            return None

        if not self.gateway.load_script():
            return None

        creds = credentials.data
        return CheckoutOptions(
            key=creds.key_id,
            amount=creds.amount,
            currency=self._settings.currency,
            name=self._settings.store_name,
            description=f"Order #{order.id}",
            order_id=creds.razorpay_order_id,
            prefill=dict(prefill or {}),
            theme={"color": self._settings.theme_color},
        )

    def _load_failed(self) -> PaymentOutcome:
        if self.state is PaymentState.ORDER_CREATED:
            self._transition(PaymentState.GATEWAY_LOADING)
        self._transition(PaymentState.GATEWAY_LOAD_FAILED)
        compensation = self._settlement.compensate(self.order_id, REASON_GATEWAY_FAILURE)
        return self._finish(
            PaymentOutcome(
                state=PaymentState.GATEWAY_LOAD_FAILED,
                order_id=self.order_id,
                message=compensation.message,
                reverted=compensation.reverted,
            )
        )

    def _accepts_callback(self, callback: str) -> bool:
        if self.state is PaymentState.GATEWAY_OPEN:
            return True
        logger.warning("Ignoring gateway callback", callback=callback, state=self.state.value, order_id=self.order_id)
        return False

    def handle_success(self, response: GatewayPaymentResponse) -> PaymentOutcome | None:
        if not self._accepts_callback("success"):
            return self.outcome
        self._transition(PaymentState.PAYMENT_SUCCEEDED)
        verification = self._settlement.verify(self.order_id, response)
        return self._finish(
            PaymentOutcome(
                state=PaymentState.PAYMENT_SUCCEEDED,
                order_id=self.order_id,
                message=verification.message,
                verified=verification.verified,
            )
        )

    def handle_dismiss(self) -> PaymentOutcome | None:
        if not self._accepts_callback("dismiss"):
            return self.outcome
        self._transition(PaymentState.PAYMENT_CANCELLED)
        compensation = self._settlement.compensate(self.order_id, REASON_USER_CANCELLED)
        return self._finish(
            PaymentOutcome(
                state=PaymentState.PAYMENT_CANCELLED,
                order_id=self.order_id,
                message=compensation.message,
                reverted=compensation.reverted,
            )
        )
