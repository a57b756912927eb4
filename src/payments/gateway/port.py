"""Hosted checkout gateway port (abstract interface).

The gateway widget is the only UI the storefront does not own while a
payment is open. Adapters load the gateway's checkout script and open the
widget; the widget reports back through ``complete()`` or ``dismiss()``,
which call the handlers registered by ``open()``.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import structlog

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class GatewayPaymentResponse:
    """What the widget hands to the success handler."""

    razorpay_payment_id: str
    razorpay_order_id: str
    razorpay_signature: str


@dataclass(frozen=True)
class CheckoutOptions:
    """Options the page passes to the gateway widget constructor."""

    key: str
    amount: int
    currency: str
    name: str
    description: str
    order_id: str
    prefill: dict[str, str] = field(default_factory=dict)
    theme: dict[str, str] = field(default_factory=dict)

    def to_widget(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "amount": self.amount,
            "currency": self.currency,
            "name": self.name,
            "description": self.description,
            "order_id": self.order_id,
            "prefill": dict(self.prefill),
            "theme": dict(self.theme),
        }


SuccessHandler = Callable[[GatewayPaymentResponse], Any]
DismissHandler = Callable[[], Any]


@dataclass
class OpenWidget:
    options: CheckoutOptions
    on_success: SuccessHandler
    on_dismiss: DismissHandler


class CheckoutGateway(ABC):
    """Abstract hosted-checkout gateway."""

    def __init__(self) -> None:
        self.widget: OpenWidget | None = None

    @abstractmethod
    def load_script(self) -> bool:
        """Make the checkout script available. Calling it again once loaded is a no-op success."""
        ...

    def open(self, options: CheckoutOptions, on_success: SuccessHandler, on_dismiss: DismissHandler) -> None:
        """Open the hosted widget. Callbacks arrive later, outside this call."""
        self.widget = OpenWidget(options=options, on_success=on_success, on_dismiss=on_dismiss)
        logger.info("Gateway widget opened", gateway_order_id=options.order_id, amount=options.amount)

    @property
    def is_open(self) -> bool:
        return self.widget is not None

    def complete(self, response: GatewayPaymentResponse) -> Any:
        """The widget reported a successful payment."""
        widget = self._take_widget("complete")
        if widget is None:
            return None
        return widget.on_success(response)

    def dismiss(self) -> Any:
        """The widget was closed without paying."""
        widget = self._take_widget("dismiss")
        if widget is None:
            return None
        return widget.on_dismiss()

    def _take_widget(self, action: str) -> OpenWidget | None:
        widget, self.widget = self.widget, None
        if widget is None:
            logger.warning("Gateway callback without an open widget", action=action)
        return widget
