"""Configurable fake checkout gateway for development and testing.

Simulates the hosted widget without any external calls. Tests drive the
user's side through ``pay()`` and ``dismiss()``.
"""

from uuid import uuid4

from payments.gateway.port import CheckoutGateway, CheckoutOptions, GatewayPaymentResponse


class FakeCheckoutGateway(CheckoutGateway):
    """Configurable fake gateway."""

    def __init__(self) -> None:
        super().__init__()
        self.script_available: bool = True
        self.loaded: bool = False
        self.calls: list[dict] = []
        self.opened: list[CheckoutOptions] = []

    def configure(self, script_available: bool) -> None:
        """Configure whether the checkout script can be loaded."""
        self.script_available = script_available

    def load_script(self) -> bool:
        self.calls.append({"method": "load_script", "already_loaded": self.loaded})
        if self.loaded:
            return True
        self.loaded = self.script_available
        return self.loaded

    def open(self, options, on_success, on_dismiss) -> None:
        self.calls.append({"method": "open", "order_id": options.order_id, "amount": options.amount})
        self.opened.append(options)
        super().open(options, on_success, on_dismiss)

    def pay(self, signature: str = "test-signature"):
        """Simulate the customer completing payment in the widget."""
        options = self.widget.options if self.widget else None
        response = GatewayPaymentResponse(
            razorpay_payment_id=f"pay_fake_{uuid4().hex[:12]}",
            razorpay_order_id=options.order_id if options else "",
            razorpay_signature=signature,
        )
        return self.complete(response)
