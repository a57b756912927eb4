"""Checkout gateway factory.

Each browser session gets its own gateway instance because the open
widget is per-session state. ``set_gateway_factory()`` swaps the adapter:
- RazorpayCheckout by default
- FakeCheckoutGateway for development and testing
"""

from collections.abc import Callable

from payments.gateway.fake_adapter import FakeCheckoutGateway
from payments.gateway.port import CheckoutGateway
from payments.gateway.razorpay_adapter import RazorpayCheckout
from shared.config import Settings

GatewayFactory = Callable[[Settings], CheckoutGateway]

_current_factory: GatewayFactory | None = None


def _default_factory(settings: Settings) -> CheckoutGateway:
    return RazorpayCheckout(settings.gateway_script_url)


def make_gateway(settings: Settings) -> CheckoutGateway:
    """Build a gateway for a new session with the active factory."""
    factory = _current_factory or _default_factory
    return factory(settings)


def set_gateway_factory(factory: GatewayFactory) -> None:
    """Override how session gateways are built (useful for tests)."""
    global _current_factory
    _current_factory = factory


def reset_gateway_factory() -> None:
    """Reset to the default factory."""
    global _current_factory
    _current_factory = None


__all__ = [
    "CheckoutGateway",
    "FakeCheckoutGateway",
    "RazorpayCheckout",
    "make_gateway",
    "reset_gateway_factory",
    "set_gateway_factory",
]
