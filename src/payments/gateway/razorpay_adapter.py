"""Razorpay hosted checkout adapter.

Loading the script means confirming the checkout.js bundle is reachable on
the gateway CDN, since the page includes it by URL. The outcome is
remembered so later loads are free.
"""

import httpx
import structlog

from payments.gateway.port import CheckoutGateway

logger = structlog.get_logger(__name__)


class RazorpayCheckout(CheckoutGateway):
    def __init__(self, script_url: str, transport: httpx.BaseTransport | None = None) -> None:
        super().__init__()
        self.script_url = script_url
        self.loaded = False
        self._transport = transport

    def load_script(self) -> bool:
        if self.loaded:
            return True
        try:
            with httpx.Client(transport=self._transport, timeout=10.0) as client:
                response = client.head(self.script_url, follow_redirects=True)
        except httpx.HTTPError as exc:
            logger.error("Checkout script unreachable", url=self.script_url, error=str(exc))
            return False
        if response.is_error:
            logger.error("Checkout script unavailable", url=self.script_url, status_code=response.status_code)
            return False
        self.loaded = True
        return True
