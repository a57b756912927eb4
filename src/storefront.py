"""Composition root: one ``Storefront`` per browser session.

Everything that the browser would hold for a visitor (client store, cart
count emitter, toasts, the open checkout and the gateway widget) lives on
the session's ``Storefront``. ``SessionRegistry`` hands them out by the
``X-Session-Id`` header.
"""

import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from uuid import uuid4

import httpx
import structlog
from fastapi import Header, Request, Response

from catalogue.product.product import ProductService
from dashboard.admin.orders import DashboardService
from identity.customer.account import AuthService
from identity.customer.addresses import AddressBook
from ordering.cart.cart import CartService
from ordering.checkout.discounts import DiscountValidator
from ordering.checkout.session import CheckoutSession
from ordering.checkout.shipping import ShippingRateResolver
from ordering.checkout.submission import OrderSubmitter
from ordering.order.order import OrderService
from payments.gateway import make_gateway
from payments.payment.bridge import PaymentGatewayBridge
from payments.payment.credentials import PaymentService
from payments.payment.settlement import PaymentSettlement
from shared.config import Settings
from shared.events import CartCountEmitter
from shared.http import BackendClient
from shared.notifications import Notifier
from shared.storage import ClientStore

logger = structlog.get_logger(__name__)

SESSION_HEADER = "X-Session-Id"


class Storefront:
    def __init__(
        self,
        settings: Settings,
        session_id: str | None = None,
        transport: httpx.BaseTransport | None = None,
        store: ClientStore | None = None,
    ) -> None:
        self.session_id = session_id or uuid4().hex
        self.settings = settings
        self.store = store or ClientStore()
        self.cart_count = CartCountEmitter()
        self.notifier = Notifier()

        self.backend = BackendClient(settings, self.store, transport=transport)
        self.auth = AuthService(self.backend, self.store)
        self.backend.set_session_expired_callback(self.auth.handle_session_expiry)

        self.products = ProductService(self.backend)
        self.addresses = AddressBook(self.backend)
        self.cart = CartService(self.backend, self.store, self.cart_count)
        self.orders = OrderService(self.backend)
        self.payments = PaymentService(self.backend, self.store)
        self.dashboard = DashboardService(self.backend)

        self.gateway = make_gateway(settings)
        self.settlement = PaymentSettlement(self.payments, self.orders, self.cart, self.notifier)
        self.bridge = PaymentGatewayBridge(self.payments, self.gateway, self.settlement, settings)
        self.checkout = CheckoutSession(
            settings,
            cart=self.cart,
            addresses=self.addresses,
            resolver=ShippingRateResolver(self.backend, settings.free_shipping_threshold),
            discounts=DiscountValidator(self.backend),
            submitter=OrderSubmitter(self.orders, settings.free_shipping_threshold),
            bridge=self.bridge,
            notifier=self.notifier,
            auth=self.auth,
        )

    def close(self) -> None:
        self.checkout.close()
        self.cart_count.close()
        self.backend.close()
        logger.debug("Storefront closed", session_id=self.session_id)


class SessionRegistry:
    """Live storefronts keyed by session id, least recently used first.

    A storefront idle for longer than ``session_idle_ttl`` is closed, and past
    ``max_sessions`` the least recently used ones go. A storefront with a
    payment in flight is never evicted; its widget callback must still find it.
    """

    def __init__(
        self,
        settings: Settings,
        transport: httpx.BaseTransport | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._settings = settings
        self._transport = transport
        self._clock = clock
        self._sessions: OrderedDict[str, Storefront] = OrderedDict()
        self._last_seen: dict[str, float] = {}
        self._lock = threading.Lock()

    def get_or_create(self, session_id: str | None) -> Storefront:
        now = self._clock()
        created = False
        with self._lock:
            evicted = self._expire(now)
            storefront = self._sessions.get(session_id) if session_id else None
            if storefront is None:
                storefront = Storefront(self._settings, session_id=session_id, transport=self._transport)
                self._sessions[storefront.session_id] = storefront
                created = True
            self._sessions.move_to_end(storefront.session_id)
            self._last_seen[storefront.session_id] = now
            evicted += self._trim()

        for stale in evicted:
            stale.close()
        if created:
            logger.info("Storefront session started", session_id=storefront.session_id, live=len(self))
        return storefront

    def _pop(self, session_id: str) -> Storefront | None:
        self._last_seen.pop(session_id, None)
        return self._sessions.pop(session_id, None)

    def _expire(self, now: float) -> list[Storefront]:
        expired = []
        for session_id, storefront in self._sessions.items():
            if now - self._last_seen[session_id] <= self._settings.session_idle_ttl:
                break
            if not storefront.bridge.busy:
                expired.append(session_id)
        if expired:
            logger.info("Expiring idle storefront sessions", count=len(expired))
        return [self._pop(session_id) for session_id in expired]

    def _trim(self) -> list[Storefront]:
        evicted: list[Storefront] = []
        # The most recent session is the caller's, so it is never a candidate
        for session_id in list(self._sessions)[:-1]:
            if len(self._sessions) <= self._settings.max_sessions:
                break
            if self._sessions[session_id].bridge.busy:
                continue
            logger.info("Evicting least recently used storefront", session_id=session_id)
            evicted.append(self._pop(session_id))
        return evicted

    def end(self, session_id: str) -> None:
        with self._lock:
            storefront = self._pop(session_id)
        if storefront is not None:
            storefront.close()

    def close(self) -> None:
        with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
            self._last_seen.clear()
        for storefront in sessions:
            storefront.close()

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)


def current_storefront(
    request: Request,
    response: Response,
    x_session_id: str | None = Header(default=None),
) -> Storefront:
    """FastAPI dependency resolving the caller's storefront, starting one if needed."""
    registry: SessionRegistry = request.app.state.sessions
    storefront = registry.get_or_create(x_session_id)
    response.headers[SESSION_HEADER] = storefront.session_id
    return storefront
