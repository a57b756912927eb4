import base64
import json
from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient

from app import create_app
from payments.gateway import reset_gateway_factory, set_gateway_factory
from payments.gateway.fake_adapter import FakeCheckoutGateway
from shared.config import Settings
from shared.events import CartCountEmitter
from shared.http import BackendClient
from shared.notifications import Notifier
from shared.storage import ClientStore
from storefront import SESSION_HEADER, Storefront


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        # Get the test file path relative to the tests directory
        test_path = Path(item.fspath)

        # Mark tests based on their directory
        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/bdd/" in str(test_path):
            item.add_marker(pytest.mark.bdd)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


# ---------------------------------------------------------------------------
# Fake backend
# ---------------------------------------------------------------------------
class MockBackend:
    """Routing table served through ``httpx.MockTransport``.

    Routes are keyed by method and path relative to ``/api/v1``. Unknown
    routes answer 404 so a test notices calls it did not expect.
    """

    def __init__(self) -> None:
        self.routes = {}
        self.requests: list[httpx.Request] = []

    def on(self, method, path, json=None, status=200, handler=None):
        if handler is None:

            def handler(request, _status=status, _json=json):
                return httpx.Response(_status, json=_json)

        self.routes[(method.upper(), path)] = handler

    def fail(self, method, path, exc_type=httpx.ConnectError):
        def handler(request):
            raise exc_type("backend unreachable", request=request)

        self.routes[(method.upper(), path)] = handler

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/api/v1")
        handler = self.routes.get((request.method, path))
        if handler is None:
            return httpx.Response(404, json={"detail": f"No route for {request.method} {path}"})
        return handler(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def calls(self, method, path) -> list[httpx.Request]:
        return [
            request
            for request in self.requests
            if request.method == method.upper() and request.url.path.removeprefix("/api/v1") == path
        ]

    def called(self, method, path) -> bool:
        return bool(self.calls(method, path))

    def last_json(self, method, path):
        return json.loads(self.calls(method, path)[-1].content)


def make_token(payload: dict) -> str:
    def segment(data: dict) -> str:
        return base64.urlsafe_b64encode(json.dumps(data).encode()).decode().rstrip("=")

    return f"{segment({'alg': 'HS256', 'typ': 'JWT'})}.{segment(payload)}.signature"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def settings():
    return Settings(backend_base_url="http://backend.test", environment="test")


@pytest.fixture()
def mock_backend():
    return MockBackend()


@pytest.fixture()
def store():
    return ClientStore()


@pytest.fixture()
def emitter():
    return CartCountEmitter()


@pytest.fixture()
def notifier():
    return Notifier()


@pytest.fixture()
def backend(settings, store, mock_backend):
    client = BackendClient(settings, store, transport=mock_backend.transport)
    yield client
    client.close()


@pytest.fixture()
def storefront(settings, mock_backend, fake_gateway_factory):
    """A visitor session wired to the mock backend and a fake gateway."""
    session = Storefront(settings, transport=mock_backend.transport)
    yield session
    session.close()


@pytest.fixture()
def token_for():
    """Build an unsigned JWT carrying the given claims."""
    return make_token


@pytest.fixture(autouse=True)
def fake_gateway_factory():
    """Every storefront built during a test gets a fake gateway."""
    set_gateway_factory(lambda settings: FakeCheckoutGateway())
    yield
    reset_gateway_factory()


# ---------------------------------------------------------------------------
# Backend payloads
# ---------------------------------------------------------------------------

def cart_item(item_id, product_id, price, quantity, offer_price=None, name="Item"):
    return {
        "id": item_id,
        "quantity": quantity,
        "product": {"id": product_id, "name": name, "price": price, "offer_price": offer_price},
    }


def address_payload(address_id=3, is_default=False, **overrides):
    return {
        "id": address_id,
        "first_name": "Asha",
        "last_name": "Rao",
        "address_line_1": "12 MG Road",
        "city": "Bengaluru",
        "state": "Karnataka",
        "postal_code": "560001",
        "country": "India",
        "phone_number": "9876543210",
        "address_type": "home",
        "is_default": is_default,
        **overrides,
    }


def order_payload(order_id=501, payment_method="COD", **overrides):
    return {
        "id": order_id,
        "user_id": 42,
        "total_amount": 1000.0,
        "order_status": "pending",
        "status": "pending",
        "payment_method": payment_method,
        "items": [],
        **overrides,
    }


@pytest.fixture()
def cart_item_factory():
    return cart_item


@pytest.fixture()
def address_factory():
    return address_payload


@pytest.fixture()
def order_factory():
    return order_payload


DEFAULT_RATES = [
    {"courier_id": 1, "courier_name": "Bluedart Air", "rate": 120, "etd": "2 days"},
    {"courier_id": 2, "courier_name": "Delhivery Surface", "rate": 60, "etd": "5 days"},
]

PAYMENT_CREDENTIALS = {"razorpay_order_id": "order_R1", "amount": 95000, "key_id": "rzp_test_key"}


@pytest.fixture()
def stock_checkout(mock_backend):
    """Route the backend calls a checkout makes, for a one-line cart."""

    def setup(subtotal=1000.0, quantity=1, rates=None, addresses=None):
        mock_backend.on(
            "GET",
            "/cart/",
            json={"items": [cart_item(11, 7, subtotal / quantity, quantity, name="Ring")]},
        )
        mock_backend.on(
            "GET",
            "/me/addresses",
            json=addresses if addresses is not None else [address_payload(3, is_default=True), address_payload(4)],
        )
        mock_backend.on("POST", "/shipping/rates", json=rates if rates is not None else DEFAULT_RATES)
        mock_backend.on("DELETE", "/cart/", status=204)
        mock_backend.on("POST", "/orders/cod", status=201, json=order_payload(501, "COD"))
        mock_backend.on("POST", "/orders/online", status=201, json=order_payload(502, "online"))
        mock_backend.on("POST", "/payments/create", json=PAYMENT_CREDENTIALS)
        mock_backend.on("POST", "/payments/verify", json={"status": "success", "order_id": 502})
        mock_backend.on(
            "POST",
            "/orders/revert-delete",
            json={"deleted": True, "restored_items": [{"product_id": 7, "quantity": quantity}]},
        )

    return setup


# ---------------------------------------------------------------------------
# API
# ---------------------------------------------------------------------------
API_SESSION = "test-session"


@pytest.fixture()
def app(settings, mock_backend, fake_gateway_factory):
    return create_app(settings, transport=mock_backend.transport)


@pytest.fixture()
def client(app):
    """Test client speaking for a single browser session."""
    with TestClient(app, headers={SESSION_HEADER: API_SESSION}) as test_client:
        yield test_client


@pytest.fixture()
def session_storefront(app, client):
    """The storefront behind ``client``'s session."""
    return app.state.sessions.get_or_create(API_SESSION)
