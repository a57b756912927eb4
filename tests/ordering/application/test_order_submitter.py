import pytest

from identity.customer.addresses import Address
from ordering.cart.cart import CartLine, CartSummary
from ordering.checkout.pricing import PaymentMethod
from ordering.checkout.shipping import ShippingRate
from ordering.checkout.submission import OrderSubmitter

RATE = ShippingRate(id=2, name="Delhivery Surface", price=60.0)
CART = CartSummary(items=[CartLine(product_id=7, name="Ring", unit_price=450.0, quantity=1)])


@pytest.fixture()
def submitter(orders):
    return OrderSubmitter(orders)


@pytest.fixture()
def address(address_factory):
    return Address.from_api(address_factory(3))


def test_refuses_without_network_call(submitter, mock_backend):
    result = submitter.submit(None, RATE, CART, PaymentMethod.COD, "key-1")
    assert not result.success
    assert result.refused
    assert result.message == "Please select a delivery address"
    assert mock_backend.requests == []


def test_cod_goes_to_cod_endpoint(submitter, mock_backend, address, order_factory):
    mock_backend.on("POST", "/orders/cod", status=201, json=order_factory(501))

    result = submitter.submit(address, RATE, CART, PaymentMethod.COD, "key-1", notes="Leave at door")

    assert result.success
    assert result.order.id == "501"
    body = mock_backend.last_json("POST", "/orders/cod")
    assert body["payment_method"] == "COD"
    assert body["shipping_address_id"] == 3
    assert body["delivery_cost"] == 60.0
    assert body["order_notes"] == "Leave at door"
    assert not mock_backend.called("POST", "/orders/online")


def test_online_goes_to_online_endpoint(submitter, mock_backend, address, order_factory):
    mock_backend.on("POST", "/orders/online", status=201, json=order_factory(502, "online"))

    result = submitter.submit(address, RATE, CART, PaymentMethod.ONLINE, "key-1")

    assert result.success
    assert mock_backend.last_json("POST", "/orders/online")["payment_method"] == "online"
    assert not mock_backend.called("POST", "/orders/cod")


def test_backend_failure_message(submitter, mock_backend, address):
    mock_backend.on("POST", "/orders/cod", status=409, json={"detail": "Ring is out of stock"})
    result = submitter.submit(address, RATE, CART, PaymentMethod.COD, "key-1")
    assert not result.success
    assert not result.refused
    assert result.message == "Ring is out of stock"


def test_generic_failure_message(submitter, mock_backend, address):
    mock_backend.fail("POST", "/orders/cod")
    result = submitter.submit(address, RATE, CART, PaymentMethod.COD, "key-1")
    assert result.message == "Failed to create order"
