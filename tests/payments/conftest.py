import pytest

from ordering.order.order import Order

CREDENTIALS = {"razorpay_order_id": "order_R1", "amount": 95000, "key_id": "rzp_test_key"}


@pytest.fixture()
def online_order():
    return Order.model_validate({"id": 502, "payment_method": "online", "order_status": "pending"})


@pytest.fixture()
def payment_backend(mock_backend):
    """Backend routes an online payment touches, all answering happily."""
    mock_backend.on("POST", "/payments/create", json=CREDENTIALS)
    mock_backend.on("POST", "/payments/verify", json={"status": "success", "order_id": 502})
    mock_backend.on("POST", "/orders/revert-delete", json={"deleted": True, "restored_items": []})
    mock_backend.on("GET", "/cart/", json={"items": []})
    mock_backend.on("DELETE", "/cart/", status=204)
    return mock_backend


@pytest.fixture()
def gateway(storefront):
    return storefront.gateway


@pytest.fixture()
def bridge(storefront):
    return storefront.bridge
