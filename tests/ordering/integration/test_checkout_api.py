"""Integration tests for the checkout endpoints via TestClient."""

import pytest


@pytest.fixture()
def loaded(client, stock_checkout):
    stock_checkout(subtotal=450.0)
    response = client.post("/checkout/load")
    assert response.status_code == 200
    return response.json()


class TestCheckoutState:
    def test_load_returns_page_state(self, loaded):
        state = loaded["data"]
        assert state["step"] == "shipping"
        assert state["selected_address_id"] == 3
        assert [address["id"] for address in state["addresses"]] == [3, 4]
        assert state["selected_rate_id"] == 2
        assert state["payment_method"] == "COD"
        assert state["summary"]["subtotal"] == 450.0
        assert state["summary"]["shipping"] == 60.0
        assert state["summary"]["total"] == 510.0

    def test_state_is_kept_per_session(self, client, loaded):
        client.post("/checkout/shipping/rate", json={"rate_id": 1})

        state = client.get("/checkout").json()["data"]

        assert state["selected_rate_id"] == 1
        assert state["summary"]["shipping"] == 120.0

    def test_other_sessions_start_fresh(self, client, loaded):
        other = client.get("/checkout", headers={"X-Session-Id": "another-browser"})

        assert other.headers["X-Session-Id"] == "another-browser"
        assert other.json()["data"]["selected_address_id"] is None

    def test_online_payment_discount(self, client, loaded):
        state = client.post("/checkout/payment-method", json={"method": "online"}).json()["data"]
        assert state["payment_method"] == "online"
        assert state["summary"]["online_discount"] == 22.5
        assert state["summary"]["total"] == 487.5


class TestValidation:
    def test_unknown_address(self, client, loaded):
        response = client.post("/checkout/address", json={"address_id": "addr-99"})

        assert response.status_code == 422
        assert response.json()["detail"] == "Address 99 not found"

    def test_unknown_payment_method(self, client, loaded):
        response = client.post("/checkout/payment-method", json={"method": "cheque"})
        assert response.status_code == 422

    def test_cannot_go_back_from_shipping(self, client, loaded):
        assert client.post("/checkout/back").status_code == 422


class TestDiscountEndpoints:
    def test_apply_and_remove(self, client, mock_backend, loaded):
        mock_backend.on("POST", "/discounts/validate", json={"code": "SAVE10", "type": "percentage", "value": 10})

        applied = client.post("/checkout/discount", json={"code": "save10"}).json()

        assert applied["success"] is True
        assert applied["data"]["discount"] == {"code": "SAVE10", "type": "percentage", "value": 10.0}
        assert applied["data"]["summary"]["discount"] == 45.0
        assert applied["notifications"] == [
            {"level": "success", "message": "Discount code 'SAVE10' applied successfully!"}
        ]

        removed = client.delete("/checkout/discount").json()
        assert removed["data"]["discount"] is None
        assert removed["data"]["summary"]["discount"] == 0

    def test_rejected_code_still_returns_state(self, client, mock_backend, loaded):
        mock_backend.on("POST", "/discounts/validate", status=404, json={"detail": "Invalid discount code"})

        body = client.post("/checkout/discount", json={"code": "NOPE"}).json()

        assert body["success"] is False
        assert body["data"]["discount_message"] == "Invalid discount code"


class TestPlaceOrder:
    def test_cash_on_delivery(self, client, mock_backend, loaded):
        client.put("/checkout/notes", json={"notes": "Leave with the guard"})

        body = client.post("/checkout/place-order").json()

        assert body["success"] is True
        assert body["data"] == {
            "step": "complete",
            "order_id": "501",
            "payment_state": None,
            "gateway_options": None,
        }
        assert {"level": "success", "message": "Order placed successfully!"} in body["notifications"]
        assert mock_backend.last_json("POST", "/orders/cod")["order_notes"] == "Leave with the guard"

    def test_online_hands_back_widget_options(self, client, loaded):
        client.post("/checkout/payment-method", json={"method": "online"})

        body = client.post("/checkout/place-order").json()

        assert body["success"] is True
        assert body["data"]["step"] == "awaiting_payment"
        assert body["data"]["payment_state"] == "gateway_open"
        options = body["data"]["gateway_options"]
        assert options["key"] == "rzp_test_key"
        assert options["order_id"] == "order_R1"
        assert options["description"] == "Order #502"

    def test_refused_order_keeps_step(self, client, stock_checkout):
        stock_checkout(addresses=[])
        client.post("/checkout/load")

        body = client.post("/checkout/place-order").json()

        assert body["success"] is False
        assert body["message"] == "Please select a delivery address"
        assert body["data"]["step"] == "shipping"
