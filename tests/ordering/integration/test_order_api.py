"""Integration tests for order history endpoints via TestClient."""


class TestOrderHistory:
    def test_list(self, client, mock_backend, order_factory):
        mock_backend.on("GET", "/orders/me", json=[order_factory(501), order_factory(502, "online")])

        body = client.get("/orders", params={"skip": 0, "limit": 10}).json()

        assert [order["id"] for order in body["data"]] == ["501", "502"]
        assert body["data"][0]["status_label"] == "Pending"
        assert body["data"][1]["payment_method_label"] == "Online Payment"
        request = mock_backend.calls("GET", "/orders/me")[0]
        assert request.url.params["limit"] == "10"

    def test_missing_order(self, client, mock_backend):
        mock_backend.on("GET", "/orders/404", status=404, json={"detail": "Order not found"})

        body = client.get("/orders/404").json()

        assert body["success"] is False
        assert body["message"] == "Order not found"


class TestCancel:
    def test_pending_order(self, client, mock_backend, order_factory):
        mock_backend.on("GET", "/orders/501", json=order_factory(501))
        mock_backend.on("PATCH", "/orders/501/cancel", json={})

        body = client.post("/orders/501/cancel").json()

        assert body["success"] is True
        assert body["message"] == "Order cancelled successfully"
        assert mock_backend.last_json("PATCH", "/orders/501/cancel") == {"status": "cancelled"}

    def test_shipped_order_is_refused_locally(self, client, mock_backend, order_factory):
        mock_backend.on("GET", "/orders/501", json=order_factory(501, order_status="shipped"))

        body = client.post("/orders/501/cancel").json()

        assert body["success"] is False
        assert not mock_backend.called("PATCH", "/orders/501/cancel")


class TestReturn:
    def test_delivered_order(self, client, mock_backend, order_factory):
        mock_backend.on("GET", "/orders/501", json=order_factory(501, order_status="delivered"))
        mock_backend.on("PATCH", "/orders/501/return", json={})

        body = client.post("/orders/501/return", json={"reason": "  Wrong size  "}).json()

        assert body["success"] is True
        assert mock_backend.last_json("PATCH", "/orders/501/return") == {
            "return_request": True,
            "return_reason": "Wrong size",
        }

    def test_reason_required(self, client):
        assert client.post("/orders/501/return", json={"reason": ""}).status_code == 422
