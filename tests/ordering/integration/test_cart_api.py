"""Integration tests for the cart endpoints via TestClient."""

import pytest


@pytest.fixture()
def stocked_cart(mock_backend, cart_item_factory):
    items = [cart_item_factory(11, 7, 1200.0, 2, offer_price=999.0, name="Ring")]
    mock_backend.on("GET", "/cart/", json={"items": items})
    return items


class TestGetCart:
    def test_lines_and_totals(self, client, stocked_cart):
        response = client.get("/cart")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        cart = body["data"]
        assert cart["item_count"] == 2
        assert cart["subtotal"] == 1998.0
        assert cart["items"][0]["line_total"] == 1998.0
        assert response.headers["X-Session-Id"] == "test-session"

    def test_unreachable_backend(self, client, mock_backend):
        mock_backend.fail("GET", "/cart/")

        body = client.get("/cart").json()

        assert body["success"] is False
        assert body["degraded"] is True
        assert body["message"] == "Failed to fetch cart"


class TestCartChanges:
    def test_add_item_updates_count(self, client, mock_backend, cart_item_factory):
        mock_backend.on("POST", "/cart/items", json={"items": [cart_item_factory(11, 7, 500.0, 3)]})

        body = client.post("/cart/items", json={"product_id": 7, "quantity": 3}).json()

        assert body["success"] is True
        assert body["message"] == "Item added to cart successfully"
        assert mock_backend.last_json("POST", "/cart/items") == {"product_id": 7, "quantity": 3}
        assert client.get("/cart/count").json() == {"count": 3}

    def test_quantity_must_be_positive(self, client):
        response = client.post("/cart/items", json={"product_id": 7, "quantity": 0})
        assert response.status_code == 422

    def test_update_quantity_uses_cart_item_id(self, client, mock_backend, stocked_cart):
        mock_backend.on("PATCH", "/cart/items/11", json={})
        client.get("/cart")

        body = client.patch("/cart/items/7", json={"quantity": 5}).json()

        assert body["success"] is True
        assert body["data"]["item_count"] == 5
        assert mock_backend.last_json("PATCH", "/cart/items/11") == {"quantity": 5}

    def test_remove_item(self, client, mock_backend, stocked_cart):
        mock_backend.on("DELETE", "/cart/items/11", status=204)
        client.get("/cart")

        body = client.delete("/cart/items/7").json()

        assert body["data"]["items"] == []
        assert client.get("/cart/count").json() == {"count": 0}

    def test_clear(self, client, mock_backend, stocked_cart):
        mock_backend.on("DELETE", "/cart/", status=204)
        client.get("/cart")

        body = client.delete("/cart").json()

        assert body["success"] is True
        assert body["data"]["item_count"] == 0
