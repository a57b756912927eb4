"""Integration tests for the catalogue endpoints via TestClient."""

from catalogue.product.product import FALLBACK_IMAGE

RING = {
    "id": 7,
    "name": "Solitaire Ring",
    "slug": "solitaire-ring",
    "price": 1200,
    "offer_price": 999,
    "stock": 4,
    "image_url": "",
}


class TestProducts:
    def test_listing(self, client, mock_backend):
        mock_backend.on("GET", "/products", json=[RING])

        body = client.get("/products", params={"category_id": 2}).json()

        (product,) = body["data"]
        assert product["effective_price"] == 999
        assert product["in_stock"] is True
        assert product["image_url"] == FALLBACK_IMAGE
        assert mock_backend.calls("GET", "/products")[0].url.params["category_id"] == "2"

    def test_search(self, client, mock_backend):
        mock_backend.on("GET", "/products", json={"items": [RING]})

        body = client.get("/products", params={"search": " ring "}).json()

        assert [product["slug"] for product in body["data"]] == ["solitaire-ring"]
        assert mock_backend.calls("GET", "/products")[0].url.params["search"] == "ring"

    def test_by_slug(self, client, mock_backend):
        mock_backend.on("GET", "/products/slug/solitaire-ring", json=RING)
        body = client.get("/products/solitaire-ring").json()
        assert body["data"]["name"] == "Solitaire Ring"

    def test_unknown_slug(self, client):
        body = client.get("/products/missing").json()
        assert body["success"] is False


class TestCategories:
    def test_listing(self, client, mock_backend):
        mock_backend.on("GET", "/categories", json=[{"id": 2, "name": "Rings", "slug": "rings"}])
        body = client.get("/categories").json()
        assert body["data"] == [{"id": 2, "name": "Rings", "slug": "rings", "image_url": None}]
