import pytest

from catalogue.product.product import ProductService


@pytest.fixture()
def products(backend):
    return ProductService(backend)


RING = {"id": 7, "name": "Solitaire Ring", "slug": "solitaire-ring", "price": 2499.0, "stock": 3}


class TestListProducts:
    def test_passes_paging_and_category(self, products, mock_backend):
        mock_backend.on("GET", "/products", json=[RING])
        result = products.list_products(skip=20, limit=10, category_id=4)

        assert result.success
        assert result.data[0].name == "Solitaire Ring"
        params = mock_backend.requests[-1].url.params
        assert params["skip"] == "20"
        assert params["limit"] == "10"
        assert params["category_id"] == "4"

    def test_accepts_wrapped_listing(self, products, mock_backend):
        mock_backend.on("GET", "/products", json={"items": [RING], "total": 1})
        assert [product.id for product in products.list_products().data] == [7]

    def test_unreachable_backend(self, products, mock_backend):
        mock_backend.fail("GET", "/products")
        result = products.list_products()
        assert result.degraded
        assert result.message == "Failed to fetch products"


class TestLookup:
    def test_get_by_slug(self, products, mock_backend):
        mock_backend.on("GET", "/products/slug/solitaire-ring", json=RING)
        assert products.get_by_slug("solitaire-ring").data.id == 7

    def test_missing_slug(self, products, mock_backend):
        mock_backend.on("GET", "/products/slug/nothing", status=404, json={"detail": "Product not found"})
        result = products.get_by_slug("nothing")
        assert not result.success
        assert result.message == "Product not found"


class TestSearch:
    def test_blank_query_makes_no_call(self, products, mock_backend):
        result = products.search("   ")
        assert result.success
        assert result.data == []
        assert mock_backend.requests == []

    def test_query_is_trimmed(self, products, mock_backend):
        mock_backend.on("GET", "/products", json=[RING])
        products.search("  ring ")
        assert mock_backend.requests[-1].url.params["search"] == "ring"


def test_list_categories(products, mock_backend):
    mock_backend.on("GET", "/categories", json=[{"id": 1, "name": "Rings", "slug": "rings"}])
    result = products.list_categories()
    assert result.data[0].name == "Rings"
