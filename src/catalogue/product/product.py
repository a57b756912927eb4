"""Product catalogue client: listing, lookup by slug, search and categories."""

from typing import Any

import structlog
from pydantic import BaseModel, field_validator

from shared.http import BackendClient
from shared.result import ServiceResult

logger = structlog.get_logger(__name__)

FALLBACK_IMAGE = "https://vauria-images.blr1.cdn.digitaloceanspaces.com/CHAINS.JPG"


def _usable_image(url: Any) -> bool:
    text = str(url or "").strip()
    return bool(text) and text.lower() != "string"


class Product(BaseModel):
    id: int
    name: str = ""
    slug: str = ""
    description: str | None = None
    price: float = 0.0
    offer_price: float | None = None
    stock: int = 0
    material: str | None = None
    weight: float | None = None
    is_active: bool = True
    featured: bool = False
    category_id: int | None = None
    image_url: str = FALLBACK_IMAGE
    images: list[str] = []

    @field_validator("image_url", mode="before")
    @classmethod
    def _fallback_image(cls, value):
        return value if _usable_image(value) else FALLBACK_IMAGE

    @field_validator("weight", "offer_price", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        return None if value in ("", None) else value

    @property
    def effective_price(self) -> float:
        return self.offer_price if self.offer_price is not None else self.price

    @property
    def gallery(self) -> list[str]:
        usable = [image for image in self.images if _usable_image(image)]
        return usable or [self.image_url]

    @property
    def in_stock(self) -> bool:
        return self.stock > 0


class Category(BaseModel):
    id: int
    name: str
    slug: str = ""
    description: str | None = None
    image_url: str | None = None


def _product_list(body) -> list[Product]:
    if isinstance(body, dict):
        body = body.get("items", body.get("products", []))
    return [Product.model_validate(item) for item in body or []]


class ProductService:
    def __init__(self, backend: BackendClient) -> None:
        self._backend = backend

    def list_products(
        self, skip: int = 0, limit: int = 20, category_id: int | None = None
    ) -> ServiceResult[list[Product]]:
        params: dict[str, Any] = {"skip": skip, "limit": limit}
        if category_id is not None:
            params["category_id"] = category_id
        return self._backend.call(
            "GET",
            "/products",
            params=params,
            parse=_product_list,
            fallback_message="Failed to fetch products",
        )

    def get_by_slug(self, slug: str) -> ServiceResult[Product]:
        return self._backend.call(
            "GET",
            f"/products/slug/{slug}",
            parse=Product.model_validate,
            fallback_message="Product not found",
        )

    def search(self, query: str, limit: int = 20) -> ServiceResult[list[Product]]:
        """Search products by free text. A blank query matches nothing."""
        query = query.strip()
        if not query:
            return ServiceResult.ok([])
        logger.debug("Searching products", query=query)
        return self._backend.call(
            "GET",
            "/products",
            params={"search": query, "limit": limit},
            parse=_product_list,
            fallback_message="Search failed",
        )

    def list_categories(self) -> ServiceResult[list[Category]]:
        return self._backend.call(
            "GET",
            "/categories",
            parse=lambda body: [Category.model_validate(item) for item in body or []],
            fallback_message="Failed to fetch categories",
        )
