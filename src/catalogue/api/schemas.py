"""Pydantic response schemas for the catalogue routes."""

from pydantic import BaseModel

from catalogue.product.product import Category, Product


class ProductSchema(BaseModel):
    id: int
    name: str
    slug: str
    description: str | None = None
    price: float
    offer_price: float | None = None
    effective_price: float
    in_stock: bool
    material: str | None = None
    category_id: int | None = None
    image_url: str
    gallery: list[str] = []

    @classmethod
    def from_product(cls, product: Product) -> "ProductSchema":
        return cls(
            id=product.id,
            name=product.name,
            slug=product.slug,
            description=product.description,
            price=product.price,
            offer_price=product.offer_price,
            effective_price=product.effective_price,
            in_stock=product.in_stock,
            material=product.material,
            category_id=product.category_id,
            image_url=product.image_url,
            gallery=product.gallery,
        )


class CategorySchema(BaseModel):
    id: int
    name: str
    slug: str = ""
    image_url: str | None = None

    @classmethod
    def from_category(cls, category: Category) -> "CategorySchema":
        return cls(id=category.id, name=category.name, slug=category.slug, image_url=category.image_url)
