"""FastAPI endpoints for the catalogue: product listing, search and categories."""

from fastapi import APIRouter, Depends, Query

from catalogue.api.schemas import CategorySchema, ProductSchema
from shared.api.schemas import ResultResponse, envelope
from storefront import Storefront, current_storefront

product_router = APIRouter(prefix="/products", tags=["products"])
category_router = APIRouter(prefix="/categories", tags=["categories"])


@product_router.get("", response_model=ResultResponse)
def list_products(
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    category_id: int | None = None,
    search: str | None = None,
    storefront: Storefront = Depends(current_storefront),
) -> ResultResponse:
    if search is not None:
        result = storefront.products.search(search, limit=limit)
    else:
        result = storefront.products.list_products(skip=skip, limit=limit, category_id=category_id)
    data = [ProductSchema.from_product(product) for product in result.data] if result.success else None
    return envelope(result, storefront.notifier, data)


@product_router.get("/{slug}", response_model=ResultResponse)
def get_product(slug: str, storefront: Storefront = Depends(current_storefront)) -> ResultResponse:
    result = storefront.products.get_by_slug(slug)
    data = ProductSchema.from_product(result.data) if result.success else None
    return envelope(result, storefront.notifier, data)


@category_router.get("", response_model=ResultResponse)
def list_categories(storefront: Storefront = Depends(current_storefront)) -> ResultResponse:
    result = storefront.products.list_categories()
    data = [CategorySchema.from_category(category) for category in result.data] if result.success else None
    return envelope(result, storefront.notifier, data)
