"""Shopping cart client: the backend owns the cart, the storefront mirrors it.

The item count is cached in the client store and broadcast through the
session's ``CartCountEmitter`` whenever the cart changes.
"""

from dataclasses import dataclass, field, replace
from typing import Any

import structlog

from shared import storage
from shared.events import CartCountEmitter
from shared.http import BackendClient
from shared.result import ServiceResult
from shared.storage import ClientStore

logger = structlog.get_logger(__name__)


def _to_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    return float(value)


@dataclass(frozen=True)
class CartLine:
    product_id: int
    name: str
    unit_price: float
    quantity: int
    offer_price: float | None = None
    cart_item_id: int | None = None
    weight: float | None = None
    image_url: str | None = None

    @property
    def effective_price(self) -> float:
        """Discounted unit price when the product is on offer."""
        return self.offer_price if self.offer_price is not None else self.unit_price

    @property
    def line_total(self) -> float:
        return self.effective_price * self.quantity

    @classmethod
    def from_api(cls, item: dict[str, Any]) -> "CartLine":
        product = item.get("product") or {}
        return cls(
            product_id=int(product.get("id", item.get("product_id"))),
            name=product.get("name") or "",
            unit_price=_to_float(product.get("price")) or 0.0,
            offer_price=_to_float(product.get("offer_price")),
            quantity=int(item["quantity"]),
            cart_item_id=int(item["id"]) if item.get("id") is not None else None,
            weight=_to_float(product.get("weight")),
            image_url=product.get("image_url"),
        )


@dataclass(frozen=True)
class CartSummary:
    items: list[CartLine] = field(default_factory=list)

    @property
    def subtotal(self) -> float:
        return sum(line.line_total for line in self.items)

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.items)

    @property
    def is_empty(self) -> bool:
        return not self.items


def _parse_cart(body: Any) -> CartSummary:
    if isinstance(body, dict):
        body = body.get("items", [])
    return CartSummary(items=[CartLine.from_api(item) for item in body or []])


class CartService:
    def __init__(self, backend: BackendClient, store: ClientStore, emitter: CartCountEmitter) -> None:
        self._backend = backend
        self._store = store
        self._emitter = emitter
        self._summary = CartSummary()

    @property
    def current(self) -> CartSummary:
        """Last cart fetched from the backend."""
        return self._summary

    def _remember(self, summary: CartSummary) -> None:
        self._summary = summary
        self._publish_count(summary.item_count)

    def _publish_count(self, count: int) -> None:
        self._store.set(storage.CART_COUNT, str(count))
        self._emitter.publish(count)

    def summary(self) -> ServiceResult[CartSummary]:
        result = self._backend.call(
            "GET",
            "/cart/",
            parse=_parse_cart,
            fallback_message="Failed to fetch cart",
            success_message="Cart fetched successfully",
        )
        if result.success:
            self._remember(result.data)
        return result

    def refresh(self) -> ServiceResult[CartSummary]:
        """Re-read the cart after the backend changed it behind our back."""
        logger.info("Refreshing cart from backend")
        return self.summary()

    def item_count(self) -> int:
        cached = self._store.get(storage.CART_COUNT)
        if cached is not None and cached.isdigit():
            return int(cached)
        return self._summary.item_count

    def _find(self, product_id: int) -> CartLine | None:
        return next((line for line in self._summary.items if line.product_id == int(product_id)), None)

    def add(self, product_id: int, quantity: int = 1) -> ServiceResult[bool]:
        result = self._backend.call(
            "POST",
            "/cart/items",
            json={"product_id": int(product_id), "quantity": quantity},
            parse=_parse_cart,
            fallback_message="Failed to add item to cart",
        )
        if not result.success:
            return ServiceResult.failure(result.message, result.status_code)
        if result.data.items:
            self._remember(result.data)
        else:
            self.summary()
        return ServiceResult.ok(True, "Item added to cart successfully")

    def update_quantity(self, product_id: int, quantity: int) -> ServiceResult[bool]:
        if quantity <= 0:
            return self.remove(product_id)
        line = self._find(product_id)
        if line is None or line.cart_item_id is None:
            return ServiceResult.failure("Item not found in cart")
        result = self._backend.call(
            "PATCH",
            f"/cart/items/{line.cart_item_id}",
            json={"quantity": quantity},
            fallback_message="Failed to update quantity",
        )
        if not result.success:
            return ServiceResult.failure(result.message, result.status_code)
        items = [
            replace(other, quantity=quantity) if other.product_id == line.product_id else other
            for other in self._summary.items
        ]
        self._remember(CartSummary(items=items))
        return ServiceResult.ok(True, "Quantity updated successfully")

    def remove(self, product_id: int) -> ServiceResult[bool]:
        line = self._find(product_id)
        if line is None or line.cart_item_id is None:
            return ServiceResult.failure("Item not found in cart")
        result = self._backend.call(
            "DELETE",
            f"/cart/items/{line.cart_item_id}",
            fallback_message="Failed to remove item from cart",
        )
        if not result.success:
            return ServiceResult.failure(result.message, result.status_code)
        items = [other for other in self._summary.items if other.product_id != int(product_id)]
        self._remember(CartSummary(items=items))
        return ServiceResult.ok(True, "Item removed from cart")

    def clear(self) -> ServiceResult[bool]:
        result = self._backend.call("DELETE", "/cart/", fallback_message="Failed to clear cart")
        if not result.success:
            return ServiceResult.failure(result.message, result.status_code)
        self._remember(CartSummary())
        logger.info("Cart cleared")
        return ServiceResult.ok(True, "Cart cleared")
