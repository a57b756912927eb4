"""Orders: backend contract models and the order API client.

Order lifecycle (paid, cancelled, returned) belongs to the backend. The
storefront creates orders, reads them, and asks for cancellation, returns
or the revert-and-delete compensation; it never changes status locally.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

import structlog
from pydantic import BaseModel, field_validator

from shared.http import BackendClient, expect_object
from shared.result import ServiceResult

logger = structlog.get_logger(__name__)


class OrderStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    RETURNED = "returned"


_CANCELLABLE_STATES = {OrderStatus.PENDING, OrderStatus.PROCESSING}


class OrderItem(BaseModel):
    id: int
    product_id: int
    quantity: int
    price: float
    created_at: datetime | None = None


class Order(BaseModel):
    id: str
    user_id: int | None = None
    total_amount: float = 0.0
    discount_amount: float = 0.0
    status: str = "pending"
    order_status: str = "pending"
    shipping_address_id: int | None = None
    shipping_address: str = ""
    billing_address: str = ""
    payment_method: str = ""
    payment_id: str | None = None
    shipping_method: str = ""
    carrier_name: str = ""
    delivery_option: str = ""
    order_notes: str = ""
    delivery_cost: float = 0.0
    return_request: bool = False
    items: list[OrderItem] = []
    created_at: datetime | None = None

    @field_validator("id", "payment_id", mode="before")
    @classmethod
    def _stringify(cls, value):
        return None if value is None else str(value)

    @field_validator("order_notes", "shipping_method", "carrier_name", "delivery_option", mode="before")
    @classmethod
    def _none_to_blank(cls, value):
        return value or ""

    @property
    def lifecycle(self) -> OrderStatus | None:
        try:
            return OrderStatus(self.order_status.lower())
        except ValueError:
            return None

    @property
    def can_cancel(self) -> bool:
        return self.lifecycle in _CANCELLABLE_STATES

    @property
    def can_request_return(self) -> bool:
        return self.lifecycle is OrderStatus.DELIVERED and not self.return_request

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)


@dataclass(frozen=True)
class OrderPayload:
    """Body of an order-creation request."""

    shipping_address_id: int
    shipping_address: str
    billing_address: str
    payment_method: str
    shipping_method: str
    carrier_name: str
    delivery_option: str
    delivery_cost: float
    idempotency_key: str
    order_notes: str = ""
    discount_code: str | None = None

    def to_api(self) -> dict[str, Any]:
        body = {
            "shipping_address_id": self.shipping_address_id,
            "shipping_address": self.shipping_address,
            "billing_address": self.billing_address,
            "payment_method": self.payment_method,
            "shipping_method": self.shipping_method,
            "carrier_name": self.carrier_name,
            "delivery_option": self.delivery_option,
            "delivery_cost": self.delivery_cost,
            "order_notes": self.order_notes,
            "idempotency_key": self.idempotency_key,
        }
        if self.discount_code:
            body["discount_code"] = self.discount_code
        return body


@dataclass(frozen=True)
class RevertResult:
    deleted: bool
    restored_items: list[dict[str, Any]] = field(default_factory=list)


def _parse_revert(body: Any) -> RevertResult:
    body = expect_object(body)
    return RevertResult(
        deleted=bool(body.get("deleted")),
        restored_items=list(body.get("restored_items") or body.get("restored") or []),
    )


# ---------------------------------------------------------------------------
# Display labels
# ---------------------------------------------------------------------------
_PAYMENT_METHOD_LABELS = {
    "cod": "Cash on Delivery",
    "online": "Online Payment",
    "card": "Credit/Debit Card",
    "upi": "UPI",
}

_SHIPPING_METHOD_LABELS = {
    "standard": "Standard Delivery",
    "express": "Express Delivery",
    "overnight": "Overnight Delivery",
}


def _capitalize(value: str) -> str:
    return value[:1].upper() + value[1:]


def payment_method_label(method: str) -> str:
    return _PAYMENT_METHOD_LABELS.get(method.lower(), _capitalize(method))


def shipping_method_label(method: str) -> str:
    return _SHIPPING_METHOD_LABELS.get(method.lower(), _capitalize(method))


def status_label(status: str) -> str:
    return _capitalize(status.replace("_", " ").lower())


# ---------------------------------------------------------------------------
# API client
# ---------------------------------------------------------------------------
class OrderService:
    def __init__(self, backend: BackendClient) -> None:
        self._backend = backend

    def list_my_orders(self, skip: int = 0, limit: int = 50) -> ServiceResult[list[Order]]:
        return self._backend.call(
            "GET",
            "/orders/me",
            params={"skip": skip, "limit": limit},
            parse=lambda body: [Order.model_validate(item) for item in body or []],
            fallback_message="Failed to fetch orders",
        )

    def get(self, order_id: str) -> ServiceResult[Order]:
        return self._backend.call(
            "GET",
            f"/orders/{order_id}",
            parse=Order.model_validate,
            fallback_message="Failed to fetch order details",
        )

    def cancel(self, order: Order) -> ServiceResult[bool]:
        if not order.can_cancel:
            return ServiceResult.failure(f"Order cannot be cancelled once {order.order_status}")
        result = self._backend.call(
            "PATCH",
            f"/orders/{order.id}/cancel",
            json={"status": OrderStatus.CANCELLED.value},
            parse=lambda _body: True,
            fallback_message="Failed to cancel order",
            success_message="Order cancelled successfully",
        )
        if result.success:
            logger.info("Order cancelled", order_id=order.id)
        return result

    def request_return(self, order: Order, reason: str) -> ServiceResult[bool]:
        if not reason.strip():
            return ServiceResult.failure("Please tell us why you are returning this order")
        if not order.can_request_return:
            return ServiceResult.failure("Returns can only be requested for delivered orders")
        return self._backend.call(
            "PATCH",
            f"/orders/{order.id}/return",
            json={"return_request": True, "return_reason": reason.strip()},
            parse=lambda _body: True,
            fallback_message="Failed to submit return request",
            success_message="Return request submitted successfully",
        )

    def _create(self, path: str, payload: OrderPayload) -> ServiceResult[Order]:
        return self._backend.call(
            "POST",
            path,
            json=payload.to_api(),
            headers={"Idempotency-Key": payload.idempotency_key},
            parse=Order.model_validate,
            fallback_message="Failed to create order",
            success_message="Order created successfully",
        )

    def create_cod_order(self, payload: OrderPayload) -> ServiceResult[Order]:
        return self._create("/orders/cod", payload)

    def create_online_order(self, payload: OrderPayload) -> ServiceResult[Order]:
        return self._create("/orders/online", payload)

    def revert_and_delete(self, order_id: str, reason: str, soft_delete: bool = True) -> ServiceResult[RevertResult]:
        """Undo an order whose payment never completed; the backend restores cart and stock."""
        logger.info("Reverting order", order_id=order_id, reason=reason)
        result = self._backend.call(
            "POST",
            "/orders/revert-delete",
            json={"order_id": order_id, "reason": reason, "soft_delete": soft_delete},
            parse=_parse_revert,
            fallback_message="Failed to revert order",
        )
        if result.success and not result.data.deleted:
            logger.warning("Backend declined to revert order", order_id=order_id)
            return ServiceResult.failure("Failed to revert order", result.status_code)
        return result
