"""Admin order dashboard: paginated order list, status updates and headline figures.

Only customers whose token carries the ``admin`` role get anything back
from these endpoints; the backend enforces that.
"""

import math
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

import structlog

from ordering.order.order import Order, OrderStatus
from shared.exceptions import ValidationError
from shared.http import BackendClient
from shared.result import ServiceResult

logger = structlog.get_logger(__name__)

_SETTLED_OUT = {OrderStatus.CANCELLED, OrderStatus.RETURNED}


@dataclass(frozen=True)
class OrderPage:
    orders: list[Order]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return max(1, math.ceil(self.total / self.limit)) if self.limit else 1


@dataclass(frozen=True)
class DashboardStats:
    total_orders: int = 0
    revenue: float = 0.0
    by_status: dict[str, int] = field(default_factory=dict)
    pending: int = 0
    open_returns: int = 0
    average_order_value: float = 0.0


def parse_status(raw: str) -> OrderStatus:
    try:
        return OrderStatus(str(raw).strip().lower())
    except ValueError as exc:
        allowed = ", ".join(status.value for status in OrderStatus)
        raise ValidationError({"status": [f"Status must be one of: {allowed}"]}) from exc


def _parse_page(page: int, limit: int):
    def parse(body: Any) -> OrderPage:
        if isinstance(body, dict):
            items = body.get("orders", body.get("items", []))
            total = int(body.get("total", len(items)))
        else:
            items = body or []
            total = len(items)
        return OrderPage(
            orders=[Order.model_validate(item) for item in items],
            page=page,
            limit=limit,
            total=total,
        )

    return parse


def compute_stats(orders: Iterable[Order]) -> DashboardStats:
    orders = list(orders)
    if not orders:
        return DashboardStats()

    statuses = Counter(order.order_status.lower() for order in orders)
    revenue = round(sum(order.total_amount for order in orders if order.lifecycle not in _SETTLED_OUT), 2)
    open_returns = sum(
        1 for order in orders if order.return_request and order.lifecycle is not OrderStatus.RETURNED
    )
    return DashboardStats(
        total_orders=len(orders),
        revenue=revenue,
        by_status=dict(statuses),
        pending=statuses.get(OrderStatus.PENDING.value, 0),
        open_returns=open_returns,
        average_order_value=round(revenue / len(orders), 2),
    )


class DashboardService:
    def __init__(self, backend: BackendClient) -> None:
        self._backend = backend

    def list_orders(self, page: int = 1, limit: int = 20, status: str | None = None) -> ServiceResult[OrderPage]:
        page = max(1, page)
        params: dict[str, Any] = {"skip": (page - 1) * limit, "limit": limit}
        if status:
            try:
                params["status"] = parse_status(status).value
            except ValidationError as exc:
                return ServiceResult.failure(exc.first_message)
        return self._backend.call(
            "GET",
            "/admin/orders",
            params=params,
            parse=_parse_page(page, limit),
            fallback_message="Failed to fetch orders",
        )

    def update_status(self, order_id: str, status: str) -> ServiceResult[Order | None]:
        try:
            target = parse_status(status)
        except ValidationError as exc:
            return ServiceResult.failure(exc.first_message)

        result = self._backend.call(
            "PATCH",
            f"/admin/orders/{order_id}/status",
            json={"status": target.value},
            parse=lambda body: Order.model_validate(body) if isinstance(body, dict) and "id" in body else None,
            fallback_message="Failed to update order status",
            success_message=f"Order status updated to {target.value}",
        )
        if result.success:
            logger.info("Order status updated", order_id=order_id, status=target.value)
        return result

    def stats(self, orders: Iterable[Order]) -> DashboardStats:
        return compute_stats(orders)
