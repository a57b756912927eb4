"""Pydantic schemas for the admin dashboard routes."""

from pydantic import BaseModel

from dashboard.admin.orders import DashboardStats, OrderPage
from ordering.api.schemas import OrderSchema


class UpdateStatusRequest(BaseModel):
    status: str


class StatsSchema(BaseModel):
    total_orders: int
    revenue: float
    by_status: dict[str, int]
    pending: int
    open_returns: int
    average_order_value: float

    @classmethod
    def from_stats(cls, stats: DashboardStats) -> "StatsSchema":
        return cls(
            total_orders=stats.total_orders,
            revenue=stats.revenue,
            by_status=dict(stats.by_status),
            pending=stats.pending,
            open_returns=stats.open_returns,
            average_order_value=stats.average_order_value,
        )


class OrderPageSchema(BaseModel):
    orders: list[OrderSchema]
    page: int
    limit: int
    total: int
    total_pages: int
    stats: StatsSchema

    @classmethod
    def from_page(cls, page: OrderPage, stats: DashboardStats) -> "OrderPageSchema":
        return cls(
            orders=[OrderSchema.from_order(order) for order in page.orders],
            page=page.page,
            limit=page.limit,
            total=page.total,
            total_pages=page.total_pages,
            stats=StatsSchema.from_stats(stats),
        )
