"""FastAPI routes for the admin order dashboard."""

from fastapi import APIRouter, Depends, HTTPException, Query

from dashboard.api.schemas import OrderPageSchema, UpdateStatusRequest
from ordering.api.schemas import OrderSchema
from shared.api.schemas import ResultResponse, envelope
from storefront import Storefront, current_storefront

admin_router = APIRouter(prefix="/admin", tags=["admin"])


def admin_storefront(storefront: Storefront = Depends(current_storefront)) -> Storefront:
    user = storefront.auth.current_user()
    if user is None:
        raise HTTPException(status_code=401, detail="Please log in")
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Admin access required")
    return storefront


@admin_router.get("/orders", response_model=ResultResponse)
def list_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: str | None = None,
    storefront: Storefront = Depends(admin_storefront),
) -> ResultResponse:
    dashboard = storefront.dashboard
    result = dashboard.list_orders(page=page, limit=limit, status=status)
    data = None
    if result.success:
        data = OrderPageSchema.from_page(result.data, dashboard.stats(result.data.orders))
    return envelope(result, storefront.notifier, data)


@admin_router.patch("/orders/{order_id}/status", response_model=ResultResponse)
def update_order_status(
    order_id: str, body: UpdateStatusRequest, storefront: Storefront = Depends(admin_storefront)
) -> ResultResponse:
    result = storefront.dashboard.update_status(order_id, body.status)
    data = OrderSchema.from_order(result.data) if result.success and result.data is not None else None
    return envelope(result, storefront.notifier, data)
