"""FastAPI routes for ordering: cart, checkout and order history."""

from fastapi import APIRouter, Depends, Query

from ordering.api.schemas import (
    AddToCartRequest,
    CartSchema,
    CheckoutStateSchema,
    DiscountRequest,
    NotesRequest,
    OrderSchema,
    PaymentMethodRequest,
    PlaceOrderSchema,
    ReturnRequest,
    SelectAddressRequest,
    SelectRateRequest,
    UpdateCartQuantityRequest,
)
from shared.api.schemas import ResultResponse, envelope
from shared.result import ServiceResult
from storefront import Storefront, current_storefront

# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


def _cart_response(result: ServiceResult, storefront: Storefront) -> ResultResponse:
    return envelope(result, storefront.notifier, CartSchema.from_summary(storefront.cart.current))


@cart_router.get("", response_model=ResultResponse)
def get_cart(storefront: Storefront = Depends(current_storefront)) -> ResultResponse:
    return _cart_response(storefront.cart.summary(), storefront)


@cart_router.post("/items", response_model=ResultResponse)
def add_cart_item(body: AddToCartRequest, storefront: Storefront = Depends(current_storefront)) -> ResultResponse:
    return _cart_response(storefront.cart.add(body.product_id, body.quantity), storefront)


@cart_router.patch("/items/{product_id}", response_model=ResultResponse)
def update_cart_item(
    product_id: int, body: UpdateCartQuantityRequest, storefront: Storefront = Depends(current_storefront)
) -> ResultResponse:
    return _cart_response(storefront.cart.update_quantity(product_id, body.quantity), storefront)


@cart_router.delete("/items/{product_id}", response_model=ResultResponse)
def remove_cart_item(product_id: int, storefront: Storefront = Depends(current_storefront)) -> ResultResponse:
    return _cart_response(storefront.cart.remove(product_id), storefront)


@cart_router.delete("", response_model=ResultResponse)
def clear_cart(storefront: Storefront = Depends(current_storefront)) -> ResultResponse:
    return _cart_response(storefront.cart.clear(), storefront)


@cart_router.get("/count")
def cart_count(storefront: Storefront = Depends(current_storefront)) -> dict:
    return {"count": storefront.cart.item_count()}


# ---------------------------------------------------------------------------
# Checkout Router
# ---------------------------------------------------------------------------
checkout_router = APIRouter(prefix="/checkout", tags=["checkout"])


def _state(storefront: Storefront, result: ServiceResult | None = None) -> ResultResponse:
    checkout = storefront.checkout
    response = envelope(result or ServiceResult.ok(), storefront.notifier)
    # The page re-renders from the state whether or not the action worked
    response.data = CheckoutStateSchema.from_session(checkout, storefront.cart.current)
    return response


@checkout_router.get("", response_model=ResultResponse)
def get_checkout(storefront: Storefront = Depends(current_storefront)) -> ResultResponse:
    return _state(storefront)


@checkout_router.post("/load", response_model=ResultResponse)
def load_checkout(storefront: Storefront = Depends(current_storefront)) -> ResultResponse:
    return _state(storefront, storefront.checkout.load())


@checkout_router.post("/address", response_model=ResultResponse)
def select_address(body: SelectAddressRequest, storefront: Storefront = Depends(current_storefront)) -> ResultResponse:
    storefront.checkout.select_address(body.address_id)
    return _state(storefront)


@checkout_router.post("/shipping/retry", response_model=ResultResponse)
def retry_shipping(storefront: Storefront = Depends(current_storefront)) -> ResultResponse:
    storefront.checkout.retry_shipping()
    return _state(storefront)


@checkout_router.post("/shipping/rate", response_model=ResultResponse)
def select_rate(body: SelectRateRequest, storefront: Storefront = Depends(current_storefront)) -> ResultResponse:
    storefront.checkout.select_rate(body.rate_id)
    return _state(storefront)


@checkout_router.post("/payment-method", response_model=ResultResponse)
def set_payment_method(
    body: PaymentMethodRequest, storefront: Storefront = Depends(current_storefront)
) -> ResultResponse:
    storefront.checkout.set_payment_method(body.method)
    return _state(storefront)


@checkout_router.post("/discount", response_model=ResultResponse)
def apply_discount(body: DiscountRequest, storefront: Storefront = Depends(current_storefront)) -> ResultResponse:
    result = storefront.checkout.apply_discount(body.code)
    return _state(storefront, ServiceResult(success=result.success, message=result.message, degraded=result.degraded))


@checkout_router.delete("/discount", response_model=ResultResponse)
def remove_discount(storefront: Storefront = Depends(current_storefront)) -> ResultResponse:
    storefront.checkout.remove_discount()
    return _state(storefront)


@checkout_router.put("/notes", response_model=ResultResponse)
def set_notes(body: NotesRequest, storefront: Storefront = Depends(current_storefront)) -> ResultResponse:
    storefront.checkout.set_notes(body.notes)
    return _state(storefront)


@checkout_router.post("/proceed", response_model=ResultResponse)
def proceed(storefront: Storefront = Depends(current_storefront)) -> ResultResponse:
    storefront.checkout.proceed()
    return _state(storefront)


@checkout_router.post("/back", response_model=ResultResponse)
def back(storefront: Storefront = Depends(current_storefront)) -> ResultResponse:
    storefront.checkout.back()
    return _state(storefront)


@checkout_router.post("/place-order", response_model=ResultResponse)
def place_order(storefront: Storefront = Depends(current_storefront)) -> ResultResponse:
    """Submit the order.

    Cash on delivery completes here. Online orders come back with the
    widget options the page hands to the gateway script; the rest arrives
    through the payment callbacks.
    """
    placed = storefront.checkout.place_order()
    gateway = storefront.gateway
    data = PlaceOrderSchema(
        step=placed.step.value,
        order_id=placed.order_id,
        payment_state=placed.payment.state.value if placed.payment else None,
        gateway_options=gateway.widget.options.to_widget() if gateway.is_open else None,
    )
    result = ServiceResult(success=placed.success, message=placed.message)
    response = envelope(result, storefront.notifier)
    response.data = data
    return response


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.get("", response_model=ResultResponse)
def list_orders(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    storefront: Storefront = Depends(current_storefront),
) -> ResultResponse:
    result = storefront.orders.list_my_orders(skip=skip, limit=limit)
    data = [OrderSchema.from_order(order) for order in result.data] if result.success else None
    return envelope(result, storefront.notifier, data)


@order_router.get("/{order_id}", response_model=ResultResponse)
def get_order(order_id: str, storefront: Storefront = Depends(current_storefront)) -> ResultResponse:
    result = storefront.orders.get(order_id)
    data = OrderSchema.from_order(result.data) if result.success else None
    return envelope(result, storefront.notifier, data)


@order_router.post("/{order_id}/cancel", response_model=ResultResponse)
def cancel_order(order_id: str, storefront: Storefront = Depends(current_storefront)) -> ResultResponse:
    found = storefront.orders.get(order_id)
    if not found.success:
        return envelope(found, storefront.notifier)
    return envelope(storefront.orders.cancel(found.data), storefront.notifier)


@order_router.post("/{order_id}/return", response_model=ResultResponse)
def request_return(
    order_id: str, body: ReturnRequest, storefront: Storefront = Depends(current_storefront)
) -> ResultResponse:
    found = storefront.orders.get(order_id)
    if not found.success:
        return envelope(found, storefront.notifier)
    return envelope(storefront.orders.request_return(found.data, body.reason), storefront.notifier)
