"""Pydantic request/response schemas for the cart, checkout and order routes.

These are the page-facing contracts; the backend's own wire format is
handled by the services.
"""

from pydantic import BaseModel, Field

from identity.api.schemas import AddressSchema
from ordering.cart.cart import CartLine, CartSummary
from ordering.checkout.pricing import OrderSummary
from ordering.checkout.session import CheckoutSession
from ordering.checkout.shipping import ShippingRate
from ordering.order.order import Order, payment_method_label, shipping_method_label, status_label


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: int
    quantity: int = Field(ge=1, default=1)


class UpdateCartQuantityRequest(BaseModel):
    quantity: int


class CartLineSchema(BaseModel):
    product_id: int
    name: str
    unit_price: float
    offer_price: float | None = None
    quantity: int
    line_total: float
    image_url: str | None = None

    @classmethod
    def from_line(cls, line: CartLine) -> "CartLineSchema":
        return cls(
            product_id=line.product_id,
            name=line.name,
            unit_price=line.unit_price,
            offer_price=line.offer_price,
            quantity=line.quantity,
            line_total=round(line.line_total, 2),
            image_url=line.image_url,
        )


class CartSchema(BaseModel):
    items: list[CartLineSchema]
    item_count: int
    subtotal: float

    @classmethod
    def from_summary(cls, summary: CartSummary) -> "CartSchema":
        return cls(
            items=[CartLineSchema.from_line(line) for line in summary.items],
            item_count=summary.item_count,
            subtotal=round(summary.subtotal, 2),
        )


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------
class SelectAddressRequest(BaseModel):
    address_id: int | str


class SelectRateRequest(BaseModel):
    rate_id: int


class PaymentMethodRequest(BaseModel):
    method: str = Field(examples=["COD", "online"])


class DiscountRequest(BaseModel):
    code: str


class NotesRequest(BaseModel):
    notes: str = ""


class RateSchema(BaseModel):
    id: int
    name: str
    price: float
    eta: str

    @classmethod
    def from_rate(cls, rate: ShippingRate) -> "RateSchema":
        return cls(id=rate.id, name=rate.name, price=rate.price, eta=rate.eta)


class SummarySchema(BaseModel):
    subtotal: float
    shipping: float
    tax: float
    online_discount: float
    discount: float
    total: float
    shipping_method: str | None = None
    free_shipping: bool

    @classmethod
    def from_summary(cls, summary: OrderSummary) -> "SummarySchema":
        return cls(
            subtotal=summary.subtotal,
            shipping=summary.shipping,
            tax=summary.tax,
            online_discount=summary.online_discount,
            discount=summary.discount,
            total=summary.total,
            shipping_method=summary.shipping_method,
            free_shipping=summary.free_shipping,
        )


class DiscountSchema(BaseModel):
    code: str
    type: str
    value: float


class CheckoutStateSchema(BaseModel):
    step: str
    addresses: list[AddressSchema]
    selected_address_id: int | None = None
    rates: list[RateSchema]
    selected_rate_id: int | None = None
    serviceable: bool | None = None
    shipping_message: str | None = None
    payment_method: str
    discount: DiscountSchema | None = None
    discount_message: str | None = None
    notes: str
    order_id: str | None = None
    cart: CartSchema
    summary: SummarySchema

    @classmethod
    def from_session(cls, session: CheckoutSession, cart: CartSummary) -> "CheckoutStateSchema":
        resolver = session.resolver
        discount = session.discount
        selected = session.selected_address
        return cls(
            step=session.step.value,
            addresses=[AddressSchema.from_address(address) for address in session.addresses],
            selected_address_id=selected.id.value if selected and selected.id else None,
            rates=[RateSchema.from_rate(rate) for rate in resolver.rates],
            selected_rate_id=resolver.selected.id if resolver.selected else None,
            serviceable=resolver.serviceable,
            shipping_message=resolver.message,
            payment_method=session.payment_method.value,
            discount=(
                DiscountSchema(code=discount.code, type=discount.type.value, value=discount.value)
                if discount
                else None
            ),
            discount_message=session.discount_message,
            notes=session.notes,
            order_id=session.order_id,
            cart=CartSchema.from_summary(cart),
            summary=SummarySchema.from_summary(session.summary),
        )


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class ReturnRequest(BaseModel):
    reason: str = Field(min_length=1)


class OrderSchema(BaseModel):
    id: str
    status: str
    status_label: str
    total_amount: float
    discount_amount: float
    delivery_cost: float
    payment_method: str
    payment_method_label: str
    shipping_method: str
    shipping_method_label: str
    shipping_address: str
    order_notes: str
    item_count: int
    can_cancel: bool
    can_request_return: bool
    return_request: bool
    created_at: str | None = None

    @classmethod
    def from_order(cls, order: Order) -> "OrderSchema":
        return cls(
            id=order.id,
            status=order.order_status,
            status_label=status_label(order.order_status),
            total_amount=order.total_amount,
            discount_amount=order.discount_amount,
            delivery_cost=order.delivery_cost,
            payment_method=order.payment_method,
            payment_method_label=payment_method_label(order.payment_method),
            shipping_method=order.shipping_method,
            shipping_method_label=shipping_method_label(order.shipping_method),
            shipping_address=order.shipping_address,
            order_notes=order.order_notes,
            item_count=order.item_count,
            can_cancel=order.can_cancel,
            can_request_return=order.can_request_return,
            return_request=order.return_request,
            created_at=order.created_at.isoformat() if order.created_at else None,
        )


class PlaceOrderSchema(BaseModel):
    step: str
    order_id: str | None = None
    payment_state: str | None = None
    gateway_options: dict | None = None
