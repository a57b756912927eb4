"""Order pricing: derives the checkout summary from cart and selections.

Pure functions only. The summary is recomputed from scratch whenever the
cart, shipping selection, payment method or discount changes; nothing
here is cached.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

FREE_SHIPPING_THRESHOLD = 599.0
ONLINE_DISCOUNT_RATE = 0.05


class PaymentMethod(Enum):
    COD = "COD"
    ONLINE = "online"

    @classmethod
    def parse(cls, raw: "PaymentMethod | str") -> "PaymentMethod":
        if isinstance(raw, PaymentMethod):
            return raw
        value = str(raw).strip()
        if value.lower() == "cod":
            return cls.COD
        if value.lower() == "online":
            return cls.ONLINE
        raise ValueError(f"Unknown payment method: {raw!r}")


class DiscountType(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


@dataclass(frozen=True)
class Discount:
    code: str
    type: DiscountType
    value: float

    def amount_for(self, subtotal: float) -> float:
        """Deduction for ``subtotal``, never more than the subtotal itself."""
        if self.type is DiscountType.PERCENTAGE:
            amount = subtotal * self.value / 100
        else:
            amount = self.value
        return max(0.0, min(amount, subtotal))


@dataclass(frozen=True)
class PricedLine:
    """The pricing view of a cart line."""

    price: float
    quantity: int
    discounted_price: float | None = None

    @property
    def total(self) -> float:
        unit = self.discounted_price if self.discounted_price is not None else self.price
        return unit * self.quantity


@dataclass(frozen=True)
class OrderSummary:
    subtotal: float = 0.0
    shipping: float = 0.0
    tax: float = 0.0
    online_discount: float = 0.0
    discount: float = 0.0
    total: float = 0.0
    shipping_method: str | None = None

    @property
    def free_shipping(self) -> bool:
        return self.subtotal > 0 and self.shipping == 0


def subtotal_of(lines: Iterable[PricedLine]) -> float:
    return round(sum(line.total for line in lines), 2)


def shipping_cost(subtotal: float, rate_price: float | None, threshold: float = FREE_SHIPPING_THRESHOLD) -> float:
    if subtotal >= threshold:
        return 0.0
    return float(rate_price or 0.0)


def calculate_summary(
    lines: Iterable[PricedLine],
    rate_price: float | None = None,
    payment_method: PaymentMethod | None = None,
    discount: Discount | None = None,
    shipping_method: str | None = None,
    threshold: float = FREE_SHIPPING_THRESHOLD,
    online_rate: float = ONLINE_DISCOUNT_RATE,
) -> OrderSummary:
    lines = list(lines)
    if not lines:
        return OrderSummary(shipping_method=shipping_method)

    subtotal = subtotal_of(lines)
    shipping = round(shipping_cost(subtotal, rate_price, threshold), 2)
    online_discount = round(subtotal * online_rate, 2) if payment_method is PaymentMethod.ONLINE else 0.0
    code_discount = round(discount.amount_for(subtotal), 2) if discount is not None else 0.0

    # Online and code discounts can together exceed the subtotal
    total = max(0.0, round(subtotal + shipping - online_discount - code_discount, 2))

    return OrderSummary(
        subtotal=subtotal,
        shipping=shipping,
        tax=0.0,
        online_discount=online_discount,
        discount=code_discount,
        total=total,
        shipping_method=shipping_method,
    )
