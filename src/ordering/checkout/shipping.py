"""Shipping rate resolution for the selected address.

Every ``resolve()`` call takes a fresh sequence token. When the backend
answers, the response is only applied if its token is still the latest one
issued; answers to superseded requests are dropped and reported as stale.
Failures never raise: an empty or failed lookup marks the address as not
serviceable.
"""

import itertools
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any

import structlog

from identity.customer.addresses import AddressId
from ordering.checkout.pricing import FREE_SHIPPING_THRESHOLD, PaymentMethod
from shared.exceptions import ValidationError
from shared.http import BackendClient
from shared.result import ServiceResult

logger = structlog.get_logger(__name__)

FREE_EXPRESS_RATE_ID = 999
NOT_SERVICEABLE_MESSAGE = "Delivery is not available for this address"


@dataclass(frozen=True)
class ShippingRate:
    id: int
    name: str
    price: float
    eta: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "ShippingRate":
        return cls(
            id=int(data["courier_id"]),
            name=data.get("courier_name") or "",
            price=float(data.get("rate") or 0),
            eta=str(data.get("etd") or ""),
        )


FREE_EXPRESS_RATE = ShippingRate(
    id=FREE_EXPRESS_RATE_ID,
    name="Free Express Delivery",
    price=0.0,
    eta="5 days",
)


class QuoteStatus(Enum):
    AVAILABLE = "available"
    UNSERVICEABLE = "unserviceable"
    STALE = "stale"


@dataclass(frozen=True)
class ShippingQuote:
    status: QuoteStatus
    rates: tuple[ShippingRate, ...] = ()
    selected: ShippingRate | None = None
    message: str | None = None

    @property
    def serviceable(self) -> bool:
        return self.status is QuoteStatus.AVAILABLE


def _parse_rates(body: Any) -> list[ShippingRate]:
    if isinstance(body, dict):
        body = body.get("rates", [])
    return [ShippingRate.from_api(item) for item in body or []]


def cheapest(rates) -> ShippingRate:
    """Lowest-priced rate; the first one listed wins a tie."""
    return min(rates, key=lambda rate: rate.price)


class ShippingRateResolver:
    def __init__(self, backend: BackendClient, threshold: float = FREE_SHIPPING_THRESHOLD) -> None:
        self._backend = backend
        self._threshold = threshold
        self._lock = threading.Lock()
        self._tokens = itertools.count(1)
        self._latest = 0

        self.rates: tuple[ShippingRate, ...] = ()
        self.selected: ShippingRate | None = None
        self.serviceable: bool | None = None
        self.message: str | None = None

    def _next_token(self) -> int:
        with self._lock:
            self._latest = next(self._tokens)
            return self._latest

    def resolve(
        self,
        address_id: AddressId,
        total_weight: float,
        amount: float,
        payment_method: PaymentMethod,
    ) -> ShippingQuote:
        token = self._next_token()
        logger.debug(
            "Fetching shipping rates",
            address_id=address_id.value,
            total_weight=total_weight,
            amount=amount,
            token=token,
        )
        result = self._backend.call(
            "POST",
            "/shipping/rates",
            json={
                "address_id": address_id.value,
                "total_weight": total_weight,
                "total_amount": amount,
                "payment_method": payment_method.value,
            },
            parse=_parse_rates,
            fallback_message=NOT_SERVICEABLE_MESSAGE,
        )
        return self._accept(token, result, amount)

    def _accept(self, token: int, result: ServiceResult, amount: float) -> ShippingQuote:
        with self._lock:
            if token != self._latest:
                logger.info("Discarding stale shipping rates", token=token, latest=self._latest)
                return ShippingQuote(
                    status=QuoteStatus.STALE,
                    rates=self.rates,
                    selected=self.selected,
                    message=self.message,
                )

            if not result.success or not result.data:
                self.rates = ()
                self.selected = None
                self.serviceable = False
                self.message = (result.message if not result.success else None) or NOT_SERVICEABLE_MESSAGE
                logger.warning("Address not serviceable", message=self.message)
                return ShippingQuote(status=QuoteStatus.UNSERVICEABLE, message=self.message)

            if amount >= self._threshold:
                self.rates = (FREE_EXPRESS_RATE,)
            else:
                self.rates = tuple(result.data)
            self.selected = cheapest(self.rates)
            self.serviceable = True
            self.message = None
            return ShippingQuote(status=QuoteStatus.AVAILABLE, rates=self.rates, selected=self.selected)

    def select(self, rate_id: int) -> ShippingRate:
        """Make ``rate_id`` the one selected rate."""
        with self._lock:
            rate = next((rate for rate in self.rates if rate.id == rate_id), None)
            if rate is None:
                raise ValidationError({"rate_id": [f"Shipping option {rate_id} is not available"]})
            self.selected = rate
            return rate

    def reset(self) -> None:
        """Forget rates, and make any in-flight lookup stale."""
        self._next_token()
        with self._lock:
            self.rates = ()
            self.selected = None
            self.serviceable = None
            self.message = None

    def snapshot(self) -> ShippingQuote:
        if self.serviceable is False:
            return ShippingQuote(status=QuoteStatus.UNSERVICEABLE, message=self.message)
        return ShippingQuote(status=QuoteStatus.AVAILABLE, rates=self.rates, selected=self.selected)
