"""Discount code validation against the backend."""

from typing import Any

import structlog

from ordering.checkout.pricing import Discount, DiscountType
from shared.http import BackendClient
from shared.result import ServiceResult

logger = structlog.get_logger(__name__)

EMPTY_CODE_MESSAGE = "Please enter a discount code"
INVALID_CODE_MESSAGE = "Invalid discount code"
UNREACHABLE_MESSAGE = "Failed to validate discount code. Please check your connection and try again."


def normalize_code(code: str) -> str:
    return code.strip().upper()


def _parse_discount(body: dict[str, Any]) -> Discount:
    return Discount(
        code=body["code"],
        type=DiscountType(str(body["type"]).lower()),
        value=float(body["value"]),
    )


class DiscountValidator:
    def __init__(self, backend: BackendClient) -> None:
        self._backend = backend

    def validate(self, code: str) -> ServiceResult[Discount]:
        """Ask the backend whether ``code`` is redeemable.

        ``code`` is expected upper-cased already. A blank code fails without
        a network call.
        """
        if not code or not code.strip():
            return ServiceResult.failure(EMPTY_CODE_MESSAGE)

        result = self._backend.call(
            "POST",
            "/discounts/validate",
            json={"code": code},
            parse=_parse_discount,
            fallback_message=INVALID_CODE_MESSAGE,
        )
        if result.degraded:
            return ServiceResult.unavailable(UNREACHABLE_MESSAGE)
        if not result.success:
            logger.info("Discount code rejected", code=code, message=result.message)
            return result

        discount = result.data
        logger.info("Discount code accepted", code=discount.code, type=discount.type.value)
        return ServiceResult.ok(discount, f"Discount code '{discount.code}' applied successfully!")
