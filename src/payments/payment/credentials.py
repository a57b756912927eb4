"""Payment credentials and verification: the backend side of an online payment.

Credentials are issued per order and kept in the client store only
between order creation and the gateway callback.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

import structlog

from payments.gateway.port import GatewayPaymentResponse
from shared import storage
from shared.http import BackendClient, expect_object
from shared.result import ServiceResult
from shared.storage import ClientStore

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class PaymentCredentials:
    razorpay_order_id: str
    amount: int
    key_id: str
    order_id: str | None = None

    @property
    def complete(self) -> bool:
        return bool(self.razorpay_order_id and self.key_id)

    @classmethod
    def from_api(cls, body: Any, order_id: str | None = None) -> "PaymentCredentials":
        body = expect_object(body)
        return cls(
            razorpay_order_id=body.get("razorpay_order_id") or "",
            amount=int(body.get("amount") or 0),
            key_id=body.get("key_id") or "",
            order_id=order_id or body.get("order_id"),
        )


@dataclass(frozen=True)
class VerificationResult:
    verified: bool
    message: str
    order_id: str | None = None
    status: str | None = None


def _parse_verification(body: Any) -> VerificationResult:
    body = expect_object(body)
    verified = body.get("status") == "success"
    return VerificationResult(
        verified=verified,
        message="Payment verified successfully" if verified else "Payment verification failed",
        order_id=str(body["order_id"]) if body.get("order_id") is not None else None,
        status=body.get("status"),
    )


class PaymentService:
    def __init__(self, backend: BackendClient, store: ClientStore) -> None:
        self._backend = backend
        self._store = store

    def create_payment(self, order_id: str) -> ServiceResult[PaymentCredentials]:
        result = self._backend.call(
            "POST",
            "/payments/create",
            json={"order_id": order_id},
            parse=lambda body: PaymentCredentials.from_api(body, order_id),
            fallback_message="Failed to create payment credentials",
            success_message="Payment credentials created successfully",
        )
        if result.success:
            credentials = result.data
            self._store.set_json(
                storage.PAYMENT_CREDENTIALS,
                {
                    "razorpay_order_id": credentials.razorpay_order_id,
                    "amount": credentials.amount,
                    "key_id": credentials.key_id,
                    "order_id": order_id,
                    "timestamp": datetime.now(UTC).isoformat(),
                },
            )
        return result

    def clear_credentials(self) -> None:
        self._store.remove(storage.PAYMENT_CREDENTIALS)

    def store_result(self, response: GatewayPaymentResponse) -> None:
        self._store.set_json(
            storage.PAYMENT_RESULT,
            {
                "payment_id": response.razorpay_payment_id,
                "order_id": response.razorpay_order_id,
                "signature": response.razorpay_signature,
                "timestamp": datetime.now(UTC).isoformat(),
            },
        )

    def clear_result(self) -> None:
        self._store.remove(storage.PAYMENT_RESULT)

    def purge(self) -> None:
        """Forget everything kept for the payment in flight."""
        self.clear_credentials()
        self.clear_result()

    def verify(self, response: GatewayPaymentResponse) -> ServiceResult[VerificationResult]:
        return self._backend.call(
            "POST",
            "/payments/verify",
            json={
                "razorpay_order_id": response.razorpay_order_id,
                "razorpay_payment_id": response.razorpay_payment_id,
                "razorpay_signature": response.razorpay_signature,
            },
            parse=_parse_verification,
            fallback_message="Failed to verify payment",
        )
