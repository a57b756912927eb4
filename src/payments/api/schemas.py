"""Pydantic request/response schemas for the payment callback routes.

The gateway widget runs in the page; these are what the page posts back
once the customer pays or closes it.
"""

from pydantic import BaseModel

from payments.gateway.port import GatewayPaymentResponse
from payments.payment.bridge import PaymentOutcome


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------
class PaymentSuccessRequest(BaseModel):
    razorpay_payment_id: str
    razorpay_order_id: str
    razorpay_signature: str

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "razorpay_payment_id": "pay_29QQoUBi66xm2f",
                    "razorpay_order_id": "order_9A33XWu170gUtm",
                    "razorpay_signature": "9ef4dffbfd84f1318f6739a3ce19f9d85851857ae648f114332d8401e0949a3d",
                }
            ]
        }
    }

    def to_response(self) -> GatewayPaymentResponse:
        return GatewayPaymentResponse(
            razorpay_payment_id=self.razorpay_payment_id,
            razorpay_order_id=self.razorpay_order_id,
            razorpay_signature=self.razorpay_signature,
        )


class ConfigureGatewayRequest(BaseModel):
    script_available: bool = True


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class PaymentOutcomeSchema(BaseModel):
    state: str
    order_id: str | None = None
    message: str
    verified: bool | None = None
    reverted: bool | None = None
    checkout_step: str

    @classmethod
    def from_outcome(cls, outcome: PaymentOutcome, checkout_step: str) -> "PaymentOutcomeSchema":
        return cls(
            state=outcome.state.value,
            order_id=outcome.order_id,
            message=outcome.message,
            verified=outcome.verified,
            reverted=outcome.reverted,
            checkout_step=checkout_step,
        )


class GatewayConfigResponse(BaseModel):
    gateway: str
    script_available: bool
