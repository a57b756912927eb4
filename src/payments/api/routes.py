"""FastAPI routes for payments: gateway widget options and widget callbacks."""

from fastapi import APIRouter, Depends, HTTPException

from payments.api.schemas import (
    ConfigureGatewayRequest,
    GatewayConfigResponse,
    PaymentOutcomeSchema,
    PaymentSuccessRequest,
)
from payments.gateway.fake_adapter import FakeCheckoutGateway
from payments.payment.bridge import PaymentOutcome
from shared.api.schemas import ResultResponse, envelope
from shared.result import ServiceResult
from storefront import Storefront, current_storefront

# ---------------------------------------------------------------------------
# Payment Router
# ---------------------------------------------------------------------------
payment_router = APIRouter(prefix="/payments", tags=["payments"])


def _outcome_response(outcome: PaymentOutcome | None, storefront: Storefront) -> ResultResponse:
    if outcome is None:
        raise HTTPException(status_code=409, detail="No payment is waiting for the gateway")
    success = outcome.paid or outcome.pending
    result = ServiceResult(success=success, message=outcome.message)
    response = envelope(result, storefront.notifier)
    response.data = PaymentOutcomeSchema.from_outcome(outcome, storefront.checkout.step.value)
    return response


@payment_router.get("/checkout-options")
def checkout_options(storefront: Storefront = Depends(current_storefront)) -> dict:
    """Options for the gateway script's constructor, while the widget is open."""
    gateway = storefront.gateway
    if not gateway.is_open:
        raise HTTPException(status_code=404, detail="No payment is waiting for the gateway")
    return gateway.widget.options.to_widget()


@payment_router.post("/callback/success", response_model=ResultResponse)
def payment_succeeded(
    body: PaymentSuccessRequest, storefront: Storefront = Depends(current_storefront)
) -> ResultResponse:
    return _outcome_response(storefront.gateway.complete(body.to_response()), storefront)


@payment_router.post("/callback/dismiss", response_model=ResultResponse)
def payment_dismissed(storefront: Storefront = Depends(current_storefront)) -> ResultResponse:
    return _outcome_response(storefront.gateway.dismiss(), storefront)


@payment_router.post("/gateway/configure", response_model=GatewayConfigResponse)
def configure_gateway(
    body: ConfigureGatewayRequest, storefront: Storefront = Depends(current_storefront)
) -> GatewayConfigResponse:
    """Configure the FakeCheckoutGateway behavior (non-production only).

    Lets manual API testing make the checkout script unavailable.
    """
    if storefront.settings.is_production:
        raise HTTPException(status_code=403, detail="Gateway configuration not available in production")

    gateway = storefront.gateway
    if not isinstance(gateway, FakeCheckoutGateway):
        raise HTTPException(status_code=400, detail="Gateway configuration only available for FakeCheckoutGateway")

    gateway.configure(script_available=body.script_available)
    return GatewayConfigResponse(gateway=type(gateway).__name__, script_available=gateway.script_available)
