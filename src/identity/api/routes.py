"""FastAPI endpoints for identity: login, signup, logout, profile and the address book."""

from dataclasses import replace

from fastapi import APIRouter, Depends, Request

from identity.api.schemas import (
    AddressRequest,
    AddressSchema,
    LoginRequest,
    ProfileSchema,
    SignupRequest,
    UserSchema,
)
from identity.customer.addresses import AddressId
from shared import storage
from shared.api.schemas import ResultResponse, envelope
from shared.result import ServiceResult
from storefront import Storefront, current_storefront

router = APIRouter(prefix="/auth", tags=["auth"])
address_router = APIRouter(prefix="/addresses", tags=["addresses"])


@router.post("/login", response_model=ResultResponse)
def login(body: LoginRequest, storefront: Storefront = Depends(current_storefront)) -> ResultResponse:
    result = storefront.auth.login(body.email, body.password)
    if result.success:
        storefront.cart.summary()
    data = UserSchema.from_user(result.data) if result.success else None
    return envelope(result, storefront.notifier, data)


@router.post("/signup", status_code=201, response_model=ResultResponse)
def signup(body: SignupRequest, storefront: Storefront = Depends(current_storefront)) -> ResultResponse:
    result = storefront.auth.register(
        body.email,
        body.password,
        body.first_name,
        body.last_name,
        phone=body.phone,
        gender=body.gender,
    )
    data = UserSchema.from_user(result.data) if result.success else None
    return envelope(result, storefront.notifier, data)


@router.post("/logout", response_model=ResultResponse)
def logout(request: Request, storefront: Storefront = Depends(current_storefront)) -> ResultResponse:
    storefront.auth.logout()
    response = envelope(ServiceResult.ok(message="Logged out"), storefront.notifier)
    # A payment widget still open needs its storefront for the callback
    if not storefront.bridge.busy:
        request.app.state.sessions.end(storefront.session_id)
    return response


@router.get("/me", response_model=ResultResponse)
def me(storefront: Storefront = Depends(current_storefront)) -> ResultResponse:
    user = storefront.auth.current_user()
    if user is None:
        message = storefront.store.get(storage.LOGIN_MESSAGE) or "Not logged in"
        return envelope(ServiceResult.failure(message, 401), storefront.notifier)
    return envelope(ServiceResult.ok(UserSchema.from_user(user)), storefront.notifier)


@router.get("/profile", response_model=ResultResponse)
def profile(storefront: Storefront = Depends(current_storefront)) -> ResultResponse:
    result = storefront.auth.fetch_profile()
    data = ProfileSchema.from_profile(result.data) if result.success else None
    return envelope(result, storefront.notifier, data)


# ---------------------------------------------------------------------------
# Address book
# ---------------------------------------------------------------------------
@address_router.get("", response_model=ResultResponse)
def list_addresses(storefront: Storefront = Depends(current_storefront)) -> ResultResponse:
    result = storefront.addresses.list_addresses()
    data = [AddressSchema.from_address(address) for address in result.data] if result.success else None
    return envelope(result, storefront.notifier, data)


@address_router.post("", status_code=201, response_model=ResultResponse)
def add_address(body: AddressRequest, storefront: Storefront = Depends(current_storefront)) -> ResultResponse:
    result = storefront.addresses.add(body.to_address())
    data = AddressSchema.from_address(result.data) if result.success else None
    return envelope(result, storefront.notifier, data)


@address_router.put("/{address_id}", response_model=ResultResponse)
def update_address(
    address_id: str, body: AddressRequest, storefront: Storefront = Depends(current_storefront)
) -> ResultResponse:
    parsed = AddressId.parse(address_id)
    result = storefront.addresses.update(parsed, replace(body.to_address(), id=parsed))
    data = AddressSchema.from_address(result.data) if result.success else None
    return envelope(result, storefront.notifier, data)


@address_router.delete("/{address_id}", response_model=ResultResponse)
def delete_address(address_id: str, storefront: Storefront = Depends(current_storefront)) -> ResultResponse:
    result = storefront.addresses.delete(AddressId.parse(address_id))
    return envelope(result, storefront.notifier)


@address_router.post("/{address_id}/default", response_model=ResultResponse)
def set_default_address(address_id: str, storefront: Storefront = Depends(current_storefront)) -> ResultResponse:
    parsed = AddressId.parse(address_id)
    listing = storefront.addresses.list_addresses()
    if not listing.success:
        return envelope(listing, storefront.notifier)
    address = next((address for address in listing.data if address.id == parsed), None)
    if address is None:
        return envelope(ServiceResult.failure("Address not found", 404), storefront.notifier)
    result = storefront.addresses.set_default(address)
    data = AddressSchema.from_address(result.data) if result.success else None
    return envelope(result, storefront.notifier, data)
