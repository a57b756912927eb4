"""Customer account session: login, signup, logout, the current user and
the backend profile.

The backend issues a JWT on login. The storefront never verifies it; the
payload is only read to recover the user id, email and role for display.
Name and phone come from the profile fetch and are kept until logout.
"""

import base64
import json
from dataclasses import dataclass, field
from typing import Any

import structlog

from identity.customer.addresses import Address
from identity.shared.email import ensure_valid_email
from shared import storage
from shared.exceptions import ValidationError
from shared.http import BackendClient, expect_object
from shared.result import ServiceResult
from shared.storage import ClientStore

logger = structlog.get_logger(__name__)

SESSION_EXPIRED_MESSAGE = "Your session has expired. Please login again."


@dataclass(frozen=True)
class User:
    id: str
    email: str
    role: str = "customer"
    first_name: str = ""
    last_name: str = ""
    phone: str = ""

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class Profile:
    user: User
    is_verified: bool = False
    gender: str | None = None
    addresses: list[Address] = field(default_factory=list)


def _parse_profile(body: Any) -> Profile:
    body = expect_object(body)
    user = User(
        id=str(body["id"]),
        email=body.get("email") or "",
        role=body.get("role") or "customer",
        first_name=body.get("first_name") or "",
        last_name=body.get("last_name") or "",
        phone=body.get("phone") or "",
    )
    return Profile(
        user=user,
        is_verified=bool(body.get("is_verified")),
        gender=body.get("gender"),
        addresses=[Address.from_api(item) for item in body.get("addresses") or []],
    )


def decode_token_payload(token: str) -> dict[str, Any] | None:
    """Read the claims of a JWT without checking its signature."""
    parts = token.split(".")
    if len(parts) != 3:
        return None
    segment = parts[1] + "=" * (-len(parts[1]) % 4)
    try:
        payload = json.loads(base64.urlsafe_b64decode(segment))
    except (ValueError, TypeError):
        return None
    return payload if isinstance(payload, dict) else None


class AuthService:
    def __init__(self, backend: BackendClient, store: ClientStore) -> None:
        self._backend = backend
        self._store = store
        self._profile: Profile | None = None

    def login(self, email: str, password: str) -> ServiceResult[User]:
        if not email or not password:
            return ServiceResult.failure("Email and password are required")

        result = self._backend.call(
            "POST",
            "/login",
            json={"email": email, "password": password},
            parse=expect_object,
            fallback_message="Login failed",
        )
        if not result.success:
            return result

        body = result.data
        token = body.get("access_token")
        if not token:
            logger.error("Login response carried no token")
            return ServiceResult.failure("Login failed")

        payload = decode_token_payload(token) or {}
        user = User(
            id=str(payload.get("user_id", "unknown")),
            email=payload.get("email") or email,
            role=payload.get("role") or "customer",
        )

        self._store.set(storage.USER_TOKEN, token)
        self._store.set(storage.TOKEN_TYPE, body.get("token_type", "bearer"))
        self._store.set(storage.USER_EMAIL, user.email)
        self._store.set(storage.USER_ID, user.id)
        self._store.remove(storage.LOGIN_MESSAGE)
        self._profile = None
        logger.info("User logged in", user_id=user.id)
        return ServiceResult.ok(user, "Login successful")

    def register(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        phone: str = "",
        gender: str = "male",
    ) -> ServiceResult[User]:
        if not all((email, password, first_name, last_name)):
            return ServiceResult.failure("All required fields must be filled")
        try:
            email = ensure_valid_email(email)
        except ValidationError as exc:
            return ServiceResult.failure(exc.first_message)

        result = self._backend.call(
            "POST",
            "/signup",
            json={
                "first_name": first_name,
                "last_name": last_name,
                "email": email,
                "password": password,
                "phone": phone,
                "gender": gender,
            },
            parse=expect_object,
            fallback_message="Registration failed",
        )
        if not result.success:
            return result

        body = result.data
        user = User(
            id=str(body.get("id", "")),
            email=body.get("email", email),
            role=body.get("role") or "customer",
            first_name=body.get("first_name", first_name),
            last_name=body.get("last_name", last_name),
            phone=body.get("phone") or phone,
        )

        login = self.login(email, password)
        if login.success:
            return ServiceResult.ok(user, "Registration and login successful")
        logger.warning("Automatic login after signup failed", email=email)
        return ServiceResult.ok(user, "Registration successful. Please log in.")

    def logout(self, session_expired: bool = False) -> None:
        self._store.remove_many(storage.IDENTITY_KEYS)
        self._profile = None
        if session_expired:
            self._store.set(storage.LOGIN_MESSAGE, SESSION_EXPIRED_MESSAGE)
        logger.info("User logged out", session_expired=session_expired)

    def handle_session_expiry(self) -> None:
        self.logout(session_expired=True)

    @property
    def is_authenticated(self) -> bool:
        return self._store.has(storage.USER_TOKEN)

    def current_user(self) -> User | None:
        token = self._store.get(storage.USER_TOKEN)
        if not token:
            return None
        payload = decode_token_payload(token)
        if payload is None:
            return None
        user = User(
            id=str(payload.get("user_id") or self._store.get(storage.USER_ID) or "unknown"),
            email=payload.get("email") or self._store.get(storage.USER_EMAIL) or "",
            role=payload.get("role") or "customer",
        )
        if self._profile is not None and self._profile.user.id == user.id:
            return self._profile.user
        return user

    def fetch_profile(self) -> ServiceResult[Profile]:
        """Load name, phone and saved addresses of the logged-in customer."""
        if not self.is_authenticated:
            return ServiceResult.failure("Not logged in", 401)

        result = self._backend.call(
            "GET",
            "/me",
            parse=_parse_profile,
            fallback_message="Failed to fetch profile",
            success_message="Profile fetched successfully",
        )
        if result.success:
            self._profile = result.data
            logger.debug("Profile loaded", user_id=result.data.user.id, addresses=len(result.data.addresses))
        return result
