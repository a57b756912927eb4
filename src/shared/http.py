"""HTTP client for the remote storefront backend.

Every backend-facing service goes through ``BackendClient.call()``, which
turns transport errors and non-2xx responses into a failed
``ServiceResult``. The bearer token comes from the session's client store,
and an expired token triggers the registered session-expired callback.
"""

from collections.abc import Callable
from typing import Any

import httpx
import structlog

from shared.config import Settings
from shared.result import ServiceResult
from shared.storage import USER_TOKEN, ClientStore

logger = structlog.get_logger(__name__)

TOKEN_EXPIRED_PATTERNS = (
    "invalid token",
    "token has expired",
    "expired token",
    "authentication failed",
    "token expired",
    "session expired",
    "access denied",
)


def error_message(response: httpx.Response) -> str | None:
    """Extract a human-readable message from an error response body."""
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    detail = body.get("detail") or body.get("message")
    if isinstance(detail, str):
        return detail
    if isinstance(detail, list):
        # FastAPI-style validation payload
        parts = [item.get("msg", "") for item in detail if isinstance(item, dict)]
        joined = "; ".join(part for part in parts if part)
        return joined or None
    return None


def _json_or_none(response: httpx.Response) -> Any:
    if not response.content:
        return None
    return response.json()


def expect_object(body: Any) -> dict[str, Any]:
    """Return ``body`` as a JSON object, treating an empty body as ``{}``."""
    if body is None:
        return {}
    if not isinstance(body, dict):
        raise ValueError(f"expected a JSON object, got {type(body).__name__}")
    return body


class BackendClient:
    def __init__(
        self,
        settings: Settings,
        store: ClientStore,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.settings = settings
        self._store = store
        self._on_session_expired: Callable[[], None] | None = None
        self._client = httpx.Client(
            base_url=settings.api_base,
            timeout=settings.request_timeout,
            transport=transport,
        )

    def set_session_expired_callback(self, callback: Callable[[], None] | None) -> None:
        self._on_session_expired = callback

    def close(self) -> None:
        self._client.close()

    def _headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        token = self._store.get(USER_TOKEN)
        if token:
            headers["Authorization"] = f"Bearer {token}"
        if extra:
            headers.update(extra)
        return headers

    def _check_session(self, response: httpx.Response) -> None:
        if response.status_code not in (401, 403) or self._on_session_expired is None:
            return
        message = error_message(response)
        if message is None or any(pattern in message.lower() for pattern in TOKEN_EXPIRED_PATTERNS):
            logger.info("Backend session expired", status_code=response.status_code)
            self._on_session_expired()

    def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        response = self._client.request(
            method,
            path,
            json=json,
            params=params,
            headers=self._headers(headers),
        )
        self._check_session(response)
        return response

    def get(self, path: str, **kwargs) -> httpx.Response:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, data: Any = None, **kwargs) -> httpx.Response:
        return self.request("POST", path, json=data, **kwargs)

    def put(self, path: str, data: Any = None, **kwargs) -> httpx.Response:
        return self.request("PUT", path, json=data, **kwargs)

    def patch(self, path: str, data: Any = None, **kwargs) -> httpx.Response:
        return self.request("PATCH", path, json=data, **kwargs)

    def delete(self, path: str, **kwargs) -> httpx.Response:
        return self.request("DELETE", path, **kwargs)

    def call(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        parse: Callable[[Any], Any] | None = None,
        fallback_message: str = "Request failed",
        success_message: str | None = None,
    ) -> ServiceResult:
        """Perform a request and fold every outcome into a ``ServiceResult``."""
        try:
            response = self.request(method, path, json=json, params=params, headers=headers)
        except httpx.HTTPError as exc:
            logger.error("Backend unreachable", method=method, path=path, error=str(exc))
            return ServiceResult.unavailable(fallback_message)

        if response.is_error:
            message = error_message(response) or fallback_message
            logger.warning(
                "Backend rejected request",
                method=method,
                path=path,
                status_code=response.status_code,
                message=message,
            )
            return ServiceResult.failure(message, status_code=response.status_code)

        try:
            body = _json_or_none(response)
            data = parse(body) if parse is not None else body
        except (ValueError, TypeError, KeyError, AttributeError) as exc:
            logger.error(
                "Unexpected backend response",
                method=method,
                path=path,
                status_code=response.status_code,
                error=str(exc),
            )
            return ServiceResult.failure(fallback_message, status_code=response.status_code)

        return ServiceResult(
            success=True,
            data=data,
            message=success_message,
            status_code=response.status_code,
        )
