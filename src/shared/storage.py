"""Client-local key/value store.

Holds what the browser keeps in local storage: auth token, cart count
cache, pending payment credentials and the last payment result. One store
belongs to one browser session.
"""

import json
from typing import Any

import structlog

logger = structlog.get_logger(__name__)

USER_TOKEN = "vauria_user_token"
TOKEN_TYPE = "vauria_token_type"
USER_EMAIL = "vauria_user_email"
USER_ID = "vauria_user_id"
LOGIN_MESSAGE = "vauria_login_message"
CART_COUNT = "vauria_cart_count"
PAYMENT_CREDENTIALS = "vauria_payment_credentials"
PAYMENT_RESULT = "vauria_payment_result"

IDENTITY_KEYS = (USER_TOKEN, TOKEN_TYPE, USER_EMAIL, USER_ID)


class ClientStore:
    """In-memory string store with JSON helpers."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._items.get(key)

    def set(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove(self, key: str) -> None:
        self._items.pop(key, None)

    def remove_many(self, keys) -> None:
        for key in keys:
            self.remove(key)

    def has(self, key: str) -> bool:
        return key in self._items

    def keys(self) -> list[str]:
        return list(self._items)

    def clear(self) -> None:
        self._items.clear()

    def get_json(self, key: str) -> Any:
        raw = self.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Discarding unreadable stored value", key=key)
            return None

    def set_json(self, key: str, value: Any) -> None:
        self.set(key, json.dumps(value))
