"""Storefront configuration.

All settings come from environment variables and are read once into a
frozen ``Settings`` instance. Nothing here talks to the network.
"""

import os
from dataclasses import dataclass

DEFAULT_BACKEND_BASE_URL = "http://localhost:8080"
DEFAULT_GATEWAY_SCRIPT_URL = "https://checkout.razorpay.com/v1/checkout.js"


def _float_env(name: str, default: float | None) -> float | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return float(raw)


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


@dataclass(frozen=True)
class Settings:
    backend_base_url: str = DEFAULT_BACKEND_BASE_URL
    environment: str = "development"
    currency: str = "INR"
    free_shipping_threshold: float = 599.0
    online_discount_rate: float = 0.05
    item_weight: float = 0.5
    gateway_script_url: str = DEFAULT_GATEWAY_SCRIPT_URL
    store_name: str = "Vauria"
    theme_color: str = "#000000"
    request_timeout: float | None = None
    session_idle_ttl: float = 1800.0
    max_sessions: int = 1000

    @property
    def api_base(self) -> str:
        """Root of the versioned backend API, without a trailing slash."""
        return f"{self.backend_base_url.rstrip('/')}/api/v1"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


def load_settings() -> Settings:
    """Build settings from the process environment."""
    return Settings(
        backend_base_url=os.getenv("VAURIA_BACKEND_BASE_URL", DEFAULT_BACKEND_BASE_URL),
        environment=(os.getenv("ENVIRONMENT") or "development").lower(),
        currency=os.getenv("VAURIA_CURRENCY", "INR"),
        free_shipping_threshold=_float_env("VAURIA_FREE_SHIPPING_THRESHOLD", 599.0),
        online_discount_rate=_float_env("VAURIA_ONLINE_DISCOUNT_RATE", 0.05),
        item_weight=_float_env("VAURIA_ITEM_WEIGHT", 0.5),
        gateway_script_url=os.getenv("VAURIA_GATEWAY_SCRIPT_URL", DEFAULT_GATEWAY_SCRIPT_URL),
        store_name=os.getenv("VAURIA_STORE_NAME", "Vauria"),
        theme_color=os.getenv("VAURIA_THEME_COLOR", "#000000"),
        request_timeout=_float_env("VAURIA_REQUEST_TIMEOUT", None),
        session_idle_ttl=_float_env("VAURIA_SESSION_IDLE_TTL", 1800.0),
        max_sessions=_int_env("VAURIA_MAX_SESSIONS", 1000),
    )
