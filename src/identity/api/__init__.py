"""Identity routes."""

from identity.api.routes import address_router, router

__all__ = ["router", "address_router"]
