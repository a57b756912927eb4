"""Admin dashboard routes."""

from dashboard.api.routes import admin_router

__all__ = ["admin_router"]
