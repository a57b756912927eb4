"""Vauria storefront FastAPI application.

Serves the storefront pages' data and owns each visitor's checkout state.
Every request carries an ``X-Session-Id`` header; the session registry
hands back that visitor's ``Storefront``.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

from contextlib import asynccontextmanager

import httpx
import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from catalogue.api import category_router, product_router
from dashboard.api import admin_router
from identity.api import address_router
from identity.api import router as identity_router
from ordering.api import cart_router, checkout_router, order_router
from payments.api import payment_router
from shared.config import Settings, load_settings
from shared.exceptions import ValidationError
from shared.utils.logging import bind_session, clear_context, configure_logging
from storefront import SESSION_HEADER, SessionRegistry

logger = structlog.get_logger(__name__)


def create_app(settings: Settings | None = None, transport: httpx.BaseTransport | None = None) -> FastAPI:
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging()
        yield
        app.state.sessions.close()

    app = FastAPI(
        title="Vauria Storefront",
        description="Storefront checkout and payment orchestration",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.sessions = SessionRegistry(settings, transport=transport)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[SESSION_HEADER],
    )

    @app.middleware("http")
    async def session_context_middleware(request: Request, call_next):
        """Tag every log line of the request with the visitor's session."""
        clear_context()
        session_id = request.headers.get(SESSION_HEADER)
        if session_id:
            bind_session(session_id, path=request.url.path)
        return await call_next(request)

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        logger.info("Request refused", path=request.url.path, errors=exc.messages)
        return JSONResponse(status_code=422, content={"detail": exc.first_message, "errors": exc.messages})

    # -----------------------------------------------------------------------
    # Routers
    # -----------------------------------------------------------------------
    app.include_router(identity_router)
    app.include_router(address_router)
    app.include_router(product_router)
    app.include_router(category_router)
    app.include_router(cart_router)
    app.include_router(checkout_router)
    app.include_router(order_router)
    app.include_router(payment_router)
    app.include_router(admin_router)

    # -----------------------------------------------------------------------
    # Health / root
    # -----------------------------------------------------------------------
    @app.get("/health")
    async def health():
        return JSONResponse(
            content={
                "status": "ok",
                "environment": settings.environment,
                "backend": settings.api_base,
                "sessions": len(app.state.sessions),
            }
        )

    return app


app = create_app()
