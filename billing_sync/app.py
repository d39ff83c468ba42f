"""FastAPI application factory — entry point for the billing sync service."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from billing_sync.config import get_settings
from billing_sync.constants import (
    CORS_ALLOW_HEADERS,
    OPERATION_CUSTOMERS,
    OPERATION_REPLAY,
    OPERATION_WEBHOOKS,
)
from billing_sync.errors import ConfigurationError, InvalidRequest, ProviderError
from billing_sync.routers import billing, health, webhooks
from billing_sync.utils import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, verbose=settings.debug)

    for operation in (OPERATION_CUSTOMERS, OPERATION_WEBHOOKS, OPERATION_REPLAY):
        missing = settings.missing_for(operation)
        if missing:
            logger.warning(f"{operation} disabled: missing {', '.join(missing)}")

    # Configure the Stripe client once at startup
    if settings.stripe_secret_key:
        from billing_sync.services.billing_service import init_stripe
        init_stripe()

    # Initialize shared httpx client for connection pooling
    from billing_sync.http_client import close_http_client, init_http_client
    await init_http_client()

    engine = None
    if settings.profile_store_backend == "sql":
        # Auto-create tables for SQLite (dev mode); PostgreSQL uses Alembic
        from billing_sync.db.session import engine
        from billing_sync.models import Base

        if engine.dialect.name == "sqlite":
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)

    yield

    await close_http_client()
    if engine is not None:
        await engine.dispose()


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        debug=settings.debug,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url=None,
    )
    app.state.settings = settings

    # --- CORS (browser callers of the billing routes) ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["POST", "OPTIONS"],
        allow_headers=CORS_ALLOW_HEADERS,
    )

    # --- Error handlers ---
    @app.exception_handler(InvalidRequest)
    async def invalid_request_handler(request: Request, exc: InvalidRequest):
        return JSONResponse({"error": exc.message}, status_code=400)

    @app.exception_handler(ProviderError)
    async def provider_error_handler(request: Request, exc: ProviderError):
        return JSONResponse({"error": exc.message}, status_code=400)

    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(request: Request, exc: ConfigurationError):
        logger.error(exc.message)
        return JSONResponse({"error": exc.message}, status_code=503)

    # --- Routers ---
    app.include_router(health.router)
    app.include_router(billing.router)
    app.include_router(webhooks.router)

    return app


app = create_app()
