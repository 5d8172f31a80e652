"""FastAPI application factory"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from card_tracker.api.errors import register_exception_handlers
from card_tracker.api.middleware import (
    FixedWindowRateLimiter,
    MetricsMiddleware,
    RateLimitMiddleware,
    RequestIDMiddleware,
    SecurityHeadersMiddleware,
)
from card_tracker.api.v1 import auth, cards, transactions, users
from card_tracker.config import Settings, settings
from card_tracker.infrastructure.database.session import Database
from card_tracker.infrastructure.observability.logging import setup_logging
from card_tracker.infrastructure.security.credentials import CredentialService

# Setup structured logging
setup_logging(settings.log_level, settings.service_name)

logger = logging.getLogger(__name__)


def create_app(
    app_settings: Settings | None = None,
    database: Database | None = None,
    credentials: CredentialService | None = None,
) -> FastAPI:
    """
    Create and configure FastAPI application.

    The database and credential service are built here unless the caller
    passes its own; the lifespan hook disposes of the connection pool on
    shutdown.
    """
    app_settings = app_settings or settings
    database = database or Database.from_settings(app_settings)
    credentials = credentials or CredentialService.from_settings(app_settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app_settings.create_tables_on_startup:
            database.create_all()
        logger.info("Service started", extra={"environment": app_settings.environment})
        try:
            yield
        finally:
            database.dispose()
            logger.info("Service stopped, database connections closed")

    app = FastAPI(
        title="Card Tracker",
        description="Credit card balance and transaction tracking service",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.database = database
    app.state.credentials = credentials

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        limiter=FixedWindowRateLimiter(app_settings.rate_limit_max, app_settings.rate_limit_window_seconds),
        prefix=app_settings.api_prefix,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[origin.strip() for origin in app_settings.cors_origin.split(",")],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app, include_stack=not app_settings.is_production)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(auth.router, prefix=app_settings.api_prefix, tags=["auth"])
    app.include_router(users.router, prefix=app_settings.api_prefix, tags=["users"])
    app.include_router(cards.router, prefix=app_settings.api_prefix, tags=["cards"])
    app.include_router(transactions.router, prefix=app_settings.api_prefix, tags=["transactions"])

    return app


def run() -> None:
    """Console entry point; uvicorn handles SIGINT/SIGTERM and runs the lifespan shutdown"""
    uvicorn.run(
        "card_tracker.api.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    run()
