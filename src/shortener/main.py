"""FastAPI application entrypoint."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shortener.api.errors import register_exception_handlers
from shortener.api.middleware import RequestIDMiddleware, RequestLoggingMiddleware
from shortener.api.router import api_router
from shortener.config import Settings, load_settings
from shortener.database import (
    close_db,
    create_engine_from_settings,
    create_session_factory,
    init_db,
)
from shortener.services.email import EmailService, get_email_backend

logger = logging.getLogger(__name__)


def init_sentry(settings: Settings) -> None:
    """Initialize Sentry for error tracking when a DSN is configured."""
    if not settings.sentry_dsn:
        return

    import sentry_sdk

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        traces_sample_rate=0.1 if settings.is_production else 1.0,
    )
    logger.info("Sentry initialized")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    settings: Settings = app.state.settings
    # Production schemas come from Alembic migrations
    if not settings.is_production:
        await init_db(app.state.engine)
    yield
    await close_db(app.state.engine)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application around an injected settings object."""
    settings = settings or load_settings()
    init_sentry(settings)

    app = FastAPI(
        title="URL Shortener API",
        description="Short links for email-verified accounts",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.debug_enabled else None,
        redoc_url="/redoc" if settings.debug_enabled else None,
        openapi_url="/openapi.json" if settings.debug_enabled else None,
    )

    app.state.settings = settings
    app.state.engine = create_engine_from_settings(settings)
    app.state.session_factory = create_session_factory(app.state.engine)
    app.state.email_service = EmailService(get_email_backend(settings), settings)

    register_exception_handlers(app)

    # Added innermost first: logging needs the request ID set by the outer middleware
    app.add_middleware(RequestLoggingMiddleware)  # type: ignore[arg-type]
    app.add_middleware(RequestIDMiddleware)  # type: ignore[arg-type]

    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "Accept", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
    )

    app.include_router(api_router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    from shortener.logging import get_uvicorn_log_config, setup_logging

    settings = load_settings()
    setup_logging(settings)
    uvicorn.run(
        "shortener.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development,
        log_config=get_uvicorn_log_config(settings),
    )
