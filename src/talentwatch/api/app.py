"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from talentwatch import __version__
from talentwatch.api.middleware import (
    ErrorHandlingMiddleware,
    RequestContextMiddleware,
    RequestLoggingMiddleware,
)
from talentwatch.api.routers import health_router, v1_router
from talentwatch.config.settings import Settings, get_settings
from talentwatch.config.validation import validate_or_raise
from talentwatch.core.logging import get_logger, setup_logging
from talentwatch.services import Services, create_services

logger = get_logger(__name__)


def create_app(settings: Settings | None = None, services: Services | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings override (useful for testing)
        services: Optional prebuilt service container (useful for testing)

    Returns:
        Configured FastAPI application

    Example:
        # Run with uvicorn
        uvicorn talentwatch.api.app:create_app --factory
    """
    if settings is None:
        settings = services.settings if services is not None else get_settings()
    validate_or_raise(settings)

    app = FastAPI(
        title="Talentwatch API",
        description="Consent-gated talent analytics and alerting",
        version=__version__,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        openapi_url="/openapi.json" if settings.DEBUG else None,
        lifespan=_lifespan,
    )

    app.state.settings = settings
    app.state.services = services or create_services(settings)

    _configure_middleware(app)
    _configure_routers(app)

    return app


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("api_starting", storage_backend=app.state.settings.storage_backend.value)

    yield

    logger.info("api_stopping")
    await app.state.services.aclose()


def _configure_middleware(app: FastAPI) -> None:
    """Configure middleware stack.

    Middleware order (outermost to innermost execution):
    1. RequestLoggingMiddleware - Logs all requests
    2. RequestContextMiddleware - Assigns request id and actor
    3. ErrorHandlingMiddleware - Converts exceptions to HTTP responses

    Starlette runs the last-added middleware outermost.
    """
    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(RequestLoggingMiddleware)


def _configure_routers(app: FastAPI) -> None:
    app.include_router(health_router)
    app.include_router(v1_router)
