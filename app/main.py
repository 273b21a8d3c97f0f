"""
Application entry point.

Creates the FastAPI application and wires together:
- Routers (one per bounded context)
- Error handlers (centralized error-kind-to-HTTP mapping)
- Security middleware (headers, rate limiting, request ids)
- Logging configuration
- Outbox dispatcher lifecycle

No business logic belongs here.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from app.core.config import Settings, get_settings
from app.core.container import Container, build_container
from app.interfaces.health import router as health_router
from app.interfaces.ordering.router import router as ordering_router
from app.shared.errors.handlers import register_error_handlers
from app.shared.logging import configure_logging
from app.shared.security.headers import RequestContextMiddleware, SecurityHeadersMiddleware
from app.shared.security.rate_limiting import build_limiter, rate_limit_exceeded_handler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: prepare storage and run the outbox dispatcher."""
    container: Container = app.state.container
    await container.startup()
    logger.info("%s %s started", container.settings.project_name, container.settings.version)
    try:
        yield
    finally:
        await container.shutdown()
        logger.info("%s stopped", container.settings.project_name)


def create_app(
    settings: Optional[Settings] = None,
    container: Optional[Container] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Registers routers, error handlers, and security middleware.
    This is the composition root of the application.

    Args:
        settings: Settings to use, defaults to the process settings.
        container: Pre-built container, built from settings when omitted.

    Returns:
        A fully configured FastAPI application instance.
    """
    if container is not None:
        settings = container.settings
    settings = settings or get_settings()
    configure_logging(level=settings.log_level)

    app = FastAPI(
        title=settings.project_name,
        version=settings.version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.container = container or build_container(settings)

    # --- Rate Limiting ---
    app.state.limiter = build_limiter(
        settings.rate_limit_default, enabled=settings.rate_limit_enabled
    )
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # --- Security Middleware ---
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestContextMiddleware)

    # --- Error Handlers ---
    register_error_handlers(app)

    # --- Routers ---
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(ordering_router, prefix="/api/v1")

    return app


app = create_app()


def run() -> None:
    """Serve the application with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run("app.main:app", host=settings.host, port=settings.port, reload=False)
