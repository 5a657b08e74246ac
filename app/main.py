"""
Application entry point.

Creates the FastAPI application and wires together:
- Routers (auth, users, teams, players, transfers, health)
- Error handlers (centralized domain-to-HTTP mapping)
- Security middleware (headers, rate limiting)
- Logging configuration
- Schema creation and cache connection on startup

No business logic belongs here.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from app.core.config import settings
from app.infrastructure.market.database import create_schema
from app.interfaces.health import router as health_router
from app.interfaces.market.dependencies import get_engine, get_listing_cache
from app.interfaces.market.router import router as market_router
from app.shared.errors.handlers import register_error_handlers
from app.shared.logging import configure_logging
from app.shared.security.headers import SecurityHeadersMiddleware
from app.shared.security.rate_limiting import limiter, rate_limit_exceeded_handler

logger = logging.getLogger(__name__)

DEV_JWT_SECRET = "dev_secret"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create missing tables, connect the listing cache, dispose the pool on exit."""
    engine = get_engine()
    create_schema(engine)
    cache = get_listing_cache()

    if settings.jwt_secret == DEV_JWT_SECRET and not settings.debug:
        logger.warning("JWT_SECRET is the development default; tokens are forgeable.")

    logger.info(
        "%s %s started (store: %s, cache: %s, team creation: %s).",
        settings.project_name,
        settings.version,
        engine.url.get_backend_name(),
        cache.describe()["backend"],
        settings.team_creation_mode,
    )

    yield

    engine.dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Registers routers, error handlers, and security middleware.
    This is the composition root of the application.

    Returns:
        A fully configured FastAPI application instance.
    """
    configure_logging(level=settings.log_level)

    app = FastAPI(
        title=settings.project_name,
        version=settings.version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    # --- Rate Limiting ---
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # --- Security Middleware ---
    app.add_middleware(SecurityHeadersMiddleware)

    # --- Error Handlers ---
    register_error_handlers(app)

    # --- Routers ---
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(market_router, prefix="/api/v1")

    return app


app = create_app()
