"""
Health check router.

``/health`` is the liveness check: it never touches a backing service.
``/health/ready`` is the readiness check: it round-trips the entity store
and the listing cache and answers 503 when the store is unreachable.
A cache that fell back to process memory still counts as ready.
"""

import logging

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.domain.market.ports import ListingCache
from app.infrastructure.market.listing_cache import RedisListingCache
from app.interfaces.market.dependencies import get_engine, get_listing_cache
from app.interfaces.market.schemas import HealthResponse, ReadinessResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


def _cache_backend(cache: ListingCache) -> str | None:
    if isinstance(cache, RedisListingCache):
        return cache.describe()["backend"]
    return None


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Returns application health status and version.",
)
def health_check(cache: ListingCache = Depends(get_listing_cache)) -> HealthResponse:
    """Return current application health status."""
    return HealthResponse(status="ok", version=settings.version, cache=_cache_backend(cache))


@router.get(
    "/health/ready",
    response_model=ReadinessResponse,
    responses={503: {"model": ReadinessResponse}},
    summary="Readiness check",
)
def readiness_check(
    response: Response,
    engine: Engine = Depends(get_engine),
    cache: ListingCache = Depends(get_listing_cache),
) -> ReadinessResponse:
    checks: dict[str, str] = {}

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except SQLAlchemyError as exc:
        logger.warning("Readiness: entity store unreachable (%s)", type(exc).__name__)
        checks["database"] = "unavailable"

    if isinstance(cache, RedisListingCache) and not cache.ping():
        checks["cache"] = "degraded"
    else:
        checks["cache"] = _cache_backend(cache) or "ok"

    ready = checks["database"] == "ok"
    if not ready:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return ReadinessResponse(status="ok" if ready else "unavailable", checks=checks)
