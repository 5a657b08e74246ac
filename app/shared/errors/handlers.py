"""
Centralized error handlers for FastAPI.

Maps domain-specific errors to HTTP responses.
No stack traces or internal details are exposed to clients.
All error responses use the ErrorResponse schema:
``{"error": ..., "code": ..., "detail": ...}``.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.domain.market.errors import (
    AuthenticationError,
    BadRequestError,
    ConflictError,
    ForbiddenError,
    MarketDomainError,
    NotFoundError,
    StoreContentionError,
)

logger = logging.getLogger(__name__)

HTTP_400 = 400
HTTP_401 = 401
HTTP_403 = 403
HTTP_404 = 404
HTTP_409 = 409
HTTP_500 = 500
HTTP_503 = 503


def _error_response(
    status_code: int,
    error: str,
    code: str,
    detail: str | None = None,
    retryable: bool | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Build a consistent JSON error response."""
    body: dict[str, str | bool | None] = {"error": error, "code": code}
    if detail:
        body["detail"] = detail
    if retryable is not None:
        body["retryable"] = retryable
    return JSONResponse(status_code=status_code, content=body, headers=headers)


def register_error_handlers(app: FastAPI) -> None:
    """Register all domain error handlers on the FastAPI application.

    Args:
        app: The FastAPI application instance.
    """

    @app.exception_handler(NotFoundError)
    async def handle_not_found(_request: Request, exc: NotFoundError) -> JSONResponse:
        """Handle missing player, listing, team or user."""
        logger.info("%s not found: %s", exc.entity, exc.entity_id)
        return _error_response(HTTP_404, f"{exc.entity} not found", exc.code, exc.message)

    @app.exception_handler(ForbiddenError)
    async def handle_forbidden(_request: Request, exc: ForbiddenError) -> JSONResponse:
        """Handle actions on entities the caller does not own."""
        logger.warning("Forbidden: %s", exc.message)
        return _error_response(HTTP_403, "Forbidden", exc.code, exc.message)

    @app.exception_handler(ConflictError)
    async def handle_conflict(_request: Request, exc: ConflictError) -> JSONResponse:
        """Handle duplicate active listings."""
        logger.info("Conflict: %s", exc.message)
        return _error_response(HTTP_409, "Conflict", exc.code, exc.message)

    @app.exception_handler(BadRequestError)
    async def handle_bad_request(_request: Request, exc: BadRequestError) -> JSONResponse:
        """Handle business rule violations."""
        logger.info("Rejected request: %s", exc.message)
        return _error_response(HTTP_400, "Bad request", exc.code, exc.message)

    @app.exception_handler(AuthenticationError)
    async def handle_authentication(
        _request: Request, exc: AuthenticationError
    ) -> JSONResponse:
        """Handle missing or invalid credentials."""
        logger.info("Authentication failed: %s", exc.message)
        return _error_response(
            HTTP_401,
            "Unauthorized",
            exc.code,
            exc.message,
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(StoreContentionError)
    async def handle_store_contention(
        _request: Request, exc: StoreContentionError
    ) -> JSONResponse:
        """Handle lock-wait timeouts and deadlocks. The client may retry."""
        logger.warning("Store contention surfaced to client: %s", exc.reason)
        return _error_response(
            HTTP_503,
            "Service busy",
            exc.code,
            "The request conflicted with concurrent activity; retry shortly.",
            retryable=True,
            headers={"Retry-After": "1"},
        )

    @app.exception_handler(MarketDomainError)
    async def handle_market_domain(
        _request: Request, exc: MarketDomainError
    ) -> JSONResponse:
        """Catch-all for unhandled market domain errors."""
        logger.error("Unhandled market domain error: %s", exc.message)
        return _error_response(HTTP_500, "Internal server error", "internal_error")

    @app.exception_handler(Exception)
    async def handle_unexpected(_request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unexpected errors. Never exposes internals."""
        logger.exception("Unexpected error: %s", type(exc).__name__)
        return _error_response(HTTP_500, "Internal server error", "internal_error")
