"""Global exception handlers for consistent error responses.

Every error leaves the service as ``{"success": false, "message": ...}``
plus the request id for tracing.

Design:
- ValidationAppError → 400, specific message
- RateLimitAppError → 429, retry window in message and headers
- DeliveryAppError / ConfigurationAppError → 500, generic message only
- Unmatched route → 404 "Endpoint not found"
- Malformed body → 400
- Unexpected Exception → generic 500 (safety net)
"""

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings_for
from app.core.errors import (
    AppError,
    ConfigurationAppError,
    DeliveryAppError,
    RateLimitAppError,
    ValidationAppError,
)
from app.core.logging import get_request_id

logger = logging.getLogger(__name__)

SYSTEM_UNAVAILABLE_MESSAGE = (
    "System temporarily unavailable. Please try again in a few minutes "
    "or contact us via WhatsApp."
)
NOT_FOUND_MESSAGE = "Endpoint not found"
INVALID_BODY_MESSAGE = "Invalid request body."
UNEXPECTED_ERROR_MESSAGE = "Something went wrong. Please try again later."


def error_response(
    status_code: int,
    message: str,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Build the shared error envelope."""
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "message": message,
            "request_id": get_request_id(),
        },
        headers=headers,
    )


def _rate_limit_headers(request: Request, exc: RateLimitAppError) -> dict[str, str] | None:
    if not settings_for(request.app).rate_limit.include_headers or not exc.details:
        return None
    return {
        "Retry-After": str(exc.details.get("retry_after", 0)),
        "X-RateLimit-Limit": str(exc.details.get("limit", 0)),
        "X-RateLimit-Remaining": "0",
    }


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle domain application errors.

    Client errors carry their specific message. Server-side failures are
    logged with detail while the client only sees a generic message.

    Args:
        request: FastAPI request object.
        exc: AppError instance (or subclass).

    Returns:
        JSONResponse with appropriate status code and error envelope.
    """
    if isinstance(exc, RateLimitAppError):
        return error_response(429, exc.message, headers=_rate_limit_headers(request, exc))

    if isinstance(exc, (DeliveryAppError, ConfigurationAppError)):
        logger.error(
            "app_error_handled",
            extra={
                "error_code": exc.code,
                "error_msg": exc.message,
                "details": exc.details,
                "status_code": 500,
                "request_path": request.url.path,
            },
        )
        return error_response(500, SYSTEM_UNAVAILABLE_MESSAGE)

    if not isinstance(exc, ValidationAppError):
        logger.warning(
            "app_error_unmapped",
            extra={"error_code": exc.code, "error_type": type(exc).__name__},
        )
    return error_response(400, exc.message)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Map routing-level HTTP errors onto the error envelope."""
    if exc.status_code in (404, 405):
        return error_response(404, NOT_FOUND_MESSAGE)

    detail = exc.detail if isinstance(exc.detail, str) else UNEXPECTED_ERROR_MESSAGE
    return error_response(exc.status_code, detail, headers=getattr(exc, "headers", None))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed JSON or a non-object body."""
    logger.info(
        "request.invalid_body",
        extra={"request_path": request.url.path, "error_count": len(exc.errors())},
    )
    return error_response(400, INVALID_BODY_MESSAGE)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors (safety net).

    Logs detailed information for debugging while returning a generic
    message. No stack traces or exception text reach the client.
    """
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
        },
        exc_info=exc,
    )
    return error_response(500, UNEXPECTED_ERROR_MESSAGE)


def setup_exception_handlers(app) -> None:
    """Register all exception handlers with the FastAPI app.

    Args:
        app: FastAPI application instance.
    """
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(StarletteHTTPException)(http_exception_handler)
    app.exception_handler(RequestValidationError)(request_validation_handler)
    app.exception_handler(Exception)(general_exception_handler)
