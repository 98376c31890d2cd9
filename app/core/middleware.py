"""HTTP middleware for request correlation and body size enforcement.

Usage:
    app.middleware("http")(body_size_limit_middleware)
    app.middleware("http")(request_id_middleware)

Starlette runs the most recently registered middleware first, so the
request id is set before the size check and shows up on 413 responses too.
"""

from __future__ import annotations

import logging
import time
import uuid

from fastapi import Request, Response
from fastapi.responses import JSONResponse

from app.core.config import settings_for
from app.core.logging import clear_request_id, get_request_id, set_request_id

logger = logging.getLogger(__name__)

PAYLOAD_TOO_LARGE_MESSAGE = "Request entity too large."


async def request_id_middleware(request: Request, call_next) -> Response:
    """Attach a correlation id and duration to every request/response pair.

    Uses the incoming ``X-Request-ID`` header (configurable via
    LOG_REQUEST_ID_HEADER) when present, otherwise generates a UUID. The id
    is stored in contextvars for log correlation and echoed back in the
    response headers along with ``X-Request-Duration-ms``.
    """

    header_name = settings_for(request.app).log.request_id_header
    request_id = request.headers.get(header_name) or str(uuid.uuid4())
    set_request_id(request_id)
    start = time.perf_counter()
    try:
        response: Response = await call_next(request)
    finally:
        clear_request_id()

    duration_ms = (time.perf_counter() - start) * 1000
    response.headers[header_name] = request_id
    response.headers.setdefault("X-Request-Duration-ms", f"{duration_ms:.2f}")
    return response


def _payload_too_large(size: int, max_bytes: int) -> JSONResponse:
    logger.warning(
        "request.body_too_large",
        extra={"size": size, "max_bytes": max_bytes},
    )
    return JSONResponse(
        status_code=413,
        content={
            "success": False,
            "message": PAYLOAD_TOO_LARGE_MESSAGE,
            "request_id": get_request_id(),
        },
    )


async def body_size_limit_middleware(request: Request, call_next) -> Response:
    """Reject request bodies larger than APP_MAX_BODY_BYTES with 413.

    Checks the Content-Length header first; bodies sent without one
    (chunked transfer) are read and measured before routing.
    """

    max_bytes = settings_for(request.app).app.max_body_bytes
    content_length = request.headers.get("content-length")

    if content_length is not None:
        try:
            declared = int(content_length)
        except ValueError:
            declared = 0
        if declared > max_bytes:
            return _payload_too_large(declared, max_bytes)
    elif request.method in {"POST", "PUT", "PATCH"}:
        body = await request.body()
        if len(body) > max_bytes:
            return _payload_too_large(len(body), max_bytes)

    return await call_next(request)
