from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Request

from app.core.config import settings_for
from app.core.lifecycle import memory_usage, uptime_seconds
from app.schemas.health import HealthResponse, MemoryUsage

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
def health_check(request: Request) -> HealthResponse:
    """Health check endpoint.

    Used by load balancers and monitoring systems to determine service health.

    Returns:
        HealthResponse: status "OK", current UTC time, email service name,
            process uptime in seconds and memory figures.
    """

    return HealthResponse(
        status="OK",
        timestamp=datetime.now(timezone.utc).isoformat(),
        service=settings_for(request.app).app.service_name,
        uptime=uptime_seconds(),
        memory=MemoryUsage(**memory_usage()),
    )
