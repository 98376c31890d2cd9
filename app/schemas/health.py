"""Pydantic schemas for the health endpoint."""

from pydantic import BaseModel, Field


class MemoryUsage(BaseModel):
    rss: int | None = Field(default=None, description="Current resident set size in bytes.")
    max_rss: int | None = Field(default=None, description="Peak resident set size in bytes.")


class HealthResponse(BaseModel):
    status: str = Field("OK", description="Liveness indicator.")
    timestamp: str = Field(..., description="Current time, ISO-8601 UTC.")
    service: str = Field(..., description="Email delivery service in use.")
    uptime: float = Field(..., description="Seconds since process start.")
    memory: MemoryUsage
