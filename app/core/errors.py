"""Application-level exception types.

This module defines domain errors used across services/adapters, enabling
consistent error handling, logging, and API responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients."""

    field: str
    min_length: int
    actual_length: int
    limit: int
    window_seconds: int
    retry_after: int
    provider: str
    timeout_seconds: float
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when a submitted field fails validation."""


class RateLimitAppError(AppError):
    """Raised when a client has used up its submissions for the window."""


class DeliveryAppError(AppError):
    """Raised when the email provider fails, errors out, or times out."""


class ConfigurationAppError(AppError):
    """Raised when required configuration (e.g. provider credential) is missing."""
