"""Submission ledger adapters.

This package provides a small abstraction layer so the service can start with
an in-memory ledger and later migrate to Redis or another shared store without
changing the gate or the API layer.
"""

from app.adapters.rate_limit.base import AbstractSubmissionLedger, RateLimitResult
from app.adapters.rate_limit.in_memory import InMemorySubmissionLedger

__all__ = [
    "AbstractSubmissionLedger",
    "InMemorySubmissionLedger",
    "RateLimitResult",
]
