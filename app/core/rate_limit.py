"""Rate limiting wiring for FastAPI routes.

This module connects the HTTP layer to the submission gate:
- Builds the process-wide ledger and gate from settings
- Derives the client identifier (rate-limit key) from the request

Rate limiting strategy:
- Sliding window per client network address.
- Clients behind the same address (NAT, proxies) share one budget.
"""

from __future__ import annotations

from fastapi import Request

from app.adapters.rate_limit.base import AbstractSubmissionLedger
from app.adapters.rate_limit.in_memory import InMemorySubmissionLedger
from app.core.config import RateLimitSettings, settings, settings_for
from app.services.submission_gate import SubmissionGate

UNKNOWN_CLIENT = "unknown"


def build_ledger(rate_settings: RateLimitSettings | None = None) -> AbstractSubmissionLedger:
    """Create an empty ledger sized from configuration."""

    cfg = rate_settings or settings.rate_limit
    return InMemorySubmissionLedger(
        limit=cfg.max_requests,
        window_seconds=cfg.window_seconds,
    )


def build_submission_gate(rate_settings: RateLimitSettings | None = None) -> SubmissionGate:
    return SubmissionGate(build_ledger(rate_settings))


def resolve_client_id(request: Request, *, trust_forwarded_for: bool = False) -> str:
    """Return the network address used as the rate-limit key.

    When ``trust_forwarded_for`` is set (service behind a reverse proxy),
    the first hop of ``X-Forwarded-For`` wins over the socket peer.
    """

    if trust_forwarded_for:
        forwarded = request.headers.get("x-forwarded-for", "")
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop

    if request.client and request.client.host:
        return request.client.host
    return UNKNOWN_CLIENT


def get_client_id(request: Request) -> str:
    """FastAPI dependency returning the requester's rate-limit key."""

    return resolve_client_id(
        request,
        trust_forwarded_for=settings_for(request.app).app.trust_forwarded_for,
    )
