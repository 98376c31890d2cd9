"""Application factory for the FastAPI app.

Centralizes app construction (state, middleware, handlers, routers) so tests
can build isolated instances with their own ledger, provider and clock.
"""

from __future__ import annotations

import time
from typing import Callable

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.adapters.email.base import AbstractEmailProvider
from app.adapters.email.factory import create_email_provider
from app.api.routes import contact_router, health_router
from app.core.config import Settings, settings as default_settings
from app.core.exception_handlers import setup_exception_handlers
from app.core.lifecycle import lifespan
from app.core.logging import configure_logging
from app.core.middleware import body_size_limit_middleware, request_id_middleware
from app.core.openapi import apply_openapi_customizations
from app.core.rate_limit import build_submission_gate
from app.services.contact_service import ContactService
from app.services.submission_gate import SubmissionGate
from app.services.sweeper import LedgerSweeper


def create_app(
    *,
    settings: Settings | None = None,
    gate: SubmissionGate | None = None,
    email_provider: AbstractEmailProvider | None = None,
    clock: Callable[[], float] = time.time,
    configure_logs: bool = True,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        settings: Settings override; defaults to the global instance.
        gate: Submission gate to use; a fresh in-memory one by default.
        email_provider: Provider override; built from RESEND_* settings by default.
        clock: Epoch-seconds time source shared by the service and sweeper.
        configure_logs: Whether to (re)configure the root logger.

    Returns:
        Configured app with state, middleware, handlers and routers.

    Raises:
        ConfigurationAppError: If no provider is given and RESEND_API_KEY is unset.
    """
    cfg = settings or default_settings

    # Logging first so subsequent init logs are formatted as desired
    if configure_logs:
        configure_logging(cfg.log)

    gate = gate or build_submission_gate(cfg.rate_limit)
    provider = email_provider or create_email_provider(cfg.email)

    app = FastAPI(
        title="Contact API",
        description=(
            "Contact form backend: validates submissions, rate limits them per "
            "client address and forwards them by email through Resend."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.settings = cfg
    app.state.gate = gate
    app.state.contact_service = ContactService(
        gate,
        provider,
        sender=cfg.email.from_address,
        recipient=cfg.email.to_address,
        brand=cfg.app.brand_name,
        timeout_seconds=cfg.email.timeout_seconds,
        reserve_before_send=cfg.rate_limit.reserve_before_send,
        clock=clock,
    )
    app.state.sweeper = LedgerSweeper(
        gate,
        interval=cfg.rate_limit.sweep_interval_seconds,
        clock=clock,
    )

    # Middleware (last registered runs first)
    app.middleware("http")(body_size_limit_middleware)
    app.middleware("http")(request_id_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.app.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[cfg.log.request_id_header, "Retry-After"],
    )

    # Exception handlers
    setup_exception_handlers(app)

    # Routers
    app.include_router(contact_router, prefix="/api")
    app.include_router(health_router, prefix="/api")

    apply_openapi_customizations(app)

    return app
