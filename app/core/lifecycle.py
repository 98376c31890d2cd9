"""Process lifecycle: startup/shutdown hooks, signals, uptime and memory stats."""

from __future__ import annotations

import logging
import os
import signal
import sys
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

import uvicorn
from fastapi import FastAPI

from app.core.config import settings_for

logger = logging.getLogger(__name__)

_STARTED_AT = time.monotonic()


def uptime_seconds() -> float:
    """Seconds since this process imported the application."""
    return time.monotonic() - _STARTED_AT


def memory_usage() -> dict[str, int | None]:
    """Current and peak resident set size in bytes, where the OS exposes them."""
    rss: int | None = None
    statm = Path("/proc/self/statm")
    if statm.is_file():
        resident_pages = int(statm.read_text().split()[1])
        rss = resident_pages * os.sysconf("SC_PAGE_SIZE")

    max_rss: int | None = None
    if sys.platform != "win32":
        import resource

        peak = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
        # Linux reports kilobytes, macOS reports bytes
        max_rss = peak if sys.platform == "darwin" else peak * 1024

    return {"rss": rss, "max_rss": max_rss}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Start the ledger sweeper on startup and cancel it on shutdown."""
    cfg = settings_for(app)
    sweeper = app.state.sweeper
    await sweeper.start()

    base_url = f"http://localhost:{cfg.app.port}"
    logger.info(
        "app.startup",
        extra={
            "port": cfg.app.port,
            "email_service": cfg.app.service_name,
            "health_url": f"{base_url}/api/health",
            "contact_url": f"{base_url}/api/contact",
        },
    )
    try:
        yield
    finally:
        await sweeper.stop()
        logger.info("app.shutdown")


class ContactServer(uvicorn.Server):
    """uvicorn server that logs which termination signal it received.

    Shutdown itself is uvicorn's: stop accepting connections and run the
    lifespan shutdown. The signal is not re-raised afterwards, so the
    process exits with status 0.
    """

    def handle_exit(self, sig: int, frame) -> None:
        name = signal.Signals(sig).name
        logger.info(
            "Received %s, shutting down gracefully",
            name,
            extra={"event": "app.signal_received", "signal": name},
        )
        super().handle_exit(sig, frame)
        # uvicorn re-raises captured signals once serving stops
        self._captured_signals.clear()
