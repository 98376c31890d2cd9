from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from typing import Callable

from app.services.submission_gate import SubmissionGate

logger = logging.getLogger(__name__)


class LedgerSweeper:
    """Periodically prunes expired entries from the gate's ledger.

    Owned by the application lifespan: started on startup, cancelled on
    shutdown. Keys of clients that stopped submitting are dropped so memory
    stays bounded.
    """

    def __init__(
        self,
        gate: SubmissionGate,
        *,
        interval: float,
        clock: Callable[[], float] = time.time,
        name: str = "ledger-sweeper",
    ) -> None:
        self._gate = gate
        self._interval = interval
        self._clock = clock
        self._name = name
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop(), name=self._name)
        logger.info("%s started (every %ds)", self._name, self._interval)

    async def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None
            logger.info("%s stopped", self._name)

    def sweep_once(self) -> int:
        removed = self._gate.sweep(self._clock())
        logger.info(
            "ledger.swept",
            extra={"keys_removed": removed, "keys_remaining": len(self._gate.ledger)},
        )
        return removed

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                self.sweep_once()
            except Exception:
                logger.exception("%s tick failed, will retry", self._name)
