"""Tests for the periodic ledger sweeper."""

import asyncio

import pytest

from app.adapters.rate_limit.in_memory import InMemorySubmissionLedger
from app.services.submission_gate import SubmissionGate
from app.services.sweeper import LedgerSweeper
from tests.fakes import FakeClock


def _gate() -> SubmissionGate:
    return SubmissionGate(InMemorySubmissionLedger(limit=10, window_seconds=900))


def test_sweep_once_removes_idle_clients() -> None:
    clock = FakeClock()
    gate = _gate()
    gate.record("idle", clock())
    gate.record("active", clock() + 3000)
    clock.advance(3600)

    sweeper = LedgerSweeper(gate, interval=3600, clock=clock)

    assert sweeper.sweep_once() == 1
    assert len(gate.ledger) == 1


@pytest.mark.asyncio
async def test_background_loop_sweeps_and_stops() -> None:
    clock = FakeClock()
    gate = _gate()
    gate.record("idle", clock())
    clock.advance(1000)

    sweeper = LedgerSweeper(gate, interval=0.01, clock=clock)
    await sweeper.start()
    assert sweeper.running is True

    for _ in range(100):
        if len(gate.ledger) == 0:
            break
        await asyncio.sleep(0.01)

    await sweeper.stop()

    assert len(gate.ledger) == 0
    assert sweeper.running is False


@pytest.mark.asyncio
async def test_loop_survives_failing_tick() -> None:
    clock = FakeClock()
    gate = _gate()
    calls = {"n": 0}

    def flaky_sweep(now: float) -> int:
        calls["n"] += 1
        if calls["n"] == 1:
            raise RuntimeError("transient")
        return 0

    gate.sweep = flaky_sweep  # type: ignore[method-assign]
    sweeper = LedgerSweeper(gate, interval=0.01, clock=clock)
    await sweeper.start()

    for _ in range(100):
        if calls["n"] >= 2:
            break
        await asyncio.sleep(0.01)

    await sweeper.stop()
    assert calls["n"] >= 2


@pytest.mark.asyncio
async def test_stop_without_start_is_noop() -> None:
    sweeper = LedgerSweeper(_gate(), interval=1)
    await sweeper.stop()
    assert sweeper.running is False
