"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
It sets TESTING so no local .env file is loaded, and provides the
environment every settings-dependent import needs.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["TESTING"] = "true"

os.environ.setdefault("RESEND_API_KEY", "re_test_key_123")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.adapters.rate_limit.in_memory import InMemorySubmissionLedger
from app.core.app_factory import create_app
from app.services.submission_gate import SubmissionGate
from tests.fakes import VALID_PAYLOAD, FakeClock, FakeEmailProvider


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def provider() -> FakeEmailProvider:
    return FakeEmailProvider()


@pytest.fixture
def ledger() -> InMemorySubmissionLedger:
    return InMemorySubmissionLedger(limit=10, window_seconds=15 * 60)


@pytest.fixture
def gate(ledger: InMemorySubmissionLedger) -> SubmissionGate:
    return SubmissionGate(ledger)


@pytest.fixture
def app(gate: SubmissionGate, provider: FakeEmailProvider, clock: FakeClock) -> FastAPI:
    return create_app(gate=gate, email_provider=provider, clock=clock, configure_logs=False)


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Create FastAPI test client."""
    return TestClient(app)


@pytest.fixture
def valid_payload() -> dict[str, str]:
    return dict(VALID_PAYLOAD)
