"""Unit tests for the submission gate: sanitization, validation and throttling."""

import pytest

from app.adapters.rate_limit.in_memory import InMemorySubmissionLedger
from app.services.submission_gate import (
    DEFAULT_PACKAGE,
    DEFAULT_PHONE,
    MAX_FIELD_LENGTH,
    MSG_INVALID_EMAIL,
    MSG_MESSAGE_TOO_SHORT,
    MSG_NAME_TOO_SHORT,
    MSG_REQUIRED,
    RejectionReason,
    SubmissionGate,
    is_valid_email,
    sanitize_text,
    validate_submission,
)

NOW = 1_700_000_000.0


def _payload(**overrides):
    base = {"name": "Jo", "email": "jo@example.com", "message": "Hello there!"}
    base.update(overrides)
    return base


class TestSanitizeText:
    def test_trims_and_truncates(self) -> None:
        assert sanitize_text("  hi  ") == "hi"
        assert len(sanitize_text("x" * 5000)) == MAX_FIELD_LENGTH

    def test_converts_to_text(self) -> None:
        assert sanitize_text(12345) == "12345"

    @pytest.mark.parametrize(
        "value",
        ["  padded  ", "x" * 1500, " " + "y" * 999 + "  ", "\tmulti\nline\n", ""],
    )
    def test_idempotent(self, value: str) -> None:
        once = sanitize_text(value)
        assert sanitize_text(once) == once


class TestIsValidEmail:
    @pytest.mark.parametrize("email", ["a@b.co", "jo@example.com", "first.last@sub.domain.org"])
    def test_accepts(self, email: str) -> None:
        assert is_valid_email(email) is True

    @pytest.mark.parametrize(
        "email",
        ["a@b", "a b@c.com", "@b.co", "a@.co", "a@b.", "a@@b.co", "plainaddress", ""],
    )
    def test_rejects(self, email: str) -> None:
        assert is_valid_email(email) is False


class TestValidateSubmission:
    @pytest.mark.parametrize("missing", ["name", "email", "message"])
    def test_required_fields(self, missing: str) -> None:
        decision = validate_submission(_payload(**{missing: ""}))
        assert decision.accepted is False
        assert decision.reason is RejectionReason.VALIDATION_ERROR
        assert decision.message == MSG_REQUIRED

    def test_absent_fields_are_required(self) -> None:
        assert validate_submission({}).message == MSG_REQUIRED

    @pytest.mark.parametrize("empty", [None, [], {}, 0, False])
    def test_falsy_values_count_as_missing(self, empty) -> None:
        decision = validate_submission(_payload(name=empty))
        assert decision.code == "missing_required_fields"
        assert decision.message == MSG_REQUIRED

    def test_name_boundary(self) -> None:
        assert validate_submission(_payload(name="Jo")).accepted is True
        rejected = validate_submission(_payload(name="J"))
        assert rejected.message == MSG_NAME_TOO_SHORT
        assert rejected.code == "name_too_short"

    def test_name_length_measured_after_trim(self) -> None:
        assert validate_submission(_payload(name="  J  ")).message == MSG_NAME_TOO_SHORT

    def test_message_boundary(self) -> None:
        assert validate_submission(_payload(message="x" * 10)).accepted is True
        assert validate_submission(_payload(message="x" * 9)).message == MSG_MESSAGE_TOO_SHORT

    def test_invalid_email(self) -> None:
        decision = validate_submission(_payload(email="a@b"))
        assert decision.message == MSG_INVALID_EMAIL

    def test_email_is_trimmed_but_not_capped(self) -> None:
        long_local = "a" * 1200
        decision = validate_submission(_payload(email=f"  {long_local}@example.com "))
        assert decision.accepted is True
        assert decision.submission.email == f"{long_local}@example.com"

    def test_validation_order_short_circuits(self) -> None:
        # Name, email and message are all bad: the name rule reports first
        decision = validate_submission(_payload(name="J", email="bad", message="short"))
        assert decision.message == MSG_NAME_TOO_SHORT

        decision = validate_submission(_payload(email="bad", message="short"))
        assert decision.message == MSG_INVALID_EMAIL

    def test_defaults_for_optional_fields(self) -> None:
        submission = validate_submission(_payload()).submission
        assert submission.package == DEFAULT_PACKAGE
        assert submission.phone == DEFAULT_PHONE

    def test_optional_fields_are_sanitized(self) -> None:
        submission = validate_submission(
            _payload(package="  Premium  ", phone=" +44 20 7946 0000 ")
        ).submission
        assert submission.package == "Premium"
        assert submission.phone == "+44 20 7946 0000"

    def test_message_is_capped(self) -> None:
        submission = validate_submission(_payload(message="m" * 2000)).submission
        assert len(submission.message) == MAX_FIELD_LENGTH


class TestSubmissionGate:
    @pytest.fixture
    def gate(self) -> SubmissionGate:
        return SubmissionGate(InMemorySubmissionLedger(limit=10, window_seconds=900))

    def test_evaluate_accepts_without_consuming(self, gate: SubmissionGate) -> None:
        decision = gate.evaluate("1.2.3.4", NOW, _payload())

        assert decision.accepted is True
        assert decision.submission.name == "Jo"
        assert len(gate.ledger) == 0

    def test_evaluate_rejects_when_full(self, gate: SubmissionGate) -> None:
        for i in range(10):
            gate.record("1.2.3.4", NOW + i)

        decision = gate.evaluate("1.2.3.4", NOW + 20, _payload())

        assert decision.accepted is False
        assert decision.reason is RejectionReason.TOO_MANY_REQUESTS
        assert "15 minutes" in decision.message
        assert decision.rate_limit.retry_after_seconds == 880
        assert len(gate.ledger.recent("1.2.3.4", NOW + 20)) == 10

    def test_rate_limit_checked_before_validation(self, gate: SubmissionGate) -> None:
        for i in range(10):
            gate.record("1.2.3.4", NOW)

        decision = gate.evaluate("1.2.3.4", NOW, {})
        assert decision.reason is RejectionReason.TOO_MANY_REQUESTS

    def test_validation_failure_does_not_touch_ledger(self, gate: SubmissionGate) -> None:
        decision = gate.admit("1.2.3.4", NOW, _payload(name="J"))

        assert decision.reason is RejectionReason.VALIDATION_ERROR
        assert len(gate.ledger) == 0

    def test_admit_reserves_and_release_returns_slot(self, gate: SubmissionGate) -> None:
        decision = gate.admit("1.2.3.4", NOW, _payload())

        assert decision.accepted is True
        assert decision.rate_limit.remaining == 9
        assert gate.ledger.recent("1.2.3.4", NOW) == [NOW]

        assert gate.release("1.2.3.4", NOW) is True
        assert len(gate.ledger) == 0

    def test_eleventh_admission_rejected(self, gate: SubmissionGate) -> None:
        for i in range(10):
            assert gate.admit("1.2.3.4", NOW + i, _payload()).accepted is True

        decision = gate.admit("1.2.3.4", NOW + 10, _payload())
        assert decision.reason is RejectionReason.TOO_MANY_REQUESTS
        # The rejected attempt does not extend the window
        assert gate.ledger.recent("1.2.3.4", NOW + 10)[-1] == NOW + 9

    def test_slot_frees_after_window(self, gate: SubmissionGate) -> None:
        for _ in range(10):
            gate.record("1.2.3.4", NOW)

        assert gate.evaluate("1.2.3.4", NOW + 899, _payload()).accepted is False
        assert gate.evaluate("1.2.3.4", NOW + 900, _payload()).accepted is True

    def test_sweep(self, gate: SubmissionGate) -> None:
        gate.record("old", NOW)
        gate.record("new", NOW + 1000)

        assert gate.sweep(NOW + 1000) == 1
        assert len(gate.ledger) == 1

    def test_rate_limit_message_uses_window(self) -> None:
        gate = SubmissionGate(InMemorySubmissionLedger(limit=1, window_seconds=60))
        assert gate.rate_limit_message == "Too many submissions. Please try again in 1 minute."
