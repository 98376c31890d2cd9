"""Rate-limited submission gate for the contact form.

The gate decides whether a submission may proceed to email delivery:
- Per-client throttling against a sliding-window ledger
- Field presence, length and email-format validation (fixed order,
  first failure wins)
- Sanitization (trim + length cap) computed once and reused downstream

The gate never talks to the email provider. Callers credit the ledger after
a successful send (``record``) or reserve up front (``admit``) and hand the
slot back on failure (``release``).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from app.adapters.rate_limit.base import AbstractSubmissionLedger, RateLimitResult

MAX_FIELD_LENGTH = 1000
MIN_NAME_LENGTH = 2
MIN_MESSAGE_LENGTH = 10
DEFAULT_PACKAGE = "General Inquiry"
DEFAULT_PHONE = "Not provided"

# Shallow syntactic check: local@domain.tld without whitespace or extra '@'
EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")

MSG_REQUIRED = "Name, email, and message are required."
MSG_NAME_TOO_SHORT = f"Name must be at least {MIN_NAME_LENGTH} characters."
MSG_INVALID_EMAIL = "Please provide a valid email address."
MSG_MESSAGE_TOO_SHORT = f"Message must be at least {MIN_MESSAGE_LENGTH} characters."


def sanitize_text(value: Any, max_length: int = MAX_FIELD_LENGTH) -> str:
    """Convert to text, trim surrounding whitespace and cap the length.

    Idempotent: ``sanitize_text(sanitize_text(x)) == sanitize_text(x)``.
    """
    return str(value).strip()[:max_length]


def is_valid_email(email: str) -> bool:
    """Return True if ``email`` looks like ``local@domain.tld``."""
    return EMAIL_PATTERN.fullmatch(email) is not None


class RejectionReason(str, Enum):
    TOO_MANY_REQUESTS = "too_many_requests"
    VALIDATION_ERROR = "validation_error"


@dataclass(frozen=True)
class SanitizedSubmission:
    """Contact fields after trimming, capping and defaulting."""

    name: str
    email: str
    message: str
    package: str
    phone: str


@dataclass(frozen=True)
class Decision:
    """Outcome of evaluating a submission.

    Exactly one of ``submission`` (accepted) or ``reason`` (rejected) is set.
    """

    submission: SanitizedSubmission | None = None
    reason: RejectionReason | None = None
    code: str | None = None
    message: str | None = None
    rate_limit: RateLimitResult | None = None

    @property
    def accepted(self) -> bool:
        return self.submission is not None

    @classmethod
    def accept(
        cls,
        submission: SanitizedSubmission,
        rate_limit: RateLimitResult | None = None,
    ) -> "Decision":
        return cls(submission=submission, rate_limit=rate_limit)

    @classmethod
    def too_many_requests(cls, message: str, rate_limit: RateLimitResult) -> "Decision":
        return cls(
            reason=RejectionReason.TOO_MANY_REQUESTS,
            code="rate_limited",
            message=message,
            rate_limit=rate_limit,
        )

    @classmethod
    def invalid(cls, code: str, message: str) -> "Decision":
        return cls(reason=RejectionReason.VALIDATION_ERROR, code=code, message=message)


def validate_submission(payload: Mapping[str, Any]) -> Decision:
    """Validate and sanitize a raw payload, ignoring rate limits.

    Checks run in a fixed order and stop at the first failure:
    required fields, name length, email format, message length.

    A required field counts as missing when it is falsy, so empty lists and
    objects are rejected along with None and "".
    """
    name = payload.get("name")
    email = payload.get("email")
    message = payload.get("message")

    if not name or not email or not message:
        return Decision.invalid("missing_required_fields", MSG_REQUIRED)

    package = payload.get("package")
    phone = payload.get("phone")

    submission = SanitizedSubmission(
        name=sanitize_text(name),
        email=str(email).strip(),
        message=sanitize_text(message),
        package=sanitize_text(package) if package else DEFAULT_PACKAGE,
        phone=sanitize_text(phone) if phone else DEFAULT_PHONE,
    )

    if len(submission.name) < MIN_NAME_LENGTH:
        return Decision.invalid("name_too_short", MSG_NAME_TOO_SHORT)

    if not is_valid_email(submission.email):
        return Decision.invalid("invalid_email", MSG_INVALID_EMAIL)

    if len(submission.message) < MIN_MESSAGE_LENGTH:
        return Decision.invalid("message_too_short", MSG_MESSAGE_TOO_SHORT)

    return Decision.accept(submission)


class SubmissionGate:
    """Admission control in front of the outbound email send.

    Attributes:
        ledger: Per-client store of recent submission timestamps.
    """

    def __init__(self, ledger: AbstractSubmissionLedger) -> None:
        self.ledger = ledger

    @property
    def rate_limit_message(self) -> str:
        minutes = max(1, round(self.ledger.window_seconds / 60))
        unit = "minute" if minutes == 1 else "minutes"
        return f"Too many submissions. Please try again in {minutes} {unit}."

    def evaluate(self, client_id: str, now: float, payload: Mapping[str, Any]) -> Decision:
        """Decide whether a submission may proceed.

        Does not consume a slot. A rejected-for-rate decision leaves the
        ledger untouched apart from lazy pruning of expired entries.

        Args:
            client_id: Rate-limit key (client network address).
            now: Current epoch time in seconds.
            payload: Raw request fields.

        Returns:
            Decision: accepted with sanitized fields, or rejected with a reason.
        """
        rate = self.ledger.check(client_id, now)
        if not rate.allowed:
            return Decision.too_many_requests(self.rate_limit_message, rate)

        decision = validate_submission(payload)
        if not decision.accepted:
            return decision
        return Decision.accept(decision.submission, rate)

    def admit(self, client_id: str, now: float, payload: Mapping[str, Any]) -> Decision:
        """Evaluate and, on acceptance, reserve a slot at ``now``.

        The caller must ``release(client_id, now)`` if delivery then fails.
        """
        decision = self.evaluate(client_id, now, payload)
        if not decision.accepted:
            return decision

        rate = self.ledger.try_reserve(client_id, now)
        if not rate.allowed:
            return Decision.too_many_requests(self.rate_limit_message, rate)
        return Decision.accept(decision.submission, rate)

    def record(self, client_id: str, now: float) -> None:
        """Credit a successful delivery to the client."""
        self.ledger.record(client_id, now)

    def release(self, client_id: str, now: float) -> bool:
        """Hand back a slot reserved by ``admit``."""
        return self.ledger.release(client_id, now)

    def sweep(self, now: float) -> int:
        """Drop expired timestamps for every client; return keys removed."""
        return self.ledger.sweep(now)
