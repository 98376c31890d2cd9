"""Contact submission service orchestrating the gate and email delivery.

Flow for one submission:
1. Ask the gate for a decision (rate limit, then validation)
2. Render subject and HTML body from the sanitized fields
3. Send through the email provider with a bounded timeout
4. Credit the ledger on success; a failed send never counts against the client
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Mapping

from app.adapters.email.base import AbstractEmailProvider, OutboundEmail
from app.core.errors import DeliveryAppError, RateLimitAppError, ValidationAppError
from app.core.logging import hash_identifier
from app.services.email_template import build_subject, render_html
from app.services.submission_gate import (
    Decision,
    RejectionReason,
    SanitizedSubmission,
    SubmissionGate,
)

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Thank you! We will get back to you within 24 hours."


@dataclass(frozen=True)
class ContactResult:
    """Successful delivery of a submission."""

    message_id: str
    submission: SanitizedSubmission


class ContactService:
    """Service accepting contact submissions and forwarding them by email.

    Attributes:
        gate: Submission gate owning the rate-limit ledger.
        provider: Email delivery provider.
    """

    def __init__(
        self,
        gate: SubmissionGate,
        provider: AbstractEmailProvider,
        *,
        sender: str,
        recipient: str,
        brand: str,
        timeout_seconds: float = 15.0,
        reserve_before_send: bool = True,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.gate = gate
        self.provider = provider
        self.sender = sender
        self.recipient = recipient
        self.brand = brand
        self.timeout_seconds = timeout_seconds
        self.reserve_before_send = reserve_before_send
        self._clock = clock

    def _raise_for_rejection(self, decision: Decision, client_hash: str) -> None:
        if decision.reason is RejectionReason.TOO_MANY_REQUESTS:
            rate = decision.rate_limit
            logger.warning(
                "rate_limit.exceeded",
                extra={
                    "client_hash": client_hash,
                    "limit": rate.limit if rate else None,
                    "retry_after_s": rate.retry_after_seconds if rate else None,
                },
            )
            raise RateLimitAppError(
                code=decision.code or "rate_limited",
                message=decision.message or "",
                details={
                    "limit": rate.limit if rate else 0,
                    "window_seconds": int(self.gate.ledger.window_seconds),
                    "retry_after": (rate.retry_after_seconds or 0) if rate else 0,
                },
            )

        logger.info(
            "contact.rejected",
            extra={"client_hash": client_hash, "reason": decision.code},
        )
        raise ValidationAppError(code=decision.code or "invalid", message=decision.message or "")

    def _build_email(self, submission: SanitizedSubmission, client_id: str) -> OutboundEmail:
        return OutboundEmail(
            sender=self.sender,
            to=self.recipient,
            reply_to=submission.email,
            subject=build_subject(submission),
            html=render_html(
                submission,
                client_id=client_id,
                submitted_at=datetime.now(),
                brand=self.brand,
            ),
        )

    async def _deliver(self, email: OutboundEmail) -> str:
        try:
            return await asyncio.wait_for(
                self.provider.send(email),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as exc:
            logger.error(
                "email.send_timeout",
                extra={
                    "provider": self.provider.name,
                    "timeout_seconds": self.timeout_seconds,
                },
            )
            raise DeliveryAppError(
                code="email_timeout",
                message="Email provider did not respond in time",
                details={
                    "provider": self.provider.name,
                    "timeout_seconds": self.timeout_seconds,
                },
            ) from exc
        except DeliveryAppError:
            raise
        except Exception as exc:
            logger.error(
                "email.send_failed",
                extra={
                    "provider": self.provider.name,
                    "error_type": type(exc).__name__,
                    "error_msg": str(exc),
                },
            )
            raise DeliveryAppError(
                code="email_send_failed",
                message=str(exc),
                details={"provider": self.provider.name},
            ) from exc

    async def submit(self, client_id: str, payload: Mapping[str, Any]) -> ContactResult:
        """Run one submission through the gate and deliver it.

        Args:
            client_id: Client network address used as the rate-limit key.
            payload: Raw request fields (name, email, message, package, phone).

        Returns:
            ContactResult with the provider's message id.

        Raises:
            RateLimitAppError: Client is over the limit for the window.
            ValidationAppError: A field failed validation.
            DeliveryAppError: The provider failed or timed out.
        """
        now = self._clock()
        client_hash = hash_identifier(client_id)

        if self.reserve_before_send:
            decision = self.gate.admit(client_id, now, payload)
        else:
            decision = self.gate.evaluate(client_id, now, payload)

        if not decision.accepted:
            self._raise_for_rejection(decision, client_hash)

        submission = decision.submission
        email = self._build_email(submission, client_id)

        try:
            message_id = await self._deliver(email)
        except BaseException:
            # Failed or cancelled send: hand back the reserved slot
            if self.reserve_before_send:
                self.gate.release(client_id, now)
            raise

        if not self.reserve_before_send:
            self.gate.record(client_id, now)

        logger.info(
            "contact.accepted",
            extra={
                "client_hash": client_hash,
                "submitter_name": submission.name,
                "package": submission.package,
                "message_id": message_id,
            },
        )
        return ContactResult(message_id=message_id, submission=submission)
