"""Resend email provider adapter."""

import asyncio
import logging
from typing import Any

import resend
from resend.http_client_requests import RequestsClient

from app.adapters.email.base import AbstractEmailProvider, OutboundEmail
from app.core.errors import DeliveryAppError

logger = logging.getLogger(__name__)


class ResendEmailProvider(AbstractEmailProvider):
    """Client for sending email through the Resend API.

    The official SDK is synchronous, so calls run in the default thread pool
    to keep the event loop free while the request is in flight.
    """

    name = "resend"

    def __init__(self, api_key: str, timeout_seconds: float = 15.0) -> None:
        """Configure the Resend SDK.

        Args:
            api_key: Resend API key.
            timeout_seconds: HTTP timeout applied by the SDK's requests client.
        """
        resend.api_key = api_key
        resend.default_http_client = RequestsClient(timeout=timeout_seconds)

    @staticmethod
    def _build_params(email: OutboundEmail) -> dict[str, Any]:
        return {
            "from": email.sender,
            "to": [email.to],
            "reply_to": email.reply_to,
            "subject": email.subject,
            "html": email.html,
        }

    def _send_sync(self, params: dict[str, Any]) -> Any:
        return resend.Emails.send(params)

    async def send(self, email: OutboundEmail) -> str:
        params = self._build_params(email)
        loop = asyncio.get_running_loop()

        try:
            response = await loop.run_in_executor(None, self._send_sync, params)
        except Exception as exc:
            logger.error(
                "email.send_failed",
                extra={
                    "provider": self.name,
                    "error_type": type(exc).__name__,
                    "error_msg": str(exc),
                },
            )
            raise DeliveryAppError(
                code="email_send_failed",
                message=f"Resend API error: {exc}",
                details={"provider": self.name},
            ) from exc

        if isinstance(response, dict):
            message_id = response.get("id")
        else:
            message_id = getattr(response, "id", None)

        if not message_id:
            logger.error(
                "email.send_failed",
                extra={"provider": self.name, "error_type": "missing_id"},
            )
            raise DeliveryAppError(
                code="email_send_failed",
                message="Resend API returned no message id",
                details={"provider": self.name},
            )

        return str(message_id)
