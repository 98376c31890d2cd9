"""Email adapter layer - abstracts over the delivery provider."""

from app.adapters.email.base import AbstractEmailProvider, OutboundEmail
from app.adapters.email.factory import create_email_provider
from app.adapters.email.resend_client import ResendEmailProvider

__all__ = [
    "AbstractEmailProvider",
    "OutboundEmail",
    "ResendEmailProvider",
    "create_email_provider",
]
