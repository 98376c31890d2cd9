"""Factory for the email provider client."""

from app.adapters.email.base import AbstractEmailProvider
from app.adapters.email.resend_client import ResendEmailProvider
from app.core.config import EmailSettings, settings
from app.core.errors import ConfigurationAppError


def create_email_provider(email_settings: EmailSettings | None = None) -> AbstractEmailProvider:
    """Instantiate the configured email provider.

    Args:
        email_settings: Optional override; defaults to global settings.

    Returns:
        AbstractEmailProvider: Ready-to-use provider client.

    Raises:
        ConfigurationAppError: If the Resend API key is not configured.
    """
    cfg = email_settings or settings.email

    if not cfg.api_key:
        raise ConfigurationAppError(
            code="email_missing_api_key",
            message="Resend provider requires RESEND_API_KEY environment variable",
        )

    return ResendEmailProvider(api_key=cfg.api_key, timeout_seconds=cfg.timeout_seconds)
