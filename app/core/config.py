"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file, with a plain .env
  used as a fallback
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Map environments to their respective .env files (relative to PROJECT_ROOT)
ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}


def _resolve_env_file() -> str | None:
    """Return the .env file for the current environment, if one exists."""

    candidates = [ENV_FILE_MAP.get(APP_ENV, ".env.development"), ".env"]
    for filename in candidates:
        path = PROJECT_ROOT / filename
        if path.is_file():
            return str(path)
    return None


_env_file = _resolve_env_file()

# Load .env file early to populate os.environ before creating nested settings.
# Nested BaseSettings don't inherit env_file, so this keeps them consistent.
# Tests set TESTING=true so a developer's local .env never leaks into them.
if _env_file and os.getenv("TESTING", "").lower() != "true":
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=False)


class AppSettings(BaseSettings):
    """HTTP server and transport configuration."""

    port: int = Field(
        3000,
        validation_alias="PORT",
        description="Listen port",
        ge=1,
        le=65535,
    )
    host: str = Field(
        "0.0.0.0",
        validation_alias="HOST",
        description="Bind address",
    )
    service_name: str = Field(
        "Resend",
        description="Service name reported by the health endpoint",
    )
    brand_name: str = Field(
        "FusionBridge",
        description="Brand used in the outbound email footer",
    )
    max_body_bytes: int = Field(
        1024 * 1024,
        description="Maximum accepted request body size in bytes",
        ge=1,
    )
    cors_allow_origins: str = Field(
        "*",
        description="Comma-separated list of allowed CORS origins",
    )
    trust_forwarded_for: bool = Field(
        False,
        description="Use the first X-Forwarded-For hop as the client identifier",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
        populate_by_name=True,
    )

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_allow_origins.split(",") if o.strip()]


class RateLimitSettings(BaseSettings):
    """Contact submission throttling."""

    max_requests: int = Field(
        10,
        description="Maximum accepted submissions per client within the window",
        ge=1,
    )
    window_seconds: int = Field(
        15 * 60,
        description="Rolling window size in seconds",
        ge=1,
    )
    sweep_interval_seconds: int = Field(
        60 * 60,
        description="How often stale ledger entries are pruned",
        ge=1,
    )
    reserve_before_send: bool = Field(
        True,
        description=(
            "Reserve a slot before the email is sent and release it on failure. "
            "When false, a slot is only credited after a successful send."
        ),
    )
    include_headers: bool = Field(
        True,
        description="Include X-RateLimit-* and Retry-After headers when throttling",
    )

    model_config = SettingsConfigDict(
        env_prefix="RATE_LIMIT_",
        case_sensitive=False,
    )


class EmailSettings(BaseSettings):
    """Email delivery provider (Resend) configuration."""

    api_key: str | None = Field(
        None,
        description="Resend API key (required to construct the provider client)",
    )
    from_address: str = Field(
        "FusionBridge Contact <onboarding@resend.dev>",
        description="Sender address, optionally with display name",
    )
    to_address: str = Field(
        "officialfusionbridge@gmail.com",
        description="Recipient of contact form submissions",
    )
    timeout_seconds: float = Field(
        15.0,
        description="Upper bound for a single provider call",
        gt=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="RESEND_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="'json' or 'plain'")
    output: str = Field("stdout", description="'stdout' or 'file'")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(
        10 * 1024 * 1024,
        description="Rotate the log file after this many bytes (0 disables rotation)",
        ge=0,
    )
    backup_count: int = Field(5, description="Rotated files to keep", ge=0)
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to propagate the correlation id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


def _build_app_settings() -> AppSettings:
    """Build app settings from environment.

    Static type checkers treat fields as constructor arguments, which is not
    how BaseSettings is intended to be used.
    """

    return AppSettings()  # type: ignore[call-arg]


def _build_rate_limit_settings() -> RateLimitSettings:
    return RateLimitSettings()  # type: ignore[call-arg]


def _build_email_settings() -> EmailSettings:
    return EmailSettings()  # type: ignore[call-arg]


def _build_log_settings() -> LogSettings:
    return LogSettings()  # type: ignore[call-arg]


class Settings(BaseSettings):
    """Main application settings container.

    Raises validation errors on startup if any setting is invalid.
    """

    app_env: str = APP_ENV
    app: AppSettings = Field(default_factory=_build_app_settings)
    rate_limit: RateLimitSettings = Field(default_factory=_build_rate_limit_settings)
    email: EmailSettings = Field(default_factory=_build_email_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
settings = Settings()


def settings_for(app) -> Settings:
    """Settings the given app was built with, falling back to the global instance."""

    return getattr(app.state, "settings", settings)
