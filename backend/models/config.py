import os
import sys

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _should_load_env_file() -> str | None:
    """Determine if .env should be loaded.

    For local development, load `.env` automatically so mail credentials can
    be provided from `backend/.env` (convenience).

    Do NOT auto-load `.env` when running under pytest or in CI, so tests run
    against the environment they set up themselves.
    """
    if any("pytest" in str(x) for x in sys.argv if x):
        return None
    if os.environ.get("CI") in ("1", "true", "True"):
        return None
    return ".env"


class Settings(BaseSettings):
    # Environment configuration
    ENVIRONMENT: str = Field(
        default="development",
        description="Environment: 'development', 'test', or 'production'",
    )

    # Single website origin allowed to post the contact form
    CLIENT_URL: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origin for the contact form",
    )
    PORT: int = Field(
        default=5000,
        description="Listening port when started with `python main.py`",
    )

    # Logging
    LOG_FILE: str = Field(
        default="",
        description="Optional rotating log file path (e.g. logs/app.log)",
    )

    # Performance settings
    SLOW_REQUEST_THRESHOLD: float = Field(
        default=1.0,
        description="Log warning for requests slower than this (seconds)",
    )

    # Client identification
    TRUST_PROXY_HEADERS: bool = Field(
        default=False,
        description="Read the client IP from CF-Connecting-IP / X-Real-IP / "
        "X-Forwarded-For. Only enable behind a trusted reverse proxy.",
    )

    # Contact form rate limiting
    CONTACT_RATE_LIMIT_REQUESTS: int = Field(
        default=3,
        description="Maximum contact submissions per client per window",
    )
    CONTACT_RATE_LIMIT_WINDOW_SECONDS: int = Field(
        default=3600,
        description="Rate limit window length; also the block duration",
    )
    RATE_LIMIT_MAX_ENTRIES: int = Field(
        default=10000,
        description="Maximum tracked clients before LRU eviction (0 = unbounded)",
    )
    RATE_LIMIT_SWEEP_INTERVAL_SECONDS: int = Field(
        default=600,
        description="Interval of the expired-entry sweep job (0 disables it)",
    )

    # Contact form email
    CONTACT_SUBJECT_PREFIX: str = Field(
        default="📧 New message:",
        description="Marker prepended to the subject of relayed messages",
    )
    CONTACT_RECIPIENT: str = Field(
        default="",
        description="Recipient override; defaults to EMAIL_USER",
    )

    # Email Provider Settings
    EMAIL_PROVIDER: str = Field(
        default="console",
        description="Email provider: 'smtp' or 'console'",
    )
    EMAIL_USER: str = Field(
        default="",
        description="Mail account used as sender, recipient and SMTP login",
    )
    EMAIL_PASS: str = Field(
        default="",
        description="Mail account password (app password for Gmail)",
    )
    SMTP_HOST: str = Field(
        default="smtp.gmail.com",
        description="SMTP server hostname",
    )
    SMTP_PORT: int = Field(
        default=587,
        description="SMTP server port",
    )
    SMTP_USE_TLS: bool = Field(
        default=True,
        description="Use STARTTLS for SMTP connection (port 587)",
    )
    SMTP_USE_SSL: bool = Field(
        default=False,
        description="Use implicit SSL for SMTP connection (port 465)",
    )
    SMTP_TIMEOUT: float = Field(
        default=10.0,
        description="SMTP socket timeout in seconds",
    )

    def get_contact_recipient(self) -> str:
        """Recipient of relayed messages (the configured account by default)."""
        return self.CONTACT_RECIPIENT or self.EMAIL_USER

    model_config = SettingsConfigDict(
        env_file=_should_load_env_file(),
        env_file_encoding="utf-8",
        extra="ignore",  # Allow extra env vars (e.g., SENTRY_DSN) without validation errors
    )


settings = Settings()


def get_settings() -> Settings:
    """Get the settings instance (for dependency injection)."""
    return settings
