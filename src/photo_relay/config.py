"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    telegram_bot_token: str
    gmail_user: str | None = None
    gmail_pass: str | None = None
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 465
    email_recipient: str | None = None
    session_ttl_seconds: int | None = None
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def email_enabled(self) -> bool:
        """Return true when SMTP credentials are configured."""
        return bool(self.gmail_user and self.gmail_pass)

    @property
    def resolved_email_recipient(self) -> str | None:
        """Return the delivery address, defaulting to the sending account."""
        return self.email_recipient or self.gmail_user


def parse_ttl(raw: int | None) -> int | None:
    """Normalize a session TTL; non-positive values disable expiry."""
    if raw is None or raw <= 0:
        return None
    return raw
