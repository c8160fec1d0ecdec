"""Relay configuration using pydantic-settings.

This module defines the RelaySettings class that reads configuration from
environment variables. Variable names are unprefixed so the service accepts
the same environment as the hosted function it replaces:

- GITHUB_WEBHOOK_SECRET: enables inbound signature verification when set
- FEISHU_SECRET: enables outbound message signing when set
- FEISHU_WEBHOOK_URL: destination of the card messages

A settings instance is passed explicitly into the application factory and the
webhook handler, so tests can inject secrets and URLs without touching the
process environment.
"""

from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RelaySettings(BaseSettings):
    """Webhook relay configuration from environment variables.

    All fields are optional. Without a GitHub secret the relay runs in open
    mode and accepts unsigned requests; without a Feishu webhook URL every
    qualifying event fails delivery with a 500 response.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # GitHub Configuration
    # -------------------------------------------------------------------------
    # Shared secret for X-Hub-Signature-256 verification
    github_webhook_secret: Optional[str] = None

    # -------------------------------------------------------------------------
    # Feishu Configuration
    # -------------------------------------------------------------------------
    # Incoming-webhook URL of the Feishu custom bot
    feishu_webhook_url: Optional[str] = None

    # Signing secret of the Feishu custom bot
    feishu_secret: Optional[str] = None

    # Timeout in seconds for the outbound POST
    feishu_timeout_seconds: float = 10.0

    # -------------------------------------------------------------------------
    # Server Configuration
    # -------------------------------------------------------------------------
    host: str = "0.0.0.0"

    port: int = 8080

    log_level: str = "INFO"

    # -------------------------------------------------------------------------
    # Validators
    # -------------------------------------------------------------------------
    @field_validator("github_webhook_secret", "feishu_secret", "feishu_webhook_url")
    @classmethod
    def empty_to_none(cls, v: Optional[str]) -> Optional[str]:
        """Treat empty or whitespace-only values as unset."""
        if v is None or not v.strip():
            return None
        return v

    @field_validator("feishu_webhook_url")
    @classmethod
    def validate_feishu_webhook_url(cls, v: Optional[str]) -> Optional[str]:
        """Validate that the Feishu webhook URL is an http(s) URL."""
        if v is not None and not v.startswith(("http://", "https://")):
            raise ValueError("feishu_webhook_url must start with http:// or https://")
        return v

    @field_validator("feishu_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Validate that the delivery timeout is positive."""
        if v <= 0:
            raise ValueError("feishu_timeout_seconds must be greater than 0")
        return v

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate that port is in valid range."""
        if not 1 <= v <= 65535:
            raise ValueError("port must be between 1 and 65535")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(f"unknown log_level: {v}")
        return level

    @property
    def verification_enabled(self) -> bool:
        """Whether inbound requests must carry a valid signature."""
        return self.github_webhook_secret is not None

    @property
    def signing_enabled(self) -> bool:
        """Whether outbound messages carry a Feishu signature."""
        return self.feishu_secret is not None


def get_settings() -> RelaySettings:
    """Create and return RelaySettings instance.

    Returns:
        RelaySettings: Configured settings instance.

    Raises:
        pydantic.ValidationError: If a configured value is invalid.
    """
    return RelaySettings()
