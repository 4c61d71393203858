"""Settings read from the environment (and an optional ``.env`` file)."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class Settings(BaseSettings):
    """Runtime configuration of the notification service."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    secret_key: str = Field(
        description="Shared secret used to verify bearer tokens from the identity provider",
        min_length=1,
    )
    jwt_algorithm: str = Field(
        default="HS256",
        description="Signing algorithm expected on bearer tokens",
    )
    app_timezone: str = Field(
        default="UTC",
        description="Timezone used to store timestamps and evaluate quiet hours",
    )
    sendgrid_api_key: str | None = Field(
        default=None,
        description="SendGrid API key used for sending notification emails via the REST API",
    )
    sendgrid_sender: str | None = Field(
        default=None,
        description="Email address that will appear as the sender of notification emails",
        min_length=3,
    )
    push_gateway_url: str | None = Field(
        default=None,
        description="Base URL of the push gateway that relays messages to devices",
    )
    push_gateway_api_key: str | None = Field(
        default=None,
        description="Bearer credential sent to the push gateway",
    )
    push_gateway_timeout: float = Field(
        default=5.0,
        description="Timeout in seconds for push gateway requests",
        gt=0,
    )
    cors_origins: str = Field(
        default="http://localhost:3000",
        description="Comma separated origins allowed to call the API from a browser",
    )
    log_level: str = Field(default="INFO", description="Root logging level")

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(_LOG_LEVELS)}")
        return level

    @model_validator(mode="after")
    def _validate_email_provider(self) -> "Settings":
        if bool(self.sendgrid_api_key) != bool(self.sendgrid_sender):
            raise ValueError("Email delivery needs both SENDGRID_API_KEY and SENDGRID_SENDER")
        if self.sendgrid_sender and "@" not in self.sendgrid_sender:
            raise ValueError("SENDGRID_SENDER must be an email address")
        return self

    @property
    def allowed_origins(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Build the settings once per process."""

    return Settings()


def reset_settings_cache() -> None:
    """Forget the cached settings so the next call re-reads the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
