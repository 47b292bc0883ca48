"""SDK settings and logging configuration."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from functools import lru_cache
from typing import Any, Literal

import httpx
import structlog
from pydantic import BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cardsdk.store import DEFAULT_EXPIRY_MARGIN_SECONDS
from cardsdk.transport import DEFAULT_BASE_URL

_LOG_CONTEXT: dict[str, str] = {"environment": "development", "service": "card-sdk"}


class PlatformSettings(BaseModel):
    """Platform account credentials and endpoint settings."""

    app_id: str = Field(min_length=1)
    app_secret: SecretStr
    base_url: str = DEFAULT_BASE_URL
    connect_timeout_seconds: float = Field(default=2.0, gt=0)
    read_timeout_seconds: float = Field(default=5.0, gt=0)

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, value: str) -> str:
        """Ensure the platform base URL uses HTTP(S)."""
        if not value.startswith(("https://", "http://")):
            raise ValueError("platform.base_url must start with 'https://' or 'http://'.")
        return value.rstrip("/")

    def http_timeout(self) -> httpx.Timeout:
        """Build the httpx timeout for platform calls."""
        return httpx.Timeout(
            connect=self.connect_timeout_seconds,
            read=self.read_timeout_seconds,
            write=self.read_timeout_seconds,
            pool=self.read_timeout_seconds,
        )


class TicketSettings(BaseModel):
    """Ticket cache settings."""

    expiry_margin_seconds: int = Field(default=DEFAULT_EXPIRY_MARGIN_SECONDS, ge=0)


class LogSettings(BaseModel):
    """Structured logging settings."""

    environment: Literal["development", "staging", "production"] = "development"
    service: str = "card-sdk"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


class Settings(BaseSettings):
    """Root SDK settings loaded from CARDSDK_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CARDSDK_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    platform: PlatformSettings
    ticket: TicketSettings = Field(default_factory=TicketSettings)
    log: LogSettings = Field(default_factory=LogSettings)


def _standard_log_fields(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Inject required structured logging fields."""
    event_dict.setdefault("environment", _LOG_CONTEXT["environment"])
    event_dict.setdefault("service", _LOG_CONTEXT["service"])
    event_dict.setdefault("timestamp", datetime.now(UTC).isoformat())
    return event_dict


def configure_structlog(settings: Settings) -> None:
    """Configure structlog for JSON output with required fields."""
    _LOG_CONTEXT["environment"] = settings.log.environment
    _LOG_CONTEXT["service"] = settings.log.service

    log_level = getattr(logging, settings.log.log_level, logging.INFO)
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            _standard_log_fields,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


@lru_cache
def get_settings() -> Settings:
    """Load and cache SDK settings from environment variables."""
    return Settings()
