"""Unit tests for settings loading and SDK wiring from settings."""

from __future__ import annotations

import time
from collections.abc import Iterator

import httpx
import pytest
from pydantic import ValidationError

from cardsdk.config import Settings, get_settings
from cardsdk.sdk import CardSDK
from cardsdk.types import TicketKind


@pytest.fixture(autouse=True)
def _clear_settings_cache(monkeypatch) -> Iterator[None]:
    """Isolate tests from each other's environment."""
    monkeypatch.chdir("/")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_settings_load_from_nested_environment(monkeypatch) -> None:
    """Nested CARDSDK_* variables populate every settings group."""
    monkeypatch.setenv("CARDSDK_PLATFORM__APP_ID", "wx-app")
    monkeypatch.setenv("CARDSDK_PLATFORM__APP_SECRET", "s3cret")
    monkeypatch.setenv("CARDSDK_PLATFORM__BASE_URL", "https://api.platform.local/")
    monkeypatch.setenv("CARDSDK_TICKET__EXPIRY_MARGIN_SECONDS", "60")
    monkeypatch.setenv("CARDSDK_LOG__LOG_LEVEL", "DEBUG")

    settings = get_settings()

    assert settings.platform.app_id == "wx-app"
    assert settings.platform.app_secret.get_secret_value() == "s3cret"
    assert settings.platform.base_url == "https://api.platform.local"
    assert settings.ticket.expiry_margin_seconds == 60
    assert settings.log.log_level == "DEBUG"
    assert "s3cret" not in repr(settings)


def test_settings_defaults(monkeypatch) -> None:
    """Only platform credentials are required."""
    monkeypatch.setenv("CARDSDK_PLATFORM__APP_ID", "wx-app")
    monkeypatch.setenv("CARDSDK_PLATFORM__APP_SECRET", "s3cret")

    settings = get_settings()

    assert settings.platform.base_url == "https://api.weixin.qq.com"
    assert settings.ticket.expiry_margin_seconds == 200
    assert settings.log.service == "card-sdk"
    timeout = settings.platform.http_timeout()
    assert timeout.connect == 2.0
    assert timeout.read == 5.0


def test_settings_reject_invalid_values() -> None:
    """Non-HTTP base URLs and negative margins are rejected."""
    with pytest.raises(ValidationError):
        Settings(platform={"app_id": "wx-app", "app_secret": "s", "base_url": "ftp://x"})
    with pytest.raises(ValidationError):
        Settings(
            platform={"app_id": "wx-app", "app_secret": "s"},
            ticket={"expiry_margin_seconds": -1},
        )


async def test_sdk_from_settings_applies_margin_and_credentials() -> None:
    """SDK built from settings fetches tokens with configured credentials."""
    requests: list[httpx.Request] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(status_code=200, json={"access_token": "AT1", "expires_in": 7200})

    settings = Settings(
        platform={"app_id": "wx-app", "app_secret": "s3cret", "base_url": "https://api.platform.local"},
        ticket={"expiry_margin_seconds": 0},
    )
    started_at = time.time()
    transport = httpx.MockTransport(handler)
    async with httpx.AsyncClient(base_url="https://api.platform.local", transport=transport) as http_client:
        async with CardSDK.from_settings(settings, http_client=http_client) as sdk:
            token = await sdk.refresher.get_access_token()
            record = sdk.store.get_record(TicketKind.ACCESS_TOKEN)

    assert token == "AT1"
    assert requests[0].url.params["appid"] == "wx-app"
    assert requests[0].url.params["secret"] == "s3cret"
    assert record is not None
    assert started_at + 7200 <= record.expires_at <= time.time() + 7200
