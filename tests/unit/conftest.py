"""Shared fixtures wiring the SDK to an in-memory platform stub."""

from __future__ import annotations

from collections.abc import AsyncIterator

import httpx
import pytest

from cardsdk.sdk import CardSDK
from tests.unit.stubs import BASE_URL, PlatformStub


@pytest.fixture
def platform() -> PlatformStub:
    """Return a fresh platform stub."""
    return PlatformStub()


@pytest.fixture
async def sdk(platform: PlatformStub) -> AsyncIterator[CardSDK]:
    """Return an SDK whose HTTP traffic is served by the platform stub."""
    transport = httpx.MockTransport(platform.handler)
    async with httpx.AsyncClient(base_url=BASE_URL, transport=transport) as http_client:
        async with CardSDK(
            app_id="wx-app",
            app_secret="s3cret",
            base_url=BASE_URL,
            http_client=http_client,
        ) as card_sdk:
            yield card_sdk
