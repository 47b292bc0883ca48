"""Unit tests for the access-token aware platform client."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from cardsdk import client as client_module
from cardsdk.exceptions import VendorError
from cardsdk.redaction import MASK
from cardsdk.sdk import CardSDK
from tests.unit.stubs import PlatformStub


class _CaptureLogger:
    """Capture structlog-like logger calls for assertions."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, dict[str, Any]]] = []

    def info(self, event: str, **kwargs: Any) -> None:
        """Capture info-level calls."""
        self.calls.append(("info", event, kwargs))

    def warning(self, event: str, **kwargs: Any) -> None:
        """Capture warning-level calls."""
        self.calls.append(("warning", event, kwargs))


async def test_post_attaches_cached_access_token(sdk: CardSDK, platform: PlatformStub) -> None:
    """Every call carries the access token, fetched once and then reused."""
    await sdk.client.post("/card/code/consume", {"code": "C1"})
    await sdk.client.post("/card/code/consume", {"code": "C2"})

    calls = platform.calls("/card/code/consume")
    assert [call.url.params["access_token"] for call in calls] == ["AT1", "AT1"]
    assert platform.token_count == 1


async def test_non_zero_errcode_raises_unless_disabled(
    sdk: CardSDK, platform: PlatformStub
) -> None:
    """Vendor errors raise by default and are returned on request."""
    platform.queue(
        "/card/code/consume",
        {"errcode": 40099, "errmsg": "code consumed"},
        {"errcode": 40099, "errmsg": "code consumed"},
    )

    with pytest.raises(VendorError) as exc_info:
        await sdk.client.post("/card/code/consume", {"code": "C1"})
    assert exc_info.value.code == 40099

    payload = await sdk.client.post("/card/code/consume", {"code": "C1"}, raise_on_error=False)
    assert payload["errcode"] == 40099


async def test_rejected_access_token_is_refreshed_and_call_retried_once(
    sdk: CardSDK, platform: PlatformStub
) -> None:
    """An expired-token errcode forces one token refresh and one retry."""
    platform.queue(
        "/card/get",
        {"errcode": 42001, "errmsg": "access_token expired"},
        {"errcode": 0, "errmsg": "ok", "card": {"card_type": "GROUPON"}},
    )

    payload = await sdk.client.post("/card/get", {"card_id": "card-1"})

    assert payload["card"] == {"card_type": "GROUPON"}
    calls = platform.calls("/card/get")
    assert [call.url.params["access_token"] for call in calls] == ["AT1", "AT2"]
    assert platform.token_count == 2


async def test_retry_happens_only_once(sdk: CardSDK, platform: PlatformStub) -> None:
    """A second token rejection is surfaced as a VendorError."""
    platform.queue(
        "/card/get",
        {"errcode": 40001, "errmsg": "invalid credential"},
        {"errcode": 40001, "errmsg": "invalid credential"},
    )

    with pytest.raises(VendorError) as exc_info:
        await sdk.client.post("/card/get", {"card_id": "card-1"})

    assert exc_info.value.code == 40001
    assert len(platform.calls("/card/get")) == 2


async def test_request_logs_redact_access_token(
    sdk: CardSDK, platform: PlatformStub, monkeypatch
) -> None:
    """Completed-call logs never contain the raw access token."""
    capture = _CaptureLogger()
    monkeypatch.setattr(client_module, "logger", capture)

    await sdk.client.get("/card/user/getcardlist", params={"openid": "o-1"})

    level, event, payload = capture.calls[-1]
    assert level == "info"
    assert event == "platform_request_completed"
    assert payload["query_params"] == {"openid": "o-1", "access_token": MASK}
    assert "AT1" not in str(capture.calls)


async def test_concurrent_rejections_share_one_token_refresh(
    sdk: CardSDK, platform: PlatformStub
) -> None:
    """Calls rejected for the same token trigger a single replacement fetch."""
    platform.rejected_tokens = {"AT1"}

    payloads = await asyncio.gather(
        *(sdk.client.post("/card/get", {"card_id": f"card-{index}"}) for index in range(4))
    )

    assert all(payload["errcode"] == 0 for payload in payloads)
    assert platform.token_count == 2
    retried = [call for call in platform.calls("/card/get") if call.url.params["access_token"] == "AT2"]
    assert len(retried) >= 1
