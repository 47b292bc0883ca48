"""Async HTTP transport for platform endpoints."""

from __future__ import annotations

from typing import Any

import httpx

from cardsdk.exceptions import MalformedResponseError, TransportError, VendorError

DEFAULT_BASE_URL = "https://api.weixin.qq.com"
DEFAULT_TIMEOUT = httpx.Timeout(connect=2.0, read=5.0, write=5.0, pool=5.0)

# errcodes meaning the access token sent is no longer accepted
ACCESS_TOKEN_INVALID_CODES = frozenset({40001, 40014, 42001})


class HttpTransport:
    """Send GET/POST requests and return the decoded JSON object."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: httpx.Timeout | float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Create transport with sane defaults and optional injected client."""
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout or DEFAULT_TIMEOUT,
        )

    async def get(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """Issue a GET request and return its JSON object body."""
        response = await self._request("GET", path, params=params)
        return self._json_object(response)

    async def post(
        self,
        path: str,
        json: dict[str, Any],
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Issue a POST request with a JSON body and return its JSON object body."""
        response = await self._request("POST", path, params=params, json=json)
        return self._json_object(response)

    async def aclose(self) -> None:
        """Close underlying HTTP client if owned by this instance."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> HttpTransport:
        """Enter async context manager."""
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        """Exit async context manager and close managed resources."""
        del exc_type, exc, tb
        await self.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Execute request and normalize transport failures."""
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as exc:
            raise TransportError(f"Platform request to {path} timed out.") from exc
        except httpx.RequestError as exc:
            raise TransportError(f"Platform unavailable for {path}.") from exc

        if response.status_code >= 400:
            raise TransportError(
                f"Platform request failed with status {response.status_code}.",
                response.status_code,
            )
        return response

    @staticmethod
    def _json_object(response: httpx.Response) -> dict[str, Any]:
        """Return response JSON as object."""
        try:
            payload = response.json()
        except ValueError as exc:
            raise MalformedResponseError(
                "Platform returned invalid JSON.", response.status_code
            ) from exc
        if not isinstance(payload, dict):
            raise MalformedResponseError(
                "Platform returned invalid JSON object.", response.status_code
            )
        return payload


def parse_errcode(payload: dict[str, Any]) -> int:
    """Return the vendor errcode of a payload, treating absence as success."""
    raw_code = payload.get("errcode", 0)
    try:
        return int(str(raw_code))
    except ValueError as exc:
        raise MalformedResponseError(f"Platform returned non-numeric errcode {raw_code!r}.") from exc


def raise_for_errcode(payload: dict[str, Any]) -> None:
    """Raise VendorError when payload carries a non-zero errcode."""
    code = parse_errcode(payload)
    if code != 0:
        raise VendorError(code, str(payload.get("errmsg", "")))


def is_access_token_rejection(payload: dict[str, Any]) -> bool:
    """Return True when payload says the access token sent was not accepted."""
    return parse_errcode(payload) in ACCESS_TOKEN_INVALID_CODES
