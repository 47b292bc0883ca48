"""Access-token aware call pipeline shared by platform API services."""

from __future__ import annotations

from time import perf_counter
from typing import Any, Protocol

import structlog

from cardsdk.exceptions import CardSDKError
from cardsdk.redaction import redact_params
from cardsdk.transport import (
    HttpTransport,
    is_access_token_rejection,
    parse_errcode,
    raise_for_errcode,
)

logger = structlog.get_logger(__name__)


class AccessTokenProvider(Protocol):
    """Source of the platform access token."""

    async def get_access_token(self, force_refresh: bool = False) -> str: ...

    async def refresh_access_token(self, rejected_token: str) -> str: ...


class PlatformClient:
    """Execute platform calls with the access token attached."""

    def __init__(self, transport: HttpTransport, tokens: AccessTokenProvider) -> None:
        """Create client attaching access tokens from tokens to every call."""
        self._transport = transport
        self._tokens = tokens

    async def get(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        raise_on_error: bool = True,
    ) -> dict[str, Any]:
        """GET path and return the response object."""
        return await self._execute("GET", path, params=params, raise_on_error=raise_on_error)

    async def post(
        self,
        path: str,
        body: dict[str, Any],
        raise_on_error: bool = True,
    ) -> dict[str, Any]:
        """POST body to path and return the response object.

        A non-zero errcode raises VendorError unless raise_on_error is False,
        in which case the payload is returned for the caller to inspect.
        """
        return await self._execute("POST", path, body=body, raise_on_error=raise_on_error)

    async def _execute(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
        raise_on_error: bool = True,
    ) -> dict[str, Any]:
        """Send one call, retrying once with a fresh token on token rejection."""
        access_token = await self._tokens.get_access_token()
        payload = await self._send(method, path, params, body, access_token)
        if is_access_token_rejection(payload):
            logger.warning(
                "access_token_rejected",
                method=method,
                path=path,
                errcode=parse_errcode(payload),
            )
            access_token = await self._tokens.refresh_access_token(access_token)
            payload = await self._send(method, path, params, body, access_token)

        if raise_on_error:
            raise_for_errcode(payload)
        return payload

    async def _send(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None,
        body: dict[str, Any] | None,
        access_token: str,
    ) -> dict[str, Any]:
        """Attach access_token, send the request and log the outcome."""
        query = {**(params or {}), "access_token": access_token}
        start = perf_counter()
        try:
            if method == "GET":
                payload = await self._transport.get(path, params=query)
            else:
                payload = await self._transport.post(path, json=body or {}, params=query)
        except CardSDKError as exc:
            logger.warning(
                "platform_request_failed",
                method=method,
                path=path,
                query_params=redact_params(query),
                error=str(exc),
                duration_ms=round((perf_counter() - start) * 1000, 2),
            )
            raise

        logger.info(
            "platform_request_completed",
            method=method,
            path=path,
            query_params=redact_params(query),
            errcode=payload.get("errcode", 0),
            duration_ms=round((perf_counter() - start) * 1000, 2),
        )
        return payload
