"""Get-or-refresh orchestration for platform credentials."""

from __future__ import annotations

from typing import Any, Protocol

import structlog

from cardsdk.exceptions import MalformedResponseError
from cardsdk.redaction import redact_params
from cardsdk.store import TicketStore
from cardsdk.transport import is_access_token_rejection, raise_for_errcode
from cardsdk.types import TicketKind

ACCESS_TOKEN_PATH = "/cgi-bin/token"
TICKET_PATH = "/cgi-bin/ticket/getticket"

logger = structlog.get_logger(__name__)


class TicketTransport(Protocol):
    """Transport surface needed to fetch credentials."""

    async def get(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]: ...


class TicketRefresher:
    """Serve credentials from the store, refreshing stale ones exactly once."""

    def __init__(
        self,
        store: TicketStore,
        transport: TicketTransport,
        app_id: str,
        app_secret: str,
    ) -> None:
        """Create refresher fetching credentials for one platform account."""
        self._store = store
        self._transport = transport
        self._app_id = app_id
        self._app_secret = app_secret

    async def get_or_refresh(self, kind: TicketKind, force_refresh: bool = False) -> str:
        """Return a valid credential for kind, fetching a new one when stale.

        Concurrent callers for the same kind queue on the kind's lock, so a
        stale credential causes exactly one outbound fetch and every waiter
        reads the refreshed value. A failed fetch leaves the store untouched.
        """
        async with self._store.lock_for(kind):
            if force_refresh:
                self._store.expire_ticket(kind)

            if self._store.is_expired(kind):
                value, ttl_seconds = await self._fetch(kind)
                record = self._store.update_ticket(kind, value, ttl_seconds)
                logger.info(
                    "ticket_refreshed",
                    kind=kind.value,
                    expires_in=ttl_seconds,
                    expires_at=record.expires_at,
                    forced=force_refresh,
                )
            return self._store.get_ticket(kind)

    async def get_access_token(self, force_refresh: bool = False) -> str:
        """Return the platform access token."""
        return await self.get_or_refresh(TicketKind.ACCESS_TOKEN, force_refresh)

    async def refresh_access_token(self, rejected_token: str) -> str:
        """Replace rejected_token unless another caller already replaced it.

        Callers that saw the same token rejected concurrently queue on the
        access-token lock; only the first one fetches, the rest reuse its result.
        """
        async with self._store.lock_for(TicketKind.ACCESS_TOKEN):
            current = self._store.get_record(TicketKind.ACCESS_TOKEN)
            if current is None or current.value == rejected_token:
                self._store.expire_ticket(TicketKind.ACCESS_TOKEN)
        return await self.get_access_token()

    async def get_card_api_ticket(self, force_refresh: bool = False) -> str:
        """Return the card API ticket."""
        return await self.get_or_refresh(TicketKind.WX_CARD, force_refresh)

    async def get_jsapi_ticket(self, force_refresh: bool = False) -> str:
        """Return the JS-SDK ticket."""
        return await self.get_or_refresh(TicketKind.JSAPI, force_refresh)

    async def _fetch(self, kind: TicketKind) -> tuple[str, int]:
        """Fetch a fresh credential and its lifetime for kind."""
        if kind is TicketKind.ACCESS_TOKEN:
            params = {
                "grant_type": "client_credential",
                "appid": self._app_id,
                "secret": self._app_secret,
            }
            logger.debug("access_token_requested", query_params=redact_params(params))
            payload = await self._transport.get(ACCESS_TOKEN_PATH, params=params)
            value_field = "access_token"
        else:
            # Ticket endpoints need the access token, which lives under a different lock.
            access_token = await self.get_access_token()
            payload = await self._fetch_ticket(kind, access_token)
            if is_access_token_rejection(payload):
                logger.warning("access_token_rejected", path=TICKET_PATH, kind=kind.value)
                access_token = await self.refresh_access_token(access_token)
                payload = await self._fetch_ticket(kind, access_token)
            value_field = "ticket"

        raise_for_errcode(payload)
        return self._parse_credential(payload, value_field)

    async def _fetch_ticket(self, kind: TicketKind, access_token: str) -> dict[str, Any]:
        """Call the ticket endpoint for kind."""
        return await self._transport.get(
            TICKET_PATH,
            params={"type": kind.value, "access_token": access_token},
        )

    @staticmethod
    def _parse_credential(payload: dict[str, Any], value_field: str) -> tuple[str, int]:
        """Extract the credential value and TTL from a fetch payload."""
        value = payload.get(value_field)
        if not isinstance(value, str) or not value:
            raise MalformedResponseError(f"Credential response is missing '{value_field}'.")

        expires_in = payload.get("expires_in")
        if isinstance(expires_in, bool) or not isinstance(expires_in, int | str):
            raise MalformedResponseError("Credential response is missing 'expires_in'.")
        try:
            ttl_seconds = int(expires_in)
        except ValueError as exc:
            raise MalformedResponseError("Credential response has invalid 'expires_in'.") from exc
        if ttl_seconds <= 0:
            raise MalformedResponseError("Credential response has non-positive 'expires_in'.")
        return value, ttl_seconds
