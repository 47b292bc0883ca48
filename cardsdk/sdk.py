"""Top-level SDK wiring."""

from __future__ import annotations

from typing import Any

import httpx

from cardsdk.card import CardService
from cardsdk.client import PlatformClient
from cardsdk.config import Settings
from cardsdk.refresher import TicketRefresher
from cardsdk.signature import SignatureBuilder
from cardsdk.store import TicketStore
from cardsdk.transport import HttpTransport


class CardSDK:
    """Wire store, transport, refresher and card service for one platform account."""

    def __init__(
        self,
        app_id: str,
        app_secret: str,
        store: TicketStore | None = None,
        base_url: str | None = None,
        timeout: httpx.Timeout | float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Create SDK; pass store to share tickets between instances."""
        self.store = store or TicketStore()
        transport_kwargs: dict[str, Any] = {"timeout": timeout, "http_client": http_client}
        if base_url is not None:
            transport_kwargs["base_url"] = base_url
        self.transport = HttpTransport(**transport_kwargs)
        self.refresher = TicketRefresher(
            store=self.store,
            transport=self.transport,
            app_id=app_id,
            app_secret=app_secret,
        )
        self.client = PlatformClient(transport=self.transport, tokens=self.refresher)
        self.signatures = SignatureBuilder(tickets=self.refresher)
        self.card = CardService(
            client=self.client,
            refresher=self.refresher,
            signature_builder=self.signatures,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        http_client: httpx.AsyncClient | None = None,
    ) -> CardSDK:
        """Build SDK from loaded settings."""
        platform = settings.platform
        return cls(
            app_id=platform.app_id,
            app_secret=platform.app_secret.get_secret_value(),
            store=TicketStore(expiry_margin_seconds=settings.ticket.expiry_margin_seconds),
            base_url=platform.base_url,
            timeout=platform.http_timeout(),
            http_client=http_client,
        )

    async def aclose(self) -> None:
        """Close the transport if owned by this instance."""
        await self.transport.aclose()

    async def __aenter__(self) -> CardSDK:
        """Enter async context manager."""
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        """Exit async context manager and close managed resources."""
        del exc_type, exc, tb
        await self.aclose()
