"""In-memory ticket store with one refresh lock per ticket kind."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable

from cardsdk.exceptions import TicketUnavailableError
from cardsdk.types import TicketKind, TicketRecord

DEFAULT_EXPIRY_MARGIN_SECONDS = 200


class TicketStore:
    """Hold the current credential for every ticket kind.

    The store performs no I/O. Writes are expected to happen while the
    caller holds ``lock_for(kind)``; ``TicketRefresher`` is the only writer
    inside the SDK.

    The per-kind locks are ``asyncio.Lock`` objects, so a store serves the
    tasks of a single event loop. Threads or separate loops need their own
    store.
    """

    def __init__(
        self,
        expiry_margin_seconds: int = DEFAULT_EXPIRY_MARGIN_SECONDS,
        now: Callable[[], float] | None = None,
    ) -> None:
        """Create an empty store with locks for every known kind."""
        if expiry_margin_seconds < 0:
            raise ValueError("expiry_margin_seconds must not be negative.")
        self._expiry_margin_seconds = expiry_margin_seconds
        self._now = now or time.time
        self._records: dict[TicketKind, TicketRecord] = {}
        self._locks: dict[TicketKind, asyncio.Lock] = {kind: asyncio.Lock() for kind in TicketKind}

    def is_expired(self, kind: TicketKind) -> bool:
        """Return True when no record exists or its expiry has been reached."""
        record = self._records.get(kind)
        return record is None or record.expires_at <= self._now()

    def get_ticket(self, kind: TicketKind) -> str:
        """Return the stored credential value for kind."""
        record = self._records.get(kind)
        if record is None:
            raise TicketUnavailableError(kind)
        return record.value

    def get_record(self, kind: TicketKind) -> TicketRecord | None:
        """Return the stored record for kind, if any."""
        return self._records.get(kind)

    def update_ticket(self, kind: TicketKind, value: str, ttl_seconds: int) -> TicketRecord:
        """Install a new credential valid for ttl_seconds minus the safety margin."""
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive.")
        effective_ttl = ttl_seconds
        if ttl_seconds > self._expiry_margin_seconds:
            effective_ttl = ttl_seconds - self._expiry_margin_seconds
        record = TicketRecord(kind=kind, value=value, expires_at=self._now() + effective_ttl)
        self._records[kind] = record
        return record

    def expire_ticket(self, kind: TicketKind) -> None:
        """Drop the record for kind so the next access refreshes it."""
        self._records.pop(kind, None)

    def lock_for(self, kind: TicketKind) -> asyncio.Lock:
        """Return the lock serializing refreshes of kind."""
        return self._locks[kind]
