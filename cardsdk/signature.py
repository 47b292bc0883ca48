"""Card API signature construction."""

from __future__ import annotations

import hashlib
import secrets
import string
import time
from collections.abc import Callable, Iterable
from typing import Protocol

from cardsdk.types import SignatureArtifact, TicketKind

NONCE_ALPHABET = string.ascii_letters + string.digits
NONCE_LENGTH = 16


class TicketProvider(Protocol):
    """Source of fresh platform tickets."""

    async def get_or_refresh(self, kind: TicketKind, force_refresh: bool = False) -> str: ...


def generate_nonce(length: int = NONCE_LENGTH) -> str:
    """Return a random alphanumeric nonce."""
    return "".join(secrets.choice(NONCE_ALPHABET) for _ in range(length))


def sign(values: Iterable[str]) -> str:
    """Return the SHA-1 hex digest of values concatenated in order."""
    return hashlib.sha1("".join(values).encode("utf-8")).hexdigest()


class SignatureBuilder:
    """Build time-boxed signatures over the current card API ticket."""

    def __init__(
        self,
        tickets: TicketProvider,
        now: Callable[[], float] | None = None,
        nonce_factory: Callable[[], str] | None = None,
    ) -> None:
        """Create builder with injectable clock and nonce source."""
        self._tickets = tickets
        self._now = now or time.time
        self._nonce_factory = nonce_factory or generate_nonce

    async def build_signature(self, *extra_params: str) -> SignatureArtifact:
        """Sign extra_params followed by timestamp, nonce and ticket.

        The value order is part of the contract the platform re-derives, so
        callers must pass extra_params (app_id, card_id, code, ...) in the
        order the client page will submit them.
        """
        ticket = await self._tickets.get_or_refresh(TicketKind.WX_CARD, False)
        timestamp = int(self._now())
        nonce = self._nonce_factory()
        signature = sign([*extra_params, str(timestamp), nonce, ticket])
        return SignatureArtifact(timestamp=timestamp, nonce=nonce, signature=signature)
