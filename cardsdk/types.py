"""SDK data contract types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class TicketKind(StrEnum):
    """Refreshable platform credential classes sharing one store."""

    ACCESS_TOKEN = "access_token"
    JSAPI = "jsapi"
    WX_CARD = "wx_card"


@dataclass(frozen=True)
class TicketRecord:
    """One stored credential and the absolute time it stops being valid."""

    kind: TicketKind
    value: str
    expires_at: float


@dataclass(frozen=True)
class SignatureArtifact:
    """Timestamp, nonce and digest a client presents to a card JS-API call."""

    timestamp: int
    nonce: str
    signature: str

    def as_dict(self) -> dict[str, str | int]:
        """Return the artifact using the wire field names."""
        return {"timestamp": self.timestamp, "nonceStr": self.nonce, "signature": self.signature}
