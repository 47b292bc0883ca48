"""Public SDK exports."""

from cardsdk.card import CardService
from cardsdk.exceptions import (
    CardSDKError,
    CardValidationError,
    MalformedResponseError,
    TicketUnavailableError,
    TransportError,
    VendorError,
)
from cardsdk.refresher import TicketRefresher
from cardsdk.sdk import CardSDK
from cardsdk.signature import SignatureBuilder
from cardsdk.store import TicketStore
from cardsdk.types import SignatureArtifact, TicketKind, TicketRecord

__all__ = [
    "CardSDK",
    "CardSDKError",
    "CardService",
    "CardValidationError",
    "MalformedResponseError",
    "SignatureArtifact",
    "SignatureBuilder",
    "TicketKind",
    "TicketRecord",
    "TicketRefresher",
    "TicketStore",
    "TicketUnavailableError",
    "TransportError",
    "VendorError",
]
