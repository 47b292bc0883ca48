"""SDK exception hierarchy."""

from __future__ import annotations

from cardsdk.types import TicketKind


class CardSDKError(Exception):
    """Base class for all SDK-specific exceptions."""


class TransportError(CardSDKError):
    """Raised when the platform is unreachable or answers with an HTTP error."""

    def __init__(self, detail: str, status_code: int | None = None) -> None:
        """Initialize with optional HTTP status code context."""
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code


class MalformedResponseError(CardSDKError):
    """Raised when the platform returns malformed or unexpected data."""

    def __init__(self, detail: str, status_code: int | None = None) -> None:
        """Initialize with optional HTTP status code context."""
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code


class VendorError(CardSDKError):
    """Raised when a response carries a non-zero vendor error code."""

    def __init__(self, code: int, message: str) -> None:
        """Initialize with the vendor errcode and errmsg."""
        super().__init__(f"[{code}] {message}")
        self.code = code
        self.message = message


class CardValidationError(VendorError):
    """Raised when call arguments fail a precondition before any request is sent."""

    INCOMPLETE_PARAMETERS = 41012

    def __init__(self, message: str = "Incomplete parameters.") -> None:
        """Initialize with the fixed incomplete-parameters code."""
        super().__init__(self.INCOMPLETE_PARAMETERS, message)


class TicketUnavailableError(CardSDKError):
    """Raised when a ticket is read before it was ever fetched."""

    def __init__(self, kind: TicketKind) -> None:
        """Initialize with the kind that has no stored ticket."""
        super().__init__(f"No ticket stored for kind '{kind.value}'.")
        self.kind = kind
