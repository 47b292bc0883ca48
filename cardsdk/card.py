"""Card and coupon API operations."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, TypeVar

import structlog
from pydantic import BaseModel, ValidationError

from cardsdk.client import PlatformClient
from cardsdk.exceptions import CardValidationError, MalformedResponseError
from cardsdk.refresher import TicketRefresher
from cardsdk.schemas import (
    CardCodeResult,
    CardLandingPageCreateRequest,
    CardLandingPageCreateResult,
    CardQrcodeCreateResult,
)
from cardsdk.signature import SignatureBuilder
from cardsdk.types import SignatureArtifact

CARD_GET = "/card/get"
CARD_CODE_DECRYPT = "/card/code/decrypt"
CARD_CODE_GET = "/card/code/get"
CARD_CODE_CONSUME = "/card/code/consume"
CARD_CODE_MARK = "/card/code/mark"
CARD_CODE_UNAVAILABLE = "/card/code/unavailable"
CARD_TEST_WHITELIST = "/card/testwhitelist/set"
CARD_QRCODE_CREATE = "/card/qrcode/create"
CARD_LANDING_PAGE_CREATE = "/card/landingpage/create"

_ModelT = TypeVar("_ModelT", bound=BaseModel)

logger = structlog.get_logger(__name__)


def _parse(model: type[_ModelT], payload: dict[str, Any]) -> _ModelT:
    """Validate payload into model, mapping schema errors to MalformedResponseError."""
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise MalformedResponseError(f"Invalid {model.__name__} payload.") from exc


def _is_blank(value: str | None) -> bool:
    """Return True for None, empty or whitespace-only values."""
    return value is None or not value.strip()


class CardService:
    """Card API facade: tickets, signatures and code lifecycle calls."""

    def __init__(
        self,
        client: PlatformClient,
        refresher: TicketRefresher,
        signature_builder: SignatureBuilder,
    ) -> None:
        """Create service over a platform client, ticket refresher and signer."""
        self._client = client
        self._refresher = refresher
        self._signature_builder = signature_builder

    async def get_card_api_ticket(self, force_refresh: bool = False) -> str:
        """Return the card API ticket, refreshing it when stale or forced."""
        return await self._refresher.get_card_api_ticket(force_refresh)

    async def create_card_api_signature(self, *sign_params: str) -> SignatureArtifact:
        """Create the signature a client page needs for card JS-API calls.

        sign_params may include app_id, card_id, card_type, code, openid and
        location_id. chooseCard calls must include app_id, otherwise the
        client receives an empty card list.
        """
        return await self._signature_builder.build_signature(*sign_params)

    async def decrypt_card_code(self, encrypt_code: str) -> str:
        """Decrypt a code obtained through the JS-SDK chooseCard call."""
        payload = await self._client.post(CARD_CODE_DECRYPT, {"encrypt_code": encrypt_code})
        code = payload.get("code")
        if not isinstance(code, str):
            raise MalformedResponseError("Decrypt response is missing 'code'.")
        return code

    async def query_card_code(
        self,
        card_id: str,
        code: str,
        check_consume: bool,
    ) -> CardCodeResult:
        """Look up one code; check_consume changes the error reported for used codes."""
        payload = await self._client.post(
            CARD_CODE_GET,
            {"card_id": card_id, "code": code, "check_consume": check_consume},
        )
        return _parse(CardCodeResult, payload)

    async def consume_card_code(self, code: str, card_id: str | None = None) -> dict[str, Any]:
        """Redeem a code. card_id is required for custom-code cards."""
        body: dict[str, Any] = {"code": code}
        if card_id:
            body["card_id"] = card_id
        return await self._client.post(CARD_CODE_CONSUME, body)

    async def mark_card_code(
        self,
        code: str,
        card_id: str,
        openid: str,
        is_mark: bool,
    ) -> CardCodeResult:
        """Bind (or release) a code to a user before it can be consumed.

        A vendor rejection is logged and returned rather than raised.
        """
        payload = await self._client.post(
            CARD_CODE_MARK,
            {"code": code, "card_id": card_id, "openid": openid, "is_mark": is_mark},
            raise_on_error=False,
        )
        result = _parse(CardCodeResult, payload)
        if not result.is_success:
            logger.warning(
                "card_code_mark_failed",
                card_id=card_id,
                errcode=result.errcode,
                errmsg=result.errmsg,
                is_mark=is_mark,
            )
        return result

    async def get_card_detail(self, card_id: str) -> dict[str, Any]:
        """Return the full card definition."""
        return await self._client.post(CARD_GET, {"card_id": card_id})

    async def add_test_whitelist(
        self,
        openids: str | Sequence[str],
        usernames: Sequence[str] | None = None,
    ) -> dict[str, Any]:
        """Allow users, by openid and optionally username, to receive unpublished cards."""
        openid_list = [openids] if isinstance(openids, str) else list(openids)
        body: dict[str, Any] = {"openid": openid_list}
        if usernames is not None:
            body["username"] = list(usernames)
        return await self._client.post(CARD_TEST_WHITELIST, body)

    async def create_qrcode_card(
        self,
        card_id: str,
        outer_str: str,
        expires_in: int = 0,
    ) -> CardQrcodeCreateResult:
        """Create a QR code that issues card_id; expires_in <= 0 keeps the platform default."""
        body: dict[str, Any] = {"action_name": "QR_CARD"}
        if expires_in > 0:
            body["expire_seconds"] = expires_in
        body["action_info"] = {"card": {"card_id": card_id, "outer_str": outer_str}}
        payload = await self._client.post(CARD_QRCODE_CREATE, body)
        return _parse(CardQrcodeCreateResult, payload)

    async def create_landing_page(
        self,
        request: CardLandingPageCreateRequest,
    ) -> CardLandingPageCreateResult:
        """Create a card landing page."""
        payload = await self._client.post(CARD_LANDING_PAGE_CREATE, request.to_payload())
        return _parse(CardLandingPageCreateResult, payload)

    async def unavailable_card_code(self, card_id: str, code: str, reason: str) -> dict[str, Any]:
        """Mark a user's code as unavailable."""
        if _is_blank(card_id) or _is_blank(code) or _is_blank(reason):
            raise CardValidationError()
        return await self._client.post(
            CARD_CODE_UNAVAILABLE,
            {"card_id": card_id, "code": code, "reason": reason},
        )
