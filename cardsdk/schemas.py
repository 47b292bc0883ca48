"""Typed card API payloads."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class _VendorModel(BaseModel):
    """Base model tolerant of the platform's loose field typing."""

    model_config = ConfigDict(
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )


class VendorResult(_VendorModel):
    """Fields every platform response may carry."""

    errcode: str = "0"
    errmsg: str | None = None

    @property
    def is_success(self) -> bool:
        """Return True when the vendor reported no error."""
        return self.errcode == "0"


class CardInfo(_VendorModel):
    """Card summary embedded in code query results."""

    card_id: str | None = None
    begin_time: int | None = None
    end_time: int | None = None
    user_card_status: str | None = None
    membership_number: str | None = None
    code: str | None = None
    bonus: int | None = None


class CardCodeResult(VendorResult):
    """Result of code query and mark calls."""

    openid: str | None = None
    card: CardInfo | None = None
    user_card_status: str | None = None
    can_consume: bool | None = None
    outer_str: str | None = None
    background_pic_url: str | None = None
    unionid: str | None = None


class CardQrcodeCreateResult(VendorResult):
    """Result of card QR code creation."""

    ticket: str | None = None
    expire_seconds: int | None = None
    url: str | None = None
    show_qrcode_url: str | None = None


class LandingPageScene(StrEnum):
    """Channels a landing page may be published to."""

    NEAR_BY = "SCENE_NEAR_BY"
    MENU = "SCENE_MENU"
    QRCODE = "SCENE_QRCODE"
    ARTICLE = "SCENE_ARTICLE"
    H5 = "SCENE_H5"
    IVR = "SCENE_IVR"
    CARD_CUSTOM_CELL = "SCENE_CARD_CUSTOM_CELL"


class LandingPageCard(_VendorModel):
    """One card entry listed on a landing page."""

    card_id: str
    thumb_url: str


class CardLandingPageCreateRequest(_VendorModel):
    """Landing page creation request body."""

    banner: str
    title: str = Field(alias="page_title")
    can_share: bool = False
    scene: LandingPageScene
    card_list: list[LandingPageCard] = Field(min_length=1)

    def to_payload(self) -> dict[str, object]:
        """Serialize with wire field names, dropping unset optionals."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class CardLandingPageCreateResult(VendorResult):
    """Result of landing page creation."""

    url: str | None = None
    page_id: int | None = None
