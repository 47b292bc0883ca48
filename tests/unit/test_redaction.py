"""Unit tests for credential masking in request logs."""

from __future__ import annotations

from cardsdk.redaction import MASK, mask_credential, redact_params


def test_long_credentials_keep_a_short_prefix() -> None:
    """Long tokens keep four characters for correlation."""
    assert mask_credential("76_Xk3bQw9zLrPtYv") == f"76_X{MASK}"


def test_short_credentials_are_fully_masked() -> None:
    """Values too short to hide behind a prefix are masked entirely."""
    assert mask_credential("AT1") == MASK
    assert mask_credential(12345) == MASK


def test_redact_params_masks_token_query_credentials() -> None:
    """appid, secret and access_token are masked; other params pass through."""
    params = {
        "grant_type": "client_credential",
        "appid": "wx1234567890abcdef",
        "secret": "0123456789abcdef0123456789abcdef",
        "openid": "o-1",
        "ACCESS_TOKEN": "short",
    }

    redacted = redact_params(params)

    assert redacted == {
        "grant_type": "client_credential",
        "appid": f"wx12{MASK}",
        "secret": f"0123{MASK}",
        "openid": "o-1",
        "ACCESS_TOKEN": MASK,
    }
    assert params["secret"] == "0123456789abcdef0123456789abcdef"
