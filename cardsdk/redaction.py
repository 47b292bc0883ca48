"""Masking of platform credentials in structured logs."""

from __future__ import annotations

from typing import Any

# query/body keys whose values identify or authenticate the platform account
CREDENTIAL_KEYS = frozenset({"access_token", "appid", "secret", "ticket", "encrypt_code"})
MASK = "***"
VISIBLE_PREFIX = 4
MIN_MASKABLE_LENGTH = 12


def mask_credential(value: Any) -> str:
    """Keep a short prefix of long credentials so log lines can be correlated."""
    text = str(value)
    if len(text) < MIN_MASKABLE_LENGTH:
        return MASK
    return f"{text[:VISIBLE_PREFIX]}{MASK}"


def redact_params(params: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of request params with credential values masked."""
    return {
        key: mask_credential(value) if key.lower() in CREDENTIAL_KEYS else value
        for key, value in params.items()
    }
