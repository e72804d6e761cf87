from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from landvote.identity import short_identity

SENSITIVE_KEYS: frozenset[str] = frozenset(
    {
        "secret",
        "token",
        "private_key",
        "api_key",
        "password",
        "mnemonic",
        "seed_phrase",
    }
)

IDENTITY_KEYS: frozenset[str] = frozenset(
    {
        "identity",
        "voter",
        "owner",
        "proposer",
        "actor",
    }
)


def _is_sensitive_key(key: str) -> bool:
    normalized = key.lower()
    return any(sensitive in normalized for sensitive in SENSITIVE_KEYS)


def redact_sensitive(data: Any) -> Any:
    """Mask secrets and shorten wallet identities before anything is logged."""
    if isinstance(data, Mapping):
        redacted: dict[Any, Any] = {}
        for key, value in data.items():
            if _is_sensitive_key(str(key)):
                redacted[key] = "***REDACTED***"
            elif str(key).lower() in IDENTITY_KEYS and isinstance(value, str):
                redacted[key] = short_identity(value)
            else:
                redacted[key] = redact_sensitive(value)
        return redacted
    if isinstance(data, list):
        return [redact_sensitive(item) for item in data]
    return data
