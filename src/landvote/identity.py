from __future__ import annotations

from eth_utils import is_hex_address, to_checksum_address


def normalize_identity(raw_value: str, *, field_name: str = "identity") -> str:
    candidate = raw_value.strip()
    if not candidate:
        raise ValueError(f"{field_name} is required")

    if not candidate.startswith("0x") or not is_hex_address(candidate):
        raise ValueError(f"{field_name} must be a 0x-prefixed wallet address")

    return str(to_checksum_address(candidate))


def short_identity(identity: str) -> str:
    """Display form used in logs, e.g. ``0x1234...5678``."""
    if len(identity) <= 12:
        return identity
    return f"{identity[:6]}...{identity[-4:]}"
