"""Tests for log redaction of secrets and wallet identities."""
from landvote.observability.redaction import redact_sensitive

WALLET = "0x1111111111111111111111111111111111111111"


def test_redact_private_key() -> None:
    """Must redact private_key fields."""
    data = {"private_key": "sk-12345secret", "parcel_id": "P1"}
    result = redact_sensitive(data)
    assert result["private_key"] == "***REDACTED***"
    assert result["parcel_id"] == "P1"


def test_redact_api_key_and_token() -> None:
    """Must redact api_key and token fields."""
    data = {"api_key": "sk-api-secret-12345", "token": "eyJhbGciOiJIUzI1NiJ9", "region": "Downtown"}
    result = redact_sensitive(data)
    assert result["api_key"] == "***REDACTED***"
    assert result["token"] == "***REDACTED***"
    assert result["region"] == "Downtown"


def test_redact_seed_phrase_and_mnemonic() -> None:
    """Must redact wallet recovery material."""
    words = "abandon abandon abandon abandon abandon abandon abandon abandon abandon abandon abandon about"
    data = {"mnemonic": words, "wallet_seed_phrase": words}
    result = redact_sensitive(data)
    assert result["mnemonic"] == "***REDACTED***"
    assert result["wallet_seed_phrase"] == "***REDACTED***"


def test_identity_fields_are_shortened() -> None:
    """Wallet identities are logged in display form only."""
    data = {"voter": WALLET, "proposer": WALLET, "proposal_id": "abc123"}
    result = redact_sensitive(data)
    assert result["voter"] == "0x1111...1111"
    assert result["proposer"] == "0x1111...1111"
    assert result["proposal_id"] == "abc123"


def test_redact_nested_and_lists() -> None:
    """Must redact nested mappings and lists of mappings."""
    data = {"outer": {"inner_api_key": "secret123"}, "votes": [{"voter": WALLET}, {"password": "x"}]}
    result = redact_sensitive(data)
    assert result["outer"]["inner_api_key"] == "***REDACTED***"
    assert result["votes"][0]["voter"] == "0x1111...1111"
    assert result["votes"][1]["password"] == "***REDACTED***"


def test_redact_case_insensitive() -> None:
    """Must redact keys regardless of case."""
    data = {"API_KEY": "secret", "Private_Key": "secret", "Owner": WALLET}
    result = redact_sensitive(data)
    assert result["API_KEY"] == "***REDACTED***"
    assert result["Private_Key"] == "***REDACTED***"
    assert result["Owner"] == "0x1111...1111"
