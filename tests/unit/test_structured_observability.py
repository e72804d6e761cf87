"""Tests for structured JSON logging of governance events."""
import io
import json

from landvote.observability.logging import configure_logging, get_logger

VOTER = "0x1111111111111111111111111111111111111111"


def _last_record(stream: io.StringIO) -> dict[str, object]:
    lines = [line for line in stream.getvalue().splitlines() if line.strip()]
    return json.loads(lines[-1])


def test_logs_are_json_keyed_by_proposal_id() -> None:
    """Operational logs MUST be structured JSON carrying the proposal id."""
    stream = io.StringIO()
    configure_logging("DEBUG", stream=stream)

    get_logger("test").info("vote_cast", proposal_id="proposal_456", choice="For")

    record = _last_record(stream)
    assert record["event"] == "vote_cast"
    assert record["proposal_id"] == "proposal_456"
    assert record["level"] == "info"
    assert "timestamp" in record


def test_logged_identities_are_shortened() -> None:
    """Full wallet addresses never reach the log stream."""
    stream = io.StringIO()
    configure_logging("DEBUG", stream=stream)

    get_logger("test").info("vote_rejected", proposal_id="p1", voter=VOTER, error="AlreadyVoted")

    record = _last_record(stream)
    assert record["voter"] == "0x1111...1111"
    assert VOTER not in stream.getvalue()


def test_level_filtering_drops_debug() -> None:
    stream = io.StringIO()
    configure_logging("WARNING", stream=stream)

    logger = get_logger("test")
    logger.debug("advance_noop", proposal_id="p1")
    logger.warning("illegal_transition", proposal_id="p1")

    output = stream.getvalue()
    assert "advance_noop" not in output
    assert "illegal_transition" in output
