import pytest

from landvote.config import DEFAULT_PROPOSAL_CATEGORIES, AppSettings
from landvote.domain.roles import Role
from landvote.domain.tally import TiePolicy


def test_defaults() -> None:
    settings = AppSettings()

    assert settings.quorum_threshold == 1
    assert settings.tie_policy == TiePolicy.REJECT
    assert settings.review_role == Role.VALIDATOR
    assert tuple(settings.proposal_categories) == DEFAULT_PROPOSAL_CATEGORIES
    assert settings.known_regions == []


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LANDVOTE_QUORUM_THRESHOLD", "5")
    monkeypatch.setenv("LANDVOTE_TIE_POLICY", "pass")
    monkeypatch.setenv("LANDVOTE_KNOWN_REGIONS", '["Downtown", "Riverfront"]')

    settings = AppSettings()

    assert settings.quorum_threshold == 5
    assert settings.tie_policy == TiePolicy.PASS
    assert settings.known_regions == ["Downtown", "Riverfront"]


def test_quorum_must_be_positive() -> None:
    with pytest.raises(ValueError):
        AppSettings(quorum_threshold=0)
