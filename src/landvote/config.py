from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from landvote.domain.roles import Role
from landvote.domain.tally import TiePolicy

DEFAULT_PROPOSAL_CATEGORIES: tuple[str, ...] = (
    "Zoning Amendment",
    "Infrastructure Development",
    "Environmental Protection",
    "Public Transportation",
    "Housing Policy",
    "Commercial Development",
    "Green Spaces",
    "Public Safety",
)


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="LANDVOTE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_env: str = "dev"
    log_level: str = "INFO"
    governance_name: str = "landvote"

    # Deployments are expected to raise this.
    quorum_threshold: int = Field(default=1, ge=1)
    tie_policy: TiePolicy = TiePolicy.REJECT
    review_role: Role = Role.VALIDATOR

    proposal_categories: list[str] = Field(default_factory=lambda: list(DEFAULT_PROPOSAL_CATEGORIES))
    known_regions: list[str] = Field(default_factory=list)

    state_path: str = "landvote-state.json"
    sweep_interval_seconds: float = Field(default=30.0, gt=0)


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    return AppSettings()
