from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest
import structlog

from landvote.clock import FixedClock
from landvote.config import AppSettings
from landvote.domain.proposal import Proposal, ProposalDraft
from landvote.domain.roles import Role
from landvote.orchestration.lifecycle import LifecycleController, build_controller
from landvote.registry.ownership import InMemoryOwnershipRegistry

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)

ALICE = "0x1111111111111111111111111111111111111111"
BOB = "0x2222222222222222222222222222222222222222"
CAROL = "0x3333333333333333333333333333333333333333"
PROPOSER = "0x4444444444444444444444444444444444444444"
VALIDATOR = "0x5555555555555555555555555555555555555555"
STRANGER = "0x6666666666666666666666666666666666666666"


@pytest.fixture(autouse=True)
def _reset_structlog() -> Any:
    yield
    structlog.reset_defaults()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(quorum_threshold=2)


@pytest.fixture
def registry() -> InMemoryOwnershipRegistry:
    registry = InMemoryOwnershipRegistry()
    for identity in (ALICE, BOB, CAROL):
        registry.assign_role(identity, Role.LANDOWNER)
    registry.assign_role(PROPOSER, Role.PROPOSER)
    registry.assign_role(VALIDATOR, Role.VALIDATOR)

    registry.register_parcel({"parcel_id": "P1", "owner": ALICE, "region": "Downtown"})
    registry.register_parcel({"parcel_id": "P2", "owner": BOB, "region": "Riverfront"})
    registry.register_parcel({"parcel_id": "P3", "owner": CAROL, "region": "Downtown"})
    return registry


@pytest.fixture
def controller(
    settings: AppSettings,
    registry: InMemoryOwnershipRegistry,
    clock: FixedClock,
) -> LifecycleController:
    return build_controller(settings, registry, clock=clock)


@pytest.fixture
def make_draft() -> Callable[..., ProposalDraft]:
    def factory(**overrides: Any) -> ProposalDraft:
        fields: dict[str, Any] = {
            "title": "Downtown Zoning Amendment - Mixed Use Development",
            "description": "Allow mixed-use development in the downtown core.",
            "category": "Zoning Amendment",
            "region": "Downtown",
            "deadline": NOW + timedelta(days=7),
            "proposer": PROPOSER,
        }
        fields.update(overrides)
        return ProposalDraft(**fields)

    return factory


@pytest.fixture
def active_proposal(
    controller: LifecycleController,
    make_draft: Callable[..., ProposalDraft],
) -> Callable[..., Proposal]:
    def factory(**overrides: Any) -> Proposal:
        proposal = controller.create_proposal(make_draft(**overrides))
        controller.submit_proposal(proposal.proposal_id, PROPOSER)
        return controller.approve_proposal(proposal.proposal_id, VALIDATOR)

    return factory
