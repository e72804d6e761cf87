"""End-to-end governance scenarios driven through the lifecycle controller."""
from __future__ import annotations

import threading
from collections.abc import Callable
from datetime import timedelta

import pytest

from conftest import ALICE, BOB, CAROL, NOW, PROPOSER, VALIDATOR
from landvote.clock import FixedClock
from landvote.domain.eligibility import EligibilityReason
from landvote.domain.proposal import Proposal, ProposalDraft
from landvote.domain.roles import Role
from landvote.domain.status import ProposalStatus, is_legal_path
from landvote.domain.vote import VoteChoice
from landvote.errors import AlreadyVoted, NotEligible, RuleRejection
from landvote.orchestration.lifecycle import LifecycleController
from landvote.registry.ownership import InMemoryOwnershipRegistry

DAVE = "0x7777777777777777777777777777777777777777"


def test_downtown_zoning_vote(
    controller: LifecycleController,
    active_proposal: Callable[..., Proposal],
) -> None:
    proposal = active_proposal()

    controller.cast_vote(ALICE, proposal.proposal_id, VoteChoice.FOR)
    tally = controller.tally(proposal.proposal_id)
    assert (tally.for_count, tally.against_count) == (1, 0)
    assert controller.get_proposal(proposal.proposal_id).status == ProposalStatus.ACTIVE

    with pytest.raises(NotEligible) as exc_info:
        controller.cast_vote(BOB, proposal.proposal_id, VoteChoice.FOR)
    assert exc_info.value.reason == EligibilityReason.NO_QUALIFYING_PARCEL

    with pytest.raises(AlreadyVoted):
        controller.cast_vote(ALICE, proposal.proposal_id, VoteChoice.AGAINST)

    tally = controller.tally(proposal.proposal_id)
    assert (tally.for_count, tally.against_count) == (1, 0)


def test_high_quorum_proposal_expires(
    controller: LifecycleController,
    registry: InMemoryOwnershipRegistry,
    clock: FixedClock,
    active_proposal: Callable[..., Proposal],
) -> None:
    registry.assign_role(DAVE, Role.LANDOWNER)
    registry.register_parcel({"parcel_id": "P4", "owner": DAVE, "region": "Downtown"})
    proposal = active_proposal(quorum=10)
    controller.cast_vote(ALICE, proposal.proposal_id, VoteChoice.FOR)
    controller.cast_vote(CAROL, proposal.proposal_id, VoteChoice.FOR)
    controller.cast_vote(DAVE, proposal.proposal_id, VoteChoice.AGAINST)

    clock.set(proposal.deadline + timedelta(seconds=1))
    closed = controller.advance_proposal(proposal.proposal_id)

    assert closed.status == ProposalStatus.EXPIRED
    assert is_legal_path(closed.status_history)


def test_tie_is_rejected(
    controller: LifecycleController,
    clock: FixedClock,
    active_proposal: Callable[..., Proposal],
) -> None:
    proposal = active_proposal()
    controller.cast_vote(ALICE, proposal.proposal_id, VoteChoice.FOR)
    controller.cast_vote(CAROL, proposal.proposal_id, VoteChoice.AGAINST)

    clock.set(proposal.deadline)

    assert controller.advance_proposal(proposal.proposal_id).status == ProposalStatus.REJECTED


def test_quorum_not_met_expires_even_if_against_leads(
    controller: LifecycleController,
    clock: FixedClock,
    active_proposal: Callable[..., Proposal],
) -> None:
    proposal = active_proposal(quorum=3)
    controller.cast_vote(ALICE, proposal.proposal_id, VoteChoice.AGAINST)
    controller.cast_vote(CAROL, proposal.proposal_id, VoteChoice.AGAINST)

    clock.set(proposal.deadline)

    assert controller.advance_proposal(proposal.proposal_id).status == ProposalStatus.EXPIRED


def test_concurrent_votes_from_different_voters_are_all_counted(
    controller: LifecycleController,
    active_proposal: Callable[..., Proposal],
) -> None:
    proposal = active_proposal()
    barrier = threading.Barrier(2)
    errors: list[RuleRejection] = []

    def vote(identity: str) -> None:
        barrier.wait()
        try:
            controller.cast_vote(identity, proposal.proposal_id, VoteChoice.FOR)
        except RuleRejection as exc:
            errors.append(exc)

    threads = [threading.Thread(target=vote, args=(identity,)) for identity in (ALICE, CAROL)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert controller.tally(proposal.proposal_id).for_count == 2


def test_rejected_create_leaves_no_trace(
    controller: LifecycleController,
    make_draft: Callable[..., ProposalDraft],
) -> None:
    controller.create_proposal(make_draft(proposer=VALIDATOR))

    with pytest.raises(RuleRejection):
        controller.create_proposal(make_draft(proposer=BOB))

    proposals = controller.list_proposals()
    assert [proposal.proposer for proposal in proposals] == [VALIDATOR]
    assert all(proposal.created_at == NOW for proposal in proposals)
    assert PROPOSER not in {proposal.proposer for proposal in proposals}
