import threading
from collections.abc import Callable

import pytest

from conftest import ALICE, BOB, NOW
from landvote.domain.proposal import Proposal
from landvote.domain.vote import Vote, VoteChoice
from landvote.errors import AlreadyVoted
from landvote.orchestration.lifecycle import LifecycleController
from landvote.orchestration.vote_ledger import VoteLedger


def _vote(voter: str, proposal_id: str = "prop-1", choice: VoteChoice = VoteChoice.FOR) -> Vote:
    return Vote.record(voter=voter, proposal_id=proposal_id, choice=choice, cast_at=NOW, parcel_id="P1")


def test_append_indexes_and_counts() -> None:
    ledger = VoteLedger()
    ledger.append(_vote(ALICE))
    ledger.append(_vote(BOB, choice=VoteChoice.AGAINST))

    assert ledger.counts("prop-1") == (1, 1)
    assert ledger.counts("other") == (0, 0)
    assert ledger.has_voted(ALICE, "prop-1")
    assert not ledger.has_voted(ALICE, "other")
    assert len(ledger.votes_for("prop-1")) == 2


def test_append_never_overwrites() -> None:
    ledger = VoteLedger()
    first = _vote(ALICE)
    ledger.append(first)

    with pytest.raises(AlreadyVoted):
        ledger.append(_vote(ALICE, choice=VoteChoice.AGAINST))

    assert ledger.get_vote(ALICE, "prop-1") == first
    assert ledger.counts("prop-1") == (1, 0)


def test_receipt_is_deterministic() -> None:
    assert _vote(ALICE).receipt == _vote(ALICE).receipt
    assert _vote(ALICE).receipt != _vote(ALICE, choice=VoteChoice.AGAINST).receipt
    assert _vote(ALICE).receipt.startswith("0x")


def test_concurrent_casts_by_same_voter_yield_one_success(
    controller: LifecycleController,
    active_proposal: Callable[..., Proposal],
) -> None:
    proposal = active_proposal()
    barrier = threading.Barrier(8)
    successes: list[Vote] = []
    rejections: list[AlreadyVoted] = []
    guard = threading.Lock()

    def cast() -> None:
        barrier.wait()
        try:
            vote = controller.cast_vote(ALICE, proposal.proposal_id, VoteChoice.FOR)
        except AlreadyVoted as exc:
            with guard:
                rejections.append(exc)
        else:
            with guard:
                successes.append(vote)

    threads = [threading.Thread(target=cast) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(successes) == 1
    assert len(rejections) == 7
    assert controller.ledger.counts(proposal.proposal_id) == (1, 0)
