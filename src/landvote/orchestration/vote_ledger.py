from __future__ import annotations

import threading
from datetime import datetime

from landvote.domain.eligibility import EligibilityDecision, EligibilityReason
from landvote.domain.proposal import Proposal
from landvote.domain.vote import Vote, VoteChoice
from landvote.errors import AlreadyVoted, NotEligible, ProposalNotActive, RuleRejection
from landvote.orchestration.eligibility import EligibilityResolver
from landvote.orchestration.locks import KeyedLocks
from landvote.registry.ownership import OwnershipSnapshot


def rejection_for(decision: EligibilityDecision, proposal: Proposal) -> RuleRejection:
    if decision.reason == EligibilityReason.ALREADY_VOTED:
        return AlreadyVoted(f"vote already recorded for proposal {proposal.proposal_id}")
    if decision.reason == EligibilityReason.VOTING_CLOSED:
        return ProposalNotActive(
            f"proposal {proposal.proposal_id} is not open for voting (status {proposal.status.value})"
        )
    reason = decision.reason or EligibilityReason.ROLE_INSUFFICIENT
    return NotEligible(reason, f"not eligible to vote on proposal {proposal.proposal_id}: {reason.value}")


class VoteLedger:
    """Append-only vote record, one vote per (voter, proposal)."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._cast_locks = KeyedLocks()
        self._votes: dict[tuple[str, str], Vote] = {}
        self._by_proposal: dict[str, list[Vote]] = {}
        self._counts: dict[str, dict[VoteChoice, int]] = {}

    def cast_vote(
        self,
        snapshot: OwnershipSnapshot,
        proposal: Proposal,
        choice: VoteChoice,
        *,
        resolver: EligibilityResolver,
        now: datetime,
    ) -> Vote:
        """Re-check eligibility and append, as one critical section per (voter, proposal)."""
        with self._cast_locks.hold((snapshot.identity, proposal.proposal_id)):
            decision = resolver.evaluate(snapshot, proposal, now)
            if not decision.eligible or decision.parcel_id is None:
                raise rejection_for(decision, proposal)

            vote = Vote.record(
                voter=snapshot.identity,
                proposal_id=proposal.proposal_id,
                choice=choice,
                cast_at=now,
                parcel_id=decision.parcel_id,
            )
            self.append(vote)
        return vote

    def append(self, vote: Vote) -> None:
        with self._lock:
            if vote.key in self._votes:
                raise AlreadyVoted(f"vote already recorded for proposal {vote.proposal_id}")
            self._votes[vote.key] = vote
            self._by_proposal.setdefault(vote.proposal_id, []).append(vote)
            counts = self._counts.setdefault(vote.proposal_id, {VoteChoice.FOR: 0, VoteChoice.AGAINST: 0})
            counts[vote.choice] += 1

    def has_voted(self, voter: str, proposal_id: str) -> bool:
        with self._lock:
            return (voter, proposal_id) in self._votes

    def get_vote(self, voter: str, proposal_id: str) -> Vote | None:
        with self._lock:
            return self._votes.get((voter, proposal_id))

    def votes_for(self, proposal_id: str) -> tuple[Vote, ...]:
        with self._lock:
            return tuple(self._by_proposal.get(proposal_id, ()))

    def counts(self, proposal_id: str) -> tuple[int, int]:
        with self._lock:
            counts = self._counts.get(proposal_id)
            if counts is None:
                return (0, 0)
            return (counts[VoteChoice.FOR], counts[VoteChoice.AGAINST])

    def all_votes(self) -> tuple[Vote, ...]:
        with self._lock:
            return tuple(self._votes.values())
