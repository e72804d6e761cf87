from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from landvote.domain.status import ProposalStatus


class TiePolicy(StrEnum):
    REJECT = "reject"
    PASS = "pass"


class TallyOutcome(StrEnum):
    PASS = "pass"
    FAIL = "fail"
    PENDING = "pending"


def compute_for_percentage(for_count: int, against_count: int) -> float:
    total = for_count + against_count
    if total == 0:
        return 0.0
    return for_count / total * 100


def derive_outcome(
    for_count: int,
    against_count: int,
    quorum: int,
    tie_policy: TiePolicy = TiePolicy.REJECT,
) -> TallyOutcome:
    """Outcome the votes would produce if the proposal closed now.

    ``PENDING`` means quorum has not been reached. Ties are settled by
    ``tie_policy``; ``REJECT`` keeps the status quo.
    """
    if for_count + against_count < quorum:
        return TallyOutcome.PENDING
    if for_count > against_count:
        return TallyOutcome.PASS
    if for_count == against_count and tie_policy == TiePolicy.PASS:
        return TallyOutcome.PASS
    return TallyOutcome.FAIL


OUTCOME_STATUSES: dict[TallyOutcome, ProposalStatus] = {
    TallyOutcome.PASS: ProposalStatus.PASSED,
    TallyOutcome.FAIL: ProposalStatus.REJECTED,
    TallyOutcome.PENDING: ProposalStatus.EXPIRED,
}

# Expired closes as a failure; quorum_met tells it apart from Rejected.
STATUS_OUTCOMES: dict[ProposalStatus, TallyOutcome] = {
    ProposalStatus.PASSED: TallyOutcome.PASS,
    ProposalStatus.REJECTED: TallyOutcome.FAIL,
    ProposalStatus.EXPIRED: TallyOutcome.FAIL,
}


def settled_outcome(
    status: ProposalStatus,
    for_count: int,
    against_count: int,
    quorum: int,
    tie_policy: TiePolicy = TiePolicy.REJECT,
) -> TallyOutcome:
    """Closed proposals report the outcome they closed with, whatever the current tie policy."""
    closed = STATUS_OUTCOMES.get(status)
    if closed is not None:
        return closed
    return derive_outcome(for_count, against_count, quorum, tie_policy)


@dataclass(slots=True, frozen=True)
class TallySnapshot:
    proposal_id: str
    status: ProposalStatus
    for_count: int
    against_count: int
    eligible_voters: int
    quorum: int
    voting_open: bool
    outcome: TallyOutcome

    @property
    def total_votes(self) -> int:
        return self.for_count + self.against_count

    @property
    def quorum_met(self) -> bool:
        return self.total_votes >= self.quorum

    @property
    def for_percentage(self) -> float:
        return compute_for_percentage(self.for_count, self.against_count)

    def as_dict(self) -> dict[str, Any]:
        return {
            "proposal_id": self.proposal_id,
            "status": self.status.value,
            "for": self.for_count,
            "against": self.against_count,
            "total_votes": self.total_votes,
            "eligible_voters": self.eligible_voters,
            "quorum": self.quorum,
            "quorum_met": self.quorum_met,
            "for_percentage": round(self.for_percentage, 2),
            "voting_open": self.voting_open,
            "outcome": self.outcome.value,
        }
