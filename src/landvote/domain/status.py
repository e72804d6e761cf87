from __future__ import annotations

from collections.abc import Sequence
from enum import StrEnum


class ProposalStatus(StrEnum):
    DRAFT = "Draft"
    UNDER_REVIEW = "UnderReview"
    ACTIVE = "Active"
    PASSED = "Passed"
    REJECTED = "Rejected"
    EXPIRED = "Expired"


TERMINAL_STATUSES: frozenset[ProposalStatus] = frozenset(
    {
        ProposalStatus.PASSED,
        ProposalStatus.REJECTED,
        ProposalStatus.EXPIRED,
    }
)

DISCARDABLE_STATUSES: frozenset[ProposalStatus] = frozenset(
    {
        ProposalStatus.DRAFT,
        ProposalStatus.UNDER_REVIEW,
    }
)

ALLOWED_TRANSITIONS: dict[ProposalStatus, frozenset[ProposalStatus]] = {
    ProposalStatus.DRAFT: frozenset({ProposalStatus.UNDER_REVIEW}),
    ProposalStatus.UNDER_REVIEW: frozenset({ProposalStatus.ACTIVE}),
    ProposalStatus.ACTIVE: frozenset(
        {
            ProposalStatus.PASSED,
            ProposalStatus.REJECTED,
            ProposalStatus.EXPIRED,
        }
    ),
    ProposalStatus.PASSED: frozenset(),
    ProposalStatus.REJECTED: frozenset(),
    ProposalStatus.EXPIRED: frozenset(),
}


def is_terminal_status(status: ProposalStatus) -> bool:
    return status in TERMINAL_STATUSES


def can_transition(current: ProposalStatus, target: ProposalStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def is_legal_path(history: Sequence[ProposalStatus]) -> bool:
    """True when ``history`` starts at Draft and only takes allowed steps."""
    if not history or history[0] != ProposalStatus.DRAFT:
        return False
    return all(can_transition(current, target) for current, target in zip(history, history[1:]))
