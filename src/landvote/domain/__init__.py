"""Domain models for region-scoped land governance."""

from landvote.domain.eligibility import EligibilityDecision, EligibilityReason
from landvote.domain.parcel import Parcel
from landvote.domain.proposal import Proposal, ProposalDraft, validate_draft
from landvote.domain.roles import Role
from landvote.domain.status import ProposalStatus, is_terminal_status
from landvote.domain.tally import TallyOutcome, TallySnapshot, TiePolicy, derive_outcome
from landvote.domain.vote import Vote, VoteChoice, parse_choice

__all__ = [
    "EligibilityDecision",
    "EligibilityReason",
    "Parcel",
    "Proposal",
    "ProposalDraft",
    "validate_draft",
    "Role",
    "ProposalStatus",
    "is_terminal_status",
    "TallyOutcome",
    "TallySnapshot",
    "TiePolicy",
    "derive_outcome",
    "Vote",
    "VoteChoice",
    "parse_choice",
]
