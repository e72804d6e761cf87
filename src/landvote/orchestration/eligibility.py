from __future__ import annotations

from typing import TYPE_CHECKING

from landvote.clock import Clock
from landvote.domain.eligibility import EligibilityDecision, EligibilityReason
from landvote.domain.proposal import Proposal
from landvote.domain.roles import Role, has_role
from landvote.errors import ValidationError
from landvote.identity import normalize_identity
from landvote.orchestration.proposal_store import ProposalStore
from landvote.registry.ownership import OwnershipRegistry, OwnershipSnapshot, take_snapshot

if TYPE_CHECKING:
    from datetime import datetime

    from landvote.orchestration.vote_ledger import VoteLedger


def qualifying_parcel_ids(snapshot: OwnershipSnapshot, proposal: Proposal) -> list[str]:
    return sorted(
        parcel.parcel_id
        for parcel in snapshot.parcels
        if parcel.owner == snapshot.identity and parcel.region == proposal.region and parcel.eligible
    )


class EligibilityResolver:
    """Decides whether an identity may vote on a proposal.

    Checks run in a fixed order (role, parcel, voting window, prior vote) and
    the first failing check supplies the reason. Nothing here mutates state.
    """

    def __init__(
        self,
        ledger: VoteLedger,
        proposals: ProposalStore,
        registry: OwnershipRegistry,
        clock: Clock,
    ) -> None:
        self._ledger = ledger
        self._proposals = proposals
        self._registry = registry
        self._clock = clock

    def evaluate(
        self,
        snapshot: OwnershipSnapshot,
        proposal: Proposal,
        now: datetime,
    ) -> EligibilityDecision:
        if not has_role(snapshot.role, Role.LANDOWNER):
            return EligibilityDecision.deny(EligibilityReason.ROLE_INSUFFICIENT)

        parcel_ids = qualifying_parcel_ids(snapshot, proposal)
        if not parcel_ids:
            return EligibilityDecision.deny(EligibilityReason.NO_QUALIFYING_PARCEL)

        if not proposal.is_open_at(now):
            return EligibilityDecision.deny(EligibilityReason.VOTING_CLOSED)

        if self._ledger.has_voted(snapshot.identity, proposal.proposal_id):
            return EligibilityDecision.deny(EligibilityReason.ALREADY_VOTED)

        return EligibilityDecision.allow(parcel_ids[0])

    def can_vote(self, identity: str, proposal_id: str) -> EligibilityDecision:
        try:
            voter = normalize_identity(identity)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc
        proposal = self._proposals.get(proposal_id)
        return self.evaluate(take_snapshot(self._registry, voter), proposal, self._clock.now())
