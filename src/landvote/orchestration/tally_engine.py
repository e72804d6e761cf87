from __future__ import annotations

from datetime import datetime

from landvote.domain.proposal import Proposal
from landvote.domain.tally import TallySnapshot, TiePolicy, settled_outcome
from landvote.orchestration.parcel_store import ParcelStore
from landvote.orchestration.vote_ledger import VoteLedger


class TallyEngine:
    def __init__(
        self,
        ledger: VoteLedger,
        parcels: ParcelStore,
        *,
        tie_policy: TiePolicy = TiePolicy.REJECT,
    ) -> None:
        self._ledger = ledger
        self._parcels = parcels
        self._tie_policy = tie_policy

    @property
    def tie_policy(self) -> TiePolicy:
        return self._tie_policy

    def snapshot(self, proposal: Proposal, now: datetime) -> TallySnapshot:
        for_count, against_count = self._ledger.counts(proposal.proposal_id)
        return TallySnapshot(
            proposal_id=proposal.proposal_id,
            status=proposal.status,
            for_count=for_count,
            against_count=against_count,
            eligible_voters=self._parcels.eligible_owner_count(proposal.region),
            quorum=proposal.quorum,
            voting_open=proposal.is_open_at(now),
            outcome=settled_outcome(
                proposal.status,
                for_count,
                against_count,
                proposal.quorum,
                self._tie_policy,
            ),
        )
