from __future__ import annotations

import hashlib
import itertools
import threading
from collections.abc import Collection
from datetime import datetime

from landvote.clock import Clock
from landvote.domain.proposal import Proposal, ProposalDraft, validate_draft
from landvote.domain.status import (
    DISCARDABLE_STATUSES,
    ProposalStatus,
    can_transition,
)
from landvote.errors import IllegalTransition, InvalidProposal, NotFound


class ProposalStore:
    def __init__(
        self,
        clock: Clock,
        *,
        default_quorum: int = 1,
        categories: Collection[str] = (),
        regions: Collection[str] = (),
    ) -> None:
        self._clock = clock
        self._default_quorum = default_quorum
        self._categories = frozenset(categories)
        self._regions = frozenset(regions)
        self._lock = threading.Lock()
        self._proposals: dict[str, Proposal] = {}
        self._sequence = itertools.count(1)

    def validate(self, draft: ProposalDraft) -> ProposalDraft:
        try:
            return validate_draft(
                draft,
                now=self._clock.now(),
                categories=self._categories,
                regions=self._regions,
            )
        except ValueError as exc:
            raise InvalidProposal(f"invalid proposal: {exc}") from exc

    def create(self, draft: ProposalDraft) -> Proposal:
        valid = self.validate(draft)
        if valid.deadline is None:
            raise InvalidProposal("invalid proposal: deadline is required")
        created_at = self._clock.now()

        with self._lock:
            proposal_id = self._next_id(valid, created_at)
            proposal = Proposal(
                proposal_id=proposal_id,
                title=valid.title,
                description=valid.description,
                category=valid.category,
                region=valid.region,
                proposer=valid.proposer,
                role_gate=valid.role_gate,
                status=ProposalStatus.DRAFT,
                deadline=valid.deadline,
                created_at=created_at,
                quorum=valid.quorum if valid.quorum is not None else self._default_quorum,
            )
            self._proposals[proposal_id] = proposal
        return proposal

    def _next_id(self, draft: ProposalDraft, created_at: datetime) -> str:
        # Restored proposals share the id space.
        while True:
            seed = f"{next(self._sequence)}:{draft.proposer}:{draft.title}:{created_at.isoformat()}"
            proposal_id = hashlib.sha256(seed.encode("utf-8")).hexdigest()[:24]
            if proposal_id not in self._proposals:
                return proposal_id

    def restore(self, proposal: Proposal) -> None:
        with self._lock:
            self._proposals[proposal.proposal_id] = proposal

    def get(self, proposal_id: str) -> Proposal:
        with self._lock:
            proposal = self._proposals.get(proposal_id)
        if proposal is None:
            raise NotFound("proposal", proposal_id)
        return proposal

    def list(
        self,
        status: ProposalStatus | None = None,
        region: str | None = None,
    ) -> tuple[Proposal, ...]:
        with self._lock:
            proposals = list(self._proposals.values())
        selected = [
            proposal
            for proposal in proposals
            if (status is None or proposal.status == status)
            and (region is None or proposal.region == region)
        ]
        return tuple(sorted(selected, key=lambda proposal: (proposal.created_at, proposal.proposal_id)))

    def transition(self, proposal_id: str, new_status: ProposalStatus) -> Proposal:
        with self._lock:
            current = self._proposals.get(proposal_id)
            if current is None:
                raise NotFound("proposal", proposal_id)
            if not can_transition(current.status, new_status):
                raise IllegalTransition(
                    proposal_id,
                    current.status.value,
                    new_status.value,
                    f"illegal transition: {current.status.value} -> {new_status.value}",
                )
            updated = current.with_status(new_status)
            self._proposals[proposal_id] = updated
        return updated

    def discard(self, proposal_id: str) -> Proposal:
        with self._lock:
            current = self._proposals.get(proposal_id)
            if current is None:
                raise NotFound("proposal", proposal_id)
            if current.status not in DISCARDABLE_STATUSES:
                raise IllegalTransition(
                    proposal_id,
                    current.status.value,
                    None,
                    f"cannot discard a proposal in status {current.status.value}",
                )
            del self._proposals[proposal_id]
        return current
