from __future__ import annotations

from collections.abc import Callable

from landvote.clock import Clock, SystemClock
from landvote.config import AppSettings
from landvote.domain.eligibility import EligibilityDecision
from landvote.domain.proposal import Proposal, ProposalDraft
from landvote.domain.roles import Role
from landvote.domain.status import ProposalStatus, is_terminal_status
from landvote.domain.tally import OUTCOME_STATUSES, TallySnapshot
from landvote.domain.vote import Vote, parse_choice
from landvote.errors import (
    IllegalTransition,
    InvalidProposal,
    NotAuthorized,
    NotEligible,
    RuleRejection,
    ValidationError,
)
from landvote.identity import normalize_identity
from landvote.observability.logging import get_logger
from landvote.orchestration.authorization import (
    AuthorizationContext,
    OperationType,
    authorize_operation,
)
from landvote.orchestration.eligibility import EligibilityResolver
from landvote.orchestration.locks import KeyedLocks
from landvote.orchestration.parcel_store import ParcelStore
from landvote.orchestration.proposal_store import ProposalStore
from landvote.orchestration.tally_engine import TallyEngine
from landvote.orchestration.vote_ledger import VoteLedger
from landvote.registry.ownership import (
    InMemoryOwnershipRegistry,
    ParcelListener,
    OwnershipRegistry,
    take_snapshot,
)

PARCEL_ELIGIBLE = "eligible"
PARCEL_VOTED = "voted"
PARCEL_INELIGIBLE = "ineligible"


class LifecycleController:
    """Entry point for every governance command.

    Commands touching one proposal are serialized on that proposal's id.
    Ownership facts are read from the registry before the lock is taken.
    """

    def __init__(
        self,
        *,
        proposals: ProposalStore,
        parcels: ParcelStore,
        ledger: VoteLedger,
        resolver: EligibilityResolver,
        tally: TallyEngine,
        registry: OwnershipRegistry,
        clock: Clock,
        review_role: Role = Role.VALIDATOR,
    ) -> None:
        self.proposals = proposals
        self.parcels = parcels
        self.ledger = ledger
        self.resolver = resolver
        self.tally_engine = tally
        self.registry = registry
        self.clock = clock
        self.review_role = review_role
        self.locks = KeyedLocks()
        self._logger = get_logger("lifecycle")

    def _identity(self, raw_value: str, field_name: str) -> str:
        try:
            return normalize_identity(raw_value, field_name=field_name)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc

    def _authorize(
        self,
        actor: str,
        operation: OperationType,
        *,
        proposer: str | None = None,
        minimum_role: Role | None = None,
    ) -> None:
        allowed, error = authorize_operation(
            AuthorizationContext(
                actor=actor,
                role=self.registry.resolve_role(actor),
                operation=operation,
                proposer=proposer,
                minimum_role=minimum_role,
            )
        )
        if not allowed:
            self._logger.info("authorization_rejected", actor=actor, operation=operation.value)
            raise NotAuthorized(error or "authorization denied")

    def _illegal(self, proposal: Proposal, target: ProposalStatus | None, message: str) -> IllegalTransition:
        self._logger.warning(
            "illegal_transition",
            proposal_id=proposal.proposal_id,
            current_status=proposal.status.value,
            target_status=target.value if target is not None else None,
            message=message,
        )
        return IllegalTransition(
            proposal.proposal_id,
            proposal.status.value,
            target.value if target is not None else None,
            message,
        )

    def _transition(self, proposal: Proposal, target: ProposalStatus) -> Proposal:
        try:
            updated = self.proposals.transition(proposal.proposal_id, target)
        except IllegalTransition as exc:
            raise self._illegal(proposal, target, exc.message) from exc

        self._logger.info(
            "proposal_transitioned",
            proposal_id=updated.proposal_id,
            from_status=proposal.status.value,
            to_status=updated.status.value,
        )
        return updated

    def _require_future_deadline(self, proposal: Proposal) -> None:
        if self.clock.now() >= proposal.deadline:
            raise InvalidProposal(
                f"invalid proposal: deadline {proposal.deadline.isoformat()} is no longer in the future"
            )

    def create_proposal(self, draft: ProposalDraft) -> Proposal:
        valid = self.proposals.validate(draft)
        self._authorize(valid.proposer, OperationType.CREATE_PROPOSAL, minimum_role=valid.role_gate)

        proposal = self.proposals.create(valid)
        self._logger.info(
            "proposal_created",
            proposal_id=proposal.proposal_id,
            proposer=proposal.proposer,
            region=proposal.region,
            category=proposal.category,
            quorum=proposal.quorum,
        )
        return proposal

    def submit_proposal(self, proposal_id: str, actor: str) -> Proposal:
        actor_id = self._identity(actor, "actor")
        self.proposals.get(proposal_id)
        with self.locks.hold(proposal_id):
            proposal = self.proposals.get(proposal_id)
            self._authorize(actor_id, OperationType.SUBMIT_PROPOSAL, proposer=proposal.proposer)
            if proposal.status == ProposalStatus.DRAFT:
                self._require_future_deadline(proposal)
            return self._transition(proposal, ProposalStatus.UNDER_REVIEW)

    def approve_proposal(self, proposal_id: str, actor: str) -> Proposal:
        actor_id = self._identity(actor, "actor")
        self.proposals.get(proposal_id)
        with self.locks.hold(proposal_id):
            proposal = self.proposals.get(proposal_id)
            self._authorize(actor_id, OperationType.APPROVE_PROPOSAL, minimum_role=self.review_role)
            if proposal.status == ProposalStatus.UNDER_REVIEW:
                self._require_future_deadline(proposal)
            return self._transition(proposal, ProposalStatus.ACTIVE)

    def discard_proposal(self, proposal_id: str, actor: str) -> Proposal:
        actor_id = self._identity(actor, "actor")
        self.proposals.get(proposal_id)
        with self.locks.hold(proposal_id):
            proposal = self.proposals.get(proposal_id)
            self._authorize(actor_id, OperationType.DISCARD_PROPOSAL, proposer=proposal.proposer)
            try:
                discarded = self.proposals.discard(proposal_id)
            except IllegalTransition as exc:
                raise self._illegal(proposal, None, exc.message) from exc
        self._logger.info("proposal_discarded", proposal_id=proposal_id, actor=actor_id)
        return discarded

    def advance_proposal(self, proposal_id: str) -> Proposal:
        self.proposals.get(proposal_id)
        with self.locks.hold(proposal_id):
            return self._advance_locked(proposal_id)

    def _advance_locked(self, proposal_id: str) -> Proposal:
        proposal = self.proposals.get(proposal_id)
        if is_terminal_status(proposal.status):
            self._logger.debug("advance_noop", proposal_id=proposal_id, status=proposal.status.value)
            return proposal

        if proposal.status != ProposalStatus.ACTIVE:
            raise self._illegal(
                proposal,
                None,
                f"cannot advance a proposal in status {proposal.status.value}",
            )

        now = self.clock.now()
        if now < proposal.deadline:
            raise self._illegal(
                proposal,
                None,
                f"voting deadline {proposal.deadline.isoformat()} has not been reached",
            )

        snapshot = self.tally_engine.snapshot(proposal, now)
        return self._transition(proposal, OUTCOME_STATUSES[snapshot.outcome])

    def sweep(self) -> tuple[Proposal, ...]:
        """Close every Active proposal whose deadline has passed."""
        now = self.clock.now()
        closed: list[Proposal] = []
        for proposal in self.proposals.list(status=ProposalStatus.ACTIVE):
            if now < proposal.deadline:
                continue
            with self.locks.hold(proposal.proposal_id):
                updated = self._advance_locked(proposal.proposal_id)
            if updated.status != proposal.status:
                closed.append(updated)

        self._logger.info("deadline_sweep", closed=len(closed))
        return tuple(closed)

    def eligibility(self, identity: str, proposal_id: str) -> EligibilityDecision:
        return self.resolver.can_vote(identity, proposal_id)

    def cast_vote(self, identity: str, proposal_id: str, choice: object) -> Vote:
        voter = self._identity(identity, "identity")
        parsed = parse_choice(choice)
        if parsed is None:
            raise ValidationError("choice must be For or Against")

        self.proposals.get(proposal_id)
        snapshot = take_snapshot(self.registry, voter)

        with self.locks.hold(proposal_id):
            proposal = self.proposals.get(proposal_id)
            try:
                vote = self.ledger.cast_vote(
                    snapshot,
                    proposal,
                    parsed,
                    resolver=self.resolver,
                    now=self.clock.now(),
                )
            except RuleRejection as exc:
                self._logger.info(
                    "vote_rejected",
                    proposal_id=proposal_id,
                    voter=voter,
                    error=exc.code,
                    reason=exc.reason.value if isinstance(exc, NotEligible) else None,
                )
                raise

        self._logger.info(
            "vote_cast",
            proposal_id=proposal_id,
            voter=voter,
            choice=vote.choice.value,
            parcel_id=vote.parcel_id,
        )
        return vote

    def tally(self, proposal_id: str) -> TallySnapshot:
        return self.tally_engine.snapshot(self.proposals.get(proposal_id), self.clock.now())

    def get_proposal(self, proposal_id: str) -> Proposal:
        return self.proposals.get(proposal_id)

    def list_proposals(
        self,
        status: ProposalStatus | None = None,
        region: str | None = None,
    ) -> tuple[Proposal, ...]:
        return self.proposals.list(status=status, region=region)

    def parcel_status(self, identity: str, proposal_id: str) -> dict[str, str]:
        """Per-parcel voting status of one wallet for one proposal."""
        voter = self._identity(identity, "identity")
        proposal = self.proposals.get(proposal_id)
        decision = self.resolver.can_vote(voter, proposal_id)
        vote = self.ledger.get_vote(voter, proposal_id)

        statuses: dict[str, str] = {}
        for parcel in self.parcels.parcels_owned_by(voter):
            if vote is not None and vote.parcel_id == parcel.parcel_id:
                statuses[parcel.parcel_id] = PARCEL_VOTED
            elif decision.eligible and parcel.region == proposal.region and parcel.eligible:
                statuses[parcel.parcel_id] = PARCEL_ELIGIBLE
            else:
                statuses[parcel.parcel_id] = PARCEL_INELIGIBLE
        return statuses


def build_controller(
    settings: AppSettings,
    registry: OwnershipRegistry,
    *,
    clock: Clock | None = None,
    subscribe: Callable[[ParcelListener], object] | None = None,
) -> LifecycleController:
    """Wire stores, ledger and engines into a controller.

    ``subscribe`` registers the parcel store's ingestion callback with the
    registry's parcel feed. It defaults to ``registry.subscribe`` for an
    ``InMemoryOwnershipRegistry``; other registries must pass their own feed,
    otherwise regional voter counts and per-parcel status stay empty.
    """
    clock = clock or SystemClock()
    parcels = ParcelStore()
    if subscribe is None and isinstance(registry, InMemoryOwnershipRegistry):
        subscribe = registry.subscribe
    if subscribe is not None:
        subscribe(parcels.ingest)

    proposals = ProposalStore(
        clock,
        default_quorum=settings.quorum_threshold,
        categories=settings.proposal_categories,
        regions=settings.known_regions,
    )
    ledger = VoteLedger()
    resolver = EligibilityResolver(ledger, proposals, registry, clock)
    return LifecycleController(
        proposals=proposals,
        parcels=parcels,
        ledger=ledger,
        resolver=resolver,
        tally=TallyEngine(ledger, parcels, tie_policy=settings.tie_policy),
        registry=registry,
        clock=clock,
        review_role=settings.review_role,
    )
