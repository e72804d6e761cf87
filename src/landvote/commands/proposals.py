from __future__ import annotations

from argparse import Namespace

from landvote.commands.session import run_in_session
from landvote.config import AppSettings
from landvote.domain.proposal import ProposalDraft
from landvote.domain.roles import Role
from landvote.domain.status import ProposalStatus
from landvote.persistence.state_file import GovernanceSession
from landvote.types import CommandResult, JsonDict


def run_create_proposal(args: Namespace, settings: AppSettings) -> CommandResult:
    draft = ProposalDraft(
        title=str(getattr(args, "title", "") or ""),
        description=str(getattr(args, "description", "") or ""),
        category=str(getattr(args, "category", "") or ""),
        region=str(getattr(args, "region", "") or ""),
        deadline=getattr(args, "deadline", None),
        proposer=str(getattr(args, "proposer", "") or ""),
        role_gate=Role(getattr(args, "role_gate", Role.PROPOSER.value)),
        quorum=getattr(args, "quorum", None),
    )

    def action(session: GovernanceSession) -> JsonDict:
        return {"proposal": session.controller.create_proposal(draft).as_dict()}

    return run_in_session("create-proposal", args, settings, action)


def run_submit_proposal(args: Namespace, settings: AppSettings) -> CommandResult:
    def action(session: GovernanceSession) -> JsonDict:
        proposal = session.controller.submit_proposal(str(args.proposal_id), str(args.actor))
        return {"proposal": proposal.as_dict()}

    return run_in_session("submit-proposal", args, settings, action)


def run_approve_proposal(args: Namespace, settings: AppSettings) -> CommandResult:
    def action(session: GovernanceSession) -> JsonDict:
        proposal = session.controller.approve_proposal(str(args.proposal_id), str(args.actor))
        return {"proposal": proposal.as_dict()}

    return run_in_session("approve-proposal", args, settings, action)


def run_discard_proposal(args: Namespace, settings: AppSettings) -> CommandResult:
    def action(session: GovernanceSession) -> JsonDict:
        proposal = session.controller.discard_proposal(str(args.proposal_id), str(args.actor))
        return {"discarded": proposal.proposal_id}

    return run_in_session("discard-proposal", args, settings, action)


def run_advance_proposal(args: Namespace, settings: AppSettings) -> CommandResult:
    def action(session: GovernanceSession) -> JsonDict:
        proposal = session.controller.advance_proposal(str(args.proposal_id))
        tally = session.controller.tally(proposal.proposal_id)
        return {"proposal": proposal.as_dict(), "tally": tally.as_dict()}

    return run_in_session("advance-proposal", args, settings, action)


def run_sweep_deadlines(args: Namespace, settings: AppSettings) -> CommandResult:
    def action(session: GovernanceSession) -> JsonDict:
        closed = session.controller.sweep()
        return {"closed": [proposal.as_dict() for proposal in closed]}

    return run_in_session("sweep-deadlines", args, settings, action)


def run_list_proposals(args: Namespace, settings: AppSettings) -> CommandResult:
    raw_status = getattr(args, "status", None)
    status = ProposalStatus(raw_status) if raw_status else None
    region = getattr(args, "region", None) or None

    def action(session: GovernanceSession) -> JsonDict:
        proposals = session.controller.list_proposals(status=status, region=region)
        return {"proposals": [proposal.as_dict() for proposal in proposals]}

    return run_in_session("list-proposals", args, settings, action, persist=False)
