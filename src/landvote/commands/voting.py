from __future__ import annotations

from argparse import Namespace

from landvote.commands.session import run_in_session
from landvote.config import AppSettings
from landvote.persistence.state_file import GovernanceSession
from landvote.types import CommandResult, JsonDict


def run_eligibility(args: Namespace, settings: AppSettings) -> CommandResult:
    def action(session: GovernanceSession) -> JsonDict:
        decision = session.controller.eligibility(str(args.identity), str(args.proposal_id))
        details = decision.as_dict()
        details["parcels"] = session.controller.parcel_status(str(args.identity), str(args.proposal_id))
        return details

    return run_in_session("eligibility", args, settings, action, persist=False)


def run_cast_vote(args: Namespace, settings: AppSettings) -> CommandResult:
    def action(session: GovernanceSession) -> JsonDict:
        vote = session.controller.cast_vote(str(args.identity), str(args.proposal_id), args.choice)
        tally = session.controller.tally(vote.proposal_id)
        return {"vote": vote.as_dict(), "tally": tally.as_dict()}

    return run_in_session("cast-vote", args, settings, action)


def run_tally(args: Namespace, settings: AppSettings) -> CommandResult:
    def action(session: GovernanceSession) -> JsonDict:
        return session.controller.tally(str(args.proposal_id)).as_dict()

    return run_in_session("tally", args, settings, action, persist=False)
