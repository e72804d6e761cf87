from __future__ import annotations

import json
import sys
from argparse import ArgumentParser, Namespace
from collections.abc import Callable, Sequence
from datetime import datetime

from landvote.commands import (
    run_advance_proposal,
    run_approve_proposal,
    run_assign_role,
    run_cast_vote,
    run_create_proposal,
    run_discard_proposal,
    run_eligibility,
    run_list_proposals,
    run_register_parcel,
    run_submit_proposal,
    run_sweep_deadlines,
    run_tally,
)
from landvote.config import AppSettings, get_settings
from landvote.domain.roles import Role
from landvote.domain.status import ProposalStatus
from landvote.domain.vote import VoteChoice
from landvote.observability.logging import configure_logging
from landvote.types import FAILURE_STATUSES, CommandResult

CommandHandler = Callable[[Namespace, AppSettings], CommandResult]

COMMAND_HANDLERS: dict[str, CommandHandler] = {
    "register-parcel": run_register_parcel,
    "assign-role": run_assign_role,
    "create-proposal": run_create_proposal,
    "submit-proposal": run_submit_proposal,
    "approve-proposal": run_approve_proposal,
    "discard-proposal": run_discard_proposal,
    "advance-proposal": run_advance_proposal,
    "sweep-deadlines": run_sweep_deadlines,
    "eligibility": run_eligibility,
    "cast-vote": run_cast_vote,
    "tally": run_tally,
    "list-proposals": run_list_proposals,
}


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(prog="landvote", description="LandVote governance engine CLI")
    parser.add_argument("--json", action="store_true", help="emit machine-readable JSON output")
    parser.add_argument("--state", default=None, help="path of the JSON state file")
    parser.add_argument(
        "--now",
        type=datetime.fromisoformat,
        default=None,
        help="evaluate the command as of this ISO timestamp instead of the system clock",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    parcel = subparsers.add_parser("register-parcel")
    parcel.add_argument("--parcel-id", required=True)
    parcel.add_argument("--owner", required=True)
    parcel.add_argument("--region", required=True)
    parcel.add_argument("--unverified", action="store_true")
    parcel.add_argument("--disputed", action="store_true")
    parcel.add_argument("--inactive", action="store_true")
    parcel.add_argument("--latitude", type=float, default=None)
    parcel.add_argument("--longitude", type=float, default=None)

    role = subparsers.add_parser("assign-role")
    role.add_argument("--identity", required=True)
    role.add_argument("--role", required=True, choices=[item.value for item in Role])

    # Draft fields stay optional here so the engine reports what is missing.
    create = subparsers.add_parser("create-proposal")
    create.add_argument("--title", default="")
    create.add_argument("--description", default="")
    create.add_argument("--category", default="")
    create.add_argument("--region", default="")
    create.add_argument("--deadline", type=datetime.fromisoformat, default=None)
    create.add_argument("--proposer", required=True)
    create.add_argument(
        "--role-gate",
        default=Role.PROPOSER.value,
        choices=[Role.PROPOSER.value, Role.VALIDATOR.value],
    )
    create.add_argument("--quorum", type=int, default=None)

    for name in ("submit-proposal", "approve-proposal", "discard-proposal"):
        actor_command = subparsers.add_parser(name)
        actor_command.add_argument("--proposal-id", required=True)
        actor_command.add_argument("--actor", required=True)

    advance = subparsers.add_parser("advance-proposal")
    advance.add_argument("--proposal-id", required=True)

    subparsers.add_parser("sweep-deadlines")

    eligibility = subparsers.add_parser("eligibility")
    eligibility.add_argument("--identity", required=True)
    eligibility.add_argument("--proposal-id", required=True)

    vote = subparsers.add_parser("cast-vote")
    vote.add_argument("--identity", required=True)
    vote.add_argument("--proposal-id", required=True)
    vote_group = vote.add_mutually_exclusive_group(required=True)
    vote_group.add_argument("--for", dest="choice", action="store_const", const=VoteChoice.FOR.value)
    vote_group.add_argument(
        "--against", dest="choice", action="store_const", const=VoteChoice.AGAINST.value
    )

    tally = subparsers.add_parser("tally")
    tally.add_argument("--proposal-id", required=True)

    listing = subparsers.add_parser("list-proposals")
    listing.add_argument("--status", default=None, choices=[status.value for status in ProposalStatus])
    listing.add_argument("--region", default=None)

    return parser


def _emit_result(result: CommandResult, *, as_json: bool) -> None:
    if as_json:
        print(result.to_json())
        return

    print(f"{result.command}: {result.status.value}")
    if result.details:
        print(json.dumps(result.details, indent=2, sort_keys=True))


def entrypoint(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    settings = get_settings()
    configure_logging(settings.log_level, stream=sys.stderr)

    handler = COMMAND_HANDLERS[str(args.command)]
    result = handler(args, settings)
    _emit_result(result, as_json=bool(args.json))
    return 1 if result.status in FAILURE_STATUSES else 0


if __name__ == "__main__":
    raise SystemExit(entrypoint())
