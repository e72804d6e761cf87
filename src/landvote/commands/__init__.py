"""Command handlers for the LandVote CLI."""

from landvote.commands.proposals import (
    run_advance_proposal,
    run_approve_proposal,
    run_create_proposal,
    run_discard_proposal,
    run_list_proposals,
    run_submit_proposal,
    run_sweep_deadlines,
)
from landvote.commands.registry import run_assign_role, run_register_parcel
from landvote.commands.voting import run_cast_vote, run_eligibility, run_tally

__all__ = [
    "run_advance_proposal",
    "run_approve_proposal",
    "run_assign_role",
    "run_cast_vote",
    "run_create_proposal",
    "run_discard_proposal",
    "run_eligibility",
    "run_list_proposals",
    "run_register_parcel",
    "run_submit_proposal",
    "run_sweep_deadlines",
    "run_tally",
]
