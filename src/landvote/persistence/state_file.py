"""JSON snapshot persistence for parcels, roles, proposals and votes.

Each record type is an independently keyed map. Votes are keyed by
``proposal_id:voter`` so duplicate checks survive a reload.
"""

from __future__ import annotations

import json
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from landvote.clock import Clock
from landvote.config import AppSettings
from landvote.domain.parcel import Parcel
from landvote.domain.proposal import Proposal
from landvote.domain.roles import Role
from landvote.domain.vote import Vote
from landvote.errors import ValidationError
from landvote.orchestration.lifecycle import LifecycleController, build_controller
from landvote.registry.ownership import InMemoryOwnershipRegistry

STATE_VERSION = 1


@dataclass(slots=True)
class GovernanceSession:
    controller: LifecycleController
    registry: InMemoryOwnershipRegistry


def _vote_key(vote: Vote) -> str:
    return f"{vote.proposal_id}:{vote.voter}"


def read_state(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {"version": STATE_VERSION, "roles": {}, "parcels": {}, "proposals": {}, "votes": {}}
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValidationError(f"state file {path} is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise ValidationError(f"state file {path} must contain a JSON object")
    return payload


def atomic_write_json(path: Path, payload: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    data = json.dumps(payload, sort_keys=True, indent=2)
    fd, tmp_name = tempfile.mkstemp(prefix=path.name + ".", suffix=".tmp", dir=str(path.parent))
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink()


def load_session(path: Path, settings: AppSettings, *, clock: Clock | None = None) -> GovernanceSession:
    state = read_state(path)
    registry = InMemoryOwnershipRegistry()
    controller = build_controller(settings, registry, clock=clock)
    try:
        for identity, role in state.get("roles", {}).items():
            registry.assign_role(identity, Role(role))
        for record in state.get("parcels", {}).values():
            registry.register_parcel(record)
        for record in state.get("proposals", {}).values():
            controller.proposals.restore(Proposal.from_dict(record))
        for record in state.get("votes", {}).values():
            controller.ledger.append(Vote.from_dict(record))
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise ValidationError(f"state file {path} holds a malformed record: {exc!r}") from exc
    return GovernanceSession(controller=controller, registry=registry)


def dump_session(session: GovernanceSession) -> dict[str, Any]:
    controller = session.controller
    parcels: tuple[Parcel, ...] = controller.parcels.all_parcels()
    return {
        "version": STATE_VERSION,
        "roles": {identity: role.value for identity, role in sorted(session.registry.roles().items())},
        "parcels": {parcel.parcel_id: parcel.as_dict() for parcel in parcels},
        "proposals": {proposal.proposal_id: proposal.as_dict() for proposal in controller.list_proposals()},
        "votes": {_vote_key(vote): vote.as_dict() for vote in controller.ledger.all_votes()},
    }


def save_session(path: Path, session: GovernanceSession) -> None:
    atomic_write_json(path, dump_session(session))
