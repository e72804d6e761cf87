from __future__ import annotations

from argparse import Namespace

from landvote.commands.session import run_in_session
from landvote.config import AppSettings
from landvote.domain.roles import Role
from landvote.persistence.state_file import GovernanceSession
from landvote.types import CommandResult, CommandStatus, JsonDict


def run_register_parcel(args: Namespace, settings: AppSettings) -> CommandResult:
    latitude = getattr(args, "latitude", None)
    longitude = getattr(args, "longitude", None)
    if (latitude is None) != (longitude is None):
        return CommandResult(
            command="register-parcel",
            status=CommandStatus.FAILED,
            details={"error": "ValidationError", "message": "latitude and longitude must be given together"},
        )

    record = {
        "parcel_id": str(getattr(args, "parcel_id", "")),
        "owner": str(getattr(args, "owner", "")),
        "region": str(getattr(args, "region", "")),
        "verified_owner": not bool(getattr(args, "unverified", False)),
        "disputed": bool(getattr(args, "disputed", False)),
        "active": not bool(getattr(args, "inactive", False)),
        "coordinates": [latitude, longitude] if latitude is not None else None,
    }

    def action(session: GovernanceSession) -> JsonDict:
        parcel = session.registry.register_parcel(record)
        return {"parcel": parcel.as_dict()}

    return run_in_session("register-parcel", args, settings, action)


def run_assign_role(args: Namespace, settings: AppSettings) -> CommandResult:
    role = Role(str(getattr(args, "role", "")))

    def action(session: GovernanceSession) -> JsonDict:
        identity = session.registry.assign_role(str(getattr(args, "identity", "")), role)
        return {"identity": identity, "role": role.value}

    return run_in_session("assign-role", args, settings, action)
