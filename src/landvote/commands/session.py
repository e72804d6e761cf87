from __future__ import annotations

from argparse import Namespace
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from landvote.clock import Clock, FixedClock, SystemClock
from landvote.config import AppSettings
from landvote.errors import GovernanceError, RuleRejection
from landvote.persistence.state_file import GovernanceSession, load_session, save_session
from landvote.types import CommandResult, CommandStatus, JsonDict

SessionAction = Callable[[GovernanceSession], JsonDict]


def _clock_from_args(args: Namespace) -> Clock:
    now = getattr(args, "now", None)
    if isinstance(now, datetime):
        return FixedClock(now)
    return SystemClock()


def state_path(args: Namespace, settings: AppSettings) -> Path:
    raw = getattr(args, "state", None) or settings.state_path
    return Path(str(raw))


def run_in_session(
    command: str,
    args: Namespace,
    settings: AppSettings,
    action: SessionAction,
    *,
    persist: bool = True,
) -> CommandResult:
    """Load state, apply ``action`` and save only when it succeeds."""
    path = state_path(args, settings)
    try:
        session = load_session(path, settings, clock=_clock_from_args(args))
        details = action(session)
    except RuleRejection as exc:
        return CommandResult(command=command, status=CommandStatus.REJECTED, details=exc.to_dict())
    except GovernanceError as exc:
        return CommandResult(command=command, status=CommandStatus.FAILED, details=exc.to_dict())

    if persist:
        save_session(path, session)
    return CommandResult(command=command, status=CommandStatus.EXECUTED, details=details)
