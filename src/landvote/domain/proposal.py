from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any

from landvote.clock import ensure_utc
from landvote.domain.roles import PROPOSAL_ROLE_GATES, Role
from landvote.domain.status import ProposalStatus
from landvote.identity import normalize_identity

REQUIRED_DRAFT_FIELDS: tuple[str, ...] = ("title", "description", "category", "region", "deadline")


def _is_blank(value: object) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


@dataclass(slots=True, frozen=True)
class ProposalDraft:
    title: str = ""
    description: str = ""
    category: str = ""
    region: str = ""
    deadline: datetime | None = None
    proposer: str = ""
    role_gate: Role = Role.PROPOSER
    quorum: int | None = None


def validate_draft(
    draft: ProposalDraft,
    *,
    now: datetime,
    categories: Collection[str] = (),
    regions: Collection[str] = (),
) -> ProposalDraft:
    """Return a normalized copy of ``draft`` or raise ``ValueError``.

    An empty ``categories`` or ``regions`` collection accepts any value.
    """
    missing = [name for name in REQUIRED_DRAFT_FIELDS if _is_blank(getattr(draft, name))]
    if missing:
        raise ValueError(f"missing required fields: {', '.join(missing)}")

    if not isinstance(draft.deadline, datetime):
        raise ValueError("deadline must be a timestamp")
    deadline = ensure_utc(draft.deadline)
    if deadline <= ensure_utc(now):
        raise ValueError("deadline must be in the future")

    category = draft.category.strip()
    if categories and category not in categories:
        raise ValueError(f"unknown category: {category}")

    region = draft.region.strip()
    if regions and region not in regions:
        raise ValueError(f"unknown region: {region}")

    if draft.role_gate not in PROPOSAL_ROLE_GATES:
        raise ValueError("role_gate must be proposer or validator")

    if draft.quorum is not None and (isinstance(draft.quorum, bool) or draft.quorum < 1):
        raise ValueError("quorum must be a positive integer")

    return replace(
        draft,
        title=draft.title.strip(),
        description=draft.description.strip(),
        category=category,
        region=region,
        deadline=deadline,
        proposer=normalize_identity(draft.proposer, field_name="proposer"),
    )


@dataclass(slots=True, frozen=True)
class Proposal:
    proposal_id: str
    title: str
    description: str
    category: str
    region: str
    proposer: str
    role_gate: Role
    status: ProposalStatus
    deadline: datetime
    created_at: datetime
    quorum: int
    status_history: tuple[ProposalStatus, ...] = field(default=(ProposalStatus.DRAFT,))

    def is_open_at(self, now: datetime) -> bool:
        return self.status == ProposalStatus.ACTIVE and ensure_utc(now) < self.deadline

    def with_status(self, status: ProposalStatus) -> Proposal:
        return replace(self, status=status, status_history=(*self.status_history, status))

    def as_dict(self) -> dict[str, Any]:
        return {
            "proposal_id": self.proposal_id,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "region": self.region,
            "proposer": self.proposer,
            "role_gate": self.role_gate.value,
            "status": self.status.value,
            "deadline": self.deadline.isoformat(),
            "created_at": self.created_at.isoformat(),
            "quorum": self.quorum,
            "status_history": [status.value for status in self.status_history],
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> Proposal:
        status = ProposalStatus(payload["status"])
        history = tuple(ProposalStatus(raw) for raw in payload.get("status_history", [])) or (status,)
        return cls(
            proposal_id=str(payload["proposal_id"]),
            title=str(payload["title"]),
            description=str(payload["description"]),
            category=str(payload["category"]),
            region=str(payload["region"]),
            proposer=str(payload["proposer"]),
            role_gate=Role(payload["role_gate"]),
            status=status,
            deadline=ensure_utc(datetime.fromisoformat(payload["deadline"])),
            created_at=ensure_utc(datetime.fromisoformat(payload["created_at"])),
            quorum=int(payload["quorum"]),
            status_history=history,
        )
