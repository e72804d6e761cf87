from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any

from landvote.clock import ensure_utc


class VoteChoice(StrEnum):
    FOR = "For"
    AGAINST = "Against"


def parse_choice(raw_value: object) -> VoteChoice | None:
    if isinstance(raw_value, VoteChoice):
        return raw_value

    if isinstance(raw_value, bool):
        return VoteChoice.FOR if raw_value else VoteChoice.AGAINST

    if isinstance(raw_value, str):
        normalized = raw_value.strip().lower()
        if normalized in {"for", "yes", "approve", "support"}:
            return VoteChoice.FOR
        if normalized in {"against", "no", "deny", "oppose"}:
            return VoteChoice.AGAINST

    return None


def compute_receipt(voter: str, proposal_id: str, choice: VoteChoice, parcel_id: str, cast_at: datetime) -> str:
    canonical = json.dumps(
        {
            "voter": voter,
            "proposal_id": proposal_id,
            "choice": choice.value,
            "parcel_id": parcel_id,
            "cast_at": ensure_utc(cast_at).isoformat(),
        },
        sort_keys=True,
        separators=(",", ":"),
    )
    return "0x" + hashlib.sha256(canonical.encode("utf-8")).hexdigest()


@dataclass(slots=True, frozen=True)
class Vote:
    voter: str
    proposal_id: str
    choice: VoteChoice
    cast_at: datetime
    parcel_id: str
    receipt: str

    @classmethod
    def record(
        cls,
        *,
        voter: str,
        proposal_id: str,
        choice: VoteChoice,
        cast_at: datetime,
        parcel_id: str,
    ) -> Vote:
        return cls(
            voter=voter,
            proposal_id=proposal_id,
            choice=choice,
            cast_at=ensure_utc(cast_at),
            parcel_id=parcel_id,
            receipt=compute_receipt(voter, proposal_id, choice, parcel_id, cast_at),
        )

    @property
    def key(self) -> tuple[str, str]:
        return (self.voter, self.proposal_id)

    def as_dict(self) -> dict[str, Any]:
        return {
            "voter": self.voter,
            "proposal_id": self.proposal_id,
            "choice": self.choice.value,
            "cast_at": self.cast_at.isoformat(),
            "parcel_id": self.parcel_id,
            "receipt": self.receipt,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> Vote:
        return cls(
            voter=str(payload["voter"]),
            proposal_id=str(payload["proposal_id"]),
            choice=VoteChoice(payload["choice"]),
            cast_at=ensure_utc(datetime.fromisoformat(payload["cast_at"])),
            parcel_id=str(payload["parcel_id"]),
            receipt=str(payload["receipt"]),
        )
