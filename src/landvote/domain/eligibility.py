from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class EligibilityReason(StrEnum):
    ROLE_INSUFFICIENT = "RoleInsufficient"
    NO_QUALIFYING_PARCEL = "NoQualifyingParcel"
    VOTING_CLOSED = "VotingClosed"
    ALREADY_VOTED = "AlreadyVoted"


@dataclass(slots=True, frozen=True)
class EligibilityDecision:
    eligible: bool
    reason: EligibilityReason | None = None
    parcel_id: str | None = None

    @classmethod
    def allow(cls, parcel_id: str) -> EligibilityDecision:
        return cls(eligible=True, parcel_id=parcel_id)

    @classmethod
    def deny(cls, reason: EligibilityReason) -> EligibilityDecision:
        return cls(eligible=False, reason=reason)

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"eligible": self.eligible}
        if self.reason is not None:
            payload["reason"] = self.reason.value
        if self.parcel_id is not None:
            payload["parcel_id"] = self.parcel_id
        return payload
