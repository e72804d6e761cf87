"""Error taxonomy for the governance engine.

Every error carries a stable ``code`` that callers display verbatim and an
``http_status`` used by the API layer. Nothing here is retried internally:
each failure is a deterministic function of current state.
"""

from __future__ import annotations

from typing import Any

from landvote.domain.eligibility import EligibilityReason


class GovernanceError(Exception):
    code = "GovernanceError"
    http_status = 400

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.code, "message": self.message}


class ValidationError(GovernanceError):
    code = "ValidationError"
    http_status = 422


class InvalidProposal(ValidationError):
    code = "InvalidProposal"


class InvalidOwnershipRecord(ValidationError):
    code = "InvalidOwnershipRecord"


class NotFound(GovernanceError):
    code = "NotFound"
    http_status = 404

    def __init__(self, entity: str, key: str) -> None:
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} not found: {key}")


class IllegalTransition(GovernanceError):
    code = "IllegalTransition"
    http_status = 409

    def __init__(self, proposal_id: str, current: str, target: str | None, message: str) -> None:
        self.proposal_id = proposal_id
        self.current = current
        self.target = target
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["proposal_id"] = self.proposal_id
        payload["current_status"] = self.current
        if self.target is not None:
            payload["target_status"] = self.target
        return payload


class RuleRejection(GovernanceError):
    """Expected business-rule outcome, not a system fault."""

    code = "RuleRejection"
    http_status = 409


class NotEligible(RuleRejection):
    code = "NotEligible"
    http_status = 403

    def __init__(self, reason: EligibilityReason, message: str) -> None:
        self.reason = reason
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["reason"] = self.reason.value
        return payload


class AlreadyVoted(RuleRejection):
    code = "AlreadyVoted"


class ProposalNotActive(RuleRejection):
    code = "ProposalNotActive"


class NotAuthorized(RuleRejection):
    code = "NotAuthorized"
    http_status = 403
