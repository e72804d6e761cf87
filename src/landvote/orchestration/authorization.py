"""Role gates for proposal lifecycle commands."""
from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from landvote.domain.roles import Role, has_role


class OperationType(StrEnum):
    CREATE_PROPOSAL = "create_proposal"
    SUBMIT_PROPOSAL = "submit_proposal"
    APPROVE_PROPOSAL = "approve_proposal"
    DISCARD_PROPOSAL = "discard_proposal"


MINIMUM_ROLES: dict[OperationType, Role] = {
    OperationType.CREATE_PROPOSAL: Role.PROPOSER,
    OperationType.SUBMIT_PROPOSAL: Role.PROPOSER,
    OperationType.APPROVE_PROPOSAL: Role.VALIDATOR,
    OperationType.DISCARD_PROPOSAL: Role.PROPOSER,
}

# Operations the proposal's own author may perform without outranking it.
AUTHOR_OPERATIONS: frozenset[OperationType] = frozenset({
    OperationType.SUBMIT_PROPOSAL,
    OperationType.DISCARD_PROPOSAL,
})


@dataclass(frozen=True)
class AuthorizationContext:
    actor: str
    role: Role | None
    operation: OperationType
    proposer: str | None = None
    minimum_role: Role | None = None


def authorize_operation(context: AuthorizationContext) -> tuple[bool, str | None]:
    """Return (True, None) if allowed, or (False, error_message) if rejected.

    ``minimum_role`` overrides the default table, e.g. a proposal's role gate
    or the configured review role. Acting on someone else's draft requires
    validator rank.
    """
    minimum = context.minimum_role or MINIMUM_ROLES[context.operation]
    if not has_role(context.role, minimum):
        held = context.role.value if context.role is not None else "none"
        return (
            False,
            f"authorization denied: {context.operation.value} requires role {minimum.value}, "
            f"actor holds {held}",
        )

    if (
        context.operation in AUTHOR_OPERATIONS
        and context.proposer is not None
        and context.actor != context.proposer
        and not has_role(context.role, Role.VALIDATOR)
    ):
        return (
            False,
            f"authorization denied: only the proposer or a validator may {context.operation.value}",
        )

    return True, None
