from __future__ import annotations

from enum import StrEnum


class Role(StrEnum):
    LANDOWNER = "landowner"
    PROPOSER = "proposer"
    VALIDATOR = "validator"

    @property
    def rank(self) -> int:
        return ROLE_RANKS[self]

    def satisfies(self, minimum: Role) -> bool:
        return self.rank >= minimum.rank


ROLE_RANKS: dict[Role, int] = {
    Role.LANDOWNER: 1,
    Role.PROPOSER: 2,
    Role.VALIDATOR: 3,
}

PROPOSAL_ROLE_GATES: frozenset[Role] = frozenset({Role.PROPOSER, Role.VALIDATOR})


def has_role(role: Role | None, minimum: Role) -> bool:
    return role is not None and role.satisfies(minimum)
