from __future__ import annotations

import threading
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, replace
from typing import Any, Protocol

from landvote.domain.parcel import Parcel
from landvote.domain.roles import Role
from landvote.errors import InvalidOwnershipRecord, NotFound
from landvote.identity import normalize_identity

ParcelListener = Callable[[Parcel], object]


class OwnershipRegistry(Protocol):
    """Read-only view of the external identity and ownership oracle."""

    def resolve_role(self, identity: str) -> Role | None:
        ...

    def resolve_parcels(self, identity: str) -> Sequence[Parcel]:
        ...


@dataclass(slots=True, frozen=True)
class OwnershipSnapshot:
    identity: str
    role: Role | None
    parcels: tuple[Parcel, ...]


def take_snapshot(registry: OwnershipRegistry, identity: str) -> OwnershipSnapshot:
    return OwnershipSnapshot(
        identity=identity,
        role=registry.resolve_role(identity),
        parcels=tuple(registry.resolve_parcels(identity)),
    )


def parse_ownership_record(record: Mapping[str, Any] | Parcel) -> Parcel:
    if isinstance(record, Parcel):
        record = record.as_dict()
    try:
        return Parcel.from_record(record)
    except ValueError as exc:
        raise InvalidOwnershipRecord(f"invalid ownership record: {exc}") from exc


class InMemoryOwnershipRegistry:
    """Registry backed by process memory, used for development, tests and the CLI."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._roles: dict[str, Role] = {}
        self._parcels: dict[str, Parcel] = {}
        self._listeners: list[ParcelListener] = []

    def subscribe(self, listener: ParcelListener) -> None:
        with self._lock:
            self._listeners.append(listener)
            existing = list(self._parcels.values())
        for parcel in existing:
            listener(parcel)

    def assign_role(self, identity: str, role: Role) -> str:
        try:
            normalized = normalize_identity(identity)
        except ValueError as exc:
            raise InvalidOwnershipRecord(str(exc)) from exc
        with self._lock:
            self._roles[normalized] = role
        return normalized

    def register_parcel(self, record: Mapping[str, Any] | Parcel) -> Parcel:
        parcel = parse_ownership_record(record)
        with self._lock:
            self._parcels[parcel.parcel_id] = parcel
            listeners = list(self._listeners)
        for listener in listeners:
            listener(parcel)
        return parcel

    def deactivate_parcel(self, parcel_id: str) -> Parcel:
        """Mark a parcel inactive and publish the change to listeners."""
        with self._lock:
            current = self._parcels.get(parcel_id)
            if current is None:
                raise NotFound("parcel", parcel_id)
            parcel = replace(current, active=False)
            self._parcels[parcel_id] = parcel
            listeners = list(self._listeners)
        for listener in listeners:
            listener(parcel)
        return parcel

    def resolve_role(self, identity: str) -> Role | None:
        with self._lock:
            return self._roles.get(identity)

    def resolve_parcels(self, identity: str) -> Sequence[Parcel]:
        with self._lock:
            return tuple(
                sorted(
                    (parcel for parcel in self._parcels.values() if parcel.owner == identity),
                    key=lambda parcel: parcel.parcel_id,
                )
            )

    def roles(self) -> dict[str, Role]:
        with self._lock:
            return dict(self._roles)

    def parcels(self) -> tuple[Parcel, ...]:
        with self._lock:
            return tuple(self._parcels.values())
