from __future__ import annotations

import threading
from collections.abc import Mapping
from typing import Any

from landvote.domain.parcel import Parcel
from landvote.errors import NotFound
from landvote.observability.logging import get_logger
from landvote.registry.ownership import parse_ownership_record


class ParcelStore:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._parcels: dict[str, Parcel] = {}
        self._by_owner: dict[str, set[str]] = {}
        self._by_region: dict[str, set[str]] = {}

    def ingest(self, record: Mapping[str, Any] | Parcel) -> Parcel:
        """Registry ingestion callback: validate and upsert one parcel."""
        parcel = parse_ownership_record(record)
        with self._lock:
            self._put(parcel)
        get_logger("parcel_store").info(
            "parcel_ingested",
            parcel_id=parcel.parcel_id,
            owner=parcel.owner,
            region=parcel.region,
            eligible=parcel.eligible,
        )
        return parcel

    def _put(self, parcel: Parcel) -> None:
        previous = self._parcels.get(parcel.parcel_id)
        if previous is not None:
            self._by_owner.get(previous.owner, set()).discard(parcel.parcel_id)
            self._by_region.get(previous.region, set()).discard(parcel.parcel_id)

        self._parcels[parcel.parcel_id] = parcel
        self._by_owner.setdefault(parcel.owner, set()).add(parcel.parcel_id)
        self._by_region.setdefault(parcel.region, set()).add(parcel.parcel_id)

    def get_parcel(self, parcel_id: str) -> Parcel:
        with self._lock:
            parcel = self._parcels.get(parcel_id)
        if parcel is None:
            raise NotFound("parcel", parcel_id)
        return parcel

    def parcels_owned_by(self, identity: str) -> tuple[Parcel, ...]:
        with self._lock:
            ids = sorted(self._by_owner.get(identity, ()))
            return tuple(self._parcels[parcel_id] for parcel_id in ids)

    def parcels_in_region(self, region: str) -> tuple[Parcel, ...]:
        with self._lock:
            ids = sorted(self._by_region.get(region, ()))
            return tuple(self._parcels[parcel_id] for parcel_id in ids)

    def eligible_owner_count(self, region: str) -> int:
        return len({parcel.owner for parcel in self.parcels_in_region(region) if parcel.eligible})

    def all_parcels(self) -> tuple[Parcel, ...]:
        with self._lock:
            return tuple(self._parcels[parcel_id] for parcel_id in sorted(self._parcels))
