from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from landvote.identity import normalize_identity


def _coerce_flag(raw_value: object, *, field_name: str, default: bool) -> bool:
    if raw_value is None:
        return default
    if isinstance(raw_value, bool):
        return raw_value
    raise ValueError(f"{field_name} must be a boolean value")


def _coerce_coordinates(raw_value: object) -> tuple[float, float] | None:
    if raw_value is None:
        return None
    if not isinstance(raw_value, (list, tuple)) or len(raw_value) != 2:
        raise ValueError("coordinates must be a [latitude, longitude] pair")

    latitude, longitude = raw_value
    if isinstance(latitude, bool) or isinstance(longitude, bool):
        raise ValueError("coordinates must be numeric")
    try:
        lat, lon = float(latitude), float(longitude)
    except (TypeError, ValueError) as exc:
        raise ValueError("coordinates must be numeric") from exc

    if not -90.0 <= lat <= 90.0 or not -180.0 <= lon <= 180.0:
        raise ValueError("coordinates out of range")
    return (lat, lon)


@dataclass(slots=True, frozen=True)
class Parcel:
    parcel_id: str
    owner: str
    region: str
    verified_owner: bool = True
    disputed: bool = False
    active: bool = True
    coordinates: tuple[float, float] | None = None

    @property
    def eligible(self) -> bool:
        return self.verified_owner and not self.disputed and self.active

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> Parcel:
        parcel_id = str(record.get("parcel_id") or "").strip()
        if not parcel_id:
            raise ValueError("parcel_id is required")

        region_raw = record.get("region")
        if not isinstance(region_raw, str) or not region_raw.strip():
            raise ValueError("region is required")

        owner_raw = record.get("owner")
        if not isinstance(owner_raw, str):
            raise ValueError("owner is required")
        owner = normalize_identity(owner_raw, field_name="owner")

        return cls(
            parcel_id=parcel_id,
            owner=owner,
            region=region_raw.strip(),
            verified_owner=_coerce_flag(
                record.get("verified_owner"), field_name="verified_owner", default=True
            ),
            disputed=_coerce_flag(record.get("disputed"), field_name="disputed", default=False),
            active=_coerce_flag(record.get("active"), field_name="active", default=True),
            coordinates=_coerce_coordinates(record.get("coordinates")),
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "parcel_id": self.parcel_id,
            "owner": self.owner,
            "region": self.region,
            "verified_owner": self.verified_owner,
            "disputed": self.disputed,
            "active": self.active,
            "eligible": self.eligible,
            "coordinates": list(self.coordinates) if self.coordinates is not None else None,
        }
