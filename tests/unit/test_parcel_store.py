import pytest

from conftest import ALICE, BOB
from landvote.errors import InvalidOwnershipRecord, NotFound
from landvote.orchestration.parcel_store import ParcelStore


def test_ingest_and_lookup() -> None:
    store = ParcelStore()
    store.ingest({"parcel_id": "P1", "owner": ALICE, "region": "Downtown", "coordinates": [40.7589, -73.9851]})

    parcel = store.get_parcel("P1")

    assert parcel.owner == ALICE
    assert parcel.eligible is True
    assert parcel.coordinates == (40.7589, -73.9851)
    assert store.parcels_owned_by(ALICE) == (parcel,)
    assert store.parcels_in_region("Downtown") == (parcel,)


def test_get_parcel_missing_raises_not_found() -> None:
    with pytest.raises(NotFound):
        ParcelStore().get_parcel("missing")


def test_ingest_upsert_reindexes_owner_and_region() -> None:
    store = ParcelStore()
    store.ingest({"parcel_id": "P1", "owner": ALICE, "region": "Downtown"})
    store.ingest({"parcel_id": "P1", "owner": BOB, "region": "Riverfront"})

    assert store.parcels_owned_by(ALICE) == ()
    assert store.parcels_in_region("Downtown") == ()
    assert [parcel.parcel_id for parcel in store.parcels_owned_by(BOB)] == ["P1"]
    assert [parcel.parcel_id for parcel in store.parcels_in_region("Riverfront")] == ["P1"]


@pytest.mark.parametrize(
    "record",
    [
        {"parcel_id": "P1", "owner": ALICE, "region": "  "},
        {"parcel_id": "P1", "owner": "not-a-wallet", "region": "Downtown"},
        {"parcel_id": "", "owner": ALICE, "region": "Downtown"},
        {"parcel_id": "P1", "owner": ALICE, "region": "Downtown", "disputed": "yes"},
        {"parcel_id": "P1", "owner": ALICE, "region": "Downtown", "coordinates": [120.0, 0.0]},
    ],
)
def test_ingest_rejects_malformed_records(record: dict[str, object]) -> None:
    store = ParcelStore()

    with pytest.raises(InvalidOwnershipRecord):
        store.ingest(record)

    assert store.all_parcels() == ()


def test_eligibility_flag_is_derived() -> None:
    store = ParcelStore()
    unverified = store.ingest({"parcel_id": "P1", "owner": ALICE, "region": "Downtown", "verified_owner": False})
    disputed = store.ingest({"parcel_id": "P2", "owner": ALICE, "region": "Downtown", "disputed": True})

    assert unverified.eligible is False
    assert disputed.eligible is False


def test_reingest_as_inactive_keeps_record_but_clears_eligibility() -> None:
    store = ParcelStore()
    store.ingest({"parcel_id": "P1", "owner": ALICE, "region": "Downtown"})

    parcel = store.ingest({"parcel_id": "P1", "owner": ALICE, "region": "Downtown", "active": False})

    assert parcel.active is False
    assert parcel.eligible is False
    assert store.get_parcel("P1").active is False


def test_eligible_owner_count_counts_distinct_owners() -> None:
    store = ParcelStore()
    store.ingest({"parcel_id": "P1", "owner": ALICE, "region": "Downtown"})
    store.ingest({"parcel_id": "P2", "owner": ALICE, "region": "Downtown"})
    store.ingest({"parcel_id": "P3", "owner": BOB, "region": "Downtown", "disputed": True})

    assert store.eligible_owner_count("Downtown") == 1
