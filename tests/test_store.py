import json

import pytest

from demanda.etl.records import STATUS_CONFIRMED, STATUS_PENDING
from demanda.etl.seed import COMARCAS, REGIONS
from demanda.store.blobs import DirectoryBlobStore, MemoryBlobStore
from demanda.store.record_store import DATA_BLOB, RecordStore, RestoreError


def test_seed_on_empty_blob(blobs, store):
    assert store.seeded
    assert len(store) == 60
    df = store.frame()
    assert set(df["region"]) == set(REGIONS)
    assert set(df["comarca"]) == set(COMARCAS)
    assert (df["requested_qty"] == 0).all()
    assert (df["status"] == STATUS_PENDING).all()
    assert len(blobs.get(DATA_BLOB)) == 60


def test_reload_does_not_reseed(blobs, store):
    ids = [r.id for r in store.records]
    again = RecordStore(blobs)
    assert not again.seeded
    assert [r.id for r in again.records] == ids


def test_update_keeps_status_in_sync(store):
    rid = store.records[0].id
    rec = store.update(rid, "requestedQty", 8)
    assert rec.status == STATUS_CONFIRMED
    rec = store.update(rid, "requested_qty", 0)
    assert rec.status == STATUS_PENDING
    rec = store.update(rid, "requested_qty", "abc")
    assert rec.requested_qty == 0
    assert rec.status == STATUS_PENDING


def test_update_approved_does_not_touch_status(store):
    rid = store.records[1].id
    rec = store.update(rid, "approved_qty", 9)
    assert rec.approved_qty == 9
    assert rec.status == STATUS_PENDING


def test_update_persists_snapshot(blobs, store):
    rid = store.records[2].id
    store.update(rid, "requested_qty", 4)
    saved = {d["id"]: d for d in blobs.get(DATA_BLOB)}
    assert saved[rid]["requestedQty"] == 4
    assert saved[rid]["status"] == STATUS_CONFIRMED


def test_update_rejects_immutable_and_unknown(store):
    rid = store.records[0].id
    with pytest.raises(ValueError):
        store.update(rid, "comarca", "Outra")
    with pytest.raises(ValueError):
        store.update(rid, "status", STATUS_CONFIRMED)
    with pytest.raises(KeyError):
        store.update("missing", "requested_qty", 1)


@pytest.mark.parametrize("payload", ["{}", "not json", "[1, 2]", '{"records": []}'])
def test_restore_rejects_bad_payload(store, payload):
    before = [r.to_dict() for r in store.records]
    with pytest.raises(RestoreError):
        store.restore(payload)
    assert [r.to_dict() for r in store.records] == before


def test_restore_rejects_duplicate_ids(store):
    dup = [{"id": "x", "comarca": "Crato"}, {"id": "x", "comarca": "Sobral"}]
    with pytest.raises(RestoreError):
        store.restore(json.dumps(dup))
    assert len(store) == 60


def test_restore_replaces_and_recomputes_status(blobs, store, sample_records):
    payload = [r.to_dict() for r in sample_records]
    payload[1]["status"] = "confirmed"
    n = store.restore(json.dumps(payload))
    assert n == 4
    assert [r.id for r in store.records] == ["r1", "r2", "r3", "r4"]
    assert store.get("r2").status == STATUS_PENDING
    assert len(blobs.get(DATA_BLOB)) == 4


def test_directory_store_roundtrip(tmp_path):
    first = RecordStore(DirectoryBlobStore(tmp_path), rng_seed=3)
    rid = first.records[5].id
    first.update(rid, "requested_qty", 21)
    assert (tmp_path / f"{DATA_BLOB}.json").exists()
    second = RecordStore(DirectoryBlobStore(tmp_path))
    assert not second.seeded
    assert second.get(rid).requested_qty == 21


def test_memory_blob_store_clear():
    blobs = MemoryBlobStore({"a": [1]})
    assert blobs.get("a") == [1]
    blobs.clear("a")
    assert blobs.get("a") is None
