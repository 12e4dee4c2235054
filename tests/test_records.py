import math

import pytest

from demanda.etl.records import (
    STATUS_CONFIRMED,
    STATUS_PENDING,
    DemandRecord,
    coerce_qty,
    records_to_frame,
    resolve_field,
)


@pytest.mark.parametrize("raw, expected", [
    ("abc", 0),
    (None, 0),
    (-5, 0),
    (math.nan, 0),
    ("3", 3),
    (2.5, 2.5),
    (7.0, 7),
])
def test_coerce_qty(raw, expected):
    assert coerce_qty(raw) == expected


def test_status_follows_requested_qty():
    rec = DemandRecord("Região Norte", "Sobral", "Copa", "Chá Mate", requested_qty=4, status=STATUS_PENDING)
    assert rec.status == STATUS_CONFIRMED
    rec = DemandRecord("Região Norte", "Sobral", "Copa", "Chá Mate", approved_qty=4, status=STATUS_CONFIRMED)
    assert rec.status == STATUS_PENDING


def test_from_dict_ignores_stored_status_and_unknown_keys():
    rec = DemandRecord.from_dict({
        "id": "abc",
        "region": " Região Norte ",
        "comarca": "Crato",
        "category": "Copa",
        "materialName": "Chá Mate",
        "requestedQty": "5",
        "status": "pending",
        "somethingElse": 1,
    })
    assert rec.id == "abc"
    assert rec.region == "Região Norte"
    assert rec.requested_qty == 5
    assert rec.status == STATUS_CONFIRMED


def test_from_dict_rejects_non_objects():
    with pytest.raises(TypeError):
        DemandRecord.from_dict(["not", "a", "record"])


def test_to_dict_uses_snapshot_keys(sample_records):
    d = sample_records[0].to_dict()
    assert d["materialName"] == "Álcool 70%"
    assert d["requestedQty"] == 12
    assert d["status"] == STATUS_CONFIRMED
    assert DemandRecord.from_dict(d).to_dict() == d


def test_resolve_field_accepts_both_spellings():
    assert resolve_field("requestedQty") == "requested_qty"
    assert resolve_field("approved_qty") == "approved_qty"
    with pytest.raises(ValueError):
        resolve_field("price")


def test_records_to_frame_keeps_order(sample_records):
    df = records_to_frame(sample_records)
    assert list(df["id"]) == ["r1", "r2", "r3", "r4"]
    assert records_to_frame([]).empty
