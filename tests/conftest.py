import os

os.environ.setdefault("MPLBACKEND", "Agg")

import pytest

from demanda.etl.records import DemandRecord
from demanda.reporting.loaders import load_config
from demanda.reporting.session import DemandSession
from demanda.store.blobs import MemoryBlobStore
from demanda.store.record_store import RecordStore

SMALL_CAPTURE = {"width_px": 640, "scale": 1, "jpeg_quality": 70}


@pytest.fixture
def blobs():
    return MemoryBlobStore()


@pytest.fixture
def store(blobs):
    return RecordStore(blobs, rng_seed=7)


@pytest.fixture
def sample_records():
    return [
        DemandRecord("Região Norte", "Sobral", "Limpeza", "Álcool 70%", predicted_demand=40,
                     requested_qty=12, approved_qty=10, id="r1"),
        DemandRecord("Região Norte", "Sobral", "Copa", "Café em Pó 500g", predicted_demand=25, id="r2"),
        DemandRecord("Região Metropolitana", "Fortaleza", "Escritório", "Papel A4 75g", predicted_demand=80,
                     requested_qty=50, id="r3"),
        DemandRecord("Região Metropolitana", "Aquiraz", "Informática", "Mouse Óptico USB", predicted_demand=15,
                     approved_qty=3, id="r4"),
    ]


@pytest.fixture
def config():
    cfg = load_config(None)
    cfg["capture"].update(SMALL_CAPTURE)
    cfg["seed"]["rng_seed"] = 11
    return cfg


@pytest.fixture
def session(blobs, config):
    return DemandSession(blobs, config=config)
