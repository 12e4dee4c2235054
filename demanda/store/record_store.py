"""
Store en memoria de registros de demanda con snapshot completo tras cada cambio
"""
from __future__ import annotations
import json

from demanda.etl.records import (
    DemandRecord,
    IMMUTABLE_FIELDS,
    coerce_qty,
    records_to_frame,
    resolve_field,
    status_for,
)
from demanda.etl.seed import seed_records, SEED_SIZE
from demanda.utils.dates import now_iso

DATA_BLOB = "demand_app_data"


class RestoreError(ValueError):
    """El backup no se pudo leer o no tiene forma de lista de registros."""


class RecordStore:
    def __init__(self, blobs, blob_name: str = DATA_BLOB, seed_size: int = SEED_SIZE, rng_seed: int | None = None):
        self.blobs = blobs
        self.blob_name = blob_name
        stored = blobs.get(blob_name)
        self.seeded = stored is None
        if stored is None:
            self._records = seed_records(seed_size, rng_seed=rng_seed)
            self.save()
        else:
            self._records = [DemandRecord.from_dict(d) for d in stored]
        self._check_ids(self._records)

    @staticmethod
    def _check_ids(records: list[DemandRecord]) -> None:
        seen: set[str] = set()
        for r in records:
            if r.id in seen:
                raise ValueError(f"id duplicado en el store: {r.id}")
            seen.add(r.id)

    def save(self) -> None:
        self.blobs.set(self.blob_name, [r.to_dict() for r in self._records])

    @property
    def records(self) -> list[DemandRecord]:
        return list(self._records)

    def frame(self):
        return records_to_frame(self._records)

    def get(self, record_id: str) -> DemandRecord:
        for r in self._records:
            if r.id == record_id:
                return r
        raise KeyError(f"Registro no encontrado: {record_id}")

    def update(self, record_id: str, field_name: str, value) -> DemandRecord:
        """
        Lee-modifica-escribe un único registro.

        El valor se coerciona a cantidad (no numérico -> 0). Tocar la cantidad
        solicitada recalcula `status`. Última escritura gana.
        """
        attr = resolve_field(field_name)
        if attr in IMMUTABLE_FIELDS or attr in ("status", "last_updated"):
            raise ValueError(f"Campo no editable: {field_name}")
        record = self.get(record_id)
        setattr(record, attr, coerce_qty(value))
        if attr == "requested_qty":
            record.status = status_for(record.requested_qty)
        record.last_updated = now_iso()
        self.save()
        return record

    def restore(self, payload: str | bytes) -> int:
        """Reemplaza todos los registros con un backup JSON (lista)."""
        try:
            data = json.loads(payload)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise RestoreError(f"Erro ao ler arquivo de backup: {exc}") from exc
        if not isinstance(data, list):
            raise RestoreError(f"Backup inválido: se esperaba una lista, llegó {type(data).__name__}")
        try:
            restored = [DemandRecord.from_dict(d) for d in data]
            self._check_ids(restored)
        except (TypeError, ValueError) as exc:
            raise RestoreError(f"Backup inválido: {exc}") from exc
        self._records = restored
        self.save()
        return len(restored)

    def __len__(self) -> int:
        return len(self._records)
