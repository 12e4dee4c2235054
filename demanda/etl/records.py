"""
Modelo de registros de demanda y conversión a DataFrame
"""
from __future__ import annotations
from dataclasses import dataclass, field
import math
import uuid
import pandas as pd

from demanda.utils.dates import now_iso

STATUS_PENDING = "pending"
STATUS_CONFIRMED = "confirmed"

NUMERIC_FIELDS = ("historical_demand", "predicted_demand", "requested_qty", "approved_qty")
IMMUTABLE_FIELDS = ("id", "region", "comarca", "category", "material_name", "unit")

# atributo -> clave del snapshot JSON
JSON_KEYS = {
    "id": "id",
    "region": "region",
    "comarca": "comarca",
    "category": "category",
    "material_name": "materialName",
    "unit": "unit",
    "historical_demand": "historicalDemand",
    "predicted_demand": "predictedDemand",
    "requested_qty": "requestedQty",
    "approved_qty": "approvedQty",
    "status": "status",
    "last_updated": "lastUpdated",
}
FIELD_BY_KEY = {v: k for k, v in JSON_KEYS.items()}

FRAME_COLUMNS = list(JSON_KEYS.keys())


def generate_id() -> str:
    return uuid.uuid4().hex[:9]


def coerce_qty(value) -> int | float:
    """Convierte una entrada a cantidad no negativa; lo no numérico vale 0."""
    if isinstance(value, bool):
        value = int(value)
    try:
        v = float(value)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(v) or v <= 0:
        return 0
    return int(v) if v.is_integer() else v


def format_qty(value) -> str:
    """
    Texto de una cantidad, igual en todos los formatos de exportación.

    Enteros sin decimales; el resto con `repr` (sin pérdida de dígitos).
    """
    v = coerce_qty(value)
    if isinstance(v, int):
        return str(v)
    return repr(float(v))


def status_for(requested_qty) -> str:
    return STATUS_CONFIRMED if coerce_qty(requested_qty) > 0 else STATUS_PENDING


def resolve_field(name: str) -> str:
    """Acepta el nombre del atributo o la clave camelCase del snapshot."""
    if name in JSON_KEYS:
        return name
    if name in FIELD_BY_KEY:
        return FIELD_BY_KEY[name]
    raise ValueError(f"Campo desconocido: {name}")


@dataclass
class DemandRecord:
    region: str
    comarca: str
    category: str
    material_name: str
    unit: str = "UN"
    historical_demand: int | float = 0
    predicted_demand: int | float = 0
    requested_qty: int | float = 0
    approved_qty: int | float = 0
    status: str = STATUS_PENDING
    last_updated: str = field(default_factory=now_iso)
    id: str = field(default_factory=generate_id)

    def __post_init__(self) -> None:
        for name in NUMERIC_FIELDS:
            setattr(self, name, coerce_qty(getattr(self, name)))
        self.status = status_for(self.requested_qty)

    def to_dict(self) -> dict:
        return {key: getattr(self, attr) for attr, key in JSON_KEYS.items()}

    @classmethod
    def from_dict(cls, data: dict) -> "DemandRecord":
        if not isinstance(data, dict):
            raise TypeError(f"Registro inválido: se esperaba objeto, llegó {type(data).__name__}")
        kwargs = {}
        for key, value in data.items():
            attr = FIELD_BY_KEY.get(key, key if key in JSON_KEYS else None)
            if attr is None or attr == "status":
                continue
            kwargs[attr] = value
        for attr in ("region", "comarca", "category", "material_name"):
            kwargs[attr] = str(kwargs.get(attr) or "").strip()
        kwargs["unit"] = str(kwargs.get("unit") or "UN")
        if not kwargs.get("id"):
            kwargs.pop("id", None)
        if not kwargs.get("last_updated"):
            kwargs.pop("last_updated", None)
        return cls(**kwargs)


def records_to_frame(records: list[DemandRecord]) -> pd.DataFrame:
    """DataFrame en el orden del store, con columnas en snake_case."""
    if not records:
        return pd.DataFrame(columns=FRAME_COLUMNS)
    return pd.DataFrame([{c: getattr(r, c) for c in FRAME_COLUMNS} for r in records], columns=FRAME_COLUMNS)
