from __future__ import annotations
from typing import NamedTuple
import numpy as np
import pandas as pd

from demanda.etl.records import coerce_qty

MODE_INPUT = "input"
MODE_ADMIN = "admin"
MODES = (MODE_INPUT, MODE_ADMIN)

DEFAULT_STATUS_LABELS = {
    "filled": "Preenchido",
    "pending": "Pendente",
    "validated": "Validado",
    "awaiting": "Aguardando",
}


class StatusView(NamedTuple):
    label: str
    category: str


def check_mode(mode: str) -> str:
    if mode not in MODES:
        raise ValueError(f"Modo desconocido: {mode} (use {', '.join(MODES)})")
    return mode


def status_category(requested_qty, approved_qty, mode: str) -> str:
    check_mode(mode)
    requested = coerce_qty(requested_qty)
    if mode == MODE_ADMIN:
        if coerce_qty(approved_qty) > 0:
            return "validated"
        if requested > 0:
            return "awaiting"
        return "pending"
    return "filled" if requested > 0 else "pending"


def derive_status(record, mode: str, labels: dict | None = None) -> StatusView:
    """
    Estado de flujo según el modo de vista.

    Se calcula sobre las cantidades actuales, nunca sobre `record.status`
    (ese campo solo cachea `requested_qty > 0`). En modo admin la cantidad
    atendida tiene precedencia sobre la solicitada.
    """
    labels = {**DEFAULT_STATUS_LABELS, **(labels or {})}
    if isinstance(record, dict):
        requested = record.get("requested_qty", record.get("requestedQty"))
        approved = record.get("approved_qty", record.get("approvedQty"))
    else:
        requested = record.requested_qty
        approved = record.approved_qty
    cat = status_category(requested, approved, mode)
    return StatusView(labels[cat], cat)


def status_frame(df: pd.DataFrame, mode: str, labels: dict | None = None) -> pd.DataFrame:
    """Versión vectorizada: columnas `status_category` y `status_label`."""
    check_mode(mode)
    labels = {**DEFAULT_STATUS_LABELS, **(labels or {})}
    requested = pd.to_numeric(df["requested_qty"], errors="coerce").fillna(0)
    approved = pd.to_numeric(df["approved_qty"], errors="coerce").fillna(0)
    if mode == MODE_ADMIN:
        cat = np.select([approved > 0, requested > 0], ["validated", "awaiting"], default="pending")
    else:
        cat = np.where(requested > 0, "filled", "pending")
    out = pd.DataFrame(index=df.index)
    out["status_category"] = pd.Series(cat, index=df.index, dtype="object")
    out["status_label"] = out["status_category"].map(labels)
    return out
