from __future__ import annotations
import math
import pandas as pd

from demanda.etl.records import STATUS_CONFIRMED

ROLLUP_COLUMNS = ["total_items", "pending_count", "comarca_n", "completion_pct"]


def completion_percent(total_items: int, pending_count: int) -> int:
    """Porcentaje de avance redondeado (mitades hacia arriba); 0 si no hay ítems."""
    if not total_items or total_items <= 0:
        return 0
    pct = (total_items - pending_count) / total_items * 100
    return int(min(100, max(0, math.floor(pct + 0.5))))


def _qty(df: pd.DataFrame, col: str) -> pd.Series:
    if col not in df.columns:
        return pd.Series([0.0] * len(df), index=df.index)
    return pd.to_numeric(df[col], errors="coerce").fillna(0.0)


def _num(value: float) -> int | float:
    v = float(value)
    return int(v) if v.is_integer() else v


def aggregate(df: pd.DataFrame, key: str) -> pd.DataFrame:
    """
    Rollup por `key` en el orden en que aparece cada valor por primera vez.

    `pending_count` usa el estado persistido (`status != confirmed`), no el
    estado derivado por modo: el rollup es un indicador de avance.
    """
    if df.empty or key not in df.columns:
        return pd.DataFrame(columns=[key, *ROLLUP_COLUMNS])
    tmp = pd.DataFrame({
        "_key": df[key].astype("string").fillna("No informado"),
        "_comarca": df["comarca"].astype("string").fillna("No informado"),
        "_pending": (df["status"] != STATUS_CONFIRMED).astype("int64"),
    })
    out = (
        tmp.groupby("_key", sort=False, as_index=False)
           .agg(
               total_items=("_key", "size"),
               pending_count=("_pending", "sum"),
               comarca_n=("_comarca", "nunique"),
           )
           .rename(columns={"_key": key})
    )
    out["total_items"] = out["total_items"].astype("int64")
    out["pending_count"] = out["pending_count"].astype("int64")
    out["comarca_n"] = out["comarca_n"].astype("int64")
    out["completion_pct"] = [
        completion_percent(t, p) for t, p in zip(out["total_items"], out["pending_count"], strict=False)
    ]
    out[key] = out[key].astype(object)
    return out.reset_index(drop=True)


def by_region(df: pd.DataFrame) -> pd.DataFrame:
    return aggregate(df, "region")


def comarcas_in_region(df: pd.DataFrame, region: str) -> pd.DataFrame:
    sub = df[df["region"] == region] if not df.empty else df
    out = aggregate(sub, "comarca")
    out.insert(1, "region", region)
    return out


def by_category(df: pd.DataFrame) -> pd.DataFrame:
    return aggregate(df, "category")


def fulfillment_rate(df: pd.DataFrame) -> float:
    total_requested = float(_qty(df, "requested_qty").sum())
    total_approved = float(_qty(df, "approved_qty").sum())
    if total_requested <= 0:
        return 0.0
    return total_approved / total_requested * 100


def requested_by_category(df: pd.DataFrame) -> pd.DataFrame:
    """Serie category -> cantidad solicitada, para el gráfico del dashboard."""
    if df.empty:
        return pd.DataFrame(columns=["category", "requested_qty"])
    tmp = pd.DataFrame({"category": df["category"], "requested_qty": _qty(df, "requested_qty")})
    return tmp.groupby("category", sort=False, as_index=False)["requested_qty"].sum()


def dashboard_kpis(df: pd.DataFrame) -> dict:
    total_items = int(len(df))
    confirmed = int((df["status"] == STATUS_CONFIRMED).sum()) if total_items else 0
    return {
        "total_items": total_items,
        "confirmed_items": confirmed,
        "completion_pct": completion_percent(total_items, total_items - confirmed),
        "total_requested": _num(_qty(df, "requested_qty").sum()),
        "total_approved": _num(_qty(df, "approved_qty").sum()),
        "fulfillment_rate": fulfillment_rate(df),
    }


def comarca_detail(df: pd.DataFrame, comarca: str) -> dict:
    sub = df[df["comarca"] == comarca] if not df.empty else df
    requested = _qty(sub, "requested_qty")
    approved = _qty(sub, "approved_qty")
    total_req = float(requested.sum())
    total_att = float(approved.sum())
    active = sub.loc[requested > 0, "category"].nunique() if not sub.empty else 0
    return {
        "comarca": comarca,
        "total_items": int(len(sub)),
        "total_requested": _num(total_req),
        "total_approved": _num(total_att),
        "deviation": _num(total_req - total_att),
        "efficiency": (total_att / total_req * 100) if total_req > 0 else 0.0,
        "active_categories": int(active),
    }
