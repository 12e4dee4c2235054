from __future__ import annotations
from dataclasses import dataclass
import pandas as pd

from demanda.etl.records import STATUS_CONFIRMED
from demanda.metrics.agregados import completion_percent

ALL_CATEGORIES = "Todos"
_ALL_ALIASES = {ALL_CATEGORIES.lower(), "all"}


@dataclass(frozen=True)
class FilterContext:
    text_query: str = ""
    category: str = ALL_CATEGORIES
    scope_comarca: str | None = None


def is_all_categories(category: str | None) -> bool:
    return category is None or str(category).lower() in _ALL_ALIASES


def filter_records(df: pd.DataFrame, ctx: FilterContext | None = None) -> pd.DataFrame:
    """
    Vista filtrada estable (conserva el orden de entrada).

    El alcance de comarca se aplica primero y excluye sin condiciones; luego
    texto (subcadena literal en material o comarca, sin distinguir
    mayúsculas; "" no filtra) y categoría exacta salvo el centinela `Todos`.
    """
    ctx = ctx or FilterContext()
    if df.empty:
        return df.copy()
    out = df
    if ctx.scope_comarca:
        out = out[out["comarca"] == ctx.scope_comarca]

    query = (ctx.text_query or "").lower()
    if query:
        material = out["material_name"].astype("string").fillna("").str.lower()
        comarca = out["comarca"].astype("string").fillna("").str.lower()
        mask = material.str.contains(query, regex=False) | comarca.str.contains(query, regex=False)
        out = out[mask.fillna(False).astype(bool)]

    if not is_all_categories(ctx.category):
        out = out[out["category"] == ctx.category]
    return out.copy()


def progress_stats(filtered: pd.DataFrame) -> dict:
    total = int(len(filtered))
    filled = int((filtered["status"] == STATUS_CONFIRMED).sum()) if total else 0
    return {"filled": filled, "total": total, "percent": completion_percent(total, total - filled)}


def category_options(df: pd.DataFrame) -> list[str]:
    cats = [] if df.empty else list(pd.unique(df["category"]))
    return [ALL_CATEGORIES, *cats]
