from __future__ import annotations
import pandas as pd

# El valor guardado de demanda prevista es semestral.
PERIOD_MULTIPLIERS = {
    "semestral": 1,
    "anual": 2,
}

PERIOD_ALIASES = {
    "semiannual": "semestral",
    "annual": "anual",
}


def normalize_period(period: str) -> str:
    p = str(period).strip().lower()
    p = PERIOD_ALIASES.get(p, p)
    if p not in PERIOD_MULTIPLIERS:
        raise ValueError(f"Periodo desconocido: {period}")
    return p


def multiplier(period: str) -> int:
    return PERIOD_MULTIPLIERS[normalize_period(period)]


def scale(predicted_demand, period: str):
    return predicted_demand * multiplier(period)


def scale_series(s: pd.Series, period: str) -> pd.Series:
    return pd.to_numeric(s, errors="coerce").fillna(0) * multiplier(period)
