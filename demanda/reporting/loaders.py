"""
Carga de configuración YAML
"""
from __future__ import annotations
from copy import deepcopy
from pathlib import Path
import yaml

from demanda.metrics.estado import DEFAULT_STATUS_LABELS

DEFAULT_CONFIG: dict = {
    "report_kind": "Relatorio",
    "default_scope": "Geral",
    "status_labels": dict(DEFAULT_STATUS_LABELS),
    "column_labels": {
        "region": "Região",
        "comarca": "Comarca",
        "category": "Categoria",
        "material_name": "Material",
        "display_prediction": "Previsão ({period})",
        "requested_qty": "Qtd. Solicitada",
        "approved_qty": "Qtd. Atendida",
        "status_label": "Status",
    },
    "storage": {
        "data_dir": "data/store",
        "records_blob": "demand_app_data",
        "logs_blob": "demand_app_logs",
    },
    "access": {"pin": "1234"},
    "seed": {"size": 60, "rng_seed": None},
    "capture": {
        "width_px": 2400,
        "scale": 2,
        "jpeg_quality": 90,
        "positive_color": "#059669",
        "muted_color": "#cbd5e1",
    },
}


def load_yaml(path: str | Path) -> dict:
    """Cargar archivo YAML"""
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def _merge(base: dict, override: dict) -> dict:
    out = deepcopy(base)
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _merge(out[k], v)
        else:
            out[k] = v
    return out


def load_config(configs_dir: str | Path | None = None) -> dict:
    """
    Configuración efectiva: `configs/global.yaml` sobre los valores por defecto.

    Si el archivo no existe se devuelven solo los defaults.
    """
    if configs_dir is None:
        return deepcopy(DEFAULT_CONFIG)
    cfg_path = Path(configs_dir) / "global.yaml"
    if not cfg_path.exists():
        return deepcopy(DEFAULT_CONFIG)
    data = load_yaml(cfg_path) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{cfg_path} debe contener un mapeo YAML")
    return _merge(DEFAULT_CONFIG, data)
