"""
Exportación de reportes: CSV, planilla HTML (.xls), PDF e imagen
"""
from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timezone
import asyncio
import csv
import io
import json
import pandas as pd

from demanda.etl.records import DemandRecord, coerce_qty, format_qty, records_to_frame
from demanda.metrics.estado import status_frame, check_mode
from demanda.metrics.periodo import normalize_period, scale_series
from demanda.viz.surface import (
    CaptureError,
    DEFAULT_CAPTURE,
    ReportSurface,
    capture_surface,
    prepare_for_capture,
    wrap_in_pdf,
)

REPORT_COLUMNS = [
    "region",
    "comarca",
    "category",
    "material_name",
    "display_prediction",
    "requested_qty",
    "approved_qty",
    "status_label",
]

DEFAULT_COLUMN_LABELS = {
    "region": "Região",
    "comarca": "Comarca",
    "category": "Categoria",
    "material_name": "Material",
    "display_prediction": "Previsão ({period})",
    "requested_qty": "Qtd. Solicitada",
    "approved_qty": "Qtd. Atendida",
    "status_label": "Status",
}

# formato -> (extensión, media type)
FORMATS = {
    "csv": ("csv", "text/csv;charset=utf-8"),
    "xls": ("xls", "application/vnd.ms-excel"),
    "pdf": ("pdf", "application/pdf"),
    "jpeg": ("jpg", "image/jpeg"),
}
RASTER_FORMATS = {"pdf", "jpeg"}

FORMAT_ALIASES = {
    "delimited-text": "csv",
    "spreadsheet-markup": "xls",
    "excel": "xls",
    "paginated-document": "pdf",
    "raster-image": "jpeg",
    "jpg": "jpeg",
}

HEADER_BG = "#f0f0f0"

BACKUP_CSV_HEADER = ["ID", "Comarca", "Material", "Previsto", "Solicitado", "Atendido", "Status"]


@dataclass(frozen=True)
class ExportPayload:
    content: bytes
    filename: str
    media_type: str


def normalize_format(fmt: str) -> str:
    f = str(fmt).strip().lower()
    f = FORMAT_ALIASES.get(f, f)
    if f not in FORMATS:
        raise ValueError(f"Formato de exportación desconocido: {fmt}")
    return f


NUMERIC_REPORT_COLUMNS = ("display_prediction", "requested_qty", "approved_qty")


def _number_column(s: pd.Series) -> pd.Series:
    # object dtype: ints y floats de Python sin que pandas los vuelva float64
    return pd.Series([coerce_qty(v) for v in s], index=s.index, dtype=object)


def build_report_frame(df: pd.DataFrame, mode: str, period: str, labels: dict | None = None) -> pd.DataFrame:
    """
    Preproceso común a todos los formatos.

    Cada fila lleva la previsión escalada al periodo y la etiqueta de estado
    del modo; los valores numéricos quedan como int/float de Python para que
    todos los encoders los escriban igual.
    """
    check_mode(mode)
    period = normalize_period(period)
    if df.empty:
        return pd.DataFrame(columns=[*REPORT_COLUMNS, "status_category"])
    status = status_frame(df, mode, labels)
    out = pd.DataFrame({
        "region": df["region"].astype(object),
        "comarca": df["comarca"].astype(object),
        "category": df["category"].astype(object),
        "material_name": df["material_name"].astype(object),
        "display_prediction": _number_column(scale_series(df["predicted_demand"], period)),
        "requested_qty": _number_column(df["requested_qty"]),
        "approved_qty": _number_column(df["approved_qty"]),
        "status_label": status["status_label"],
        "status_category": status["status_category"],
    })
    return out.reset_index(drop=True)


def column_headers(period: str, column_labels: dict | None = None) -> list[str]:
    labels = {**DEFAULT_COLUMN_LABELS, **(column_labels or {})}
    period = normalize_period(period)
    return [str(labels[c]).format(period=period) for c in REPORT_COLUMNS]


def report_filename(ext: str, scope_label: str | None = None, report_kind: str = "Relatorio",
                    default_scope: str = "Geral", now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    scope = scope_label or default_scope
    return f"{report_kind}_{scope}_{now.date().isoformat()}.{ext}"


def _labeled(report: pd.DataFrame, headers: list[str]) -> pd.DataFrame:
    out = report[REPORT_COLUMNS].copy()
    out.columns = headers
    return out


def to_delimited(report: pd.DataFrame, headers: list[str]) -> bytes:
    """CSV UTF-8 con BOM; textos entre comillas, números sin comillas."""
    buf = io.StringIO()
    _labeled(report, headers).to_csv(buf, index=False, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    return ("\ufeff" + buf.getvalue()).encode("utf-8")


def to_spreadsheet_markup(report: pd.DataFrame, headers: list[str]) -> bytes:
    labeled = _labeled(report, headers)
    formatters = {headers[REPORT_COLUMNS.index(c)]: format_qty for c in NUMERIC_REPORT_COLUMNS}
    table_html = labeled.to_html(index=False, border=1, na_rep="", formatters=formatters)
    table_html = table_html.replace("<th>", f'<th style="background-color: {HEADER_BG};">')
    parts = [
        '<html xmlns:o="urn:schemas-microsoft-com:office:office" '
        'xmlns:x="urn:schemas-microsoft-com:office:excel" '
        'xmlns="http://www.w3.org/TR/REC-html40">',
        '<head><meta charset="UTF-8"></head>',
        "<body>",
        table_html,
        "</body>",
        "</html>",
    ]
    return "\n".join(parts).encode("utf-8")


async def export_report_async(
    df: pd.DataFrame,
    mode: str,
    period: str,
    fmt: str,
    scope_label: str | None = None,
    surface: ReportSurface | None = None,
    now: datetime | None = None,
    config: dict | None = None,
) -> ExportPayload:
    """
    Exporta la vista filtrada en el formato pedido.

    pdf/jpeg capturan `surface` (la tabla mostrada) tras prepararla; si no hay
    superficie o la captura falla se lanza `CaptureError` y no hay payload.
    """
    cfg = config or {}
    fmt = normalize_format(fmt)
    ext, media_type = FORMATS[fmt]
    now = now or datetime.now(timezone.utc)
    filename = report_filename(
        ext,
        scope_label,
        report_kind=cfg.get("report_kind", "Relatorio"),
        default_scope=cfg.get("default_scope", "Geral"),
        now=now,
    )

    if fmt not in RASTER_FORMATS:
        report = build_report_frame(df, mode, period, cfg.get("status_labels"))
        headers = column_headers(period, cfg.get("column_labels"))
        if fmt == "csv":
            return ExportPayload(to_delimited(report, headers), filename, media_type)
        return ExportPayload(to_spreadsheet_markup(report, headers), filename, media_type)

    if surface is None:
        raise CaptureError("Superficie de reporte no disponible")
    capture = {**DEFAULT_CAPTURE, **(cfg.get("capture") or {})}
    prepared = prepare_for_capture(surface, scope_label or cfg.get("default_scope", "Geral"), capture, now=now)
    if fmt == "jpeg":
        content = await capture_surface(prepared, "jpeg", capture["scale"], capture["jpeg_quality"])
        return ExportPayload(content, filename, media_type)
    png = await capture_surface(prepared, "png", capture["scale"])
    try:
        content = wrap_in_pdf(png)
    except (ValueError, OSError) as exc:
        raise CaptureError(f"No se pudo generar el PDF: {exc}") from exc
    return ExportPayload(content, filename, media_type)


def export_report(df: pd.DataFrame, mode: str, period: str, fmt: str, **kwargs) -> ExportPayload:
    """Versión síncrona; dentro de un event loop usar `export_report_async`."""
    return asyncio.run(export_report_async(df, mode, period, fmt, **kwargs))


def export_backup(records: list[DemandRecord], fmt: str, now: datetime | None = None) -> ExportPayload:
    """Backup completo del store en JSON o CSV plano."""
    now = now or datetime.now(timezone.utc)
    stamp = now.isoformat().replace("+00:00", "Z")
    fmt = str(fmt).strip().lower()
    if fmt == "json":
        content = json.dumps([r.to_dict() for r in records], ensure_ascii=False, indent=2)
        return ExportPayload(content.encode("utf-8"), f"export_{stamp}.json", "application/json")
    if fmt != "csv":
        raise ValueError(f"Formato de backup desconocido: {fmt}")
    df = records_to_frame(records)
    out = pd.DataFrame({
        "ID": df["id"],
        "Comarca": df["comarca"],
        "Material": df["material_name"],
        "Previsto": df["predicted_demand"],
        "Solicitado": df["requested_qty"],
        "Atendido": df["approved_qty"],
        "Status": df["status"],
    }, columns=BACKUP_CSV_HEADER)
    buf = io.StringIO()
    out.to_csv(buf, index=False, lineterminator="\n")
    return ExportPayload(buf.getvalue().encode("utf-8"), f"export_{stamp}.csv", "text/csv")
