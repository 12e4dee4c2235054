"""
Superficie del reporte en pantalla y su captura a imagen

La tabla visible se modela como una `ReportSurface` (cabecera interactiva,
controles, celdas editables y pills de estado). Antes de capturarla se
transforma de forma determinista con `prepare_for_capture` y luego se
rasteriza con matplotlib.
"""
from __future__ import annotations
from copy import deepcopy
from dataclasses import dataclass, field
from datetime import datetime
import asyncio
import io
import matplotlib.image as mpimg
from matplotlib.lines import Line2D
from matplotlib.figure import Figure

from demanda.etl.records import format_qty
from demanda.utils.dates import emission_stamp

# A4 apaisado en pulgadas (297 x 210 mm)
A4_LANDSCAPE_IN = (297 / 25.4, 210 / 25.4)

DEFAULT_CAPTURE = {
    "width_px": 2400,
    "scale": 2,
    "jpeg_quality": 90,
    "positive_color": "#059669",
    "muted_color": "#cbd5e1",
}

DEFAULT_CONTROLS = ["export-menu", "filters-section", "period-selector", "progress-bar-line"]


class CaptureError(RuntimeError):
    """La superficie no está disponible o falló su serialización."""


@dataclass
class SurfaceCell:
    text: str
    kind: str = "text"  # text | input | pill
    color: str | None = None
    bold: bool = False


@dataclass
class ReportSurface:
    columns: list[str]
    rows: list[list[SurfaceCell]]
    header: dict = field(default_factory=dict)
    controls: list[str] = field(default_factory=lambda: list(DEFAULT_CONTROLS))
    title_block: list[str] = field(default_factory=list)
    width_px: int = 1280
    background: str = "#1e293b"
    text_color: str = "#e2e8f0"
    interactive: bool = True


def build_surface(report, headers: list[str], editable: str, header: dict | None = None) -> ReportSurface:
    """
    Superficie tal como se muestra: la columna `editable` se pinta como input
    y el estado como pill.

    Args:
        report: DataFrame de `build_report_frame`
        headers: etiquetas de columna en orden
        editable: columna editable (`requested_qty` o `approved_qty`)
        header: cabecera interactiva (búsqueda, categoría, avance)
    """
    rows: list[list[SurfaceCell]] = []
    for rec in report.to_dict("records"):
        rows.append([
            SurfaceCell(str(rec["region"])),
            SurfaceCell(str(rec["comarca"])),
            SurfaceCell(str(rec["category"])),
            SurfaceCell(str(rec["material_name"])),
            SurfaceCell(format_qty(rec["display_prediction"])),
            SurfaceCell(format_qty(rec["requested_qty"]), kind="input" if editable == "requested_qty" else "text"),
            SurfaceCell(format_qty(rec["approved_qty"]), kind="input" if editable == "approved_qty" else "text"),
            SurfaceCell(str(rec["status_label"]), kind="pill"),
        ])
    return ReportSurface(columns=list(headers), rows=rows, header=dict(header or {}))


def prepare_for_capture(surface: ReportSurface, scope_label: str, capture: dict | None = None,
                        now: datetime | None = None) -> ReportSurface:
    cfg = {**DEFAULT_CAPTURE, **(capture or {})}
    out = deepcopy(surface)
    out.width_px = int(cfg["width_px"])
    out.background = "#ffffff"
    out.text_color = "#334155"
    out.interactive = False
    out.controls = []
    out.header = {}
    out.title_block = [
        f"Relatório de Demanda: {scope_label}",
        f"Data de Emissão: {emission_stamp(now)}",
    ]
    for row in out.rows:
        for cell in row:
            if cell.kind == "input":
                try:
                    positive = float(cell.text) > 0
                except ValueError:
                    positive = False
                cell.kind = "text"
                cell.bold = True
                cell.color = cfg["positive_color"] if positive else cfg["muted_color"]
            elif cell.kind == "pill":
                cell.kind = "text"
                cell.bold = True
    return out


def render_surface(surface: ReportSurface, fmt: str = "png", scale: float = 2, jpeg_quality: int = 90) -> bytes:
    if surface is None:
        raise CaptureError("Superficie de reporte no disponible")
    width_in = surface.width_px / 100
    n_rows = len(surface.rows)
    title_in = 1.1 if surface.title_block else 0.3
    height_in = max(3.0, title_in + 0.6 + 0.3 * (n_rows + 1))
    fig = Figure(figsize=(width_in, height_in), facecolor=surface.background)

    if surface.title_block:
        top = 1 - 0.35 / height_in
        fig.text(0.017, top, surface.title_block[0], fontsize=21, fontweight="bold", color="#0f172a", va="top")
        for i, line in enumerate(surface.title_block[1:], start=1):
            fig.text(0.017, top - (0.42 * i) / height_in, line, fontsize=11, color="#64748b", va="top")
        y = 1 - (title_in - 0.1) / height_in
        fig.add_artist(Line2D([0.017, 0.983], [y, y], color="#334155", linewidth=2, transform=fig.transFigure))

    table_top = 1 - title_in / height_in
    ax = fig.add_axes([0.017, 0.3 / height_in, 0.966, table_top - 0.3 / height_in])
    ax.axis("off")
    ax.set_facecolor(surface.background)

    if not surface.rows:
        ax.text(0.5, 0.5, "Sem registros para o filtro atual", ha="center", va="center", color=surface.text_color)
    else:
        cell_text = [[c.text for c in row] for row in surface.rows]
        table = ax.table(cellText=cell_text, colLabels=surface.columns, cellLoc="center", bbox=[0.0, 0.0, 1.0, 1.0])
        table.auto_set_font_size(False)
        table.set_fontsize(10)

        # Estilo de encabezado
        for j in range(len(surface.columns)):
            cell = table[(0, j)]
            cell.set_facecolor("#f1f5f9")
            cell.set_text_props(weight="bold", color="#0f172a", fontsize=10)
            cell.set_edgecolor("#cbd5e1")

        # Estilo de filas
        for i, row in enumerate(surface.rows, start=1):
            for j, sc in enumerate(row):
                cell = table[(i, j)]
                cell.set_facecolor("#ffffff" if i % 2 == 1 else "#f8fafc")
                cell.set_edgecolor("#e2e8f0")
                cell.set_text_props(
                    color=sc.color or surface.text_color,
                    weight="bold" if sc.bold else "normal",
                    family="monospace" if sc.color else "sans-serif",
                )

    buf = io.BytesIO()
    kwargs = {}
    if fmt in ("jpeg", "jpg"):
        kwargs["pil_kwargs"] = {"quality": int(jpeg_quality)}
    fig.savefig(buf, format=fmt, dpi=100 * scale, facecolor=surface.background, **kwargs)
    return buf.getvalue()


async def capture_surface(surface: ReportSurface | None, fmt: str = "png", scale: float = 2,
                          jpeg_quality: int = 90) -> bytes:
    """Rasteriza la superficie fuera del hilo que llama; sin reintentos."""
    if surface is None:
        raise CaptureError("Superficie de reporte no disponible")
    try:
        return await asyncio.to_thread(render_surface, surface, fmt, scale, jpeg_quality)
    except CaptureError:
        raise
    except Exception as exc:
        raise CaptureError(f"Falló la captura de la superficie: {exc}") from exc


def pdf_page(png: bytes) -> Figure:
    """
    Página A4 apaisada con la imagen al ancho completo, anclada arriba y
    conservando proporción; lo que exceda el alto de la página queda fuera.
    """
    img = mpimg.imread(io.BytesIO(png), format="png")
    h, w = img.shape[:2]
    page_w, page_h = A4_LANDSCAPE_IN
    frac = (h * page_w / w) / page_h
    fig = Figure(figsize=(page_w, page_h), facecolor="white")
    ax = fig.add_axes([0.0, 1.0 - frac, 1.0, frac])
    ax.imshow(img, aspect="auto")
    ax.axis("off")
    return fig


def wrap_in_pdf(png: bytes) -> bytes:
    buf = io.BytesIO()
    pdf_page(png).savefig(buf, format="pdf", facecolor="white")
    return buf.getvalue()
