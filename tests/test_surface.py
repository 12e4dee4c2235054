import asyncio
import io
from datetime import datetime

import pytest
from matplotlib.figure import Figure

from demanda.etl.records import DemandRecord, records_to_frame
from demanda.reporting.exporter import build_report_frame, column_headers
from demanda.viz.surface import (
    A4_LANDSCAPE_IN,
    DEFAULT_CONTROLS,
    CaptureError,
    build_surface,
    capture_surface,
    pdf_page,
    prepare_for_capture,
    wrap_in_pdf,
)

NOW = datetime(2026, 10, 19, 9, 5, 7)


@pytest.fixture
def surface(sample_records):
    report = build_report_frame(records_to_frame(sample_records), "admin", "semestral")
    return build_surface(report, column_headers("semestral"), "approved_qty", {"search": "x"})


def test_build_surface_marks_editable_and_status(surface):
    assert surface.controls == DEFAULT_CONTROLS
    row = surface.rows[0]
    assert row[6].kind == "input"
    assert row[5].kind == "text"
    assert row[7].kind == "pill"
    assert row[7].text == "Validado"


def test_prepare_for_capture(surface):
    prepared = prepare_for_capture(surface, "Sobral", {"width_px": 2400}, now=NOW)
    assert prepared.width_px == 2400
    assert prepared.background == "#ffffff"
    assert not prepared.interactive
    assert prepared.controls == []
    assert prepared.header == {}
    assert prepared.title_block == [
        "Relatório de Demanda: Sobral",
        "Data de Emissão: 19/10/2026 às 09:05:07",
    ]
    kinds = {c.kind for row in prepared.rows for c in row}
    assert kinds == {"text"}
    assert prepared.rows[0][6].color == "#059669"
    assert prepared.rows[0][6].bold
    assert prepared.rows[1][6].color == "#cbd5e1"
    assert prepared.rows[0][7].bold


def test_prepare_for_capture_leaves_input_untouched(surface):
    prepare_for_capture(surface, "Sobral", now=NOW)
    assert surface.header == {"search": "x"}
    assert surface.rows[0][6].kind == "input"


def test_capture_missing_surface():
    with pytest.raises(CaptureError):
        asyncio.run(capture_surface(None, "png"))


def test_capture_png(surface):
    prepared = prepare_for_capture(surface, "Geral", {"width_px": 640}, now=NOW)
    png = asyncio.run(capture_surface(prepared, "png", scale=1))
    assert png.startswith(b"\x89PNG")


def test_surface_cells_match_report_values():
    frame = records_to_frame([
        DemandRecord("R", "C", "K", "M", predicted_demand=1234567.5, requested_qty=1.0000001, id="s1"),
    ])
    report = build_report_frame(frame, "input", "semestral")
    surface = build_surface(report, column_headers("semestral"), "requested_qty")
    assert [c.text for c in surface.rows[0]] == [
        "R", "C", "K", "M", "1234567.5", "1.0000001", "0", "Preenchido",
    ]


def _png(width_in: float, height_in: float) -> bytes:
    fig = Figure(figsize=(width_in, height_in))
    buf = io.BytesIO()
    fig.savefig(buf, format="png", dpi=10)
    return buf.getvalue()


@pytest.mark.parametrize("height_in", [5, 20])
def test_pdf_page_fills_width_anchored_at_top(height_in):
    page = pdf_page(_png(24, height_in))
    box = page.axes[0].get_position()
    page_w, page_h = A4_LANDSCAPE_IN
    assert box.x0 == pytest.approx(0.0)
    assert box.width == pytest.approx(1.0)
    assert box.y1 == pytest.approx(1.0)
    assert box.height == pytest.approx((height_in * page_w / 24) / page_h, rel=0.02)


def test_wrap_in_pdf_is_one_pdf_document():
    assert wrap_in_pdf(_png(24, 20)).startswith(b"%PDF")
