from pathlib import Path

import pytest

from demanda.reporting.loaders import DEFAULT_CONFIG, load_config
from demanda.reporting.utils import ProgressPrinter, format_seconds
from demanda.utils.dates import emission_stamp
from demanda.utils.io import decode_text
from demanda.utils.log import TraceLog

REPO_CONFIGS = Path(__file__).resolve().parents[1] / "configs"


def test_repo_config_matches_defaults():
    cfg = load_config(REPO_CONFIGS)
    assert cfg["status_labels"] == DEFAULT_CONFIG["status_labels"]
    assert cfg["access"]["pin"] == "1234"
    assert cfg["capture"]["width_px"] == 2400


def test_missing_config_dir_gives_defaults(tmp_path):
    assert load_config(tmp_path / "nope") == DEFAULT_CONFIG


def test_partial_override_is_merged(tmp_path):
    (tmp_path / "global.yaml").write_text("access:\n  pin: '9999'\ncapture:\n  scale: 1\n", encoding="utf-8")
    cfg = load_config(tmp_path)
    assert cfg["access"]["pin"] == "9999"
    assert cfg["capture"]["scale"] == 1
    assert cfg["capture"]["jpeg_quality"] == 90


def test_non_mapping_config_rejected(tmp_path):
    (tmp_path / "global.yaml").write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(tmp_path)


def test_trace_log_writes_jsonl(tmp_path):
    trace = TraceLog(tmp_path / "logs" / "trace.jsonl")
    trace.event("export", "ok", {"rows": 3})
    trace.event("done", "fin")
    lines = (tmp_path / "logs" / "trace.jsonl").read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    assert len(trace.events) == 2


def test_decode_text_fallbacks():
    assert decode_text("\ufeffação".encode("utf-8")) == "ação"
    assert decode_text("ação".encode("latin-1")) == "ação"


def test_format_seconds():
    assert format_seconds(None) == "N/A"
    assert format_seconds(5) == "5s"
    assert format_seconds(125) == "2m 5s"
    assert format_seconds(3725) == "1h 2m 5s"


def test_emission_stamp():
    from datetime import datetime
    assert emission_stamp(datetime(2026, 1, 2, 3, 4, 5)) == "02/01/2026 às 03:04:05"


def test_format_seconds_sub_second():
    assert format_seconds(0.25) == "250ms"


def test_progress_printer_records_stage_timings(capsys):
    progress = ProgressPrinter(["Sessão", "Exportação csv"])
    progress.announce("Geral")
    progress.done("Sessão")
    progress.done("Exportação csv")
    assert list(progress.timings) == ["Sessão", "Exportação csv"]
    out = capsys.readouterr().out
    assert "Relatório Geral: 2 etapas" in out
    assert "[02/02] Exportação csv (100%" in out
