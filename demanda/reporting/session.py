"""
Sesión de trabajo: usuario, alcance, filtros y operaciones sobre el store

El estado de navegación viaja en un `ViewContext` explícito; la sesión solo
guarda el store, la bitácora y los avisos para el usuario.
"""
from __future__ import annotations
from dataclasses import dataclass, field, replace
from datetime import datetime
from pathlib import Path
import asyncio
import pandas as pd

from demanda.audit.recorder import AuditLog
from demanda.etl.records import DemandRecord
from demanda.metrics import agregados
from demanda.metrics.estado import MODE_ADMIN, MODE_INPUT, check_mode
from demanda.metrics.filtros import FilterContext, filter_records, progress_stats
from demanda.metrics.periodo import normalize_period
from demanda.reporting.exporter import (
    ExportPayload,
    build_report_frame,
    column_headers,
    export_backup,
    export_report_async,
    normalize_format,
)
from demanda.reporting.loaders import load_config
from demanda.store.blobs import DirectoryBlobStore
from demanda.store.record_store import RecordStore, RestoreError
from demanda.utils.io import decode_text, read_text_safely
from demanda.utils.log import TraceLog
from demanda.viz.surface import CaptureError, ReportSurface, build_surface


@dataclass(frozen=True)
class ViewContext:
    user: str | None = None
    mode: str = MODE_INPUT
    period: str = "semestral"
    filters: FilterContext = field(default_factory=FilterContext)

    @property
    def scope(self) -> str | None:
        return self.filters.scope_comarca


@dataclass(frozen=True)
class Notice:
    level: str
    message: str


class DemandSession:
    def __init__(self, blobs, config: dict | None = None, trace: TraceLog | None = None):
        self.config = config or load_config(None)
        storage = self.config.get("storage", {}) or {}
        seed_cfg = self.config.get("seed", {}) or {}
        self.store = RecordStore(
            blobs,
            blob_name=storage.get("records_blob", "demand_app_data"),
            seed_size=int(seed_cfg.get("size", 60)),
            rng_seed=seed_cfg.get("rng_seed"),
        )
        self.audit = AuditLog(blobs, blob_name=storage.get("logs_blob", "demand_app_logs"))
        self.trace = trace or TraceLog(None)
        self.notices: list[Notice] = []
        self.surface_available = True
        if self.store.seeded:
            self.trace.event("seed", "store inicializado con datos sintéticos", {"records": len(self.store)})

    @classmethod
    def from_directory(cls, data_dir: str | Path, config: dict | None = None,
                       trace: TraceLog | None = None) -> "DemandSession":
        return cls(DirectoryBlobStore(data_dir), config=config, trace=trace)

    def _notify(self, level: str, message: str) -> Notice:
        notice = Notice(level, message)
        self.notices.append(notice)
        return notice

    # --- acceso ---

    def login(self, username: str, name: str | None = None, register: bool = False) -> ViewContext:
        display = (name or username).strip() if register else username.strip()
        if register:
            self.audit.record(display, "Registro", "Novo usuário registrado no sistema")
        else:
            self.audit.record(display, "Login", "Acesso ao sistema realizado")
        return ViewContext(user=display)

    def logout(self, ctx: ViewContext) -> ViewContext:
        self.audit.record(ctx.user or "?", "Logout", "Saída do sistema")
        return ViewContext()

    def open_comarca(self, ctx: ViewContext, comarca: str, pin: str) -> ViewContext | None:
        """Compuerta de PIN: concedido devuelve el contexto con alcance; denegado, None."""
        expected = str((self.config.get("access", {}) or {}).get("pin", "1234"))
        if str(pin) != expected:
            self._notify("error", "PIN Incorreto.")
            return None
        self.audit.record(ctx.user or "", "Acesso", f"Acesso liberado à comarca {comarca}")
        return replace(ctx, filters=replace(ctx.filters, scope_comarca=comarca))

    def close_scope(self, ctx: ViewContext) -> ViewContext:
        return replace(ctx, filters=replace(ctx.filters, scope_comarca=None))

    def with_view(self, ctx: ViewContext, mode: str | None = None, period: str | None = None,
                  text_query: str | None = None, category: str | None = None) -> ViewContext:
        filters = ctx.filters
        if text_query is not None:
            filters = replace(filters, text_query=text_query)
        if category is not None:
            filters = replace(filters, category=category)
        return replace(
            ctx,
            mode=check_mode(mode) if mode is not None else ctx.mode,
            period=normalize_period(period) if period is not None else ctx.period,
            filters=filters,
        )

    # --- lectura ---

    def frame(self) -> pd.DataFrame:
        return self.store.frame()

    def view(self, ctx: ViewContext) -> pd.DataFrame:
        return filter_records(self.frame(), ctx.filters)

    def progress(self, ctx: ViewContext) -> dict:
        return progress_stats(self.view(ctx))

    def region_rollup(self) -> pd.DataFrame:
        return agregados.by_region(self.frame())

    def comarca_rollup(self, region: str) -> pd.DataFrame:
        return agregados.comarcas_in_region(self.frame(), region)

    def dashboard(self) -> dict:
        return agregados.dashboard_kpis(self.frame())

    def current_surface(self, ctx: ViewContext) -> ReportSurface | None:
        if not self.surface_available:
            return None
        report = build_report_frame(self.view(ctx), ctx.mode, ctx.period, self.config.get("status_labels"))
        headers = column_headers(ctx.period, self.config.get("column_labels"))
        editable = "approved_qty" if ctx.mode == MODE_ADMIN else "requested_qty"
        progress = self.progress(ctx)
        header = {
            "title": ctx.scope or self.config.get("default_scope", "Geral"),
            "search": ctx.filters.text_query,
            "category": ctx.filters.category,
            "progress": f"{progress['filled']}/{progress['total']}",
        }
        return build_surface(report, headers, editable, header)

    # --- escritura ---

    def update(self, ctx: ViewContext, record_id: str, field_name: str, value) -> DemandRecord:
        return self.store.update(record_id, field_name, value)

    def import_file(self, ctx: ViewContext, source: str | Path | bytes) -> int:
        """Solo cuenta filas (líneas menos encabezado); no fusiona en el store."""
        text = decode_text(source) if isinstance(source, bytes) else read_text_safely(source)
        lines = [ln for ln in text.splitlines() if ln.strip()]
        rows = max(0, len(lines) - 1)
        if rows == 0:
            self._notify("error", "Arquivo sem linhas de dados.")
            return 0
        self._notify("info", f"Arquivo lido com sucesso. {rows} linhas processadas.")
        self.audit.record(ctx.user or "", "Importação", "Planilha importada manualmente")
        self.trace.event("import", "archivo leído", {"rows": rows})
        return rows

    def restore(self, ctx: ViewContext, payload: str | bytes) -> bool:
        try:
            n = self.store.restore(payload)
        except RestoreError as exc:
            self._notify("error", "Erro ao ler arquivo de backup.")
            self.trace.event("restore", "backup rechazado", {"error": str(exc)})
            return False
        self.audit.record(ctx.user or "", "Backup", "Sistema restaurado via arquivo JSON")
        self._notify("info", "Backup restaurado com sucesso!")
        self.trace.event("restore", "store reemplazado", {"records": n})
        return True

    def export_backup(self, ctx: ViewContext, fmt: str, now: datetime | None = None) -> ExportPayload:
        payload = export_backup(self.store.records, fmt, now=now)
        self.audit.record(ctx.user or "", "Exportação", f"Dados exportados em {fmt.upper()}")
        return payload

    async def export_report_async(self, ctx: ViewContext, fmt: str, now: datetime | None = None) -> ExportPayload | None:
        fmt = normalize_format(fmt)
        filtered = self.view(ctx)
        try:
            payload = await export_report_async(
                filtered,
                ctx.mode,
                ctx.period,
                fmt,
                scope_label=ctx.scope,
                surface=self.current_surface(ctx),
                now=now,
                config=self.config,
            )
        except CaptureError as exc:
            self._notify("error", "Erro ao gerar exportação. Tente novamente.")
            self.trace.event("export", "captura fallida", {"format": fmt, "error": str(exc)})
            return None
        self.audit.record(ctx.user or "", "Exportação", f"Relatório exportado em {fmt.upper()} ({len(filtered)} itens)")
        self.trace.event("export", "reporte exportado", {"format": fmt, "file": payload.filename, "rows": int(len(filtered))})
        return payload

    def export_report(self, ctx: ViewContext, fmt: str, now: datetime | None = None) -> ExportPayload | None:
        return asyncio.run(self.export_report_async(ctx, fmt, now=now))
