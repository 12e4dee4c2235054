from __future__ import annotations
from pathlib import Path
import argparse
import pandas as pd

from demanda.utils.io import ensure_dir, write_bytes, write_json
from demanda.utils.log import TraceLog
from demanda.metrics import agregados
from demanda.metrics.estado import MODES
from demanda.metrics.filtros import ALL_CATEGORIES
from demanda.metrics.periodo import PERIOD_MULTIPLIERS
from demanda.reporting.exporter import FORMATS, FORMAT_ALIASES
from demanda.reporting.loaders import load_config
from demanda.reporting.session import DemandSession, ViewContext
from demanda.reporting.utils import ProgressPrinter
from demanda.viz.figures import save_bar_categorias, save_bar_regiones


def _parse_formats(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [f.strip() for f in raw.split(",") if f.strip()]


def _print_rollup(title: str, df: pd.DataFrame):
    print(title, flush=True)
    if df.empty:
        print("  (sem dados)", flush=True)
        return
    key = df.columns[0]
    for rec in df.to_dict("records"):
        print(
            f"  {rec[key]:<24} {rec['completion_pct']:>3}%  "
            f"itens={rec['total_items']} pendentes={rec['pending_count']} comarcas={rec['comarca_n']}",
            flush=True,
        )


def _print_summary(session: DemandSession, ctx: ViewContext):
    kpis = session.dashboard()
    print(
        f"Itens: {kpis['total_items']} | Confirmados: {kpis['confirmed_items']} "
        f"({kpis['completion_pct']}%) | Solicitado: {kpis['total_requested']} | "
        f"Atendido: {kpis['total_approved']} | Atendimento: {kpis['fulfillment_rate']:.1f}%",
        flush=True,
    )
    regions = session.region_rollup()
    _print_rollup("Regiões:", regions)
    for region in regions["region"] if not regions.empty else []:
        _print_rollup(f"Comarcas em {region}:", session.comarca_rollup(region))
    prog = session.progress(ctx)
    print(f"Vista atual: {prog['filled']}/{prog['total']} preenchidos ({prog['percent']}%)", flush=True)


def run_export(args) -> Path:
    cfg = load_config(args.configs)
    data_dir = args.data_dir or (cfg.get("storage", {}) or {}).get("data_dir", "data/store")
    out_dir = ensure_dir(args.out)
    trace = TraceLog(out_dir / "trace_log.jsonl")
    session = DemandSession.from_directory(data_dir, config=cfg, trace=trace)

    formats = _parse_formats(args.format)
    stages = ["Sessão e filtros"]
    if args.restore:
        stages.append("Restauração de backup")
    if args.import_file:
        stages.append("Importação de planilha")
    stages += [f"Exportação {f}" for f in formats]
    if args.backup:
        stages.append(f"Backup {args.backup}")
    if args.figures:
        stages.append("Figuras")
    progress = ProgressPrinter(stages)
    progress.announce(args.scope or cfg.get("default_scope", "Geral"))

    ctx = session.login(args.user)
    ctx = session.with_view(ctx, mode=args.mode, period=args.period,
                            text_query=args.text, category=args.category)
    if args.scope:
        scoped = session.open_comarca(ctx, args.scope, args.pin)
        if scoped is None:
            raise SystemExit(f"Acesso negado à comarca {args.scope}: PIN incorreto")
        ctx = scoped
    trace.event("session", "contexto de vista", {
        "user": ctx.user, "mode": ctx.mode, "period": ctx.period,
        "scope": ctx.scope, "text": ctx.filters.text_query, "category": ctx.filters.category,
    })
    progress.done("Sessão e filtros")

    if args.restore:
        ok = session.restore(ctx, Path(args.restore).read_bytes())
        if not ok:
            raise SystemExit(session.notices[-1].message)
        progress.done("Restauração de backup")

    if args.import_file:
        session.import_file(ctx, args.import_file)
        progress.done("Importação de planilha")

    written: list[str] = []
    for fmt in formats:
        payload = session.export_report(ctx, fmt)
        if payload is not None:
            write_bytes(out_dir / payload.filename, payload.content)
            written.append(payload.filename)
        progress.done(f"Exportação {fmt}")

    if args.backup:
        payload = session.export_backup(ctx, args.backup)
        fname = payload.filename.replace(":", "-")
        write_bytes(out_dir / fname, payload.content)
        written.append(fname)
        progress.done(f"Backup {args.backup}")

    if args.figures:
        fig_dir = ensure_dir(out_dir / "figures")
        frame = session.frame()
        save_bar_regiones(session.region_rollup(), str(fig_dir / "avanco_regioes.png"))
        save_bar_categorias(agregados.requested_by_category(frame), str(fig_dir / "solicitado_categorias.png"))
        written += ["figures/avanco_regioes.png", "figures/solicitado_categorias.png"]
        progress.done("Figuras")

    if args.summary:
        _print_summary(session, ctx)

    for notice in session.notices:
        print(f"[{notice.level}] {notice.message}", flush=True)

    session.logout(ctx)
    write_json(out_dir / "audit_log.json", [e.to_dict() for e in session.audit.entries()])
    trace.event("done", "corrida terminada", {
        "files": written, "elapsed": progress.summary(), "stages": progress.timings,
    })
    print(f"Listo en {progress.summary()}: {len(written)} archivos en {out_dir}", flush=True)
    return out_dir


def main():
    ap = argparse.ArgumentParser(description="Relatórios de demanda de materiais (filtros, rollups e exportação).")
    ap.add_argument("--configs", default="configs", help="Carpeta configs/ (global.yaml).")
    ap.add_argument("--data_dir", default=None, help="Carpeta del store (blobs JSON). Por defecto storage.data_dir.")
    ap.add_argument("--out", default="outputs", help="Carpeta de salida.")
    ap.add_argument("--format", default=None,
                    help=f"Formatos separados por coma: {', '.join([*FORMATS, *FORMAT_ALIASES])}.")
    ap.add_argument("--mode", default="input", choices=list(MODES), help="Modo de estado (input|admin).")
    ap.add_argument("--period", default="semestral",
                    help=f"Periodo de previsión ({'|'.join(PERIOD_MULTIPLIERS)}).")
    ap.add_argument("--scope", default=None, help="Comarca (requiere --pin).")
    ap.add_argument("--pin", default="", help="PIN de acceso a la comarca.")
    ap.add_argument("--text", default="", help="Búsqueda por material o comarca.")
    ap.add_argument("--category", default=ALL_CATEGORIES, help="Categoría (Todos = sin filtro).")
    ap.add_argument("--user", default="cli", help="Usuario para la bitácora.")
    ap.add_argument("--restore", default=None, help="Backup JSON que reemplaza el store.")
    ap.add_argument("--import_file", default=None, help="Planilha a contar (no se fusiona).")
    ap.add_argument("--backup", default=None, choices=["json", "csv"], help="Exporta backup completo.")
    ap.add_argument("--summary", action="store_true", help="Imprime KPIs y rollups.")
    ap.add_argument("--figures", action="store_true", help="Genera gráficos PNG.")
    args = ap.parse_args()
    try:
        run_export(args)
    except (ValueError, KeyError) as exc:
        raise SystemExit(f"Error: {exc}") from exc


if __name__ == "__main__":
    main()
