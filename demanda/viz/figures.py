from __future__ import annotations
import pandas as pd
import matplotlib.pyplot as plt
import matplotlib as mpl

mpl.rcParams['font.family'] = 'sans-serif'
mpl.rcParams['font.sans-serif'] = ['Arial', 'DejaVu Sans', 'Helvetica']
mpl.rcParams['font.size'] = 10
mpl.rcParams['axes.labelsize'] = 11
mpl.rcParams['axes.titlesize'] = 13
mpl.rcParams['axes.titleweight'] = 'bold'
mpl.rcParams['xtick.labelsize'] = 9
mpl.rcParams['ytick.labelsize'] = 9
mpl.rcParams['figure.facecolor'] = 'white'
mpl.rcParams['axes.facecolor'] = '#f8f9fa'
mpl.rcParams['axes.edgecolor'] = '#dee2e6'
mpl.rcParams['axes.linewidth'] = 1.2
mpl.rcParams['grid.color'] = '#dee2e6'
mpl.rcParams['grid.alpha'] = 0.5

# Paleta del dashboard
COLOR_PALETTE = [
    '#4f46e5',  # Índigo
    '#059669',  # Verde esmeralda
    '#f59e0b',  # Ámbar
    '#0ea5e9',  # Celeste
    '#e11d48',  # Rosa
    '#64748b',  # Pizarra
]

mpl.rcParams['axes.prop_cycle'] = mpl.cycler(color=COLOR_PALETTE)


def _fmt_int(value) -> str:
    try:
        return f"{int(float(value)):,}".replace(",", ".")
    except (TypeError, ValueError):
        return "N/A"


def save_bar_regiones(rollup: pd.DataFrame, outpath: str, title: str = "Avanço por região"):
    """Barras horizontales de % de avance por región (o comarca)."""
    key = rollup.columns[0] if len(rollup.columns) else "region"
    fig, ax = plt.subplots(figsize=(9, max(3.5, 0.6 * len(rollup) + 1.5)))
    fig.patch.set_facecolor('white')
    if rollup.empty:
        ax.text(0.5, 0.5, "Sem dados", ha="center", va="center")
        ax.axis("off")
    else:
        data = rollup.reset_index(drop=True)
        positions = range(len(data))
        pct = pd.to_numeric(data["completion_pct"], errors="coerce").fillna(0)
        ax.barh(positions, [100] * len(data), color='#e2e8f0', height=0.55)
        bars = ax.barh(positions, pct, color=COLOR_PALETTE[1], height=0.55)
        ax.set_yticks(list(positions))
        ax.set_yticklabels(data[key].astype(str), fontweight='500')
        ax.invert_yaxis()
        ax.set_xlim(0, 110)
        ax.set_xlabel("% concluído", fontweight='600')
        ax.spines['top'].set_visible(False)
        ax.spines['right'].set_visible(False)
        for bar, value, total, pending in zip(
            bars, pct, data["total_items"], data["pending_count"], strict=False
        ):
            y = bar.get_y() + bar.get_height() / 2
            ax.text(101, y, f"{int(value)}% ({_fmt_int(pending)}/{_fmt_int(total)} pend.)",
                    va="center", fontsize=8, fontweight='600')
    ax.set_title(title, fontweight='bold', color='#2d3748')
    fig.tight_layout()
    fig.savefig(outpath, dpi=150, bbox_inches='tight', facecolor='white')
    plt.close(fig)


def save_bar_categorias(req: pd.DataFrame, outpath: str, title: str = "Solicitado por categoria"):
    fig, ax = plt.subplots(figsize=(10, 5.5))
    fig.patch.set_facecolor('white')
    if req.empty or float(pd.to_numeric(req["requested_qty"], errors="coerce").fillna(0).sum()) == 0:
        ax.text(0.5, 0.5, "Sem solicitações registradas", ha="center", va="center")
    else:
        data = req.sort_values("requested_qty", ascending=False).reset_index(drop=True)
        positions = range(len(data))
        bars = ax.bar(positions, data["requested_qty"], color=COLOR_PALETTE[0],
                      edgecolor='white', linewidth=1.5, alpha=0.85)
        ax.set_xticks(list(positions))
        ax.set_xticklabels(data["category"], rotation=30, ha="right", fontweight='500')
        ax.set_ylabel("Qtd. solicitada", fontweight='600')
        ymax = max(float(data["requested_qty"].max()), 1.0)
        ax.set_ylim(0, ymax * 1.2)
        ax.spines['top'].set_visible(False)
        ax.spines['right'].set_visible(False)
        for bar, value in zip(bars, data["requested_qty"], strict=False):
            x = bar.get_x() + bar.get_width() / 2
            ax.text(x, bar.get_height() + ymax * 0.02, _fmt_int(value),
                    ha="center", va="bottom", fontsize=8, fontweight='600')
    ax.set_title(title, fontweight='bold', color='#2d3748')
    fig.tight_layout()
    fig.savefig(outpath, dpi=150, bbox_inches='tight', facecolor='white')
    plt.close(fig)
