"""
Reloj y avance de la corrida de exportación
"""
from __future__ import annotations
import math
from time import perf_counter


def format_seconds(seconds: float | None) -> str:
    """Duración legible: `850ms`, `12s`, `3m 5s`, `1h 2m 5s`."""
    if seconds is None or not math.isfinite(seconds):
        return "N/A"
    seconds = max(0.0, seconds)
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    minutes, secs = divmod(int(round(seconds)), 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}h {minutes}m {secs}s"
    return f"{minutes}m {secs}s" if minutes else f"{secs}s"


class ProgressPrinter:
    """Etapas de la corrida; guarda cuánto tardó cada una en `timings`."""

    def __init__(self, stages: list[str]):
        self.stages = stages
        self.completed = 0
        self.start = perf_counter()
        self._last = self.start
        self.timings: dict[str, str] = {}

    def announce(self, scope: str):
        print(f"Relatório {scope}: {len(self.stages)} etapas", flush=True)
        for idx, label in enumerate(self.stages, start=1):
            print(f"  {idx:02d}. {label}", flush=True)
        print("-" * 40, flush=True)

    def done(self, label: str):
        now = perf_counter()
        self.timings[label] = format_seconds(now - self._last)
        self._last = now
        self.completed += 1
        total = len(self.stages) or 1
        print(
            f"[{self.completed:02d}/{len(self.stages):02d}] {label} "
            f"({100 * self.completed / total:.0f}% · {self.timings[label]}, total {self.summary()})",
            flush=True,
        )

    def summary(self) -> str:
        return format_seconds(perf_counter() - self.start)
