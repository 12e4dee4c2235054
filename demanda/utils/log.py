from __future__ import annotations
from pathlib import Path
import json
from datetime import datetime, timezone

class TraceLog:
    def __init__(self, path: str | Path | None):
        self.path = Path(path) if path else None
        if self.path is not None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        self.events: list[dict] = []

    def event(self, step: str, message: str, stats: dict | None = None) -> None:
        rec = {
            "ts_utc": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "step": step,
            "message": message,
            "stats": stats or {},
        }
        self.events.append(rec)
        if self.path is None:
            return
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(json.dumps(rec, ensure_ascii=False) + "\n")
