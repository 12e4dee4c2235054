from __future__ import annotations
from datetime import datetime, timezone

def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")

def emission_stamp(ts: datetime | None = None) -> str:
    """Fecha y hora de emisión en formato dd/mm/aaaa às HH:MM:SS."""
    ts = ts or datetime.now()
    return f"{ts:%d/%m/%Y} às {ts:%H:%M:%S}"
