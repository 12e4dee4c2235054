from __future__ import annotations
from dataclasses import dataclass, field, asdict

from demanda.etl.records import generate_id
from demanda.utils.dates import now_iso

LOGS_BLOB = "demand_app_logs"


@dataclass(frozen=True)
class AuditEntry:
    user: str
    action: str
    details: str
    timestamp: str = field(default_factory=now_iso)
    id: str = field(default_factory=generate_id)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "AuditEntry":
        return cls(
            user=str(data.get("user", "")),
            action=str(data.get("action", "")),
            details=str(data.get("details", "")),
            timestamp=str(data.get("timestamp") or now_iso()),
            id=str(data.get("id") or generate_id()),
        )


class AuditLog:
    """Bitácora append-only, la entrada más reciente primero."""

    def __init__(self, blobs=None, blob_name: str = LOGS_BLOB):
        self.blobs = blobs
        self.blob_name = blob_name
        self._entries: list[AuditEntry] = []
        if blobs is not None:
            stored = blobs.get(blob_name) or []
            self._entries = [AuditEntry.from_dict(e) for e in stored if isinstance(e, dict)]

    def record(self, user: str, action: str, details: str) -> AuditEntry:
        entry = AuditEntry(user=user or "", action=action, details=details)
        self._entries.insert(0, entry)
        if self.blobs is not None:
            self.blobs.set(self.blob_name, [e.to_dict() for e in self._entries])
        return entry

    def entries(self) -> list[AuditEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
