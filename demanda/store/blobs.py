"""
Almacenamiento clave-valor de snapshots JSON
"""
from __future__ import annotations
from pathlib import Path
import json

from demanda.utils.io import ensure_dir, write_json


class MemoryBlobStore:
    """Blobs en memoria; útil para pruebas y sesiones efímeras."""

    def __init__(self, initial: dict | None = None):
        self._blobs: dict[str, str] = {}
        for name, obj in (initial or {}).items():
            self.set(name, obj)

    def get(self, name: str):
        raw = self._blobs.get(name)
        return None if raw is None else json.loads(raw)

    def set(self, name: str, obj) -> None:
        self._blobs[name] = json.dumps(obj, ensure_ascii=False)

    def clear(self, name: str) -> None:
        self._blobs.pop(name, None)


class DirectoryBlobStore:
    """Un archivo `<name>.json` por blob dentro de `root`."""

    def __init__(self, root: str | Path):
        self.root = ensure_dir(root)

    def _path(self, name: str) -> Path:
        return self.root / f"{name}.json"

    def get(self, name: str):
        path = self._path(name)
        if not path.exists():
            return None
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)

    def set(self, name: str, obj) -> None:
        tmp = self._path(name).with_suffix(".json.tmp")
        write_json(tmp, obj)
        tmp.replace(self._path(name))

    def clear(self, name: str) -> None:
        path = self._path(name)
        if path.exists():
            path.unlink()
