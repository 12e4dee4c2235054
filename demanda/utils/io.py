from __future__ import annotations
from pathlib import Path
import json


def decode_text(raw: bytes) -> str:
    for enc in ("utf-8-sig", "utf-8", "latin-1"):
        try:
            return raw.decode(enc)
        except UnicodeDecodeError:
            continue
    return raw.decode("latin-1", errors="ignore")


def read_text_safely(path: str | Path) -> str:
    """
    Lee un archivo de texto probando varios encodings.

    Args:
        path: Ruta al archivo

    Returns:
        Contenido decodificado (utf-8, utf-8 con BOM o latin-1)
    """
    with open(path, "rb") as fh:
        return decode_text(fh.read())


def ensure_dir(path: str | Path) -> Path:
    p = Path(path)
    p.mkdir(parents=True, exist_ok=True)
    return p

def write_json(path: str | Path, obj) -> None:
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(obj, f, ensure_ascii=False, indent=2)

def write_bytes(path: str | Path, content: bytes) -> Path:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_bytes(content)
    return p
