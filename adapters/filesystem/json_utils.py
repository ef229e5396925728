from __future__ import annotations

from pathlib import Path
from typing import Any

import orjson


def _ensure_object(record: Any, location: str) -> dict[str, Any]:
    if not isinstance(record, dict):
        msg = f"{location}: expected a JSON object"
        raise ValueError(msg)
    return record


def load_json(path: Path) -> dict[str, Any]:
    return _ensure_object(orjson.loads(path.read_bytes()), str(path))


def write_bytes_atomic(path: Path, content: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(f"{path.suffix}.tmp")
    tmp_path.write_bytes(content)
    tmp_path.replace(path)


def iter_json_lines(path: Path) -> list[dict[str, Any]]:
    """Objects of a JSON Lines file; blank lines are skipped."""
    lines = path.read_text(encoding="utf-8").splitlines()
    return [
        _ensure_object(orjson.loads(line), f"{path}:{line_no}")
        for line_no, line in enumerate(lines, start=1)
        if line.strip()
    ]
