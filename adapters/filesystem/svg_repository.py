from __future__ import annotations

from pathlib import Path

from filelock import FileLock

from adapters.filesystem.json_utils import write_bytes_atomic
from domain.ports.repositories import SvgRepository

XML_DECLARATION = '<?xml version="1.0" encoding="utf-8"?>\n'


class FileSystemSvgRepository(SvgRepository):
    def save(self, markup: str, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        lock_path = path.with_suffix(f"{path.suffix}.lock")
        with FileLock(str(lock_path)):
            write_bytes_atomic(path, f"{XML_DECLARATION}{markup}\n".encode("utf-8"))

    def clear(self, directory: Path) -> int:
        if not directory.exists():
            return 0
        removed = 0
        for path in directory.iterdir():
            if not path.is_file():
                continue
            if path.suffix.lower() == ".svg" or path.name.endswith(".lock"):
                path.unlink()
                removed += 1
        return removed
