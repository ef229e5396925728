from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from domain.models import CommandEnvelope, FsmInfo


class MachineRepository(Protocol):
    def load_all_with_paths(self, directory: Path) -> Sequence[tuple[Path, FsmInfo]]: ...

    def load_by_path(self, path: Path) -> FsmInfo: ...


class SvgRepository(Protocol):
    def save(self, markup: str, path: Path) -> None: ...

    def clear(self, directory: Path) -> int: ...


class CommandSource(Protocol):
    def load(self, path: Path) -> Sequence[CommandEnvelope]: ...
