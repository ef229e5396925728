from __future__ import annotations

from pathlib import Path

from adapters.filesystem.json_utils import iter_json_lines
from domain.models import CommandEnvelope
from domain.ports.repositories import CommandSource


class JsonLinesCommandSource(CommandSource):
    """Reads recorded command envelopes, one JSON object per line."""

    def load(self, path: Path) -> list[CommandEnvelope]:
        return [CommandEnvelope.model_validate(record) for record in iter_json_lines(path)]
