from __future__ import annotations

import re
from pathlib import Path
from typing import Optional

import typer
import uvicorn
from rich.console import Console

from adapters.filesystem.command_log import JsonLinesCommandSource
from adapters.filesystem.json_utils import load_json
from adapters.filesystem.machine_repository import FileSystemMachineRepository
from adapters.filesystem.svg_repository import FileSystemSvgRepository
from app.config import configure_logging, load_settings
from domain.models import FsmInfo, StateChangedInfo
from domain.services.diagram import Diagram
from domain.services.session_registry import StateMachineRegistry
from domain.services.svg import to_xml

app = typer.Typer(no_args_is_help=True)
console = Console()

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def _safe_stem(value: str) -> str:
    return _UNSAFE_FILENAME_CHARS.sub("_", value).strip("_") or "machine"


def _clean_output(svg_repo: FileSystemSvgRepository, target_dir: Path, clean: bool) -> None:
    if not clean:
        return
    removed = svg_repo.clear(target_dir)
    console.print(f"[yellow]Removed[/] {removed} file(s) from {target_dir}")


@app.command("render")
def render(
    input_dir: Path = typer.Option(
        Path("data/machines"), help="Directory with machine description JSON files.",
    ),
    output_dir: Optional[Path] = typer.Option(
        None, help="Directory to write SVG files (defaults to viewer.output_dir).",
    ),
    clean: bool = typer.Option(
        False, help="Remove existing SVG files from the output directory first.",
    ),
    config: Optional[Path] = typer.Option(None, help="Optional YAML config file."),
) -> None:
    settings = load_settings(config)
    configure_logging(settings)
    target_dir = output_dir or settings.viewer.output_dir
    layout = settings.viewer.layout.to_layout_config()
    machine_repo = FileSystemMachineRepository()
    svg_repo = FileSystemSvgRepository()

    pairs = machine_repo.load_all_with_paths(input_dir)
    if not pairs:
        console.print(f"[yellow]No machine files found in {input_dir}[/]")
        raise typer.Exit(code=0)

    _clean_output(svg_repo, target_dir, clean)
    for path, fsm in pairs:
        diagram = Diagram(fsm, layout)
        target_path = target_dir / f"{path.stem}.svg"
        svg_repo.save(to_xml(diagram.svg_document()), target_path)
        console.print(f"[green]Wrote[/] {target_path}")


@app.command("replay")
def replay(
    commands_path: Path = typer.Argument(..., help="JSON Lines file with command envelopes."),
    output_dir: Optional[Path] = typer.Option(
        None, help="Directory to write SVG files (defaults to viewer.output_dir).",
    ),
    clean: bool = typer.Option(
        False, help="Remove existing SVG files from the output directory first.",
    ),
    config: Optional[Path] = typer.Option(None, help="Optional YAML config file."),
) -> None:
    settings = load_settings(config)
    configure_logging(settings)
    target_dir = output_dir or settings.viewer.output_dir
    registry = StateMachineRegistry(settings.viewer.layout.to_layout_config())

    try:
        envelopes = JsonLinesCommandSource().load(commands_path)
        for envelope in envelopes:
            registry.dispatch(envelope)
    except (OSError, ValueError) as exc:
        console.print(f"[red]Replay failed:[/] {exc}")
        raise typer.Exit(code=1) from exc

    svg_repo = FileSystemSvgRepository()
    _clean_output(svg_repo, target_dir, clean)
    written = 0
    for machine in registry.machines():
        if machine.svg_doc is None:
            continue
        stem = f"{_safe_stem(machine.client_id)}__{_safe_stem(machine.fsm_name)}"
        target_path = target_dir / f"{stem}.svg"
        svg_repo.save(machine.svg_markup, target_path)
        console.print(f"[green]Wrote[/] {target_path}")
        written += 1
    if not written:
        console.print("[yellow]No machine was set by the replayed commands[/]")


@app.command("validate")
def validate(
    input_path: Path = typer.Argument(..., help="Machine description or state change file."),
) -> None:
    if not input_path.exists():
        console.print(f"[red]File not found:[/] {input_path}")
        raise typer.Exit(code=1)

    try:
        data = load_json(input_path)
        if "states" in data or "States" in data:
            fsm = FsmInfo.model_validate(data)
            console.print(
                f"[green]Valid machine description[/] ({len(fsm.states)} states): {input_path}"
            )
        else:
            StateChangedInfo.model_validate(data)
            console.print(f"[green]Valid state change:[/] {input_path}")
    except ValueError as exc:
        console.print(f"[red]Validation failed:[/] {exc}")
        raise typer.Exit(code=1) from exc


@app.command("serve")
def serve(
    host: str = typer.Option("127.0.0.1", help="Interface to bind."),
    port: int = typer.Option(8080, help="Port to listen on."),
) -> None:
    uvicorn.run("app.web_main:app", host=host, port=port)


if __name__ == "__main__":
    app()
