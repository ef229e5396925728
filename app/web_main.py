from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, cast

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import ORJSONResponse, Response

from app.config import AppSettings, load_settings
from domain.models import CommandEnvelope
from domain.services.session_registry import StateMachineRegistry, UnknownCommandError
from domain.services.state_machine import StateMachine

logger = logging.getLogger(__name__)

SVG_MEDIA_TYPE = "image/svg+xml"


@dataclass(frozen=True)
class ViewerContext:
    settings: AppSettings
    registry: StateMachineRegistry
    # Commands are applied one at a time so no half-updated diagram is served.
    lock: threading.Lock


def create_app(settings: AppSettings) -> FastAPI:
    app = FastAPI(title=settings.viewer.title)
    registry = StateMachineRegistry(settings.viewer.layout.to_layout_config())
    app.state.context = ViewerContext(settings=settings, registry=registry, lock=threading.Lock())

    @app.get("/health")
    def health(context: ViewerContext = Depends(get_context)) -> ORJSONResponse:
        return ORJSONResponse({"status": "ok", "machines": len(context.registry)})

    @app.get("/api/machines")
    def api_machines(context: ViewerContext = Depends(get_context)) -> ORJSONResponse:
        with context.lock:
            items = [summarize_machine(machine) for machine in context.registry.machines()]
        return ORJSONResponse({"items": items})

    @app.post("/api/commands")
    def api_command(
        envelope: CommandEnvelope,
        context: ViewerContext = Depends(get_context),
    ) -> ORJSONResponse:
        with context.lock:
            try:
                result = context.registry.dispatch(envelope)
            except UnknownCommandError as exc:
                raise HTTPException(status_code=400, detail=str(exc)) from exc
            except ValueError as exc:
                logger.warning(
                    "Rejected %s command from %s: %s",
                    envelope.command.name,
                    envelope.client_id,
                    exc,
                )
                raise HTTPException(status_code=400, detail="Invalid command payload") from exc
            machine = summarize_machine(result.machine) if result.machine else None
            removed = [machine.key for machine in result.removed]
        follow_ups = [
            {"fsm": follow_up.fsm, "command": follow_up.name} for follow_up in result.follow_ups
        ]
        return ORJSONResponse(
            {
                "status": "ok",
                "command": envelope.command.name,
                "machine": machine,
                "follow_ups": follow_ups,
                "removed": removed,
            }
        )

    @app.get("/api/machines/{client_id}/{fsm}/svg")
    def api_machine_svg(
        client_id: str,
        fsm: str,
        context: ViewerContext = Depends(get_context),
    ) -> Response:
        with context.lock:
            machine = context.registry.get(client_id, fsm)
            if machine is None:
                raise HTTPException(status_code=404, detail="Machine not found")
            if machine.svg_doc is None:
                raise HTTPException(status_code=404, detail="Machine has no diagram yet")
            markup = machine.svg_markup
        return Response(content=markup, media_type=SVG_MEDIA_TYPE)

    @app.delete("/api/clients/{client_id}")
    def api_remove_client(
        client_id: str,
        context: ViewerContext = Depends(get_context),
    ) -> ORJSONResponse:
        with context.lock:
            removed = context.registry.remove_client(client_id)
        if not removed:
            raise HTTPException(status_code=404, detail="Client not found")
        return ORJSONResponse({"status": "ok", "removed": [machine.key for machine in removed]})

    return app


def get_context(request: Request) -> ViewerContext:
    return cast(ViewerContext, request.app.state.context)


def summarize_machine(machine: StateMachine) -> dict[str, Any]:
    summary: dict[str, Any] = {
        "client_id": machine.client_id,
        "fsm": machine.fsm_name,
        "key": machine.key,
        "has_diagram": machine.diagram is not None,
        "highlighted": [],
    }
    diagram = machine.diagram
    if diagram is not None:
        summary["width"] = diagram.total_width
        summary["height"] = diagram.total_height
        summary["highlighted"] = [
            match.node.id for match in diagram.iter_matches(lambda node: node.is_highlighted)
        ]
    return summary


app = create_app(load_settings())
