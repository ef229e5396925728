from __future__ import annotations

import logging
from dataclasses import dataclass, field

from domain.models import (
    COMMAND_GET_STATES,
    COMMAND_RECEIVED_FSM,
    COMMAND_REMOVE_CLIENT,
    COMMAND_SET_FSM,
    COMMAND_UPDATE_STATE,
    CommandEnvelope,
    MachineCommand,
)
from domain.services.diagram import LayoutConfig
from domain.services.state_machine import StateMachine

logger = logging.getLogger(__name__)


class UnknownCommandError(ValueError):
    def __init__(self, command: str) -> None:
        super().__init__(f"Unknown command: {command}")
        self.command = command


@dataclass(frozen=True)
class DispatchResult:
    machine: StateMachine | None
    follow_ups: list[MachineCommand] = field(default_factory=list)
    removed: list[StateMachine] = field(default_factory=list)


class StateMachineRegistry:
    """Owns one ``StateMachine`` per (client id, machine name) pair."""

    def __init__(self, layout_config: LayoutConfig | None = None) -> None:
        self.layout_config = layout_config
        self._machines: dict[tuple[str, str], StateMachine] = {}

    def __len__(self) -> int:
        return len(self._machines)

    def machines(self) -> list[StateMachine]:
        return list(self._machines.values())

    def get(self, client_id: str, fsm_name: str) -> StateMachine | None:
        return self._machines.get((client_id, fsm_name))

    def get_or_create(self, client_id: str, fsm_name: str) -> StateMachine:
        key = (client_id, fsm_name)
        machine = self._machines.get(key)
        if machine is None:
            machine = StateMachine(client_id, fsm_name, self.layout_config)
            self._machines[key] = machine
        return machine

    def remove_client(self, client_id: str) -> list[StateMachine]:
        removed = [
            machine for (owner, _), machine in self._machines.items() if owner == client_id
        ]
        for machine in removed:
            del self._machines[(machine.client_id, machine.fsm_name)]
        if removed:
            logger.info("Removed %d machine(s) of client %s", len(removed), client_id)
        return removed

    def dispatch(self, envelope: CommandEnvelope) -> DispatchResult:
        command = envelope.command
        if command.name == COMMAND_SET_FSM:
            machine = self.get_or_create(envelope.client_id, command.fsm)
            machine.on_set_machine(command.payload)
            follow_ups = [
                MachineCommand(fsm=command.fsm, name=COMMAND_RECEIVED_FSM),
                MachineCommand(fsm=command.fsm, name=COMMAND_GET_STATES),
            ]
            return DispatchResult(machine=machine, follow_ups=follow_ups)
        if command.name == COMMAND_UPDATE_STATE:
            machine = self.get_or_create(envelope.client_id, command.fsm)
            machine.on_state_changed(command.payload)
            return DispatchResult(machine=machine)
        if command.name == COMMAND_REMOVE_CLIENT:
            return DispatchResult(machine=None, removed=self.remove_client(envelope.client_id))
        raise UnknownCommandError(command.name)
