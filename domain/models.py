from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Set, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

COMMAND_SET_FSM = "set-fsm"
COMMAND_UPDATE_STATE = "update-state"
COMMAND_REMOVE_CLIENT = "remove-client"
COMMAND_GET_STATES = "get-states"
COMMAND_RECEIVED_FSM = "received-fsm"

Payload = Union[str, bytes, Mapping[str, Any]]


def _lower_first(key: str) -> str:
    return key[:1].lower() + key[1:]


class WireModel(BaseModel):
    """Base for decoded command payloads.

    Producers send camelCase or PascalCase keys, both are accepted.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    @model_validator(mode="before")
    @classmethod
    def normalize_key_case(cls, data: Any) -> Any:
        if isinstance(data, Mapping):
            return {
                _lower_first(key) if isinstance(key, str) else key: value
                for key, value in data.items()
            }
        return data


class TransitionInfo(WireModel):
    end_point_id: str = ""
    is_history: bool = False
    is_deep_history: bool = False
    is_to_final: bool = False


class StateInfo(WireModel):
    name: str = ""
    id: str = ""
    transitions: List[TransitionInfo] = Field(default_factory=list)
    children: List[FsmInfo] = Field(default_factory=list)
    is_initial: bool = False
    is_final: bool = False
    has_history: bool = False
    has_deep_history: bool = False

    @property
    def has_children(self) -> bool:
        return bool(self.children)

    def __str__(self) -> str:
        return self.name


class FsmInfo(WireModel):
    name: str = ""
    states: List[StateInfo] = Field(default_factory=list)

    @field_validator("states", mode="after")
    @classmethod
    def ensure_valid_states(cls, states: List[StateInfo]) -> List[StateInfo]:
        initial_count = sum(1 for state in states if state.is_initial)
        if initial_count != 1:
            msg = f"Expected exactly one initial state, found {initial_count}"
            raise ValueError(msg)
        final_count = sum(1 for state in states if state.is_final)
        if final_count > 1:
            msg = f"Expected at most one final state, found {final_count}"
            raise ValueError(msg)
        seen: Set[str] = set()
        for state in states:
            if state.id in seen:
                msg = f"Duplicate state id found: {state.id}"
                raise ValueError(msg)
            seen.add(state.id)
        return states

    @property
    def normal_states(self) -> List[StateInfo]:
        return [state for state in self.states if not state.is_initial and not state.is_final]

    @property
    def initial_state(self) -> StateInfo:
        return next(state for state in self.states if state.is_initial)

    @property
    def final_state(self) -> Optional[StateInfo]:
        return next((state for state in self.states if state.is_final), None)

    def __str__(self) -> str:
        return self.name


StateInfo.model_rebuild()
FsmInfo.model_rebuild()


class StateChangedInfo(WireModel):
    fsm: str = Field(
        default="",
        validation_alias=AliasChoices("fsm", "machineName", "machine_name"),
    )
    old_state_name: str = ""
    old_state_id: str = ""
    new_state_name: str = ""
    new_state_id: str = ""


class MachineCommand(WireModel):
    fsm: str = ""
    name: str = Field(..., min_length=1, validation_alias=AliasChoices("name", "command"))
    payload: Union[str, Dict[str, Any]] = ""


class CommandEnvelope(WireModel):
    client_id: str = Field(..., min_length=1)
    command: MachineCommand = Field(
        ..., validation_alias=AliasChoices("command", "machineCommand", "jasmCommand")
    )


def parse_fsm_info(payload: Payload) -> FsmInfo:
    if isinstance(payload, (str, bytes)):
        return FsmInfo.model_validate_json(payload)
    return FsmInfo.model_validate(payload)


def parse_state_changed(payload: Payload) -> StateChangedInfo:
    if isinstance(payload, (str, bytes)):
        return StateChangedInfo.model_validate_json(payload)
    return StateChangedInfo.model_validate(payload)


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class AnchorPoint:
    """A base point plus a small offset.

    ``x``/``y`` include the offset; ``point`` is the base alone.
    """

    point: Point
    offset: Point = Point(0.0, 0.0)

    @property
    def x(self) -> float:
        return self.point.x + self.offset.x

    @property
    def y(self) -> float:
        return self.point.y + self.offset.y

    def translated(self, location: Point) -> AnchorPoint:
        return AnchorPoint(Point(location.x + self.point.x, location.y + self.point.y), self.offset)


def anchor(x: float, y: float, offset_x: float = 0.0, offset_y: float = 0.0) -> AnchorPoint:
    return AnchorPoint(Point(x, y), Point(offset_x, offset_y))
