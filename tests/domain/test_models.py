from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from domain.models import (
    CommandEnvelope,
    FsmInfo,
    Point,
    anchor,
    parse_fsm_info,
    parse_state_changed,
)
from tests.helpers.fsm_fixtures import fsm, simple_machine, state, transition


def test_fsm_info_accepts_camel_case_payload() -> None:
    info = parse_fsm_info(json.dumps(simple_machine()))

    assert info.name == "Door"
    assert [item.id for item in info.normal_states] == ["a", "b"]
    assert info.initial_state.id == "i"
    assert info.final_state is not None and info.final_state.id == "f"
    assert info.states[2].transitions[0].is_to_final is True


def test_fsm_info_accepts_pascal_case_payload() -> None:
    payload = {
        "Name": "Pascal",
        "States": [
            {"Name": "Start", "Id": "s", "IsInitial": True, "Transitions": [{"EndPointId": "x"}]},
            {"Name": "X", "Id": "x", "HasHistory": True},
        ],
    }

    info = FsmInfo.model_validate(payload)

    assert info.name == "Pascal"
    assert info.initial_state.transitions[0].end_point_id == "x"
    assert info.states[1].has_history is True


def test_fsm_info_without_final_state() -> None:
    info = FsmInfo.model_validate(fsm("NoFinal", state("i", isInitial=True), state("a")))

    assert info.final_state is None
    assert len(info.normal_states) == 1


def test_fsm_info_parses_nested_children() -> None:
    child = fsm("Inner", state("ci", isInitial=True), state("c1"))
    info = FsmInfo.model_validate(
        fsm("Outer", state("i", isInitial=True), state("c", children=[child]))
    )

    composite = info.states[1]
    assert composite.has_children is True
    assert composite.children[0].name == "Inner"
    assert composite.children[0].initial_state.id == "ci"


@pytest.mark.parametrize(
    "states",
    [
        [state("a"), state("b")],
        [state("i", isInitial=True), state("j", isInitial=True)],
    ],
)
def test_fsm_info_requires_exactly_one_initial_state(states: list[dict[str, object]]) -> None:
    with pytest.raises(ValidationError, match="initial"):
        FsmInfo.model_validate(fsm("Broken", *states))


def test_fsm_info_rejects_two_final_states() -> None:
    with pytest.raises(ValidationError, match="final"):
        FsmInfo.model_validate(
            fsm(
                "Broken",
                state("i", isInitial=True),
                state("f1", isFinal=True),
                state("f2", isFinal=True),
            )
        )


def test_fsm_info_rejects_duplicate_ids() -> None:
    with pytest.raises(ValidationError, match="Duplicate state id"):
        FsmInfo.model_validate(fsm("Broken", state("i", isInitial=True), state("a"), state("a")))


def test_parse_fsm_info_rejects_malformed_json() -> None:
    with pytest.raises(ValueError):
        parse_fsm_info("{not json")


def test_state_changed_accepts_machine_name_alias() -> None:
    info = parse_state_changed(
        {
            "MachineName": "Door",
            "OldStateName": "A",
            "OldStateId": "a",
            "NewStateName": "B",
            "NewStateId": "b",
        }
    )

    assert info.fsm == "Door"
    assert info.old_state_id == "a"
    assert info.new_state_name == "B"


def test_command_envelope_accepts_legacy_keys() -> None:
    envelope = CommandEnvelope.model_validate(
        {
            "ClientId": "client-1",
            "JasmCommand": {"Fsm": "Door", "Command": "set-fsm", "Payload": "{}"},
        }
    )

    assert envelope.client_id == "client-1"
    assert envelope.command.fsm == "Door"
    assert envelope.command.name == "set-fsm"
    assert envelope.command.payload == "{}"


def test_command_envelope_requires_client_id() -> None:
    with pytest.raises(ValidationError):
        CommandEnvelope.model_validate({"clientId": "", "command": {"command": "set-fsm"}})


def test_anchor_point_offsets_and_translation() -> None:
    item = anchor(0, -4, -1)

    moved = item.translated(Point(28, 20))

    assert (item.x, item.y) == (-1, -4)
    assert moved.point == Point(28, 16)
    assert (moved.x, moved.y) == (27, 16)


def test_transition_defaults() -> None:
    info = FsmInfo.model_validate(
        fsm("T", state("i", isInitial=True, transitions=[transition("a")]), state("a"))
    )

    item = info.initial_state.transitions[0]
    assert (item.is_history, item.is_deep_history, item.is_to_final) == (False, False, False)


def test_command_payload_accepts_text_or_object() -> None:
    as_text = CommandEnvelope.model_validate(
        {"clientId": "c1", "command": {"command": "set-fsm", "payload": '{"name": "Door"}'}}
    )
    as_object = CommandEnvelope.model_validate(
        {"clientId": "c1", "command": {"command": "set-fsm", "payload": {"name": "Door"}}}
    )

    assert as_text.command.payload == '{"name": "Door"}'
    assert as_object.command.payload == {"name": "Door"}
