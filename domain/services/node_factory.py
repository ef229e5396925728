from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

from domain.models import Point, StateInfo
from domain.services.nodes import Node, NodeKind

if TYPE_CHECKING:
    from domain.services.diagram import Diagram

StatePredicate = Callable[[StateInfo], bool]

# Checked in order; the first matching predicate decides the node kind.
_KIND_RULES: list[tuple[StatePredicate, NodeKind]] = [
    (lambda state: state.is_initial, NodeKind.INITIAL),
    (lambda state: state.is_final, NodeKind.FINAL),
    (
        lambda state: state.has_children and state.has_history and state.has_deep_history,
        NodeKind.HISTORY_DEEP_HISTORY,
    ),
    (lambda state: state.has_children and state.has_history, NodeKind.HISTORY),
    (lambda state: state.has_children and state.has_deep_history, NodeKind.DEEP_HISTORY),
    (lambda state: state.has_children, NodeKind.COMPOSITE),
]


def node_kind_for(state: StateInfo) -> NodeKind:
    for predicate, kind in _KIND_RULES:
        if predicate(state):
            return kind
    return NodeKind.STATE


def create_node(
    state: StateInfo,
    location: Point,
    children: Sequence[Diagram] = (),
) -> Node:
    kind = node_kind_for(state)
    if kind in (NodeKind.INITIAL, NodeKind.FINAL):
        return Node(id=state.id, name="", location=location, kind=kind)
    return Node(
        id=state.id,
        name=state.name,
        location=location,
        kind=kind,
        children=list(children) if kind is not NodeKind.STATE else [],
    )
