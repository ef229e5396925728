from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field

from domain.models import FsmInfo, Point, StateInfo, TransitionInfo
from domain.services import svg
from domain.services.connections import select_connection
from domain.services.node_factory import create_node
from domain.services.nodes import Node
from domain.services.svg import SvgElement

logger = logging.getLogger(__name__)

NodePredicate = Callable[[Node], bool]


@dataclass(frozen=True)
class LayoutConfig:
    border: float = 20.0
    state_space: float = 16.0
    special_node_offset: float = 8.0
    min_distance: float = 4.0


@dataclass(frozen=True)
class NodeMatch:
    diagram: Diagram
    node: Node


@dataclass(frozen=True)
class NestedRow:
    elements: list[SvgElement] = field(default_factory=list)
    left: float = 0.0
    height: float = 0.0

    def combine(self, element: SvgElement, width: float, height: float) -> NestedRow:
        return NestedRow(
            elements=[*self.elements, element],
            left=self.left + width,
            height=max(self.height, height),
        )


class Diagram:
    """Circular layout of one state machine plus its nested child machines.

    Normal states sit on a construction circle, the initial node in the top
    left corner and the final node in a bottom corner. Child machines of
    composite states are laid out in a single row below the circle.
    """

    def __init__(self, fsm: FsmInfo, config: LayoutConfig | None = None) -> None:
        self.fsm = fsm
        self.config = config or LayoutConfig()
        normal_count = len(fsm.normal_states)
        self.radius = max(normal_count - 1, 0) / 2 * self.config.state_space
        self.mid_point = Point(self.radius + self.config.border, self.radius + self.config.border)
        self.width = 2 * self.radius + 2 * self.config.border
        self.height = 2 * self.radius + 2 * self.config.border

        self._nodes_by_id: dict[str, Node] = {}
        self._states_by_id: dict[str, StateInfo] = {}
        self._order: list[str] = []

        self.base_diagram = self._build_base_diagram()
        self.total_width = self._calculate_total_width()
        self.total_height = self._calculate_total_height()

    @property
    def nodes(self) -> list[Node]:
        return [self._nodes_by_id[node_id] for node_id in self._order]

    @property
    def composite_nodes(self) -> list[Node]:
        return [node for node in self.nodes if node.is_composite]

    @property
    def child_diagrams(self) -> list[Diagram]:
        return [child for node in self.composite_nodes for child in node.children]

    def node(self, node_id: str) -> Node | None:
        return self._nodes_by_id.get(node_id)

    def svg_document(self) -> SvgElement:
        return self.svg_graph(svg.document(self.total_width, self.total_height))

    def svg_graph(self, parent: SvgElement) -> SvgElement:
        return parent.add(self.base_diagram, self._build_nested())

    def iter_matches(self, predicate: NodePredicate) -> Iterator[NodeMatch]:
        """Nodes of this diagram first, then child diagrams depth-first."""
        for node in self.nodes:
            if predicate(node):
                yield NodeMatch(self, node)
        for child in self.child_diagrams:
            yield from child.iter_matches(predicate)

    def find_node(self, node_id: str) -> NodeMatch | None:
        return next(self.iter_matches(lambda node: node.id == node_id), None)

    def reset_all(self) -> None:
        for node in self.nodes:
            node.reset()

    def _build_base_diagram(self) -> SvgElement:
        base = svg.group()
        states = self._register_initial_node() + self._register_normal_nodes()
        states += self._register_final_node()
        base.add(states, self._build_transitions())
        return base

    def _register_node(self, state: StateInfo, location: Point) -> SvgElement:
        children = [Diagram(child, self.config) for child in state.children]
        node = create_node(state, location, children)
        self._nodes_by_id[state.id] = node
        self._states_by_id[state.id] = state
        self._order.append(state.id)
        return node.element

    def _register_initial_node(self) -> list[SvgElement]:
        offset = self.config.special_node_offset
        return [self._register_node(self.fsm.initial_state, Point(offset, offset))]

    def _register_normal_nodes(self) -> list[SvgElement]:
        normal_states = self.fsm.normal_states
        if not normal_states:
            return []
        step = 2 * math.pi / len(normal_states)
        return [
            self._register_node(state, self._node_position(index * step))
            for index, state in enumerate(normal_states)
        ]

    def _register_final_node(self) -> list[SvgElement]:
        state = self.fsm.final_state
        if state is None:
            return []
        offset = self.config.special_node_offset
        right = self.mid_point.x + self.radius + self.config.border - offset
        owner = next(
            (
                candidate
                for candidate in self.fsm.normal_states
                if any(transition.is_to_final for transition in candidate.transitions)
            ),
            None,
        )
        if owner is None:
            logger.debug("No transition to final state in %s, placing it right", self.fsm.name)
            x = right
        else:
            x = offset if self._nodes_by_id[owner.id].location.x < self.mid_point.x else right
        y = self.mid_point.y + self.radius + self.config.border - offset
        return [self._register_node(state, Point(x, y))]

    def _node_position(self, angle: float) -> Point:
        return Point(
            self.mid_point.x + self.radius * math.sin(angle),
            self.mid_point.y - self.radius * math.cos(angle),
        )

    def _build_transitions(self) -> list[SvgElement]:
        connectors: list[SvgElement] = []
        for node_id in self._order:
            start = self._nodes_by_id[node_id]
            for transition in self._states_by_id[node_id].transitions:
                end = self._nodes_by_id.get(transition.end_point_id)
                if end is None:
                    logger.debug(
                        "Skipping transition %s -> %s in %s: unknown target",
                        node_id,
                        transition.end_point_id,
                        self.fsm.name,
                    )
                    continue
                connectors.append(self._build_transition(start, transition, end))
        return connectors

    def _build_transition(self, start: Node, transition: TransitionInfo, end: Node) -> SvgElement:
        connection = select_connection(
            start,
            end,
            transition.is_history,
            transition.is_deep_history,
            self.mid_point,
            self.radius,
            self.config.min_distance,
        )
        return svg.line(
            connection.start.x,
            connection.start.y,
            connection.end.x,
            connection.end.y,
            svg.TRANSITION_STYLE,
        )

    def _build_nested(self) -> list[SvgElement]:
        row = NestedRow()
        for node in self.composite_nodes:
            row = self._nest_children(row, node, self.height)
        return row.elements

    @staticmethod
    def _nest_children(row: NestedRow, node: Node, top: float) -> NestedRow:
        inner = NestedRow(left=row.left)
        for child in node.children:
            frame = child.svg_graph(svg.group(class_name="fsm", left=inner.left, top=top))
            inner = inner.combine(frame, child.total_width, child.total_height)

        panel = [
            svg.rect(
                row.left + 2,
                top + 2,
                inner.left - row.left - 4,
                inner.height - 4,
                5,
                svg.BACKGROUND_STYLE,
            ),
            svg.text(node.name, row.left + 18, top + 6, svg.BIG_TEXT),
        ]
        return NestedRow(
            elements=[*row.elements, *panel, *inner.elements],
            left=inner.left,
            height=max(row.height, inner.height),
        )

    def _calculate_total_width(self) -> float:
        return max(self.width, sum(child.total_width for child in self.child_diagrams))

    def _calculate_total_height(self) -> float:
        return self.height + max(
            (child.total_height for child in self.child_diagrams), default=0.0
        )
