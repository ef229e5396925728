from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from domain.models import AnchorPoint, Point, anchor
from domain.services import svg
from domain.services.svg import Style, SvgElement

if TYPE_CHECKING:
    from domain.services.diagram import Diagram


class NodeKind(str, Enum):
    STATE = "state"
    COMPOSITE = "composite"
    HISTORY = "history"
    DEEP_HISTORY = "deep_history"
    HISTORY_DEEP_HISTORY = "history_deep_history"
    INITIAL = "initial"
    FINAL = "final"


class NodeVisual(str, Enum):
    NORMAL = "normal"
    HIGHLIGHTED = "highlighted"


COMPOSITE_KINDS = frozenset(
    {
        NodeKind.COMPOSITE,
        NodeKind.HISTORY,
        NodeKind.DEEP_HISTORY,
        NodeKind.HISTORY_DEEP_HISTORY,
    }
)
SPECIAL_KINDS = frozenset({NodeKind.INITIAL, NodeKind.FINAL})

SPECIAL_NODE_RADIUS = 2.0
FINAL_DOT_RADIUS = 1.3
HISTORY_BUBBLE_RADIUS = 2.0

STATE_ANCHORS_OUT: tuple[AnchorPoint, ...] = (
    anchor(0, -4, -1),
    anchor(10, 0, 0, -1),
    anchor(0, 4, 1),
    anchor(-10, 0, 0, 1),
)
STATE_ANCHORS_IN: tuple[AnchorPoint, ...] = (
    anchor(0, -4, 1),
    anchor(10, 0, 0, 1),
    anchor(0, 4, -1),
    anchor(-10, 0, 0, -1),
)
# Out/in sets of a node showing both bubbles; the bottom offsets keep arrows clear of them.
HISTORY_DEEP_HISTORY_ANCHORS_OUT: tuple[AnchorPoint, ...] = (
    anchor(0, -4, -1),
    anchor(10, 0, 0, -1),
    anchor(0, 4, 5),
    anchor(-10, 0, 0, 1),
)
HISTORY_DEEP_HISTORY_ANCHORS_IN: tuple[AnchorPoint, ...] = (
    anchor(0, -4, 1),
    anchor(10, 0, 0, 1),
    anchor(0, 4, 3),
    anchor(-10, 0, 0, -1),
)
LEFT_BUBBLE_ANCHORS_IN: tuple[AnchorPoint, ...] = (anchor(-6, 6),)
RIGHT_BUBBLE_ANCHORS_IN: tuple[AnchorPoint, ...] = (anchor(-1, 6),)
SPECIAL_ANCHORS: tuple[AnchorPoint, ...] = (
    anchor(0, -2),
    anchor(2, 0),
    anchor(0, 2),
    anchor(-2, 0),
)

_NORMAL_STYLES: dict[NodeKind, Style] = {
    NodeKind.INITIAL: svg.STATE_INITIAL_STYLE,
    NodeKind.FINAL: svg.STATE_FINAL_STYLE,
}
_HIGHLIGHTED_STYLES: dict[NodeKind, Style] = {
    NodeKind.INITIAL: svg.STATE_INITIAL_HIGHLIGHTED_STYLE,
    NodeKind.FINAL: svg.STATE_FINAL_HIGHLIGHTED_STYLE,
}


def style_for(kind: NodeKind, visual: NodeVisual) -> Style:
    if visual is NodeVisual.HIGHLIGHTED:
        return _HIGHLIGHTED_STYLES.get(kind, svg.STATE_HIGHLIGHTED_STYLE)
    return _NORMAL_STYLES.get(kind, svg.STATE_STYLE)


def node_style(node: Node) -> Style:
    return style_for(node.kind, node.visual)


def anchors_out(kind: NodeKind) -> tuple[AnchorPoint, ...]:
    if kind in SPECIAL_KINDS:
        return SPECIAL_ANCHORS
    if kind is NodeKind.HISTORY_DEEP_HISTORY:
        return HISTORY_DEEP_HISTORY_ANCHORS_OUT
    return STATE_ANCHORS_OUT


def anchors_in(kind: NodeKind, has_history: bool, has_deep_history: bool) -> tuple[AnchorPoint, ...]:
    """Incoming anchors for a connection carrying the given history flags.

    On a node with both bubbles the history bubble is checked before the
    deep-history one; a connection flagged with both lands on the history
    bubble.
    """
    if kind in SPECIAL_KINDS:
        return SPECIAL_ANCHORS
    if kind is NodeKind.HISTORY and has_history:
        return LEFT_BUBBLE_ANCHORS_IN
    if kind is NodeKind.DEEP_HISTORY and has_deep_history:
        return LEFT_BUBBLE_ANCHORS_IN
    if kind is NodeKind.HISTORY_DEEP_HISTORY:
        if has_history:
            return LEFT_BUBBLE_ANCHORS_IN
        if has_deep_history:
            return RIGHT_BUBBLE_ANCHORS_IN
        return HISTORY_DEEP_HISTORY_ANCHORS_IN
    return STATE_ANCHORS_IN


@dataclass(eq=False)
class Node:
    id: str
    name: str
    location: Point
    kind: NodeKind = NodeKind.STATE
    children: list[Diagram] = field(default_factory=list)
    visual: NodeVisual = NodeVisual.NORMAL
    element: SvgElement = field(init=False, repr=False)
    main_element: SvgElement = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.element = svg.group(f"{self.id}-group")
        self.main_element = self._build_main_element()
        self.element.add(self.main_element)
        self.element.add(self._build_decorations())

    @property
    def is_composite(self) -> bool:
        return self.kind in COMPOSITE_KINDS

    @property
    def is_highlighted(self) -> bool:
        return self.visual is NodeVisual.HIGHLIGHTED

    @property
    def anchors_out(self) -> tuple[AnchorPoint, ...]:
        return anchors_out(self.kind)

    def anchors_in(self, has_history: bool, has_deep_history: bool) -> tuple[AnchorPoint, ...]:
        return anchors_in(self.kind, has_history, has_deep_history)

    def highlight(self) -> None:
        self._apply_visual(NodeVisual.HIGHLIGHTED)

    def reset(self) -> None:
        self._apply_visual(NodeVisual.NORMAL)

    def _apply_visual(self, visual: NodeVisual) -> None:
        self.visual = visual
        svg.set_style(self.main_element, node_style(self))

    def _build_main_element(self) -> SvgElement:
        style = node_style(self)
        if self.kind in SPECIAL_KINDS:
            return svg.circle(self.location.x, self.location.y, SPECIAL_NODE_RADIUS, style, self.id)
        return svg.state_rect(self.location, style, self.id)

    def _build_decorations(self) -> list[SvgElement]:
        x, y = self.location.x, self.location.y
        if self.kind is NodeKind.INITIAL:
            return []
        if self.kind is NodeKind.FINAL:
            return [svg.circle(x, y, FINAL_DOT_RADIUS, svg.STATE_INITIAL_STYLE)]

        decorations = [svg.centered_text(self.name, x, y, svg.NORMAL_TEXT)]
        if not self.is_composite:
            return decorations

        decorations.extend(
            [
                svg.circle(x + 5, y + 2.8, 0.5, svg.SMALL_CIRCLE_STYLE),
                svg.circle(x + 7.5, y + 2.8, 0.5, svg.SMALL_CIRCLE_STYLE),
                svg.line(x + 5.5, y + 2.8, x + 7, y + 2.8, svg.LINE_STYLE),
            ]
        )
        if self.kind is NodeKind.HISTORY:
            decorations.extend(_bubble(x - 6, y, "H", svg.BIG_TEXT))
        elif self.kind is NodeKind.DEEP_HISTORY:
            decorations.extend(_bubble(x - 6, y, "Hd", svg.BIG_TEXT_CONDENSED))
        elif self.kind is NodeKind.HISTORY_DEEP_HISTORY:
            decorations.extend(_bubble(x - 6, y, "H", svg.BIG_TEXT))
            decorations.extend(_bubble(x - 1, y, "Hd", svg.BIG_TEXT_CONDENSED))
        return decorations


def _bubble(x: float, node_y: float, label: str, style: svg.TextStyle) -> list[SvgElement]:
    return [
        svg.circle(x, node_y + 4, HISTORY_BUBBLE_RADIUS, svg.HISTORY_STYLE),
        svg.centered_text(label, x, node_y + 4.4, style),
    ]
