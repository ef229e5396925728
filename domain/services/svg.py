from __future__ import annotations

import xml.etree.ElementTree as ET
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from domain.models import Point

SVG_NAMESPACE = "http://www.w3.org/2000/svg"
ARROW_MARKER_ID = "ArrowWideRounded"
FONT_FAMILY = "Arial,sans-serif"

STATE_WIDTH = 20.0
STATE_HEIGHT = 8.0
STATE_CORNER_RADIUS = 2.0


def fmt_number(value: float) -> str:
    text = f"{value:.3f}".rstrip("0").rstrip(".")
    return "0" if text in {"", "-0"} else text


@dataclass(frozen=True)
class Style:
    stroke_width: float
    fill: str
    stroke: str

    def __str__(self) -> str:
        return f"stroke-width:{fmt_number(self.stroke_width)}px;stroke:{self.stroke};fill:{self.fill}"


@dataclass(frozen=True)
class TransitionStyle(Style):
    def __str__(self) -> str:
        return f"{super().__str__()};marker-end:url(#{ARROW_MARKER_ID})"


@dataclass(frozen=True)
class BackgroundStyle(Style):
    def __str__(self) -> str:
        return f"{super().__str__()};fill-opacity:.25;stroke-dasharray:0.45"


@dataclass(frozen=True)
class TextStyle:
    font_size: int
    font_stretch: str = "normal"

    def __str__(self) -> str:
        return (
            f"font-family:{FONT_FAMILY};font-size:{self.font_size}px;letter-spacing:0px;"
            f"line-height:1.25;stroke-width:.26458;word-spacing:0px;"
            f"font-stretch:{self.font_stretch}"
        )


ANTIQUE_WHITE = "#FAEBD7"
BLACK = "#000000"
WHITE = "#FFFFFF"
RED = "#FF0000"

STATE_STYLE = Style(0.2, ANTIQUE_WHITE, BLACK)
STATE_HIGHLIGHTED_STYLE = Style(0.5, ANTIQUE_WHITE, RED)
STATE_FINAL_STYLE = Style(0.2, WHITE, BLACK)
STATE_FINAL_HIGHLIGHTED_STYLE = Style(0.5, WHITE, RED)
STATE_INITIAL_STYLE = Style(0.2, BLACK, BLACK)
STATE_INITIAL_HIGHLIGHTED_STYLE = Style(0.5, BLACK, RED)
SMALL_CIRCLE_STYLE = Style(0.15, ANTIQUE_WHITE, BLACK)
LINE_STYLE = Style(0.15, BLACK, BLACK)
HISTORY_STYLE = Style(0.15, WHITE, BLACK)
TRANSITION_STYLE = TransitionStyle(0.15, BLACK, BLACK)
BACKGROUND_STYLE = BackgroundStyle(0.15, ANTIQUE_WHITE, BLACK)
NORMAL_TEXT = TextStyle(2)
BIG_TEXT = TextStyle(3)
BIG_TEXT_CONDENSED = TextStyle(3, "condensed")


@dataclass(eq=False)
class SvgElement:
    tag: str
    attributes: dict[str, str] = field(default_factory=dict)
    children: list[SvgElement] = field(default_factory=list)
    text: str | None = None

    @property
    def id(self) -> str | None:
        return self.attributes.get("id")

    @property
    def style(self) -> str | None:
        return self.attributes.get("style")

    def add(self, *items: SvgElement | Iterable[SvgElement]) -> SvgElement:
        for item in items:
            if isinstance(item, SvgElement):
                self.children.append(item)
            else:
                self.children.extend(item)
        return self

    def iter(self) -> Iterator[SvgElement]:
        yield self
        for child in self.children:
            yield from child.iter()

    def find_by_id(self, element_id: str) -> SvgElement | None:
        return next((element for element in self.iter() if element.id == element_id), None)


def _element(tag: str, attributes: dict[str, object], text: str | None = None) -> SvgElement:
    rendered: dict[str, str] = {}
    for key, value in attributes.items():
        if value is None:
            continue
        rendered[key] = fmt_number(value) if isinstance(value, (int, float)) else str(value)
    return SvgElement(tag=tag, attributes=rendered, text=text)


def set_style(element: SvgElement, style: Style) -> None:
    if "style" in element.attributes:
        element.attributes["style"] = str(style)


def circle(
    cx: float, cy: float, radius: float, style: Style, element_id: str | None = None
) -> SvgElement:
    return _element(
        "circle", {"id": element_id, "cx": cx, "cy": cy, "r": radius, "style": style}
    )


def rect(
    x: float,
    y: float,
    width: float,
    height: float,
    radius: float,
    style: Style,
    element_id: str | None = None,
) -> SvgElement:
    return _element(
        "rect",
        {
            "id": element_id,
            "x": x,
            "y": y,
            "width": width,
            "height": height,
            "rx": radius,
            "ry": radius,
            "style": style,
        },
    )


def state_rect(location: Point, style: Style, element_id: str | None = None) -> SvgElement:
    return rect(
        location.x - STATE_WIDTH / 2,
        location.y - STATE_HEIGHT / 2,
        STATE_WIDTH,
        STATE_HEIGHT,
        STATE_CORNER_RADIUS,
        style,
        element_id,
    )


def centered_text(text_value: str, x: float, y: float, style: TextStyle) -> SvgElement:
    return _element(
        "text",
        {
            "x": x,
            "y": y,
            "style": style,
            "text-anchor": "middle",
            "dominant-baseline": "middle",
        },
        text_value,
    )


def text(text_value: str, x: float, y: float, style: TextStyle) -> SvgElement:
    return _element("text", {"x": x, "y": y, "style": style}, text_value)


def line(start_x: float, start_y: float, end_x: float, end_y: float, style: Style) -> SvgElement:
    path = (
        f"M{fmt_number(start_x)} {fmt_number(start_y)} "
        f"{fmt_number(end_x)} {fmt_number(end_y)}"
    )
    return _element("path", {"d": path, "style": style})


def group(
    element_id: str | None = None,
    class_name: str | None = None,
    left: float | None = None,
    top: float | None = None,
) -> SvgElement:
    transform = None
    if left is not None or top is not None:
        transform = f"translate({fmt_number(left or 0.0)} {fmt_number(top or 0.0)})"
    return _element("g", {"id": element_id, "class": class_name, "transform": transform})


def document(width: float, height: float) -> SvgElement:
    """Root ``svg`` element with the viewBox and the shared arrowhead marker."""
    marker = _element(
        "marker",
        {
            "id": ARROW_MARKER_ID,
            "style": "overflow:visible",
            "markerHeight": 1,
            "markerWidth": 2,
            "orient": "auto-start-reverse",
            "preserveAspectRatio": "none",
            "refX": 1,
            "viewBox": "0 0 1 1",
        },
    ).add(
        _element(
            "path",
            {
                "id": "path2",
                "transform": "rotate(180 .125 0)",
                "d": "m3-3-3 3 3 3",
                "style": "fill:none;stroke-linecap:round;stroke:context-stroke",
            },
        )
    )
    defs = _element("defs", {"id": "defs1"}).add(marker)
    root = _element(
        "svg",
        {"xmlns": SVG_NAMESPACE, "viewBox": f"0 0 {fmt_number(width)} {fmt_number(height)}"},
    )
    return root.add(defs)


def to_etree(element: SvgElement) -> ET.Element:
    node = ET.Element(element.tag, element.attributes)
    node.text = element.text
    for child in element.children:
        node.append(to_etree(child))
    return node


def to_xml(element: SvgElement) -> str:
    return ET.tostring(to_etree(element), encoding="unicode")
