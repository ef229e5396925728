from __future__ import annotations

import xml.etree.ElementTree as ET

import pytest

from domain.models import Point
from domain.services import svg


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (20.0, "20"),
        (0.2, "0.2"),
        (1.23456, "1.235"),
        (-0.0001, "0"),
        (-3.5, "-3.5"),
        (28.000000000000004, "28"),
    ],
)
def test_fmt_number(value: float, expected: str) -> None:
    assert svg.fmt_number(value) == expected


def test_style_strings() -> None:
    assert str(svg.STATE_STYLE) == "stroke-width:0.2px;stroke:#000000;fill:#FAEBD7"
    assert str(svg.STATE_HIGHLIGHTED_STYLE) == "stroke-width:0.5px;stroke:#FF0000;fill:#FAEBD7"
    assert str(svg.TRANSITION_STYLE).endswith(";marker-end:url(#ArrowWideRounded)")
    assert "fill-opacity:.25" in str(svg.BACKGROUND_STYLE)
    assert "font-stretch:condensed" in str(svg.BIG_TEXT_CONDENSED)
    assert "font-size:2px" in str(svg.NORMAL_TEXT)


def test_state_rect_is_centered_on_location() -> None:
    element = svg.state_rect(Point(28, 20), svg.STATE_STYLE, "a")

    assert element.tag == "rect"
    assert element.attributes["id"] == "a"
    assert element.attributes["x"] == "18"
    assert element.attributes["y"] == "16"
    assert element.attributes["width"] == "20"
    assert element.attributes["height"] == "8"
    assert element.attributes["rx"] == "2"


def test_builders_skip_missing_attributes() -> None:
    element = svg.circle(1, 2, 3, svg.STATE_STYLE)

    assert "id" not in element.attributes
    assert svg.group().attributes == {}
    assert svg.group(class_name="fsm", left=40, top=56).attributes == {
        "class": "fsm",
        "transform": "translate(40 56)",
    }


def test_line_renders_path_data() -> None:
    element = svg.line(28, 24, 28, 32.5, svg.TRANSITION_STYLE)

    assert element.tag == "path"
    assert element.attributes["d"] == "M28 24 28 32.5"


def test_set_style_only_touches_styled_elements() -> None:
    styled = svg.circle(0, 0, 1, svg.STATE_STYLE)
    bare = svg.group()

    svg.set_style(styled, svg.STATE_HIGHLIGHTED_STYLE)
    svg.set_style(bare, svg.STATE_HIGHLIGHTED_STYLE)

    assert styled.style == str(svg.STATE_HIGHLIGHTED_STYLE)
    assert "style" not in bare.attributes


def test_document_serializes_with_marker() -> None:
    root = svg.document(80, 40.5)
    root.add(svg.group("a-group").add(svg.circle(1, 2, 3, svg.STATE_STYLE, "a")))

    markup = svg.to_xml(root)
    parsed = ET.fromstring(markup)

    assert parsed.tag == f"{{{svg.SVG_NAMESPACE}}}svg"
    assert parsed.attrib["viewBox"] == "0 0 80 40.5"
    marker = parsed.find(f".//{{{svg.SVG_NAMESPACE}}}marker")
    assert marker is not None
    assert marker.attrib["id"] == svg.ARROW_MARKER_ID
    assert root.find_by_id("a") is not None
    assert root.find_by_id("missing") is None


def test_text_is_escaped() -> None:
    markup = svg.to_xml(svg.text("a < b & c", 0, 0, svg.BIG_TEXT))

    assert "a &lt; b &amp; c" in markup
