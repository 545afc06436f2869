"""
Unit tests for svg_writer: number formatting, per-primitive elements, labels, document order.
"""
from __future__ import annotations

import pytest
from lxml import etree as ET

from sbgnml2png.errors import UnsupportedPrimitiveError
from sbgnml2png.io.raster_writer import _PAINTERS
from sbgnml2png.io.svg_writer import _ELEMENT_BUILDERS, NS_SVG, SVGWriter, fmt
from sbgnml2png.model.diagram import Point
from sbgnml2png.model.intermediate import (
    CircleShape, DrawItem, EllipseShape, Label, PolygonShape, PolylineShape, RectShape, RingShape,
    RoundedRectShape, Scene, Shape, Style,
)
from sbgnml2png.pipeline import render
from sbgnml2png.render.scene import SceneComposer

NSMAP = {"svg": NS_SVG}


def _scene(*shapes, width: int = 100, height: int = 80) -> Scene:
    items = tuple(DrawItem(shape, (1, i), f"g{i}") for i, shape in enumerate(shapes))
    return Scene(width=width, height=height, items=items)


def _parse(svg_text: str) -> ET._Element:
    return ET.fromstring(svg_text.encode("utf-8"))


# ---- fmt ----
@pytest.mark.parametrize(
    "value,expected",
    [(20.0, "20"), (1.5, "1.5"), (17.142857, "17.14"), (-0.001, "0"), (0.0, "0"), (3.105, "3.1")],
)
def test_fmt(value: float, expected: str) -> None:
    assert fmt(value) == expected


# ---- document ----
def test_root_size_and_background() -> None:
    root = _parse(SVGWriter().write_string(_scene(width=120, height=45)))
    assert root.tag == f"{{{NS_SVG}}}svg"
    assert root.get("width") == "120"
    assert root.get("height") == "45"
    assert root.get("viewBox") == "0 0 120 45"
    background = root.find("svg:rect", NSMAP)
    assert background.get("fill") == "#FFFFFF"
    assert background.get("width") == "120"


def test_rect_element() -> None:
    shape = RectShape(10, 20, 30, 40, style=Style(fill="#FFFFFF", stroke="#555555", stroke_width=2.0))
    root = SVGWriter().build(_scene(shape))
    rect = root.findall("svg:rect", NSMAP)[1]
    assert (rect.get("x"), rect.get("y"), rect.get("width"), rect.get("height")) == ("10", "20", "30", "40")
    assert rect.get("fill") == "#FFFFFF"
    assert rect.get("stroke") == "#555555"
    assert rect.get("stroke-width") == "2"
    assert rect.get("data-owner") == "g0"


def test_rounded_rect_radius_clamped() -> None:
    root = SVGWriter().build(_scene(RoundedRectShape(0, 0, 40, 10, radius=12)))
    rect = root.findall("svg:rect", NSMAP)[1]
    assert rect.get("rx") == "5"
    assert rect.get("ry") == "5"


def test_ring_is_two_circles() -> None:
    root = SVGWriter().build(_scene(RingShape(50, 40, 10, 6)))
    group = root.find("svg:g", NSMAP)
    outer, inner = group.findall("svg:circle", NSMAP)
    assert outer.get("r") == "10"
    assert inner.get("r") == "6"
    assert inner.get("fill") == "none"


def test_polyline_has_no_fill() -> None:
    line = PolylineShape((Point(0, 0), Point(10, 5)))
    root = SVGWriter().build(_scene(line))
    polyline = root.find("svg:polyline", NSMAP)
    assert polyline.get("points") == "0,0 10,5"
    assert polyline.get("fill") == "none"


def test_label_is_centered_text() -> None:
    shape = CircleShape(20, 20, 10, label=Label("AND", 20, 20, 8))
    root = SVGWriter().build(_scene(shape))
    text = root.find("svg:text", NSMAP)
    assert text.text == "AND"
    assert text.get("text-anchor") == "middle"
    assert text.get("dominant-baseline") == "central"
    assert text.get("font-size") == "8"
    assert (text.get("x"), text.get("y")) == ("20", "20")


def test_unknown_primitive_raises() -> None:
    class _Blob(Shape):
        style = Style()
        label = None

    with pytest.raises(UnsupportedPrimitiveError):
        SVGWriter().write_string(_scene(_Blob()))


def test_both_backends_dispatch_the_same_primitives() -> None:
    primitives = {RectShape, RoundedRectShape, CircleShape, EllipseShape, RingShape, PolygonShape, PolylineShape}
    assert set(_ELEMENT_BUILDERS) == primitives
    assert set(_PAINTERS) == primitives


# ---- rendered diagrams ----
NESTED = (
    '<glyph id="na" class="nucleic acid feature"><bbox x="100" y="100" w="120" h="60"/>'
    '<glyph id="ui" class="unit of information"><bbox x="110" y="90" w="40" h="20"/></glyph></glyph>'
)


def test_child_after_parent_in_document_order(load_diagram) -> None:
    svg_text, _image = render(load_diagram(NESTED), padding=10)
    root = _parse(svg_text)
    owners = [el.get("data-owner") for el in root.iter() if el.get("data-owner")]
    assert owners.index("ui") > owners.index("na")


def test_nested_glyph_at_absolute_position(load_diagram) -> None:
    """The nested unit of information sits at its own bbox, shifted only by the canvas origin."""
    root = _parse(render(load_diagram(NESTED), padding=10)[0])
    ui = [el for el in root.iter(f"{{{NS_SVG}}}rect") if el.get("data-owner") == "ui"][0]
    # origin = (100 - 10, 90 - 10)
    assert (ui.get("x"), ui.get("y"), ui.get("width"), ui.get("height")) == ("20", "10", "40", "20")


def test_and_glyph_text(load_diagram) -> None:
    diagram = load_diagram('<glyph id="op" class="and"><bbox x="0" y="0" w="40" h="40"/></glyph>')
    root = _parse(render(diagram)[0])
    circle = root.find("svg:circle", NSMAP)
    text = root.find("svg:text", NSMAP)
    assert text.text == "AND"
    assert text.get("x") == circle.get("cx")
    assert text.get("y") == circle.get("cy")


def test_svg_output_is_deterministic(sample_sbgn_path) -> None:
    from sbgnml2png.io.sbgn_loader import SbgnLoader

    diagram = SbgnLoader().load_diagram(sample_sbgn_path)
    scene = SceneComposer().compose(diagram)
    writer = SVGWriter()
    assert writer.write_string(scene) == writer.write_string(scene)
    assert render(diagram)[0] == render(diagram)[0]
