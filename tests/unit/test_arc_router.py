"""
Tests for arc routing and arc markers (arc_router, style_map).
"""
from __future__ import annotations

import math

import pytest

from sbgnml2png.config import BORDER_COLOR, RenderConfig
from sbgnml2png.errors import DegenerateGeometryWarning, UnsupportedClassError
from sbgnml2png.logger import ConversionLogger
from sbgnml2png.mapping.shape_map import resolve_glyph
from sbgnml2png.mapping.style_map import (
    ARC_RECIPES, ATTACH_SIDE, catalysis_center, catalysis_radius, resolve_arc,
)
from sbgnml2png.model.diagram import Arc, Point
from sbgnml2png.model.intermediate import (
    ARROWHEAD, BAR, CATALYSIS_CIRCLE, OPAQUE_DIAMOND, OPAQUE_TRIANGLE, OPEN_CIRCLE, OPEN_TRIANGLE,
)
from sbgnml2png.routing.arc_router import ArcRouter, side_anchors

PROCESS = '<glyph id="p" class="process"><bbox x="0" y="0" w="40" h="40"/></glyph>'
MACRO = '<glyph id="m" class="macromolecule"><bbox x="-100" y="0" w="60" h="30"/></glyph>'
MODIFIER = '<glyph id="e" class="macromolecule"><bbox x="0" y="100" w="40" h="20"/></glyph>'
PRODUCT = '<glyph id="q" class="simple chemical"><bbox x="100" y="0" w="40" h="40"/></glyph>'


def _approx(a: float, b: float, tol: float = 1e-6) -> bool:
    return abs(a - b) <= tol


def _router(diagram, config: RenderConfig = None, logger: ConversionLogger = None) -> ArcRouter:
    resolved = {glyph.id: resolve_glyph(glyph, config) for glyph in diagram.all_glyphs()}
    return ArcRouter(diagram, resolved, config, logger or ConversionLogger())


def _route(load_diagram, markup: str, config: RenderConfig = None):
    diagram = load_diagram(markup)
    return _router(diagram, config).route(diagram.arcs[0])


# ---- recipes ----
def test_modulation_family_attaches_to_sides() -> None:
    for name in ("modulation", "stimulation", "catalysis", "inhibition",
                 "necessary stimulation", "absolute inhibition"):
        assert ARC_RECIPES[name].attach == ATTACH_SIDE


def test_unknown_arc_class_raises() -> None:
    with pytest.raises(UnsupportedClassError):
        resolve_arc(Arc(id="a", class_name="teleportation", source="x", target="y"))


OPAQUE = "#FFFFFF"
BAR_OFFSET_PX = 14.0 * 1.75

# class -> (kind, fill, distance back from the endpoint) per marker, in drawing order
MARKER_TABLE = {
    "consumption": (),
    "production": ((ARROWHEAD, BORDER_COLOR, 0.0),),
    "logic arc": (),
    "equivalence arc": ((OPEN_CIRCLE, None, 0.0),),
    "modulation": ((OPAQUE_DIAMOND, OPAQUE, 0.0),),
    "stimulation": ((OPAQUE_TRIANGLE, OPAQUE, 0.0),),
    "catalysis": ((CATALYSIS_CIRCLE, OPAQUE, 0.0),),
    "inhibition": ((BAR, None, 0.0),),
    "necessary stimulation": ((BAR, None, BAR_OFFSET_PX), (OPAQUE_TRIANGLE, OPAQUE, 0.0)),
    "absolute inhibition": ((BAR, None, 0.0), (BAR, None, BAR_OFFSET_PX)),
    "positive influence": ((OPAQUE_TRIANGLE, OPAQUE, 0.0),),
    "negative influence": ((BAR, None, 0.0),),
    "unknown influence": ((OPEN_TRIANGLE, None, 0.0),),
    "assignment": ((OPEN_TRIANGLE, None, 0.0),),
}


def test_marker_table_covers_every_arc_class() -> None:
    assert set(MARKER_TABLE) == set(ARC_RECIPES)


@pytest.mark.parametrize("class_name", sorted(MARKER_TABLE))
def test_arc_class_markers(load_diagram, class_name: str) -> None:
    """Side-attached and port-attached arcs from e into p carry their class markers at the routed end."""
    routed = _route(load_diagram, PROCESS + MODIFIER + f'<arc id="a" class="{class_name}" source="e" target="p"/>')
    end = routed.points[-1]
    expected = MARKER_TABLE[class_name]
    assert [marker.kind for marker in routed.markers] == [kind for kind, _fill, _offset in expected]
    for marker, (_kind, fill, offset) in zip(routed.markers, expected):
        assert marker.anchor == end
        assert marker.shape.style.fill == fill
        if marker.kind == BAR:
            a, b = marker.shape.points
            center = Point((a.x + b.x) / 2.0, (a.y + b.y) / 2.0)
            assert _approx(center.distance_to(end), offset)
            assert _approx(a.distance_to(b), 12.0 * 1.75)


# ---- endpoints ----
def test_consumption_scenario(load_diagram) -> None:
    """Macromolecule -> process: clipped at the macromolecule's right edge, ends on the left port."""
    routed = _route(load_diagram, PROCESS + MACRO + '<arc id="a" class="consumption" source="m" target="p"/>')
    start, end = routed.points
    assert (end.x, end.y) == (0.0, 20.0)
    assert _approx(start.x, -40.0)
    assert _approx(start.y, 15.0 + 5.0 * 30.0 / 70.0)
    assert routed.markers == ()


def test_production_arrowhead_at_clipped_end(load_diagram) -> None:
    routed = _route(load_diagram, PROCESS + PRODUCT + '<arc id="a" class="production" source="p" target="q"/>')
    start, end = routed.points
    assert (start.x, start.y) == (40.0, 20.0)
    assert _approx(end.x, 100.0) and _approx(end.y, 20.0)
    (marker,) = routed.markers
    assert marker.kind == ARROWHEAD
    assert marker.shape.style.fill == BORDER_COLOR
    # tip on the endpoint, base 8 * 1.75 back along the arc
    tip = marker.shape.points[-1]
    assert (tip.x, tip.y) == (end.x, end.y)
    base_x = marker.shape.points[0].x
    assert _approx(end.x - base_x, 14.0)


def test_explicit_port_reference(load_diagram) -> None:
    routed = _route(load_diagram, PROCESS + PRODUCT + '<arc id="a" class="production" source="p.right" target="q"/>')
    assert (routed.points[0].x, routed.points[0].y) == (40.0, 20.0)


def test_side_anchors_horizontal_process(load_diagram) -> None:
    diagram = load_diagram(PROCESS)
    assert [(p.x, p.y) for p in side_anchors(diagram.glyphs[0])] == [(20.0, 0.0), (20.0, 40.0)]


def test_modulation_targets_nearest_side(load_diagram) -> None:
    routed = _route(load_diagram, PROCESS + MODIFIER + '<arc id="a" class="modulation" source="e" target="p"/>')
    start, end = routed.points
    assert (end.x, end.y) == (20.0, 40.0)
    assert _approx(start.x, 20.0) and _approx(start.y, 100.0)
    assert [m.kind for m in routed.markers] == [OPAQUE_DIAMOND]


def test_waypoints_kept_in_order(load_diagram) -> None:
    routed = _route(
        load_diagram,
        PROCESS + MACRO
        + '<arc id="a" class="consumption" source="m" target="p"><next x="-20" y="60"/><next x="-10" y="20"/></arc>',
    )
    points = routed.points
    assert len(points) == 4
    assert [(p.x, p.y) for p in points[1:3]] == [(-20.0, 60.0), (-10.0, 20.0)]
    # the source is clipped toward the first waypoint (through the bottom edge)
    assert _approx(points[0].y, 30.0)


def test_declared_endpoints_used_when_enabled(load_diagram) -> None:
    markup = (PROCESS + MACRO + '<arc id="a" class="consumption" source="m" target="p">'
              '<start x="-41" y="16"/><end x="1" y="21"/></arc>')
    routed = _route(load_diagram, markup, RenderConfig(use_declared_endpoints=True))
    assert [(p.x, p.y) for p in routed.points] == [(-41.0, 16.0), (1.0, 21.0)]
    routed = _route(load_diagram, markup)
    assert (routed.points[-1].x, routed.points[-1].y) == (0.0, 20.0)


# ---- markers ----
@pytest.mark.parametrize("ratio", [0.1, 0.25, 0.5, 0.75, 0.9])
def test_catalysis_center_distance(load_diagram, ratio: float) -> None:
    config = RenderConfig(catalysis_overlap_ratio=ratio)
    routed = _route(load_diagram, PROCESS + MODIFIER + '<arc id="a" class="catalysis" source="e" target="p"/>', config)
    (marker,) = routed.markers
    assert marker.kind == CATALYSIS_CIRCLE
    end = routed.points[-1]
    circle = marker.shape
    distance = math.hypot(circle.cx - end.x, circle.cy - end.y)
    assert _approx(distance, circle.r * (1.0 - ratio))


def test_catalysis_scenario_defaults() -> None:
    config = RenderConfig()
    radius = catalysis_radius(config)
    assert _approx(radius, 8 * 1.75 * 0.4)
    center = catalysis_center(Point(0.0, 0.0), (1.0, 0.0), radius, 0.5)
    assert _approx(center.x, -radius * 0.5)
    assert center.y == 0.0


def test_catalysis_circle_is_filled_white(load_diagram) -> None:
    routed = _route(load_diagram, PROCESS + MODIFIER + '<arc id="a" class="catalysis" source="e" target="p"/>')
    assert routed.markers[0].shape.style.fill == "#FFFFFF"


def test_inhibition_bar_perpendicular_at_end(load_diagram) -> None:
    routed = _route(load_diagram, PROCESS + MODIFIER + '<arc id="a" class="inhibition" source="e" target="p"/>')
    (bar,) = routed.markers
    assert bar.kind == BAR
    a, b = bar.shape.points
    assert _approx(a.y, 40.0) and _approx(b.y, 40.0)
    assert _approx(abs(b.x - a.x), 12 * 1.75)


def test_necessary_stimulation_bar_offset(load_diagram) -> None:
    routed = _route(load_diagram,
                    PROCESS + MODIFIER + '<arc id="a" class="necessary stimulation" source="e" target="p"/>')
    bar, triangle = routed.markers
    assert triangle.kind == OPAQUE_TRIANGLE
    assert _approx(bar.shape.points[0].y, 40.0 + 14 * 1.75)


# ---- degenerate arcs ----
def test_zero_length_arc_gets_stub(load_diagram) -> None:
    markup = (PROCESS + MACRO + '<arc id="a" class="production" source="m" target="p">'
              '<start x="5" y="5"/><end x="5" y="5"/></arc>')
    diagram = load_diagram(markup)
    logger = ConversionLogger()
    router = _router(diagram, RenderConfig(use_declared_endpoints=True), logger)
    with pytest.warns(DegenerateGeometryWarning):
        routed = router.route(diagram.arcs[0])
    start, end = routed.points
    assert (start.x, start.y) == (5.0, 5.0)
    assert _approx(end.x - start.x, 4.0)
    assert [w.warning_type for w in logger.get_warnings()] == ["degenerate_geometry"]
