"""
Arc style mapping module

SBGN arc class -> attach policy and endpoint markers, plus the marker
geometry builders (arrowheads, triangles, bars, circles, diamonds)
"""
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from ..config import BORDER_COLOR, ARROW_HALF_WIDTH_RATIO, CIRCLE_MARKER_RATIO, RenderConfig, default_config
from ..errors import UnsupportedClassError
from ..geom.vector import along, angle_degrees, perpendicular
from ..model.diagram import Arc, Point
from ..model.intermediate import (
    ARROWHEAD, BAR, CATALYSIS_CIRCLE, CircleShape, Marker, OPAQUE_DIAMOND, OPAQUE_TRIANGLE,
    OPEN_CIRCLE, OPEN_TRIANGLE, PolygonShape, PolylineShape, Style,
)

# Attach policies at process-like glyphs
ATTACH_PORT = "port"  # nearest port
ATTACH_SIDE = "side"  # nearest of the two non-port sides (when targeting a process-like glyph)

Direction = Tuple[float, float]


@dataclass(frozen=True)
class MarkerSpec:
    kind: str
    # Distance back from the endpoint: 'end' (at the endpoint) or 'bar_offset'
    position: str = "end"


@dataclass(frozen=True)
class ArcRecipe:
    attach: str
    markers: Tuple[MarkerSpec, ...] = ()


_BAR_AT_END = MarkerSpec(BAR)
_BAR_AT_OFFSET = MarkerSpec(BAR, "bar_offset")

ARC_RECIPES: Dict[str, ArcRecipe] = {
    # Process description flux arcs
    "consumption": ArcRecipe(ATTACH_PORT),
    "production": ArcRecipe(ATTACH_PORT, (MarkerSpec(ARROWHEAD),)),
    "logic arc": ArcRecipe(ATTACH_PORT),
    "equivalence arc": ArcRecipe(ATTACH_PORT, (MarkerSpec(OPEN_CIRCLE),)),
    # Modulation family
    "modulation": ArcRecipe(ATTACH_SIDE, (MarkerSpec(OPAQUE_DIAMOND),)),
    "stimulation": ArcRecipe(ATTACH_SIDE, (MarkerSpec(OPAQUE_TRIANGLE),)),
    "catalysis": ArcRecipe(ATTACH_SIDE, (MarkerSpec(CATALYSIS_CIRCLE),)),
    "inhibition": ArcRecipe(ATTACH_SIDE, (_BAR_AT_END,)),
    "necessary stimulation": ArcRecipe(ATTACH_SIDE, (_BAR_AT_OFFSET, MarkerSpec(OPAQUE_TRIANGLE))),
    "absolute inhibition": ArcRecipe(ATTACH_SIDE, (_BAR_AT_END, _BAR_AT_OFFSET)),
    # Activity flow influences
    "positive influence": ArcRecipe(ATTACH_SIDE, (MarkerSpec(OPAQUE_TRIANGLE),)),
    "negative influence": ArcRecipe(ATTACH_SIDE, (_BAR_AT_END,)),
    "unknown influence": ArcRecipe(ATTACH_SIDE, (MarkerSpec(OPEN_TRIANGLE),)),
    "assignment": ArcRecipe(ATTACH_PORT, (MarkerSpec(OPEN_TRIANGLE),)),
}


def resolve_arc(arc: Arc) -> ArcRecipe:
    """Look up the recipe for an arc class"""
    recipe = ARC_RECIPES.get(arc.class_name)
    if recipe is None:
        raise UnsupportedClassError(arc.class_name, arc.id)
    return recipe


def _stroke(config: RenderConfig, fill: Optional[str]) -> Style:
    return Style(fill=fill, stroke=BORDER_COLOR, stroke_width=config.line_width)


def triangle_points(end: Point, direction: Direction, size: float) -> Tuple[Point, Point, Point]:
    """Base corners and tip of an arrowhead whose tip sits on `end`"""
    base = along(end, direction, -size)
    px, py = perpendicular(direction)
    half_width = size * ARROW_HALF_WIDTH_RATIO
    return (
        Point(base.x + px * half_width, base.y + py * half_width),
        Point(base.x - px * half_width, base.y - py * half_width),
        end,
    )


def _triangle(fill: Optional[str]):
    def build(end: Point, direction: Direction, config: RenderConfig) -> PolygonShape:
        return PolygonShape(triangle_points(end, direction, config.arrow_size_px), style=_stroke(config, fill))
    return build


def bar_points(end: Point, direction: Direction, length: float, offset: float) -> Tuple[Point, Point]:
    center = along(end, direction, -offset)
    px, py = perpendicular(direction)
    half = length / 2.0
    return (Point(center.x - px * half, center.y - py * half),
            Point(center.x + px * half, center.y + py * half))


def catalysis_radius(config: RenderConfig) -> float:
    return config.arrow_size_px * CIRCLE_MARKER_RATIO


def catalysis_center(end: Point, direction: Direction, radius: float, overlap_ratio: float) -> Point:
    """Circle center pulled back so the circle overlaps the line by overlap_ratio * radius"""
    overlap = max(radius * overlap_ratio, 0.0)
    return along(end, direction, -max(radius - overlap, 0.0))


def _catalysis(end: Point, direction: Direction, config: RenderConfig) -> CircleShape:
    radius = catalysis_radius(config)
    center = catalysis_center(end, direction, radius, config.catalysis_overlap_ratio)
    return CircleShape(center.x, center.y, radius, style=_stroke(config, "#FFFFFF"))


def _open_circle(end: Point, direction: Direction, config: RenderConfig) -> CircleShape:
    return CircleShape(end.x, end.y, max(catalysis_radius(config), 1.0), style=_stroke(config, None))


def _diamond(end: Point, direction: Direction, config: RenderConfig) -> PolygonShape:
    size = config.arrow_size_px
    back = along(end, direction, -size)
    mid = along(end, direction, -size / 2.0)
    px, py = perpendicular(direction)
    half_width = size * 0.4
    return PolygonShape(
        (end,
         Point(mid.x + px * half_width, mid.y + py * half_width),
         back,
         Point(mid.x - px * half_width, mid.y - py * half_width)),
        style=_stroke(config, "#FFFFFF"),
    )


_SHAPE_BUILDERS: Dict[str, Callable] = {
    ARROWHEAD: _triangle(BORDER_COLOR),
    OPEN_TRIANGLE: _triangle(None),
    OPAQUE_TRIANGLE: _triangle("#FFFFFF"),
    CATALYSIS_CIRCLE: _catalysis,
    OPEN_CIRCLE: _open_circle,
    OPAQUE_DIAMOND: _diamond,
}


def build_marker(spec: MarkerSpec, end: Point, direction: Direction,
                 config: Optional[RenderConfig] = None) -> Marker:
    """
    Build one endpoint marker.

    Args:
        spec: Marker kind and position
        end: Arc endpoint (after clipping)
        direction: Unit direction of the last segment, pointing at `end`
        config: RenderConfig (default_config if None)
    """
    config = config or default_config
    if spec.kind == BAR:
        offset = config.bar_offset_px if spec.position == "bar_offset" else 0.0
        shape = PolylineShape(bar_points(end, direction, config.bar_length_px, offset),
                              style=_stroke(config, None))
    else:
        shape = _SHAPE_BUILDERS[spec.kind](end, direction, config)
    return Marker(kind=spec.kind, shape=shape, anchor=end, angle=angle_degrees(direction))


def build_markers(recipe: ArcRecipe, end: Point, direction: Direction,
                  config: Optional[RenderConfig] = None) -> Tuple[Marker, ...]:
    return tuple(build_marker(spec, end, direction, config) for spec in recipe.markers)
