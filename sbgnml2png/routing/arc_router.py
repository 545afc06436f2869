"""
Arc routing module

Computes arc endpoints against ports, process sides or glyph outlines,
inserts waypoints, and attaches the class markers at the target end
"""
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from ..config import BORDER_COLOR, RenderConfig, default_config
from ..geom.outline import clip_to_ellipse, clip_to_polygon
from ..geom.vector import EPS, unit_vector
from ..logger import ConversionLogger, get_logger
from ..mapping.shape_map import ResolvedGlyph
from ..mapping.style_map import ATTACH_SIDE, ArcRecipe, build_markers, resolve_arc
from ..model.diagram import Arc, Diagram, Glyph, Point, Port
from ..model.intermediate import (
    CircleShape, EllipseShape, Marker, PolylineShape, RectShape, RingShape, Shape, Style,
)

SOURCE = "source"
TARGET = "target"


@dataclass(frozen=True)
class RoutedArc:
    arc: Arc
    line: PolylineShape
    markers: Tuple[Marker, ...] = ()

    @property
    def points(self) -> Tuple[Point, ...]:
        return self.line.points


def side_anchors(glyph: Glyph) -> Tuple[Point, ...]:
    """Midpoints of the two sides not used as ports"""
    center = glyph.bbox.center
    half = min(glyph.bbox.w, glyph.bbox.h) / 2.0
    sides = {port.side for port in glyph.ports}
    if "left" in sides or "right" in sides:
        return (Point(center.x, center.y - half), Point(center.x, center.y + half))
    return (Point(center.x - half, center.y), Point(center.x + half, center.y))


def clip_to_shape(shape: Shape, inside: Point, toward: Point) -> Point:
    """Boundary point of `shape` on the segment inside -> toward"""
    if isinstance(shape, (CircleShape, RingShape)):
        return clip_to_ellipse(Point(shape.cx, shape.cy), shape.r, shape.r, toward)
    if isinstance(shape, EllipseShape):
        return clip_to_ellipse(Point(shape.cx, shape.cy), shape.rx, shape.ry, toward)
    return clip_to_polygon(inside, toward, shape.outline())


class ArcRouter:
    """Arc endpoint resolution, clipping and marker placement"""

    def __init__(
        self,
        diagram: Diagram,
        resolved: Dict[str, ResolvedGlyph],
        config: Optional[RenderConfig] = None,
        logger: Optional[ConversionLogger] = None,
    ):
        """
        Args:
            diagram: Loaded diagram (provides the id -> anchor index)
            resolved: Resolved glyphs by id; glyphs missing here (skipped by
                policy) are clipped against their bbox rectangle
            config: RenderConfig (default_config if None)
            logger: ConversionLogger instance
        """
        self.diagram = diagram
        self.index = diagram.index
        self.resolved = resolved
        self.config = config or default_config
        self.logger = logger or get_logger()

    def route(self, arc: Arc, recipe: Optional[ArcRecipe] = None) -> RoutedArc:
        """
        Route one arc.

        Raises:
            UnsupportedClassError: When the arc class has no recipe
        """
        if recipe is None:
            recipe = resolve_arc(arc)

        if self.config.use_declared_endpoints and arc.start is not None and arc.end is not None:
            points = (arc.start,) + arc.waypoints + (arc.end,)
        else:
            source_hint = arc.waypoints[0] if arc.waypoints else self._reference_point(arc.target)
            target_hint = arc.waypoints[-1] if arc.waypoints else self._reference_point(arc.source)
            # Ports and side anchors are fixed; outline clipping aims at them
            start = self._anchored_endpoint(arc.source, SOURCE, source_hint, recipe)
            end = self._anchored_endpoint(arc.target, TARGET, target_hint, recipe)
            if start is None:
                toward = end if end is not None and not arc.waypoints else source_hint
                start = self._clipped_endpoint(arc.source, toward)
            if end is None:
                toward = start if not arc.waypoints else target_hint
                end = self._clipped_endpoint(arc.target, toward)
            points = (start,) + arc.waypoints + (end,)

        direction = self._last_direction(points)
        if direction is None:
            points, direction = self._stub(arc, points[-1])

        line = PolylineShape(points, style=Style(fill=None, stroke=BORDER_COLOR, stroke_width=self.config.line_width))
        markers = build_markers(recipe, points[-1], direction, self.config)
        return RoutedArc(arc=arc, line=line, markers=markers)

    def _reference_point(self, ref_id: str) -> Point:
        anchor = self.index.resolve(ref_id)
        if isinstance(anchor, Port):
            return anchor.point
        return anchor.bbox.center

    def _anchored_endpoint(self, ref_id: str, role: str, hint: Point, recipe: ArcRecipe) -> Optional[Point]:
        """Port or side anchor for ref_id; None when the glyph has no ports"""
        anchor = self.index.resolve(ref_id)
        if isinstance(anchor, Port):
            return anchor.point
        if not anchor.ports:
            return None
        if recipe.attach == ATTACH_SIDE and role == TARGET:
            candidates = side_anchors(anchor)
        else:
            candidates = tuple(port.point for port in anchor.ports)
        return min(candidates, key=lambda point: point.distance_to(hint))

    def _clipped_endpoint(self, ref_id: str, toward: Point) -> Point:
        glyph = self.index.resolve(ref_id)
        return clip_to_shape(self._outline_for(glyph), glyph.bbox.center, toward)

    def _outline_for(self, glyph: Glyph) -> Shape:
        resolved = self.resolved.get(glyph.id)
        if resolved is not None:
            return resolved.body
        bbox = glyph.bbox
        return RectShape(bbox.x, bbox.y, bbox.w, bbox.h)

    @staticmethod
    def _last_direction(points: Tuple[Point, ...]) -> Optional[Tuple[float, float]]:
        """Direction into the last point from the nearest distinct earlier point"""
        end = points[-1]
        for previous in reversed(points[:-1]):
            if previous.distance_to(end) > EPS:
                return unit_vector(previous, end)
        return None

    def _stub(self, arc: Arc, point: Point):
        length = self.config.min_stub_length
        if self.logger:
            self.logger.warn_degenerate_geometry(
                arc.id, "zero-length arc", {"x": point.x, "y": point.y, "stub_length": length}
            )
        return (point, Point(point.x + length, point.y)), (1.0, 0.0)
