"""
Outline geometry

Flattened outline builders for the SBGN node shapes (rounded corners, barrel
curves, hexagons...) and the clipping routines the router and the clone
marker use. Curved outlines are flattened here once so that the SVG and
raster backends draw exactly the same polygon.
"""
import math
from typing import List, Optional, Sequence, Tuple

from ..model.diagram import Point
from .vector import EPS

ARC_SEGMENTS = 8
ELLIPSE_SEGMENTS = 72
CURVE_SEGMENTS = 12


def arc_points(cx: float, cy: float, radius: float, start: float, end: float,
               segments: int = ARC_SEGMENTS) -> List[Point]:
    """Points along a circular arc from angle start to end (radians, inclusive)"""
    return [
        Point(cx + radius * math.cos(start + (end - start) * i / segments),
              cy + radius * math.sin(start + (end - start) * i / segments))
        for i in range(segments + 1)
    ]


def ellipse_points(cx: float, cy: float, rx: float, ry: float,
                   segments: int = ELLIPSE_SEGMENTS) -> List[Point]:
    return [
        Point(cx + rx * math.cos(2.0 * math.pi * i / segments),
              cy + ry * math.sin(2.0 * math.pi * i / segments))
        for i in range(segments)
    ]


def rect_points(x: float, y: float, w: float, h: float) -> List[Point]:
    return [Point(x, y), Point(x + w, y), Point(x + w, y + h), Point(x, y + h)]


def rounded_rect_points(x: float, y: float, w: float, h: float, radius: float) -> List[Point]:
    radius = max(0.0, min(radius, w / 2.0, h / 2.0))
    if radius <= EPS:
        return rect_points(x, y, w, h)
    right = x + w
    bottom = y + h
    half_pi = math.pi / 2.0
    points: List[Point] = []
    points += arc_points(right - radius, y + radius, radius, -half_pi, 0.0)
    points += arc_points(right - radius, bottom - radius, radius, 0.0, half_pi)
    points += arc_points(x + radius, bottom - radius, radius, half_pi, math.pi)
    points += arc_points(x + radius, y + radius, radius, math.pi, 3.0 * half_pi)
    return points


def round_bottom_rect_points(x: float, y: float, w: float, h: float, radius: float) -> List[Point]:
    """Rectangle with rounded bottom corners (nucleic acid feature)"""
    radius = max(0.0, min(radius, w / 2.0, h / 2.0))
    right = x + w
    bottom = y + h
    half_pi = math.pi / 2.0
    points = [Point(x, y), Point(right, y)]
    points += arc_points(right - radius, bottom - radius, radius, 0.0, half_pi)
    points += arc_points(x + radius, bottom - radius, radius, half_pi, math.pi)
    return points


def cut_rect_points(x: float, y: float, w: float, h: float, corner: float) -> List[Point]:
    """Octagon with cut corners (complex)"""
    x1 = x + w
    y1 = y + h
    return [
        Point(x, y + corner), Point(x + corner, y),
        Point(x1 - corner, y), Point(x1, y + corner),
        Point(x1, y1 - corner), Point(x1 - corner, y1),
        Point(x + corner, y1), Point(x, y1 - corner),
    ]


def hexagon_points(x: float, y: float, w: float, h: float) -> List[Point]:
    return [
        Point(x, y + 0.5 * h), Point(x + 0.25 * w, y),
        Point(x + 0.75 * w, y), Point(x + w, y + 0.5 * h),
        Point(x + 0.75 * w, y + h), Point(x + 0.25 * w, y + h),
    ]


def concave_hexagon_points(x: float, y: float, w: float, h: float) -> List[Point]:
    """Perturbing agent outline"""
    return [
        Point(x, y), Point(x + w, y),
        Point(x + 0.85 * w, y + 0.5 * h), Point(x + w, y + h),
        Point(x, y + h), Point(x + 0.15 * w, y + 0.5 * h),
    ]


def tag_points(x: float, y: float, w: float, h: float, notch: float) -> List[Point]:
    return [
        Point(x + notch, y), Point(x + w, y), Point(x + w, y + h),
        Point(x + notch, y + h), Point(x, y + h / 2.0),
    ]


def _quad_points(p0: Point, control: Point, p1: Point, segments: int = CURVE_SEGMENTS) -> List[Point]:
    """Quadratic Bezier samples, excluding p0"""
    points = []
    for i in range(1, segments + 1):
        t = i / segments
        u = 1.0 - t
        points.append(Point(
            u * u * p0.x + 2.0 * u * t * control.x + t * t * p1.x,
            u * u * p0.y + 2.0 * u * t * control.y + t * t * p1.y,
        ))
    return points


def barrel_points(x: float, y: float, w: float, h: float) -> List[Point]:
    """Compartment outline: straight sides joined by quadratic corners"""
    top_y = y + 0.03 * h
    points = [Point(x, top_y), Point(x, y + 0.97 * h)]
    points += _quad_points(points[-1], Point(x + 0.06 * w, y + h), Point(x + 0.25 * w, y + h))
    points.append(Point(x + 0.75 * w, y + h))
    points += _quad_points(points[-1], Point(x + 0.95 * w, y + h), Point(x + w, y + 0.95 * h))
    points.append(Point(x + w, y + 0.05 * h))
    points += _quad_points(points[-1], Point(x + w, y), Point(x + 0.75 * w, y))
    points.append(Point(x + 0.25 * w, y))
    points += _quad_points(points[-1], Point(x + 0.06 * w, y), Point(x, top_y))
    # the last curve sample closes on the first point
    return points[:-1]


def _segment_intersection(p: Point, q: Point, a: Point, b: Point) -> Optional[float]:
    """Parameter t along p->q where it crosses segment a->b, or None"""
    rx, ry = q.x - p.x, q.y - p.y
    sx, sy = b.x - a.x, b.y - a.y
    denom = rx * sy - ry * sx
    if abs(denom) <= EPS:
        return None
    qpx, qpy = a.x - p.x, a.y - p.y
    t = (qpx * sy - qpy * sx) / denom
    u = (qpx * ry - qpy * rx) / denom
    if -EPS <= t <= 1.0 + EPS and -EPS <= u <= 1.0 + EPS:
        return min(max(t, 0.0), 1.0)
    return None


def clip_to_polygon(inside: Point, outside: Point, polygon: Sequence[Point]) -> Point:
    """
    Point where the segment inside -> outside leaves the polygon.

    Uses the last crossing along the segment so concave outlines clip at
    their outer boundary. Returns `inside` when nothing is crossed (the
    outside point lies within the outline).
    """
    best: Optional[float] = None
    count = len(polygon)
    for i in range(count):
        t = _segment_intersection(inside, outside, polygon[i], polygon[(i + 1) % count])
        if t is not None and (best is None or t > best):
            best = t
    if best is None:
        return inside
    return Point(inside.x + (outside.x - inside.x) * best,
                 inside.y + (outside.y - inside.y) * best)


def clip_to_ellipse(center: Point, rx: float, ry: float, toward: Point) -> Point:
    """Exact boundary point of an axis-aligned ellipse in the direction of `toward`"""
    dx = toward.x - center.x
    dy = toward.y - center.y
    if rx <= EPS or ry <= EPS or (abs(dx) <= EPS and abs(dy) <= EPS):
        return center
    scale = 1.0 / math.sqrt((dx / rx) ** 2 + (dy / ry) ** 2)
    if scale >= 1.0:
        return toward
    return Point(center.x + dx * scale, center.y + dy * scale)


def clip_polygon_below(polygon: Sequence[Point], y_cut: float) -> List[Point]:
    """Part of the polygon with y >= y_cut (Sutherland-Hodgman, one half-plane)"""
    result: List[Point] = []
    count = len(polygon)
    for i in range(count):
        current = polygon[i]
        following = polygon[(i + 1) % count]
        current_in = current.y >= y_cut
        following_in = following.y >= y_cut
        if current_in:
            result.append(current)
        if current_in != following_in:
            t = (y_cut - current.y) / (following.y - current.y)
            result.append(Point(current.x + (following.x - current.x) * t, y_cut))
    return result


def bounds_of(points: Sequence[Point]) -> Tuple[float, float, float, float]:
    xs = [p.x for p in points]
    ys = [p.y for p in points]
    return (min(xs), min(ys), max(xs), max(ys))
