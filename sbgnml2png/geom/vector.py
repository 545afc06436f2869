"""Small 2D vector helpers over model Points"""
import math
from typing import Optional, Tuple

from ..model.diagram import Point

EPS = 1e-9


def unit_vector(start: Point, end: Point) -> Optional[Tuple[float, float]]:
    """Unit direction start -> end, or None when the points coincide"""
    dx = end.x - start.x
    dy = end.y - start.y
    length = math.hypot(dx, dy)
    if length <= EPS:
        return None
    return (dx / length, dy / length)


def along(point: Point, direction: Tuple[float, float], distance: float) -> Point:
    return Point(point.x + direction[0] * distance, point.y + direction[1] * distance)


def perpendicular(direction: Tuple[float, float]) -> Tuple[float, float]:
    return (-direction[1], direction[0])


def angle_degrees(direction: Tuple[float, float]) -> float:
    return math.degrees(math.atan2(direction[1], direction[0]))


def union_bounds(a, b):
    if a is None:
        return b
    if b is None:
        return a
    return (min(a[0], b[0]), min(a[1], b[1]), max(a[2], b[2]), max(a[3], b[3]))
