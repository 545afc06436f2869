"""
Geometry helpers shared by the resolver, the arc router and the scene composer.
"""
from .outline import (
    clip_polygon_below,
    clip_to_ellipse,
    clip_to_polygon,
)
from .vector import (
    along,
    angle_degrees,
    perpendicular,
    unit_vector,
)

__all__ = [
    "along",
    "angle_degrees",
    "clip_polygon_below",
    "clip_to_ellipse",
    "clip_to_polygon",
    "perpendicular",
    "unit_vector",
]
