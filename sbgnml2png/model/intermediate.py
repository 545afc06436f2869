"""
Intermediate drawing model

Shape variants, markers and draw items produced by the resolver/router and
consumed unchanged by the SVG and raster backends
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Optional, Tuple, Union

from ..config import BORDER_COLOR, DEFAULT_FILL_COLOR, DEFAULT_LINE_WIDTH
from ..geom import outline as geom_outline
from .diagram import Point

Bounds = Tuple[float, float, float, float]

# Marker kinds
ARROWHEAD = "arrowhead"
OPEN_TRIANGLE = "open_triangle"
OPAQUE_TRIANGLE = "opaque_triangle"
BAR = "bar"
CATALYSIS_CIRCLE = "catalysis_circle"
OPEN_CIRCLE = "open_circle"
OPAQUE_DIAMOND = "opaque_diamond"
ORIENTATION_TICK = "orientation_tick"

# Draw layers (first component of the z-order key)
LAYER_CONTAINERS = 0
LAYER_NODES = 1
LAYER_ARCS = 2
LAYER_MARKERS = 3


@dataclass(frozen=True)
class Style:
    """Fill / stroke; None means no paint"""
    fill: Optional[str] = DEFAULT_FILL_COLOR
    stroke: Optional[str] = BORDER_COLOR
    stroke_width: float = DEFAULT_LINE_WIDTH


@dataclass(frozen=True)
class Label:
    """Single-line text centered on (x, y)"""
    text: str
    x: float
    y: float
    font_px: float
    color: str = BORDER_COLOR

    def translated(self, dx: float, dy: float) -> "Label":
        return replace(self, x=self.x + dx, y=self.y + dy)


class Shape:
    """Common behaviour of the drawing primitives"""

    style: Style
    label: Optional[Label]

    def outline(self) -> Tuple[Point, ...]:
        raise NotImplementedError

    def bounds(self) -> Bounds:
        return geom_outline.bounds_of(self.outline())

    def _moved(self, dx: float, dy: float) -> dict:
        raise NotImplementedError

    def translated(self, dx: float, dy: float) -> "Shape":
        label = self.label.translated(dx, dy) if self.label is not None else None
        return replace(self, label=label, **self._moved(dx, dy))


@dataclass(frozen=True)
class RectShape(Shape):
    x: float
    y: float
    w: float
    h: float
    style: Style = field(default_factory=Style)
    label: Optional[Label] = None

    def outline(self):
        return tuple(geom_outline.rect_points(self.x, self.y, self.w, self.h))

    def _moved(self, dx, dy):
        return {"x": self.x + dx, "y": self.y + dy}


@dataclass(frozen=True)
class RoundedRectShape(Shape):
    x: float
    y: float
    w: float
    h: float
    radius: float
    style: Style = field(default_factory=Style)
    label: Optional[Label] = None

    def outline(self):
        return tuple(geom_outline.rounded_rect_points(self.x, self.y, self.w, self.h, self.radius))

    def bounds(self):
        return (self.x, self.y, self.x + self.w, self.y + self.h)

    def _moved(self, dx, dy):
        return {"x": self.x + dx, "y": self.y + dy}


@dataclass(frozen=True)
class CircleShape(Shape):
    cx: float
    cy: float
    r: float
    style: Style = field(default_factory=Style)
    label: Optional[Label] = None

    def outline(self):
        return tuple(geom_outline.ellipse_points(self.cx, self.cy, self.r, self.r))

    def bounds(self):
        return (self.cx - self.r, self.cy - self.r, self.cx + self.r, self.cy + self.r)

    def _moved(self, dx, dy):
        return {"cx": self.cx + dx, "cy": self.cy + dy}


@dataclass(frozen=True)
class EllipseShape(Shape):
    cx: float
    cy: float
    rx: float
    ry: float
    style: Style = field(default_factory=Style)
    label: Optional[Label] = None

    def outline(self):
        return tuple(geom_outline.ellipse_points(self.cx, self.cy, self.rx, self.ry))

    def bounds(self):
        return (self.cx - self.rx, self.cy - self.ry, self.cx + self.rx, self.cy + self.ry)

    def _moved(self, dx, dy):
        return {"cx": self.cx + dx, "cy": self.cy + dy}


@dataclass(frozen=True)
class RingShape(Shape):
    """Outer circle plus a concentric inner circle (dissociation)"""
    cx: float
    cy: float
    r: float
    inner_r: float
    style: Style = field(default_factory=Style)
    label: Optional[Label] = None

    def outline(self):
        return tuple(geom_outline.ellipse_points(self.cx, self.cy, self.r, self.r))

    def bounds(self):
        return (self.cx - self.r, self.cy - self.r, self.cx + self.r, self.cy + self.r)

    def _moved(self, dx, dy):
        return {"cx": self.cx + dx, "cy": self.cy + dy}


@dataclass(frozen=True)
class PolygonShape(Shape):
    """Closed path given by its (already flattened) vertices"""
    points: Tuple[Point, ...]
    style: Style = field(default_factory=Style)
    label: Optional[Label] = None

    def outline(self):
        return self.points

    def _moved(self, dx, dy):
        return {"points": tuple(p.translated(dx, dy) for p in self.points)}


@dataclass(frozen=True)
class PolylineShape(Shape):
    """Open path: arc lines, decorations, orientation ticks, bars"""
    points: Tuple[Point, ...]
    style: Style = field(default_factory=lambda: Style(fill=None))
    label: Optional[Label] = None

    def outline(self):
        return self.points

    def _moved(self, dx, dy):
        return {"points": tuple(p.translated(dx, dy) for p in self.points)}


@dataclass(frozen=True)
class Marker:
    """Decoration anchored to an arc endpoint or a port"""
    kind: str
    shape: Shape
    anchor: Point
    angle: float = 0.0

    def bounds(self) -> Bounds:
        return self.shape.bounds()

    def translated(self, dx: float, dy: float) -> "Marker":
        return replace(self, shape=self.shape.translated(dx, dy), anchor=self.anchor.translated(dx, dy))


Element = Union[Shape, Marker]


@dataclass(frozen=True)
class DrawItem:
    element: Element
    z: Tuple[int, int]
    owner_id: Optional[str] = None

    @property
    def shape(self) -> Shape:
        """The primitive to draw (markers draw their geometry shape)"""
        if isinstance(self.element, Marker):
            return self.element.shape
        return self.element

    @property
    def is_marker(self) -> bool:
        return isinstance(self.element, Marker)

    def bounds(self) -> Bounds:
        return self.element.bounds()

    def translated(self, dx: float, dy: float) -> "DrawItem":
        return replace(self, element=self.element.translated(dx, dy))


@dataclass(frozen=True)
class Scene:
    """Composed drawing list in canvas coordinates"""
    width: int
    height: int
    items: Tuple[DrawItem, ...]
    origin: Point = Point(0.0, 0.0)
