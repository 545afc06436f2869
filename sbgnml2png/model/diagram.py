"""
Document model

Typed, immutable representation of an SBGN-ML map: glyphs (with nested glyphs
and derived ports), arcs, and the id -> anchor lookup used by the router
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple, Union

# Glyph classes that own two ports on opposite sides
PROCESS_CLASSES = frozenset({"process", "omitted process", "uncertain process"})
LOGICAL_CLASSES = frozenset({"and", "or", "not"})
PORTED_CLASSES = PROCESS_CLASSES | LOGICAL_CLASSES | {"association", "dissociation"}

ORIENTATIONS = ("horizontal", "vertical", "left", "right", "up", "down")


@dataclass(frozen=True)
class Point:
    x: float
    y: float

    def translated(self, dx: float, dy: float) -> "Point":
        return Point(self.x + dx, self.y + dy)

    def distance_to(self, other: "Point") -> float:
        return math.hypot(other.x - self.x, other.y - self.y)


@dataclass(frozen=True)
class BBox:
    """Absolute bounding box (top-left origin)"""
    x: float
    y: float
    w: float
    h: float

    @property
    def center(self) -> Point:
        return Point(self.x + self.w / 2.0, self.y + self.h / 2.0)

    @property
    def right(self) -> float:
        return self.x + self.w

    @property
    def bottom(self) -> float:
        return self.y + self.h

    def is_degenerate(self) -> bool:
        return self.w <= 0 or self.h <= 0

    def bounds(self) -> Tuple[float, float, float, float]:
        return (min(self.x, self.right), min(self.y, self.bottom),
                max(self.x, self.right), max(self.y, self.bottom))


@dataclass(frozen=True)
class Port:
    id: str
    glyph_id: str
    side: str  # 'left', 'right', 'top', 'bottom'
    point: Point


@dataclass(frozen=True)
class Glyph:
    id: str
    class_name: str
    bbox: BBox
    orientation: Optional[str] = None
    label: str = ""
    glyphs: Tuple["Glyph", ...] = ()
    ports: Tuple[Port, ...] = ()
    has_clone: bool = False
    state_value: Optional[str] = None
    state_variable: Optional[str] = None

    @property
    def is_ported(self) -> bool:
        return self.class_name in PORTED_CLASSES

    def walk(self, depth: int = 0) -> Iterator[Tuple["Glyph", int]]:
        """Depth-first pre-order walk (self first, then nested glyphs in document order)"""
        yield self, depth
        for child in self.glyphs:
            yield from child.walk(depth + 1)


@dataclass(frozen=True)
class Arc:
    id: str
    class_name: str
    source: str
    target: str
    waypoints: Tuple[Point, ...] = ()
    start: Optional[Point] = None
    end: Optional[Point] = None


Anchor = Union[Glyph, Port]


@dataclass(frozen=True)
class AnchorIndex:
    """id -> glyph / port lookup, built once after loading"""
    glyphs: Dict[str, Glyph] = field(default_factory=dict)
    ports: Dict[str, Port] = field(default_factory=dict)

    @classmethod
    def build(cls, glyphs: Tuple[Glyph, ...], port_aliases: Optional[Dict[str, str]] = None) -> "AnchorIndex":
        glyph_map: Dict[str, Glyph] = {}
        port_map: Dict[str, Port] = {}
        for top in glyphs:
            for glyph, _depth in top.walk():
                glyph_map[glyph.id] = glyph
                for port in glyph.ports:
                    port_map[port.id] = port
        for alias, target in (port_aliases or {}).items():
            if target in port_map:
                port_map.setdefault(alias, port_map[target])
            elif target in glyph_map:
                glyph_map.setdefault(alias, glyph_map[target])
        return cls(glyphs=glyph_map, ports=port_map)

    def __contains__(self, ref_id: str) -> bool:
        return ref_id in self.glyphs or ref_id in self.ports

    def resolve(self, ref_id: str) -> Optional[Anchor]:
        if ref_id in self.ports:
            return self.ports[ref_id]
        return self.glyphs.get(ref_id)


@dataclass(frozen=True)
class Diagram:
    glyphs: Tuple[Glyph, ...] = ()
    arcs: Tuple[Arc, ...] = ()
    index: AnchorIndex = field(default_factory=AnchorIndex)

    def iter_glyphs(self) -> Iterator[Tuple[Glyph, int]]:
        for glyph in self.glyphs:
            yield from glyph.walk()

    def all_glyphs(self) -> List[Glyph]:
        return [glyph for glyph, _ in self.iter_glyphs()]


def default_orientation(class_name: str, orientation: Optional[str]) -> Optional[str]:
    """Ported classes default to horizontal; other classes keep what was given"""
    if orientation:
        return orientation
    if class_name in PORTED_CLASSES:
        return "horizontal"
    return None


def port_sides(orientation: Optional[str]) -> Tuple[str, str]:
    if orientation in ("vertical", "up", "down"):
        return ("top", "bottom")
    return ("left", "right")


def derive_ports(glyph_id: str, class_name: str, bbox: BBox, orientation: Optional[str]) -> Tuple[Port, ...]:
    """
    Two ports on the midpoints of opposite sides of the drawn outline.

    Process-like outlines are squares of side min(w, h) centered in the bbox;
    logical operators and association/dissociation are circles of the same
    diameter, so both use the same half-extent.
    """
    if class_name not in PORTED_CLASSES:
        return ()
    center = bbox.center
    half = max(min(bbox.w, bbox.h), 0.0) / 2.0
    offsets = {
        "left": (-half, 0.0),
        "right": (half, 0.0),
        "top": (0.0, -half),
        "bottom": (0.0, half),
    }
    ports = []
    for side in port_sides(orientation):
        dx, dy = offsets[side]
        ports.append(Port(
            id=f"{glyph_id}.{side}",
            glyph_id=glyph_id,
            side=side,
            point=Point(center.x + dx, center.y + dy),
        ))
    return tuple(ports)
