"""
SVG output module

Serializes a composed Scene to SVG markup using lxml; one SVG element per
drawing primitive, in scene order
"""
from typing import Callable, Dict, Optional, Type

from lxml import etree as ET

from ..config import BACKGROUND_COLOR, RenderConfig, default_config
from ..errors import UnsupportedPrimitiveError
from ..logger import ConversionLogger
from ..model.intermediate import (
    CircleShape, DrawItem, EllipseShape, Label, PolygonShape, PolylineShape,
    RectShape, RingShape, RoundedRectShape, Scene, Shape, Style,
)

NS_SVG = 'http://www.w3.org/2000/svg'
NSMAP_SVG = {None: NS_SVG}


def _s(tag_name: str) -> str:
    """Create SVG namespace-qualified tag name"""
    return f'{{{NS_SVG}}}{tag_name}'


def fmt(value: float) -> str:
    """Fixed two-decimal formatting with trailing zeros stripped"""
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def _points_attr(points) -> str:
    return " ".join(f"{fmt(p.x)},{fmt(p.y)}" for p in points)


def _apply_style(element: ET._Element, style: Style) -> None:
    element.set("fill", style.fill or "none")
    element.set("stroke", style.stroke or "none")
    if style.stroke:
        element.set("stroke-width", fmt(style.stroke_width))


def _rect(parent: ET._Element, shape: RectShape) -> ET._Element:
    el = ET.SubElement(parent, _s("rect"), x=fmt(shape.x), y=fmt(shape.y),
                       width=fmt(shape.w), height=fmt(shape.h))
    _apply_style(el, shape.style)
    return el


def _rounded_rect(parent: ET._Element, shape: RoundedRectShape) -> ET._Element:
    radius = max(0.0, min(shape.radius, shape.w / 2.0, shape.h / 2.0))
    el = ET.SubElement(parent, _s("rect"), x=fmt(shape.x), y=fmt(shape.y),
                       width=fmt(shape.w), height=fmt(shape.h), rx=fmt(radius), ry=fmt(radius))
    _apply_style(el, shape.style)
    return el


def _circle(parent: ET._Element, shape: CircleShape) -> ET._Element:
    el = ET.SubElement(parent, _s("circle"), cx=fmt(shape.cx), cy=fmt(shape.cy), r=fmt(shape.r))
    _apply_style(el, shape.style)
    return el


def _ellipse(parent: ET._Element, shape: EllipseShape) -> ET._Element:
    el = ET.SubElement(parent, _s("ellipse"), cx=fmt(shape.cx), cy=fmt(shape.cy),
                       rx=fmt(shape.rx), ry=fmt(shape.ry))
    _apply_style(el, shape.style)
    return el


def _ring(parent: ET._Element, shape: RingShape) -> ET._Element:
    group = ET.SubElement(parent, _s("g"))
    outer = ET.SubElement(group, _s("circle"), cx=fmt(shape.cx), cy=fmt(shape.cy), r=fmt(shape.r))
    _apply_style(outer, shape.style)
    inner = ET.SubElement(group, _s("circle"), cx=fmt(shape.cx), cy=fmt(shape.cy), r=fmt(shape.inner_r))
    _apply_style(inner, Style(fill=None, stroke=shape.style.stroke, stroke_width=shape.style.stroke_width))
    return group


def _polygon(parent: ET._Element, shape) -> ET._Element:
    el = ET.SubElement(parent, _s("polygon"), points=_points_attr(shape.outline()))
    _apply_style(el, shape.style)
    return el


def _polyline(parent: ET._Element, shape: PolylineShape) -> ET._Element:
    el = ET.SubElement(parent, _s("polyline"), points=_points_attr(shape.points))
    _apply_style(el, Style(fill=None, stroke=shape.style.stroke, stroke_width=shape.style.stroke_width))
    el.set("stroke-linejoin", "round")
    return el


_ELEMENT_BUILDERS: Dict[Type[Shape], Callable[[ET._Element, Shape], ET._Element]] = {
    RectShape: _rect,
    RoundedRectShape: _rounded_rect,
    CircleShape: _circle,
    EllipseShape: _ellipse,
    RingShape: _ring,
    PolygonShape: _polygon,
    PolylineShape: _polyline,
}


class SVGWriter:
    """SVG document writer"""

    def __init__(self, logger: Optional[ConversionLogger] = None, config: Optional[RenderConfig] = None):
        """
        Args:
            logger: ConversionLogger instance
            config: RenderConfig instance (uses default_config if None)
        """
        self.config = config or default_config
        self.logger = logger

    def build(self, scene: Scene) -> ET._Element:
        """Build the <svg> element tree for a scene"""
        root = ET.Element(_s("svg"), nsmap=NSMAP_SVG)
        root.set("version", "1.1")
        root.set("width", str(scene.width))
        root.set("height", str(scene.height))
        root.set("viewBox", f"0 0 {scene.width} {scene.height}")
        ET.SubElement(root, _s("rect"), x="0", y="0", width=str(scene.width),
                      height=str(scene.height), fill=BACKGROUND_COLOR)

        for item in scene.items:
            self._add_item(root, item)
        return root

    def write_string(self, scene: Scene) -> str:
        root = self.build(scene)
        return ET.tostring(root, pretty_print=True, xml_declaration=True, encoding="UTF-8").decode("utf-8")

    def _add_item(self, root: ET._Element, item: DrawItem) -> None:
        shape = item.shape
        builder = _ELEMENT_BUILDERS.get(type(shape))
        if builder is None:
            raise UnsupportedPrimitiveError(f"No SVG element for primitive {type(shape).__name__}")
        element = builder(root, shape)
        if item.owner_id:
            element.set("data-owner", item.owner_id)
        element.set("class", item.element.kind if item.is_marker else "shape")
        if shape.label is not None:
            self._add_label(root, shape.label, item.owner_id)

    def _add_label(self, root: ET._Element, label: Label, owner_id: Optional[str]) -> None:
        text = ET.SubElement(root, _s("text"), x=fmt(label.x), y=fmt(label.y))
        text.set("font-family", self.config.font_family)
        text.set("font-size", fmt(label.font_px))
        text.set("fill", label.color)
        text.set("text-anchor", "middle")
        text.set("dominant-baseline", "central")
        if owner_id:
            text.set("data-owner", owner_id)
        text.text = label.text
