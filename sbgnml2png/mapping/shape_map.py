"""
Glyph shape mapping module

SBGN glyph class -> shape recipe table, and resolution of a Glyph into its
drawing primitives (outline, multimer ghost, decorations, clone marker,
label, orientation ticks) and port layout
"""
from dataclasses import dataclass, replace
from typing import Callable, Dict, Optional, Tuple

from ..config import (
    ASSOCIATION_FILL_COLOR, BORDER_COLOR, CLONE_MARKER_FILL_COLOR, CLONE_MARKER_HEIGHT_RATIO,
    DEFAULT_FILL_COLOR, DEFAULT_LINE_WIDTH, FONT_MAIN_PX, FONT_SMALL_PX, MIN_EXTENT_PX,
    RenderConfig, default_config,
)
from ..errors import UnsupportedClassError
from ..geom import outline as geom_outline
from ..logger import ConversionLogger, get_logger
from ..model.diagram import BBox, Glyph, Point, Port
from ..model.intermediate import (
    CircleShape, EllipseShape, Label, Marker, ORIENTATION_TICK, PolygonShape, PolylineShape,
    RectShape, RingShape, RoundedRectShape, Shape, Style,
)

ShapeBuilder = Callable[[BBox, Style], Shape]
DecorationBuilder = Callable[[BBox, Shape, Style], Tuple[Shape, ...]]


def _square(bbox: BBox, style: Style) -> Shape:
    side = min(bbox.w, bbox.h)
    center = bbox.center
    return RectShape(center.x - side / 2.0, center.y - side / 2.0, side, side, style=style)


def _rect(bbox: BBox, style: Style) -> Shape:
    return RectShape(bbox.x, bbox.y, bbox.w, bbox.h, style=style)


def _circle(bbox: BBox, style: Style) -> Shape:
    center = bbox.center
    return CircleShape(center.x, center.y, min(bbox.w, bbox.h) / 2.0, style=style)


def _ring(bbox: BBox, style: Style) -> Shape:
    center = bbox.center
    radius = max(min(bbox.w, bbox.h) / 2.0, 1.0)
    return RingShape(center.x, center.y, radius, max(radius * 0.6, 1.0), style=style)


def _ellipse(bbox: BBox, style: Style) -> Shape:
    center = bbox.center
    return EllipseShape(center.x, center.y, bbox.w / 2.0, bbox.h / 2.0, style=style)


def _rounded(bbox: BBox, style: Style) -> Shape:
    radius = max(min(bbox.w, bbox.h) * 0.1, 1.0)
    return RoundedRectShape(bbox.x, bbox.y, bbox.w, bbox.h, radius, style=style)


def _stadium(bbox: BBox, style: Style) -> Shape:
    radius = min(0.24 * max(bbox.w, bbox.h), min(bbox.w, bbox.h) / 2.0)
    return RoundedRectShape(bbox.x, bbox.y, bbox.w, bbox.h, radius, style=style)


def _polygon(points_fn) -> ShapeBuilder:
    def build(bbox: BBox, style: Style) -> Shape:
        return PolygonShape(tuple(points_fn(bbox)), style=style)
    return build


_nucleic_acid = _polygon(lambda b: geom_outline.round_bottom_rect_points(
    b.x, b.y, b.w, b.h, max(b.h * 0.3, 1.0)))
_complex = _polygon(lambda b: geom_outline.cut_rect_points(
    b.x, b.y, b.w, b.h, max(min(b.w, b.h) * 0.2, 1.0)))
_hexagon = _polygon(lambda b: geom_outline.hexagon_points(b.x, b.y, b.w, b.h))
_concave_hexagon = _polygon(lambda b: geom_outline.concave_hexagon_points(b.x, b.y, b.w, b.h))
_tag = _polygon(lambda b: geom_outline.tag_points(b.x, b.y, b.w, b.h, max(b.h * 0.3, 2.0)))
_barrel = _polygon(lambda b: geom_outline.barrel_points(b.x, b.y, b.w, b.h))


def _line_style(style: Style) -> Style:
    return Style(fill=None, stroke=style.stroke, stroke_width=style.stroke_width)


def _omitted_lines(bbox: BBox, body: Shape, style: Style) -> Tuple[Shape, ...]:
    """Two parallel NW->SE diagonals inside the square"""
    x0, y0, x1, _y1 = body.bounds()
    side = x1 - x0
    line_style = _line_style(style)
    return (
        PolylineShape((Point(x0 + 0.15 * side, y0 + 0.35 * side),
                       Point(x0 + 0.65 * side, y0 + 0.85 * side)), style=line_style),
        PolylineShape((Point(x0 + 0.35 * side, y0 + 0.15 * side),
                       Point(x0 + 0.85 * side, y0 + 0.65 * side)), style=line_style),
    )


def _source_sink_slash(bbox: BBox, body: Shape, style: Style) -> Tuple[Shape, ...]:
    return (PolylineShape((Point(bbox.x, bbox.bottom), Point(bbox.right, bbox.y)),
                          style=_line_style(style)),)


@dataclass(frozen=True)
class GlyphRecipe:
    """How one glyph class is drawn"""
    build: ShapeBuilder
    fill: Optional[str] = DEFAULT_FILL_COLOR
    stroke_width: float = DEFAULT_LINE_WIDTH
    font_px: float = FONT_MAIN_PX
    fixed_label: Optional[str] = None
    label_position: str = "center"  # 'center', 'bottom'
    fit_font: bool = False
    decorate: Optional[DecorationBuilder] = None
    # (dx, dy, reference width, reference height) of the multimer ghost
    ghost: Optional[Tuple[float, float, float, float]] = None
    container: bool = False


_PROCESS = GlyphRecipe(build=_square, fit_font=True)

GLYPH_RECIPES: Dict[str, GlyphRecipe] = {
    # Process nodes
    "process": _PROCESS,
    "omitted process": replace(_PROCESS, decorate=_omitted_lines),
    "uncertain process": replace(_PROCESS, fixed_label="?"),
    "association": GlyphRecipe(build=_circle, fill=ASSOCIATION_FILL_COLOR, fit_font=True),
    "dissociation": GlyphRecipe(build=_ring, fit_font=True),
    # Logical operators
    "and": GlyphRecipe(build=_circle, fixed_label="AND", fit_font=True),
    "or": GlyphRecipe(build=_circle, fixed_label="OR", fit_font=True),
    "not": GlyphRecipe(build=_circle, fixed_label="NOT", fit_font=True),
    # Entity pool nodes
    "macromolecule": GlyphRecipe(build=_rounded, stroke_width=2.0),
    "macromolecule multimer": GlyphRecipe(build=_rounded, stroke_width=2.0, ghost=(12.0, 12.0, 96.0, 48.0)),
    "nucleic acid feature": GlyphRecipe(build=_nucleic_acid, stroke_width=2.0),
    "nucleic acid feature multimer": GlyphRecipe(build=_nucleic_acid, stroke_width=2.0,
                                                 ghost=(12.0, 12.0, 88.0, 52.0)),
    "simple chemical": GlyphRecipe(build=_ellipse, stroke_width=2.0),
    "simple chemical multimer": GlyphRecipe(build=_ellipse, stroke_width=2.0, ghost=(5.0, 5.0, 48.0, 48.0)),
    "unspecified entity": GlyphRecipe(build=_ellipse, stroke_width=2.0),
    "complex": GlyphRecipe(build=_complex, stroke_width=4.0, label_position="bottom"),
    "complex multimer": GlyphRecipe(build=_complex, stroke_width=4.0, label_position="bottom",
                                    ghost=(16.0, 16.0, 120.0, 120.0)),
    "perturbing agent": GlyphRecipe(build=_concave_hexagon, stroke_width=2.0),
    "source and sink": GlyphRecipe(build=_ellipse, decorate=_source_sink_slash),
    "phenotype": GlyphRecipe(build=_hexagon),
    "outcome": GlyphRecipe(build=_hexagon),
    "biological activity": GlyphRecipe(build=_rect),
    "submap": GlyphRecipe(build=_rect),
    "tag": GlyphRecipe(build=_tag, font_px=FONT_SMALL_PX),
    "terminal": GlyphRecipe(build=_tag, font_px=FONT_SMALL_PX),
    # Containers
    "compartment": GlyphRecipe(build=_barrel, stroke_width=4.0, label_position="bottom", container=True),
    # Auxiliary units (own absolute bbox)
    "unit of information": GlyphRecipe(build=_rounded, font_px=FONT_SMALL_PX),
    "state variable": GlyphRecipe(build=_stadium, font_px=FONT_SMALL_PX),
    "cardinality": GlyphRecipe(build=_rounded, font_px=FONT_SMALL_PX),
}

# Neutral recipe for the 'placeholder' unsupported-class policy
PLACEHOLDER_RECIPE = GlyphRecipe(build=_rect, font_px=FONT_SMALL_PX)


def get_recipe(class_name: str, element_id: Optional[str] = None) -> GlyphRecipe:
    recipe = GLYPH_RECIPES.get(class_name)
    if recipe is None:
        raise UnsupportedClassError(class_name, element_id)
    return recipe


@dataclass(frozen=True)
class ResolvedGlyph:
    """Drawing primitives and port layout of one glyph (nested glyphs excluded)"""
    glyph: Glyph
    body: Shape
    underlays: Tuple[Shape, ...] = ()
    overlays: Tuple[Shape, ...] = ()
    ticks: Tuple[Marker, ...] = ()
    ports: Tuple[Port, ...] = ()
    container: bool = False

    def shapes(self) -> Tuple[Shape, ...]:
        return self.underlays + (self.body,) + self.overlays


def state_var_label(value: Optional[str], variable: Optional[str]) -> str:
    """State variable label in value@variable form"""
    if value and variable:
        return f"{value}@{variable}"
    return value or variable or ""


def glyph_label_text(glyph: Glyph, recipe: GlyphRecipe) -> str:
    if recipe.fixed_label is not None:
        return recipe.fixed_label
    if glyph.class_name == "state variable" and not glyph.label.strip():
        return state_var_label(glyph.state_value, glyph.state_variable)
    return glyph.label


def _label_for(glyph: Glyph, bbox: BBox, body: Shape, recipe: GlyphRecipe) -> Optional[Label]:
    text = glyph_label_text(glyph, recipe)
    if not text.strip():
        return None
    font_px = recipe.font_px
    if recipe.fit_font:
        font_px = min(font_px, max(min(bbox.w, bbox.h) * 0.4, 1.0))
    x0, y0, x1, y1 = body.bounds()
    if recipe.label_position == "bottom":
        return Label(text, (x0 + x1) / 2.0, y1 - font_px / 2.0 - 2.0, font_px)
    return Label(text, (x0 + x1) / 2.0, (y0 + y1) / 2.0, font_px)


def _clone_marker(body: Shape, style: Style) -> Tuple[Shape, ...]:
    """Lower band of the outline filled, then the outline stroked again"""
    x0, y0, x1, y1 = body.bounds()
    cut = y1 - max((y1 - y0) * CLONE_MARKER_HEIGHT_RATIO, 1.0)
    band = geom_outline.clip_polygon_below(body.outline(), cut)
    if len(band) < 3:
        return ()
    return (
        PolygonShape(tuple(band), style=Style(fill=CLONE_MARKER_FILL_COLOR, stroke=None)),
        replace(body, style=Style(fill=None, stroke=style.stroke, stroke_width=style.stroke_width)),
    )


def _ghost(recipe: GlyphRecipe, bbox: BBox, style: Style) -> Tuple[Shape, ...]:
    if recipe.ghost is None:
        return ()
    dx, dy, ref_w, ref_h = recipe.ghost
    scale = min(1.0, bbox.w / ref_w, bbox.h / ref_h)
    shifted = BBox(bbox.x + dx * scale, bbox.y + dy * scale, bbox.w, bbox.h)
    return (recipe.build(shifted, style),)


_TICK_SIDES = {
    "horizontal": ("left", "right"),
    "vertical": ("top", "bottom"),
    "left": ("left",),
    "right": ("right",),
    "up": ("top",),
    "down": ("bottom",),
}
_OUTWARD = {"left": (-1.0, 0.0), "right": (1.0, 0.0), "top": (0.0, -1.0), "bottom": (0.0, 1.0)}
_OUTWARD_ANGLE = {"left": 180.0, "right": 0.0, "top": -90.0, "bottom": 90.0}


def orientation_ticks(glyph: Glyph, ports: Tuple[Port, ...], length: float, style: Style) -> Tuple[Marker, ...]:
    """Port connector lines drawn outward from each port"""
    if not glyph.orientation:
        return ()
    sides = _TICK_SIDES.get(glyph.orientation, ())
    tick_style = _line_style(style)
    ticks = []
    for port in ports:
        if port.side not in sides:
            continue
        ux, uy = _OUTWARD[port.side]
        end = Point(port.point.x + ux * length, port.point.y + uy * length)
        ticks.append(Marker(
            kind=ORIENTATION_TICK,
            shape=PolylineShape((port.point, end), style=tick_style),
            anchor=port.point,
            angle=_OUTWARD_ANGLE[port.side],
        ))
    return tuple(ticks)


def connector_length(class_name: str, config: Optional[RenderConfig] = None) -> float:
    return (config or default_config).connector_length_for(class_name)


def _usable_bbox(glyph: Glyph, logger: Optional[ConversionLogger]) -> BBox:
    bbox = glyph.bbox
    if not bbox.is_degenerate():
        return bbox
    if logger:
        logger.warn_degenerate_geometry(glyph.id, "zero-size bbox", {"w": bbox.w, "h": bbox.h})
    return BBox(bbox.x, bbox.y, max(bbox.w, MIN_EXTENT_PX), max(bbox.h, MIN_EXTENT_PX))


def resolve_glyph(
    glyph: Glyph,
    config: Optional[RenderConfig] = None,
    logger: Optional[ConversionLogger] = None,
    recipe: Optional[GlyphRecipe] = None,
) -> ResolvedGlyph:
    """
    Resolve one glyph (not its nested glyphs) into drawing primitives.

    Args:
        glyph: Glyph to resolve
        config: RenderConfig (default_config if None)
        logger: ConversionLogger for degenerate geometry warnings
        recipe: Explicit recipe (placeholder policy); looked up by class if None

    Raises:
        UnsupportedClassError: When the class has no recipe
    """
    config = config or default_config
    if recipe is None:
        recipe = get_recipe(glyph.class_name, glyph.id)
    bbox = _usable_bbox(glyph, logger or get_logger())
    style = Style(fill=recipe.fill, stroke=BORDER_COLOR, stroke_width=recipe.stroke_width)

    body = recipe.build(bbox, style)
    underlays = _ghost(recipe, bbox, style)
    overlays: Tuple[Shape, ...] = ()
    if recipe.decorate is not None:
        overlays += recipe.decorate(bbox, body, style)
    if glyph.has_clone and config.show_clone_markers:
        overlays += _clone_marker(body, style)

    label = _label_for(glyph, bbox, body, recipe)
    if label is not None:
        if overlays:
            overlays = overlays[:-1] + (replace(overlays[-1], label=label),)
        else:
            body = replace(body, label=label)

    tick_style = Style(fill=None, stroke=BORDER_COLOR, stroke_width=config.line_width)
    ticks = orientation_ticks(glyph, glyph.ports, config.connector_length_for(glyph.class_name), tick_style)

    return ResolvedGlyph(
        glyph=glyph,
        body=body,
        underlays=underlays,
        overlays=overlays,
        ticks=ticks,
        ports=glyph.ports,
        container=recipe.container,
    )
