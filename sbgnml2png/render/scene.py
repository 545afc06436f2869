"""
Scene composition module

Resolves every glyph and arc of a Diagram, orders the drawing primitives by
z-order, computes the padded canvas and translates everything to canvas
coordinates
"""
import math
from typing import Dict, List, Optional, Tuple

from ..config import RenderConfig, UNSUPPORTED_POLICIES, default_config
from ..errors import UnsupportedClassError
from ..geom.vector import union_bounds
from ..logger import ConversionLogger, get_logger
from ..mapping.shape_map import PLACEHOLDER_RECIPE, ResolvedGlyph, resolve_glyph
from ..model.diagram import Diagram, Glyph, Point
from ..model.intermediate import (
    DrawItem, LAYER_ARCS, LAYER_CONTAINERS, LAYER_MARKERS, LAYER_NODES, Scene,
)
from ..routing.arc_router import ArcRouter, RoutedArc


class SceneComposer:
    """Flattens a Diagram into an ordered, canvas-aligned drawing list"""

    def __init__(self, config: Optional[RenderConfig] = None, logger: Optional[ConversionLogger] = None):
        """
        Args:
            config: RenderConfig (default_config if None)
            logger: ConversionLogger instance
        """
        self.config = config or default_config
        self.logger = logger or get_logger()
        if self.config.on_unsupported not in UNSUPPORTED_POLICIES:
            raise ValueError(
                f"on_unsupported must be one of {UNSUPPORTED_POLICIES}, got {self.config.on_unsupported!r}"
            )

    def resolve_glyphs(self, diagram: Diagram) -> List[ResolvedGlyph]:
        """Resolve glyphs in draw order: depth-first pre-order, siblings in document order"""
        resolved: List[ResolvedGlyph] = []
        for glyph, _depth in diagram.iter_glyphs():
            item = self._resolve_one(glyph)
            if item is not None:
                resolved.append(item)
        return resolved

    def _resolve_one(self, glyph: Glyph) -> Optional[ResolvedGlyph]:
        try:
            return resolve_glyph(glyph, self.config, self.logger)
        except UnsupportedClassError:
            policy = self.config.on_unsupported
            if policy == "abort":
                raise
            self.logger.warn_unsupported_class(glyph.id, glyph.class_name, policy)
            if policy == "placeholder":
                return resolve_glyph(glyph, self.config, self.logger, recipe=PLACEHOLDER_RECIPE)
            return None

    def route_arcs(self, diagram: Diagram, resolved: Dict[str, ResolvedGlyph]) -> List[RoutedArc]:
        router = ArcRouter(diagram, resolved, self.config, self.logger)
        routed: List[RoutedArc] = []
        for arc in diagram.arcs:
            try:
                routed.append(router.route(arc))
            except UnsupportedClassError:
                if self.config.on_unsupported == "abort":
                    raise
                # No neutral arc shape exists: both lenient policies drop the arc
                self.logger.warn_unsupported_class(arc.id, arc.class_name, "skip")
        return routed

    def build_items(self, resolved: List[ResolvedGlyph], routed: List[RoutedArc]) -> List[DrawItem]:
        """Unordered-by-layer items with their z keys; sorted by compose()"""
        items: List[DrawItem] = []
        seq = 0
        for entry in resolved:
            layer = LAYER_CONTAINERS if entry.container else LAYER_NODES
            for shape in entry.shapes():
                items.append(DrawItem(shape, (layer, seq), entry.glyph.id))
                seq += 1
            for tick in entry.ticks:
                items.append(DrawItem(tick, (LAYER_MARKERS, seq), entry.glyph.id))
                seq += 1
        for arc in routed:
            items.append(DrawItem(arc.line, (LAYER_ARCS, seq), arc.arc.id))
            seq += 1
            for marker in arc.markers:
                items.append(DrawItem(marker, (LAYER_MARKERS, seq), arc.arc.id))
                seq += 1
        items.sort(key=lambda item: item.z)
        return items

    def compose(self, diagram: Diagram, padding: Optional[float] = None) -> Scene:
        """
        Compose the final drawing list.

        Args:
            diagram: Loaded diagram
            padding: Canvas padding in px (config.padding if None)

        Raises:
            UnsupportedClassError: Under the 'abort' policy
        """
        padding = self.config.padding if padding is None else float(padding)
        if padding < 0:
            raise ValueError(f"padding must be non-negative, got {padding}")

        resolved = self.resolve_glyphs(diagram)
        routed = self.route_arcs(diagram, {entry.glyph.id: entry for entry in resolved})
        items = self.build_items(resolved, routed)

        bounds = self._content_bounds(diagram, items)
        if bounds is None:
            bounds = (0.0, 0.0, 0.0, 0.0)
        min_x, min_y, max_x, max_y = bounds
        origin = Point(min_x - padding, min_y - padding)
        width = self._canvas_extent(max_x - min_x + 2.0 * padding)
        height = self._canvas_extent(max_y - min_y + 2.0 * padding)

        dx, dy = -origin.x, -origin.y
        translated = tuple(item.translated(dx, dy) for item in items)
        self.logger.debug(
            f"Composed scene: {len(translated)} items, canvas {width}x{height}, origin ({origin.x:.2f}, {origin.y:.2f})"
        )
        return Scene(width=width, height=height, items=translated, origin=origin)

    @staticmethod
    def _content_bounds(diagram: Diagram, items: List[DrawItem]) -> Optional[Tuple[float, float, float, float]]:
        bounds = None
        for glyph, _depth in diagram.iter_glyphs():
            bounds = union_bounds(bounds, glyph.bbox.bounds())
        for item in items:
            bounds = union_bounds(bounds, item.bounds())
        return bounds

    @staticmethod
    def _canvas_extent(span: float) -> int:
        # Rounding first keeps float noise from adding a pixel
        return max(int(math.ceil(round(span, 6))), 1)
