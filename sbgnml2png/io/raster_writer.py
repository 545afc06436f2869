"""
Raster output module

Rasterizes a composed Scene with Pillow. The scene is drawn at an integer
supersampling factor and box-filtered down to the canvas size, so curved
outlines and diagonal arcs come out anti-aliased.
"""
from functools import lru_cache
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Type
import io

from PIL import Image, ImageDraw, ImageFont

from ..config import BACKGROUND_COLOR, RenderConfig, default_config
from ..errors import UnsupportedPrimitiveError
from ..logger import ConversionLogger
from ..model.diagram import Point
from ..model.intermediate import (
    CircleShape, DrawItem, EllipseShape, Label, PolygonShape, PolylineShape,
    RectShape, RingShape, RoundedRectShape, Scene, Shape, Style,
)

XY = Tuple[float, float]


@lru_cache(maxsize=32)
def _font(size_px: int, font_files: Tuple[str, ...] = ()) -> ImageFont.FreeTypeFont:
    """First loadable font file at size_px, else Pillow's default font"""
    for name in font_files:
        try:
            return ImageFont.truetype(name, size_px)
        except OSError:
            continue
    return ImageFont.load_default(size=size_px)


class _Canvas:
    """ImageDraw wrapper that scales scene coordinates by the supersampling factor"""

    def __init__(self, image: Image.Image, scale: int, font_files: Tuple[str, ...] = ()):
        self.draw = ImageDraw.Draw(image)
        self.scale = scale
        self.font_files = tuple(font_files)

    def xy(self, points: Sequence[Point]) -> List[XY]:
        s = self.scale
        return [(p.x * s, p.y * s) for p in points]

    def width(self, style: Style) -> int:
        return max(int(round(style.stroke_width * self.scale)), 1)

    def fill_polygon(self, points: Sequence[Point], style: Style) -> None:
        if style.fill and len(points) >= 3:
            self.draw.polygon(self.xy(points), fill=style.fill)

    def stroke_path(self, points: Sequence[Point], style: Style, closed: bool) -> None:
        if not style.stroke or len(points) < 2:
            return
        xy = self.xy(points)
        if closed:
            xy.append(xy[0])
        self.draw.line(xy, fill=style.stroke, width=self.width(style), joint="curve")

    def ellipse(self, cx: float, cy: float, rx: float, ry: float, style: Style) -> None:
        s = self.scale
        box = [(cx - rx) * s, (cy - ry) * s, (cx + rx) * s, (cy + ry) * s]
        if style.fill:
            self.draw.ellipse(box, fill=style.fill)
        if style.stroke:
            width = self.width(style)
            # Pillow strokes inward from the box; widen it so the stroke is centered
            half = width / 2.0
            outer = [box[0] - half, box[1] - half, box[2] + half, box[3] + half]
            self.draw.ellipse(outer, outline=style.stroke, width=width)

    def text(self, label: Label) -> None:
        s = self.scale
        font = _font(max(int(round(label.font_px * s)), 1), self.font_files)
        self.draw.text((label.x * s, label.y * s), label.text, fill=label.color, font=font, anchor="mm")


def _draw_outline(canvas: _Canvas, shape: Shape) -> None:
    points = shape.outline()
    canvas.fill_polygon(points, shape.style)
    canvas.stroke_path(points, shape.style, closed=True)


def _draw_circle(canvas: _Canvas, shape: CircleShape) -> None:
    canvas.ellipse(shape.cx, shape.cy, shape.r, shape.r, shape.style)


def _draw_ellipse(canvas: _Canvas, shape: EllipseShape) -> None:
    canvas.ellipse(shape.cx, shape.cy, shape.rx, shape.ry, shape.style)


def _draw_ring(canvas: _Canvas, shape: RingShape) -> None:
    canvas.ellipse(shape.cx, shape.cy, shape.r, shape.r, shape.style)
    inner = Style(fill=None, stroke=shape.style.stroke, stroke_width=shape.style.stroke_width)
    canvas.ellipse(shape.cx, shape.cy, shape.inner_r, shape.inner_r, inner)


def _draw_polyline(canvas: _Canvas, shape: PolylineShape) -> None:
    canvas.stroke_path(shape.points, shape.style, closed=False)


_PAINTERS: Dict[Type[Shape], Callable[[_Canvas, Shape], None]] = {
    RectShape: _draw_outline,
    RoundedRectShape: _draw_outline,
    CircleShape: _draw_circle,
    EllipseShape: _draw_ellipse,
    RingShape: _draw_ring,
    PolygonShape: _draw_outline,
    PolylineShape: _draw_polyline,
}


class RasterRenderer:
    """Pillow rasterizer for composed scenes"""

    def __init__(self, logger: Optional[ConversionLogger] = None, config: Optional[RenderConfig] = None):
        """
        Args:
            logger: ConversionLogger instance
            config: RenderConfig instance (uses default_config if None)
        """
        self.config = config or default_config
        self.logger = logger

    def render(self, scene: Scene) -> Image.Image:
        """
        Rasterize a scene to an RGB image of exactly scene.width x scene.height.

        Raises:
            UnsupportedPrimitiveError: When an item has no painter
        """
        scale = max(int(self.config.supersample), 1)
        image = Image.new("RGB", (scene.width * scale, scene.height * scale), BACKGROUND_COLOR)
        canvas = _Canvas(image, scale, self.config.font_files)

        for item in scene.items:
            self._paint(canvas, item)

        if scale > 1:
            image = image.resize((scene.width, scene.height), Image.Resampling.BOX)
        return image

    @staticmethod
    def _paint(canvas: _Canvas, item: DrawItem) -> None:
        shape = item.shape
        painter = _PAINTERS.get(type(shape))
        if painter is None:
            raise UnsupportedPrimitiveError(f"No raster painter for primitive {type(shape).__name__}")
        painter(canvas, shape)
        if shape.label is not None:
            canvas.text(shape.label)


def encode_png(image: Image.Image) -> bytes:
    """Encode an image as PNG bytes"""
    out = io.BytesIO()
    image.save(out, format="PNG")
    return out.getvalue()


def image_to_rgba(image: Image.Image) -> bytes:
    """Raw RGBA8 pixel buffer, row-major"""
    return image.convert("RGBA").tobytes()
