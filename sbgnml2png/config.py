"""
Configuration module

Fixed rendering constants (arrow/bar/marker sizes, colors, fonts) and the
RenderConfig dataclass shared by the resolver, router, composer and backends
"""
from dataclasses import dataclass, field
from typing import Dict, Tuple

DEFAULT_PADDING_PX = 10.0
DEFAULT_LINE_WIDTH = 1.5

# Marker geometry: arrowheads scale from ARROW_SIZE * ARROW_SCALE,
# bars use BAR_LENGTH / BAR_OFFSET with the same scale
ARROW_SIZE = 8.0
ARROW_SCALE = 1.75
BAR_LENGTH = 12.0
BAR_OFFSET = 14.0
CATALYSIS_OVERLAP_RATIO = 0.5
ARROW_HALF_WIDTH_RATIO = 0.6
CIRCLE_MARKER_RATIO = 0.4

# Orientation tick length drawn outside each port
PORT_CONNECTOR_LEN_PX = 10.0
LOGICAL_PORT_CONNECTOR_LEN_PX = 20.0

MIN_STUB_LENGTH_PX = 4.0
MIN_EXTENT_PX = 1.0

FONT_FAMILY = "Liberation Sans, Arial, Helvetica, sans-serif"
# Raster font files tried in order, matching FONT_FAMILY; Pillow's bundled font is the fallback
FONT_FILES = ("LiberationSans-Regular.ttf", "DejaVuSans.ttf", "Arial.ttf", "Helvetica.ttc")
FONT_MAIN_PX = 20.0
FONT_SMALL_PX = 12.0

BORDER_COLOR = "#555555"
DEFAULT_FILL_COLOR = "#FFFFFF"
ASSOCIATION_FILL_COLOR = "#6B6B6B"
CLONE_MARKER_FILL_COLOR = "#D1D1D1"
BACKGROUND_COLOR = "#FFFFFF"
CLONE_MARKER_HEIGHT_RATIO = 0.30

UNSUPPORTED_POLICIES = ("abort", "skip", "placeholder")


def _default_connector_lengths() -> Dict[str, float]:
    return {
        "and": LOGICAL_PORT_CONNECTOR_LEN_PX,
        "or": LOGICAL_PORT_CONNECTOR_LEN_PX,
        "not": LOGICAL_PORT_CONNECTOR_LEN_PX,
    }


@dataclass
class RenderConfig:
    """Rendering configuration (fixed defaults, overridable per run)"""
    padding: float = DEFAULT_PADDING_PX
    line_width: float = DEFAULT_LINE_WIDTH
    arrow_size: float = ARROW_SIZE
    arrow_scale: float = ARROW_SCALE
    bar_length: float = BAR_LENGTH
    bar_offset: float = BAR_OFFSET
    catalysis_overlap_ratio: float = CATALYSIS_OVERLAP_RATIO
    # Class-keyed orientation tick lengths; classes not listed use the default
    connector_lengths: Dict[str, float] = field(default_factory=_default_connector_lengths)
    default_connector_length: float = PORT_CONNECTOR_LEN_PX
    min_stub_length: float = MIN_STUB_LENGTH_PX
    supersample: int = 4
    show_clone_markers: bool = True
    on_unsupported: str = "abort"
    use_declared_endpoints: bool = False
    font_family: str = FONT_FAMILY
    font_files: Tuple[str, ...] = FONT_FILES

    @property
    def arrow_size_px(self) -> float:
        return self.arrow_size * self.arrow_scale

    @property
    def bar_length_px(self) -> float:
        return self.bar_length * self.arrow_scale

    @property
    def bar_offset_px(self) -> float:
        return self.bar_offset * self.arrow_scale

    def connector_length_for(self, class_name: str) -> float:
        """Orientation tick length for a glyph class"""
        return self.connector_lengths.get(class_name, self.default_connector_length)


# Global default configuration instance
default_config = RenderConfig()
