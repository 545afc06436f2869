"""
Rendering pipeline

Diagram -> Scene -> (SVG text, raster image), plus a file-to-file helper
"""
from pathlib import Path
from typing import Optional, Tuple, Union

from PIL import Image

from .config import RenderConfig, default_config
from .io.raster_writer import RasterRenderer, encode_png
from .io.sbgn_loader import SbgnLoader
from .io.svg_writer import SVGWriter
from .logger import ConversionLogger, get_logger
from .model.diagram import Diagram
from .render.scene import SceneComposer


def render(
    diagram: Diagram,
    padding: Optional[float] = None,
    config: Optional[RenderConfig] = None,
    logger: Optional[ConversionLogger] = None,
) -> Tuple[str, Image.Image]:
    """
    Render a diagram to SVG markup and a raster image of the same canvas.

    Args:
        diagram: Loaded diagram
        padding: Canvas padding in px (config.padding if None)
        config: RenderConfig (default_config if None)
        logger: ConversionLogger (module default if None)

    Returns:
        (svg_text, image)
    """
    config = config or default_config
    logger = logger or get_logger()

    scene = SceneComposer(config, logger).compose(diagram, padding)
    svg_text = SVGWriter(logger=logger, config=config).write_string(scene)
    image = RasterRenderer(logger=logger, config=config).render(scene)
    return svg_text, image


def render_file(
    input_path: Union[str, Path],
    png_path: Union[str, Path],
    svg_path: Union[str, Path, None] = None,
    padding: Optional[float] = None,
    config: Optional[RenderConfig] = None,
    logger: Optional[ConversionLogger] = None,
) -> Tuple[Path, Path]:
    """
    Read an SBGN-ML file and write the PNG and SVG renderings.

    Nothing is written when loading or rendering fails.

    Args:
        input_path: SBGN-ML file
        png_path: PNG output path
        svg_path: SVG output path (png_path with a .svg suffix if None)

    Returns:
        (png_path, svg_path) actually written
    """
    logger = logger or get_logger()
    png_path = Path(png_path)
    svg_path = Path(svg_path) if svg_path is not None else png_path.with_suffix(".svg")

    diagram = SbgnLoader(logger=logger).load_diagram(input_path)
    svg_text, image = render(diagram, padding=padding, config=config, logger=logger)
    png_bytes = encode_png(image)

    png_path.write_bytes(png_bytes)
    svg_path.write_text(svg_text, encoding="utf-8")
    logger.info(f"Rendered {len(diagram.all_glyphs())} glyphs and {len(diagram.arcs)} arcs ({image.width}x{image.height})")
    return png_path, svg_path
