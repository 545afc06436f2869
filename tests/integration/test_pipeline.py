"""
End-to-end tests for the rendering pipeline (render, render_file) on the sample diagram.
"""
from __future__ import annotations

from pathlib import Path

import pytest
from lxml import etree as ET

from sbgnml2png.errors import MalformedDocumentError
from sbgnml2png.io.sbgn_loader import SbgnLoader
from sbgnml2png.io.svg_writer import NS_SVG
from sbgnml2png.logger import ConversionLogger
from sbgnml2png.pipeline import render, render_file


@pytest.fixture
def sample_diagram(sample_sbgn_path: Path):
    return SbgnLoader().load_diagram(sample_sbgn_path)


def test_render_svg_and_image_share_canvas(sample_diagram) -> None:
    svg_text, image = render(sample_diagram)
    root = ET.fromstring(svg_text.encode("utf-8"))
    assert (int(root.get("width")), int(root.get("height"))) == image.size
    # compartment (20, 20, 560, 320) is the outermost glyph; default padding 10
    assert image.size == (580, 340)


def test_render_every_glyph_drawn(sample_diagram) -> None:
    svg_text, _image = render(sample_diagram)
    root = ET.fromstring(svg_text.encode("utf-8"))
    owners = {el.get("data-owner") for el in root.iter() if el.get("data-owner")}
    expected = {glyph.id for glyph in sample_diagram.all_glyphs()} | {arc.id for arc in sample_diagram.arcs}
    assert expected <= owners


def test_render_labels(sample_diagram) -> None:
    svg_text, _image = render(sample_diagram)
    root = ET.fromstring(svg_text.encode("utf-8"))
    texts = [el.text for el in root.iter(f"{{{NS_SVG}}}text")]
    assert "cytosol" in texts
    assert "T202" in texts
    assert "P@T202" in texts
    assert texts.count("ERK") == 2


def test_render_is_deterministic(sample_diagram) -> None:
    svg_a, image_a = render(sample_diagram)
    svg_b, image_b = render(sample_diagram)
    assert svg_a == svg_b
    assert image_a.tobytes() == image_b.tobytes()


def test_render_file_writes_both_outputs(sample_sbgn_path: Path, tmp_path: Path) -> None:
    png_path, svg_path = render_file(sample_sbgn_path, tmp_path / "sample.png", logger=ConversionLogger())
    assert png_path.read_bytes()[:4] == b"\x89PNG"
    assert svg_path == tmp_path / "sample.svg"
    assert svg_path.read_text(encoding="utf-8").startswith("<?xml")


def test_render_file_malformed_writes_nothing(tmp_path: Path) -> None:
    src = tmp_path / "broken.sbgn"
    src.write_text("<sbgn><map><glyph id='g' class='macromolecule'></map>", encoding="utf-8")
    with pytest.raises(MalformedDocumentError):
        render_file(src, tmp_path / "out.png", tmp_path / "out.svg")
    assert list(tmp_path.iterdir()) == [src]
