"""Shared fixtures: project root, sample paths and an SBGN-ML document builder."""

from pathlib import Path
from typing import Callable

import pytest

from sbgnml2png.io.sbgn_loader import SbgnLoader
from sbgnml2png.logger import ConversionLogger
from sbgnml2png.model.diagram import Diagram

# Repository root (sbgnml2png/)
ROOT_DIR = Path(__file__).resolve().parent.parent

SBGN_NS = "http://sbgn.org/libsbgn/0.2"


def sbgn_document(body: str, language: str = "process description") -> str:
    """Wrap glyph/arc markup in an <sbgn><map> document."""
    return (
        f'<sbgn xmlns="{SBGN_NS}"><map language="{language}">'
        f"{body}"
        "</map></sbgn>"
    )


@pytest.fixture
def sample_dir() -> Path:
    """Path to the sample/ directory."""
    return ROOT_DIR / "sample"


@pytest.fixture
def sample_sbgn_path(sample_dir: Path) -> Path:
    """Path to sample/sample.sbgn."""
    path = sample_dir / "sample.sbgn"
    if not path.exists():
        pytest.skip(f"Sample file not found: {path}")
    return path


@pytest.fixture
def logger() -> ConversionLogger:
    return ConversionLogger()


@pytest.fixture
def load_diagram(logger: ConversionLogger) -> Callable[[str], Diagram]:
    """Build a Diagram from the inner markup of a <map>."""
    loader = SbgnLoader(logger=logger)

    def _load(body: str) -> Diagram:
        return loader.build_diagram(loader.load_string(sbgn_document(body)))

    return _load
