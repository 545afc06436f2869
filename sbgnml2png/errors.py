"""
Error taxonomy for SBGN-ML rendering

MalformedDocumentError aborts the whole document, UnsupportedClassError is
recoverable by policy, DegenerateGeometryWarning is never fatal
"""
from typing import Optional


class SbgnRenderError(Exception):
    """Base class for rendering errors"""


class MalformedDocumentError(SbgnRenderError):
    """Missing/invalid required attribute or dangling arc reference"""

    def __init__(self, element_id: Optional[str], field: str, message: Optional[str] = None):
        self.element_id = element_id
        self.field = field
        detail = message or f"missing or invalid '{field}'"
        super().__init__(f"[{element_id or '?'}] {detail}")


class UnsupportedClassError(SbgnRenderError):
    """Glyph or arc class with no entry in the recipe tables"""

    def __init__(self, class_name: str, element_id: Optional[str] = None):
        self.class_name = class_name
        self.element_id = element_id
        super().__init__(f"[{element_id or '?'}] Unsupported class: {class_name!r}")


class UnsupportedPrimitiveError(TypeError):
    """A backend received a drawing primitive it has no routine for"""


class DegenerateGeometryWarning(UserWarning):
    """Zero-size bbox or zero-length arc replaced by minimal geometry"""
