"""
Logging and QA module

Records unsupported classes, degenerate geometry and unresolved ports during
rendering, and provides log output for automated testing
"""
import logging
import warnings
from typing import List, Dict, Any, Optional
from dataclasses import dataclass, field

from .errors import DegenerateGeometryWarning


@dataclass
class ConversionWarning:
    """Warning during rendering"""
    element_id: Optional[str]
    warning_type: str  # 'unsupported_class', 'degenerate_geometry', 'unresolved_port'
    message: str
    details: Dict[str, Any] = field(default_factory=dict)


class ConversionLogger:
    """Logger for the rendering process"""

    def __init__(self, warn_unsupported: bool = True):
        """
        Args:
            warn_unsupported: Whether to record skipped unsupported classes
        """
        self.warn_unsupported = warn_unsupported
        self.warnings: List[ConversionWarning] = []
        self.logger = logging.getLogger('sbgnml2png')

        # Logger configuration (default)
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)
            self.logger.setLevel(logging.INFO)

    def warn_unsupported_class(self, element_id: Optional[str], class_name: str, action: str):
        """Record warning for a glyph/arc class that was skipped or replaced"""
        if not self.warn_unsupported:
            return

        message = f"Unsupported class: {class_name} ({action})"
        warning = ConversionWarning(
            element_id=element_id,
            warning_type='unsupported_class',
            message=message,
            details={'class_name': class_name, 'action': action}
        )
        self.warnings.append(warning)
        self.logger.warning(f"[{element_id}] {message}")

    def warn_degenerate_geometry(self, element_id: Optional[str], reason: str, details: Dict[str, Any] = None):
        """Record warning for zero-size or zero-length geometry"""
        message = f"Degenerate geometry: {reason}"
        warning = ConversionWarning(
            element_id=element_id,
            warning_type='degenerate_geometry',
            message=message,
            details=details or {}
        )
        self.warnings.append(warning)
        self.logger.warning(f"[{element_id}] {message}")
        warnings.warn(f"[{element_id}] {message}", DegenerateGeometryWarning, stacklevel=3)

    def warn_unresolved_port(self, element_id: Optional[str], port_id: str, mapped_to: str):
        """Record warning for a declared port mapped onto a derived port"""
        message = f"Declared port {port_id} mapped to {mapped_to}"
        warning = ConversionWarning(
            element_id=element_id,
            warning_type='unresolved_port',
            message=message,
            details={'port_id': port_id, 'mapped_to': mapped_to}
        )
        self.warnings.append(warning)
        self.logger.debug(f"[{element_id}] {message}")

    def info(self, message: str):
        """Info log"""
        self.logger.info(message)

    def debug(self, message: str):
        """Debug log"""
        self.logger.debug(message)

    def error(self, message: str):
        """Error log"""
        self.logger.error(message)

    def get_warnings(self) -> List[ConversionWarning]:
        """Get warning list"""
        return self.warnings

    def clear_warnings(self):
        """Clear warning list"""
        self.warnings.clear()


# Global logger instance
_default_logger = ConversionLogger()


def get_logger() -> ConversionLogger:
    """Get default logger"""
    return _default_logger
