"""
SBGN-ML loading and parsing module

Provides loading of .sbgn/.sbgnml/.xml files, the <map> lookup, and
conversion of <glyph>/<arc> elements (bbox, label, state, clone, ports,
nested glyphs) into the typed Diagram model
"""
import math
import re
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from lxml import etree as ET

from ..errors import MalformedDocumentError
from ..logger import ConversionLogger
from ..model.diagram import (
    AnchorIndex, Arc, BBox, Diagram, Glyph, Point, ORIENTATIONS,
    default_orientation, derive_ports,
)


def local_name(element: ET._Element) -> str:
    """Tag name without the SBGN-ML namespace"""
    tag = element.tag
    if not isinstance(tag, str):
        return ""
    return ET.QName(tag).localname


def normalize_class(class_name: Optional[str]) -> str:
    """'necessary-stimulation' / 'Necessary_Stimulation' -> 'necessary stimulation'"""
    if not class_name:
        return ""
    return re.sub(r"[\s_\-]+", " ", class_name.strip().lower())


class SbgnLoader:
    """SBGN-ML file loading and Diagram building"""

    def __init__(self, logger: Optional[ConversionLogger] = None):
        """
        Args:
            logger: ConversionLogger instance
        """
        self.logger = logger

    def load_file(self, path: Union[str, Path]) -> ET._Element:
        """
        Load an SBGN-ML file and return its root element

        Raises:
            MalformedDocumentError: When the file is not well-formed XML
        """
        try:
            tree = ET.parse(str(path))
        except ET.XMLSyntaxError as e:
            raise MalformedDocumentError(None, "xml", f"Failed to parse SBGN XML: {e}") from e
        return tree.getroot()

    def load_string(self, text: Union[str, bytes]) -> ET._Element:
        if isinstance(text, str):
            text = text.encode("utf-8")
        try:
            return ET.fromstring(text)
        except ET.XMLSyntaxError as e:
            raise MalformedDocumentError(None, "xml", f"Failed to parse SBGN XML: {e}") from e

    def load_diagram(self, path: Union[str, Path]) -> Diagram:
        return self.build_diagram(self.load_file(path))

    def build_diagram(self, root: ET._Element) -> Diagram:
        """
        Convert the <map> of an SBGN-ML tree into a Diagram

        Raises:
            MalformedDocumentError: Missing id/class/bbox, duplicate ids,
                or an arc referencing an unknown glyph/port id
        """
        map_node = self._find_map(root)
        seen_ids: Dict[str, str] = {}
        port_aliases: Dict[str, str] = {}

        glyphs: List[Glyph] = []
        for child in self._children(map_node, "glyph"):
            glyphs.append(self._parse_glyph(child, seen_ids, port_aliases))

        arcs: List[Arc] = []
        for arc_node in self._children(map_node, "arc"):
            arcs.append(self._parse_arc(arc_node, seen_ids))

        glyph_tuple = tuple(glyphs)
        index = AnchorIndex.build(glyph_tuple, port_aliases)
        for arc in arcs:
            for field_name, ref in (("source", arc.source), ("target", arc.target)):
                if ref not in index:
                    raise MalformedDocumentError(
                        arc.id, field_name, f"arc {field_name} references unknown id {ref!r}"
                    )

        if self.logger:
            self.logger.debug(
                f"Loaded diagram: {len(index.glyphs)} glyph ids, {len(arcs)} arcs, "
                f"{len(index.ports)} port ids, {len(port_aliases)} declared ports"
            )
        return Diagram(
            glyphs=glyph_tuple,
            arcs=tuple(arcs),
            index=index,
        )

    def _find_map(self, root: ET._Element) -> ET._Element:
        if local_name(root) == "map":
            return root
        for element in root.iter():
            if local_name(element) == "map":
                return element
        raise MalformedDocumentError(None, "map", "SBGN file missing map element")

    @staticmethod
    def _children(element: ET._Element, name: str) -> List[ET._Element]:
        return [child for child in element if local_name(child) == name]

    @classmethod
    def _child(cls, element: ET._Element, name: str) -> Optional[ET._Element]:
        children = cls._children(element, name)
        return children[0] if children else None

    @staticmethod
    def _parse_float(value: Optional[str]) -> Optional[float]:
        if value is None:
            return None
        try:
            number = float(value)
        except ValueError:
            return None
        # NaN and infinities are not usable coordinates
        return number if math.isfinite(number) else None

    def _parse_bbox(self, node: Optional[ET._Element], element_id: str) -> BBox:
        if node is None:
            raise MalformedDocumentError(element_id, "bbox", "missing bbox")
        values = []
        for attr in ("x", "y", "w", "h"):
            value = self._parse_float(node.attrib.get(attr))
            if value is None:
                raise MalformedDocumentError(
                    element_id, f"bbox.{attr}",
                    f"missing or non-numeric bbox attribute {attr!r}: {node.attrib.get(attr)!r}"
                )
            values.append(value)
        return BBox(*values)

    def _parse_point(self, node: ET._Element, element_id: str, field_name: str) -> Point:
        x = self._parse_float(node.attrib.get("x"))
        y = self._parse_float(node.attrib.get("y"))
        if x is None or y is None:
            raise MalformedDocumentError(element_id, field_name, f"missing or non-numeric {field_name} coordinates")
        return Point(x, y)

    @staticmethod
    def _register_id(element_id: str, seen_ids: Dict[str, str], kind: str) -> None:
        if element_id in seen_ids:
            raise MalformedDocumentError(element_id, "id", f"duplicate id (already used by a {seen_ids[element_id]})")
        seen_ids[element_id] = kind

    def _parse_glyph(self, node: ET._Element, seen_ids: Dict[str, str], port_aliases: Dict[str, str]) -> Glyph:
        # Walk nested glyphs recursively; their bboxes are absolute and kept as given
        glyph_id = node.attrib.get("id")
        if not glyph_id:
            raise MalformedDocumentError(None, "id", "glyph missing id")
        self._register_id(glyph_id, seen_ids, "glyph")

        class_name = normalize_class(node.attrib.get("class"))
        if not class_name:
            raise MalformedDocumentError(glyph_id, "class", "glyph missing class")

        bbox = self._parse_bbox(self._child(node, "bbox"), glyph_id)

        label_node = self._child(node, "label")
        label = ""
        if label_node is not None:
            label = (label_node.attrib.get("text") or "").replace("\r", "")

        orientation = node.attrib.get("orientation")
        if orientation is not None:
            orientation = orientation.strip().lower()
            if orientation not in ORIENTATIONS:
                raise MalformedDocumentError(glyph_id, "orientation", f"invalid orientation {orientation!r}")
        orientation = default_orientation(class_name, orientation)

        state_node = self._child(node, "state")
        state_value = state_node.attrib.get("value") if state_node is not None else None
        state_variable = state_node.attrib.get("variable") if state_node is not None else None

        ports = derive_ports(glyph_id, class_name, bbox, orientation)
        for port_node in self._children(node, "port"):
            self._alias_declared_port(glyph_id, port_node, ports, seen_ids, port_aliases)

        nested = tuple(
            self._parse_glyph(child, seen_ids, port_aliases)
            for child in self._children(node, "glyph")
        )

        return Glyph(
            id=glyph_id,
            class_name=class_name,
            bbox=bbox,
            orientation=orientation,
            label=label,
            glyphs=nested,
            ports=ports,
            has_clone=self._child(node, "clone") is not None,
            state_value=state_value,
            state_variable=state_variable,
        )

    def _alias_declared_port(self, glyph_id, port_node, ports, seen_ids, port_aliases) -> None:
        """Map a document <port> onto the nearest derived port of its glyph, or the glyph itself"""
        port_id = port_node.attrib.get("id")
        if not port_id:
            raise MalformedDocumentError(glyph_id, "port.id", "port missing id")
        self._register_id(port_id, seen_ids, "port")
        if not ports:
            # arcs naming this port attach to the glyph outline instead
            port_aliases[port_id] = glyph_id
            if self.logger:
                self.logger.debug(f"[{glyph_id}] Declared port {port_id} resolves to its glyph")
            return
        declared = self._parse_point(port_node, port_id, "port")
        nearest = min(ports, key=lambda port: port.point.distance_to(declared))
        port_aliases[port_id] = nearest.id
        if self.logger and nearest.point.distance_to(declared) > 1e-6:
            self.logger.warn_unresolved_port(glyph_id, port_id, nearest.id)

    def _parse_arc(self, node: ET._Element, seen_ids: Dict[str, str]) -> Arc:
        arc_id = node.attrib.get("id")
        if not arc_id:
            raise MalformedDocumentError(None, "id", "arc missing id")
        self._register_id(arc_id, seen_ids, "arc")

        class_name = normalize_class(node.attrib.get("class"))
        if not class_name:
            raise MalformedDocumentError(arc_id, "class", "arc missing class")

        source = node.attrib.get("source")
        target = node.attrib.get("target")
        if not source:
            raise MalformedDocumentError(arc_id, "source", "arc missing source")
        if not target:
            raise MalformedDocumentError(arc_id, "target", "arc missing target")

        start_node = self._child(node, "start")
        end_node = self._child(node, "end")
        start = self._parse_point(start_node, arc_id, "start") if start_node is not None else None
        end = self._parse_point(end_node, arc_id, "end") if end_node is not None else None
        waypoints: Tuple[Point, ...] = tuple(
            self._parse_point(next_node, arc_id, "next")
            for next_node in self._children(node, "next")
        )

        return Arc(
            id=arc_id,
            class_name=class_name,
            source=source,
            target=target,
            waypoints=waypoints,
            start=start,
            end=end,
        )
