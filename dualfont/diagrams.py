"""Diagram extraction and reinsertion utilities."""

from __future__ import annotations

import base64
import binascii
import pathlib
import zlib
from typing import Dict, List, Optional, Tuple
from urllib.parse import unquote

from lxml import etree

from .errors import DiagramFormatError, UnsupportedFileTypeError
from .structures import FormatResult, LabelUnit

SUPPORTED_SUFFIXES = (".drawio", ".xml")
WRAPPER_TAGS = ("object", "UserObject")


def parse_style(style: str) -> Dict[str, Optional[str]]:
    """Parse an mxGraph ``key=value;`` style string, keeping entry order.

    Entries without ``=`` (shape names such as ``ellipse``) map to ``None``.
    """

    entries: Dict[str, Optional[str]] = {}
    for part in style.split(";"):
        if not part:
            continue
        key, sep, value = part.partition("=")
        entries[key] = value if sep else None
    return entries


def render_style(entries: Dict[str, Optional[str]]) -> str:
    parts = [key if value is None else f"{key}={value}" for key, value in entries.items()]
    return "".join(f"{part};" for part in parts)


def set_style_value(style: Optional[str], key: str, value: str) -> str:
    """Set one style entry, leaving the others in place."""

    entries = parse_style(style or "")
    entries[key] = value
    return render_style(entries)


def decode_diagram(payload: str) -> str:
    """Decode a compressed diagram: base64, raw deflate, then URL encoding."""

    try:
        compressed = base64.b64decode(payload.strip(), validate=True)
        inflated = zlib.decompress(compressed, -15).decode("utf-8")
    except (binascii.Error, zlib.error, UnicodeDecodeError) as exc:
        raise DiagramFormatError(f"Compressed diagram could not be decoded: {exc}") from exc
    return unquote(inflated)


def _styled_cell(element: etree._Element) -> etree._Element:
    """Return the element carrying the style of a labelled cell."""

    if element.tag in WRAPPER_TAGS:
        inner = element.find("mxCell")
        if inner is not None:
            return inner
    return element


def _apply_result(element: etree._Element, attribute: str, result: FormatResult) -> None:
    if not result.ok:
        return
    cell = _styled_cell(element)
    if result.is_markup:
        element.set(attribute, result.value)
        cell.set("style", set_style_value(cell.get("style"), "html", "1"))
    elif result.font:
        cell.set("style", set_style_value(cell.get("style"), "fontFamily", result.font))


class DiagramDocument:
    """Extracts and reinserts cell labels of a draw.io diagram file."""

    def __init__(self, source_path: pathlib.Path):
        self.source_path = source_path
        self.units: List[LabelUnit] = []
        try:
            self.tree = etree.parse(str(source_path))
        except etree.XMLSyntaxError as exc:
            raise DiagramFormatError(f"Diagram is not well-formed XML: {exc}") from exc
        self.root = self.tree.getroot()
        if self.root.tag not in ("mxfile", "mxGraphModel"):
            raise DiagramFormatError(
                f"Unexpected root element <{self.root.tag}>; expected <mxfile> or <mxGraphModel>."
            )
        self._inflate_diagrams()

    def _inflate_diagrams(self) -> None:
        """Replace compressed diagram payloads with their graph model."""

        for diagram in self.root.iter("diagram"):
            if diagram.find("mxGraphModel") is not None:
                continue
            payload = (diagram.text or "").strip()
            if not payload:
                continue
            xml = decode_diagram(payload)
            try:
                model = etree.fromstring(xml.encode("utf-8"))
            except etree.XMLSyntaxError as exc:
                raise DiagramFormatError(
                    f"Diagram '{diagram.get('name', '')}' holds invalid XML: {exc}"
                ) from exc
            diagram.text = None
            diagram.append(model)

    def _pages(self) -> List[Tuple[str, etree._Element]]:
        if self.root.tag == "mxGraphModel":
            return [("Diagram", self.root)]
        pages = []
        for d_idx, diagram in enumerate(self.root.iter("diagram")):
            name = diagram.get("name") or f"Page-{d_idx + 1}"
            pages.append((name, diagram))
        return pages

    def extract_label_units(self) -> List[LabelUnit]:
        units: List[LabelUnit] = []
        for page_name, page in self._pages():
            for element in page.iter("mxCell", *WRAPPER_TAGS):
                attribute = "value" if element.tag == "mxCell" else "label"
                if element.tag == "mxCell" and element.getparent().tag in WRAPPER_TAGS:
                    continue
                label = element.get(attribute)
                if not label:
                    continue
                cell_id = element.get("id", "?")
                units.append(
                    LabelUnit(
                        unit_id=f"{page_name}#{cell_id}",
                        label=label,
                        location=f"{page_name}, cell {cell_id}",
                        apply=self._make_applier(element, attribute),
                    )
                )
        self.units = units
        return units

    @staticmethod
    def _make_applier(element: etree._Element, attribute: str):
        def _apply(result: FormatResult) -> None:
            _apply_result(element, attribute, result)

        return _apply

    def save(self, destination: pathlib.Path) -> None:
        self.tree.write(str(destination), encoding="utf-8", xml_declaration=False)


def open_diagram(path: pathlib.Path) -> DiagramDocument:
    """Open a diagram after checking its file type."""

    if path.suffix.lower() not in SUPPORTED_SUFFIXES:
        raise UnsupportedFileTypeError(
            "This file type isn't supported. Please use .drawio or .xml."
        )
    return DiagramDocument(path)
