"""
Document access for waterml-ingest.

Wraps ``xml.etree.ElementTree`` behind the four query primitives the
extractor needs:

- ``find_all(node, path, ns)``: all descendants matching a structural path.
- ``children(node)``: direct child elements.
- ``local_name(el)``: element name with the namespace stripped.
- ``text_of(el)`` / ``attrs_of(el)``: text content and attributes.

Also provides ``read_document()`` (path / XML text / bytes / parsed tree ->
root element), ``detect_namespace()`` (reject non-WaterML 1.x documents),
and ``query_notes()`` (the ``queryInfo/note`` title -> text mapping).

Retrieving documents over the network is the caller's job; hand the
response body to ``read_document()``.
"""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from pathlib import Path

from waterml_ingest.exceptions import UnknownFormatError

logger = logging.getLogger(__name__)

WATERML_1_1_NS = "http://www.cuahsi.org/waterML/1.1/"
WATERML_1_0_NS = "http://www.cuahsi.org/waterML/1.0/"
KNOWN_NAMESPACES = (WATERML_1_1_NS, WATERML_1_0_NS)

# Prefix used in every query path below
NS_PREFIX = "ns1"

_TAG_PATTERN = re.compile(r"^\{(?P<ns>[^}]*)\}(?P<name>.*)$")


def read_document(source: str | Path | bytes | ET.ElementTree | ET.Element) -> ET.Element:
    """Return the root element of a WaterML document.

    Args:
        source: A file path, raw XML text (must start with ``<``), raw XML
            bytes, an ``ElementTree`` or an ``Element``.

    Raises:
        FileNotFoundError: If *source* is a path that does not exist.
        xml.etree.ElementTree.ParseError: If the content is not well-formed XML.
    """
    if isinstance(source, ET.Element):
        return source
    if isinstance(source, ET.ElementTree):
        return source.getroot()
    if isinstance(source, bytes):
        return ET.fromstring(source)
    if isinstance(source, str) and source.lstrip().startswith("<"):
        return ET.fromstring(source)

    path = Path(source)
    if not path.exists():
        raise FileNotFoundError(f"WaterML document not found: {path}")
    logger.info("Reading WaterML document: %s", path)
    return ET.parse(path).getroot()


def namespaces(ns: str) -> dict[str, str]:
    """Prefix map for ``find_all`` paths."""
    return {NS_PREFIX: ns}


def detect_namespace(root: ET.Element) -> str:
    """Return the WaterML namespace URI declared by the root element.

    Raises:
        UnknownFormatError: If the root is not in a known WaterML 1.x namespace.
    """
    match = _TAG_PATTERN.match(root.tag)
    ns = match.group("ns") if match else ""
    if ns not in KNOWN_NAMESPACES:
        raise UnknownFormatError(
            f"Not a WaterML 1.x document: root element is {root.tag!r}. "
            f"Expected one of namespaces {list(KNOWN_NAMESPACES)}"
        )
    logger.debug("Detected WaterML namespace %s", ns)
    return ns


def find_all(node: ET.Element, path: str, ns: str) -> list[ET.Element]:
    """All elements under *node* matching *path* (``ns1:`` prefixed)."""
    return node.findall(path, namespaces(ns))


def children(node: ET.Element) -> list[ET.Element]:
    return list(node)


def local_name(el: ET.Element) -> str:
    match = _TAG_PATTERN.match(el.tag)
    return match.group("name") if match else el.tag


def text_of(el: ET.Element) -> str:
    """All text content of *el*, including descendants, stripped."""
    return "".join(el.itertext()).strip()


def attrs_of(el: ET.Element) -> dict[str, str]:
    """Attributes of *el* keyed by local name."""
    return {
        (_TAG_PATTERN.match(key).group("name") if key.startswith("{") else key): value
        for key, value in el.attrib.items()
    }


def query_notes(root: ET.Element, ns: str) -> dict[str, str]:
    """Map each ``queryInfo/note`` title to its text."""
    notes: dict[str, str] = {}
    for query_info in find_all(root, f".//{NS_PREFIX}:queryInfo", ns):
        for node in children(query_info):
            if local_name(node) != "note":
                continue
            title = attrs_of(node).get("title", "")
            notes[title] = text_of(node)
    return notes
