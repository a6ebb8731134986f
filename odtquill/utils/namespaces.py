"""
Namespace handling for OpenDocument XML.

Provides the ODF namespace map and small helpers that build and inspect
lxml elements using ``prefix:local`` names.
"""

from __future__ import annotations

from typing import Dict, Optional

from lxml import etree

NAMESPACES: Dict[str, str] = {
    "office": "urn:oasis:names:tc:opendocument:xmlns:office:1.0",
    "style": "urn:oasis:names:tc:opendocument:xmlns:style:1.0",
    "text": "urn:oasis:names:tc:opendocument:xmlns:text:1.0",
    "table": "urn:oasis:names:tc:opendocument:xmlns:table:1.0",
    "draw": "urn:oasis:names:tc:opendocument:xmlns:drawing:1.0",
    "fo": "urn:oasis:names:tc:opendocument:xmlns:xsl-fo-compatible:1.0",
    "svg": "urn:oasis:names:tc:opendocument:xmlns:svg-compatible:1.0",
    "xlink": "http://www.w3.org/1999/xlink",
    "dc": "http://purl.org/dc/elements/1.1/",
    "meta": "urn:oasis:names:tc:opendocument:xmlns:meta:1.0",
    "manifest": "urn:oasis:names:tc:opendocument:xmlns:manifest:1.0",
}

# Elements that hold a run of inline text content.
PARAGRAPH_TAGS = ("text:p", "text:h")


def qn(name: str) -> str:
    """
    Convert ``prefix:local`` into lxml's ``{uri}local`` notation.

    Names without a prefix are returned unchanged.
    """
    if ":" not in name:
        return name
    prefix, local = name.split(":", 1)
    return f"{{{NAMESPACES[prefix]}}}{local}"


def make_element(tag: str, attrib: Optional[Dict[str, str]] = None) -> etree._Element:
    """Create a detached element that declares the ODF namespaces."""
    element = etree.Element(qn(tag), nsmap=NAMESPACES)
    for name, value in (attrib or {}).items():
        element.set(qn(name), str(value))
    return element


def sub_element(parent: etree._Element, tag: str, attrib: Optional[Dict[str, str]] = None) -> etree._Element:
    element = etree.SubElement(parent, qn(tag))
    for name, value in (attrib or {}).items():
        element.set(qn(name), str(value))
    return element


def get_attr(element: etree._Element, name: str, default: Optional[str] = None) -> Optional[str]:
    return element.get(qn(name), default)


def set_attr(element: etree._Element, name: str, value) -> None:
    element.set(qn(name), str(value))


def is_tag(element, *names: str) -> bool:
    """Return True if ``element`` is an element with one of the given names."""
    if not isinstance(element.tag, str):
        return False
    return any(element.tag == qn(name) for name in names)


def element_text(element: etree._Element) -> str:
    """Concatenated text content of an element and its descendants."""
    return "".join(element.itertext())
