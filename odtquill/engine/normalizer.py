"""
Placeholder normalization.

Word processors often split ``{{placeholder}}`` tokens across several
``text:span`` elements. Before matching, affected paragraphs have their
span-wrapped text merged back into plain text runs.
"""

from __future__ import annotations

import logging
import re
from typing import List

from lxml import etree

from ..utils.namespaces import PARAGRAPH_TAGS, get_attr, is_tag, qn

logger = logging.getLogger(__name__)

TOKEN_PATTERN = re.compile(r"\{\{[^{}]*\}\}")


def _text_slots(element: etree._Element) -> List[str]:
    """Every text node below ``element`` in document order (excluding its tail)."""
    slots = [element.text or ""]
    for child in element.iterdescendants():
        slots.append(child.text or "")
        slots.append(child.tail or "")
    return slots


def _has_split_token(paragraph: etree._Element) -> bool:
    full_text = "".join(paragraph.itertext())
    if "{{" not in full_text:
        return False
    whole = len(TOKEN_PATTERN.findall(full_text))
    per_slot = sum(len(TOKEN_PATTERN.findall(slot)) for slot in _text_slots(paragraph))
    return whole != per_slot or full_text.count("{{") != whole


def _is_flat_span(element: etree._Element) -> bool:
    """A span (or space marker) that holds nothing but text and flat spans."""
    if is_tag(element, "text:s"):
        return True
    if not is_tag(element, "text:span"):
        return False
    return all(_is_flat_span(child) for child in element)


def _flat_text(element: etree._Element) -> str:
    if is_tag(element, "text:s"):
        return " " * int(get_attr(element, "text:c", "1") or 1)
    parts = [element.text or ""]
    for child in element:
        parts.append(_flat_text(child))
        parts.append(child.tail or "")
    return "".join(parts)


def merge_paragraph_text(paragraph: etree._Element) -> None:
    """
    Merge flat spans of ``paragraph`` into its text runs.

    Elements that are not flat spans (line breaks, tabs, frames, links ...)
    stay in place and separate the merged runs.
    """
    buffer = paragraph.text or ""
    previous = None
    for child in list(paragraph):
        if isinstance(child.tag, str) and _is_flat_span(child):
            buffer += _flat_text(child) + (child.tail or "")
            paragraph.remove(child)
            continue
        if previous is None:
            paragraph.text = buffer or None
        else:
            previous.tail = buffer or None
        previous = child
        buffer = child.tail or ""
    if previous is None:
        paragraph.text = buffer or None
    else:
        previous.tail = buffer or None


def normalize_placeholders(root: etree._Element) -> int:
    """
    Repair split placeholder tokens in every paragraph below ``root``.

    Returns:
        Number of paragraphs rewritten
    """
    count = 0
    paragraph_tags = {qn(tag) for tag in PARAGRAPH_TAGS}
    for paragraph in list(root.iter(*paragraph_tags)):
        if _has_split_token(paragraph):
            merge_paragraph_text(paragraph)
            count += 1
    if count:
        logger.debug(f"Normalized {count} paragraphs with split placeholders")
    return count
