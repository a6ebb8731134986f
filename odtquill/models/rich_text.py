"""
RichText - ordered container of paragraphs, tables and other elements.

RichText has no XML element of its own: it renders to the concatenation of
its children's fragments.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping, Optional, Union

from lxml import etree

from ..styles.style_registry import StyleRegistry
from .base import OdtElement
from .paragraph import Paragraph

logger = logging.getLogger(__name__)


class RichText(OdtElement):
    """Builder for a sequence of block elements."""

    def __init__(self) -> None:
        self.elements: List[OdtElement] = []

    def add_paragraph(
        self,
        content: Union[str, Paragraph, None] = None,
        style_name: Optional[str] = None,
        style_options: Optional[Mapping[str, Any]] = None,
    ) -> "RichText":
        """
        Append a paragraph.

        Args:
            content: Text for a new paragraph or a ready Paragraph
            style_name: Paragraph style name
            style_options: Paragraph style options
        """
        if isinstance(content, Paragraph):
            paragraph = content
            if style_name is not None or style_options is not None:
                paragraph.set_paragraph_style(style_name, style_options)
        else:
            paragraph = Paragraph(paragraph_style=style_name, paragraph_style_options=style_options)
            if content is not None:
                paragraph.add_text(content)
        self.elements.append(paragraph)
        return self

    def add_element(self, element: OdtElement) -> "RichText":
        self.elements.append(element)
        return self

    def add_table(self, table: OdtElement) -> "RichText":
        return self.add_element(table)

    def add_image(self, image: OdtElement, paragraph_style: Optional[str] = None) -> "RichText":
        """Append an image wrapped in its own paragraph."""
        self.elements.append(Paragraph(paragraph_style=paragraph_style).embed(image))
        return self

    def add_paragraph_break(self, count: int = 1) -> "RichText":
        for _ in range(max(count, 1)):
            self.elements.append(Paragraph())
        return self

    def add_multi_paragraph(
        self,
        lines: Union[str, Iterable[str]],
        style_name: Optional[str] = None,
        first_bold: bool = False,
    ) -> "RichText":
        """One paragraph per line; optionally bold the first line only."""
        if isinstance(lines, str):
            lines = lines.splitlines()
        for index, line in enumerate(lines):
            style = {"bold": True} if first_bold and index == 0 else None
            self.elements.append(Paragraph(line, style, paragraph_style=style_name))
        return self

    def _current_paragraph(self) -> Paragraph:
        if not self.elements or not isinstance(self.elements[-1], Paragraph):
            self.elements.append(Paragraph())
        return self.elements[-1]

    def add_text(self, text: Any, style: Optional[Mapping[str, Any]] = None) -> "RichText":
        self._current_paragraph().add_text(text, style)
        return self

    def add_line_break(self, count: int = 1) -> "RichText":
        self._current_paragraph().add_line_break(count)
        return self

    def add_tab(self) -> "RichText":
        self._current_paragraph().add_tab()
        return self

    def add_bullet_list(self, items: Iterable[Any], style: Optional[Mapping[str, Any]] = None) -> "RichText":
        for item in items:
            self.elements.append(Paragraph(item, style).set_bulleted())
        return self

    def add_numbered_list(self, items: Iterable[Any], style: Optional[Mapping[str, Any]] = None) -> "RichText":
        for index, item in enumerate(items):
            self.elements.append(Paragraph(item, style).set_numbered(continue_numbering=index > 0))
        return self

    def is_empty(self) -> bool:
        return not self.elements

    def embedded_elements(self) -> List[OdtElement]:
        return list(self.elements)

    def to_xml(self, registry: StyleRegistry) -> List[etree._Element]:
        self.register_styles(registry)
        nodes: List[etree._Element] = []
        for element in self.elements:
            nodes.extend(element.to_xml(registry))
        return nodes

    def __len__(self) -> int:
        return len(self.elements)
