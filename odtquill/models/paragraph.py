"""
Paragraph model - a fluent builder for one ODF paragraph.

A paragraph is an ordered list of inline parts (text runs, line breaks,
tabs, tab-stop texts, hyperlinks) plus embedded elements such as inline
images. It can be turned into a single-item bulleted or numbered list.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from lxml import etree

from ..styles.defaults import BULLET_LIST_STYLE, NUMBER_LIST_STYLE
from ..styles.style_mapper import StyleMapper
from ..styles.style_registry import StyleFamily, StyleRegistry, generate_style_name
from ..utils.namespaces import is_tag, make_element, qn, sub_element
from ..utils.units import parse_length
from .base import OdtElement, StyleMap

logger = logging.getLogger(__name__)

DEFAULT_PARAGRAPH_STYLE = "Standard"


@dataclass
class TextRun:
    text: str
    style_name: Optional[str] = None


@dataclass
class LineBreak:
    pass


@dataclass
class Tab:
    pass


@dataclass
class TabStop:
    position: float
    alignment: str = "left"
    text: Optional[str] = None
    style_name: Optional[str] = None


@dataclass
class Hyperlink:
    text: str
    href: str
    style_name: Optional[str] = None


ParagraphPart = Union[TextRun, LineBreak, Tab, TabStop, Hyperlink]


class ListKind(str, Enum):
    NONE = "none"
    BULLETED = "bulleted"
    NUMBERED = "numbered"


LIST_STYLES = {
    ListKind.BULLETED: BULLET_LIST_STYLE,
    ListKind.NUMBERED: NUMBER_LIST_STYLE,
}


def _tab_position_key(position: Any) -> Any:
    """Comparable form of a tab position: ``5``, ``5.0`` and ``"5cm"`` are equal."""
    return parse_length(position) or str(position).strip()


def _append_text(parent: etree._Element, text: str) -> None:
    """Append text after the last child of ``parent`` (or as its text)."""
    if not text:
        return
    if len(parent):
        last = parent[-1]
        last.tail = (last.tail or "") + text
    else:
        parent.text = (parent.text or "") + text


class Paragraph(OdtElement):
    """
    One ``text:p`` with inline runs.

    Every builder method returns the paragraph itself so calls can be chained.
    """

    def __init__(
        self,
        text: Optional[str] = None,
        style: Optional[Mapping[str, Any]] = None,
        paragraph_style: Optional[str] = None,
        paragraph_style_options: Optional[Mapping[str, Any]] = None,
    ):
        """
        Args:
            text: Optional initial text run
            style: Text style options for the initial run
            paragraph_style: Explicit paragraph style name
            paragraph_style_options: Paragraph style options (margins, tab stops ...)
        """
        self.parts: List[ParagraphPart] = []
        self.text_styles: Dict[str, Dict[str, Any]] = {}
        self.paragraph_style_options: Dict[str, Any] = dict(paragraph_style_options or {})
        self.list_kind = ListKind.NONE
        self.continue_numbering = False
        self._paragraph_style = paragraph_style
        self._embedded: List[OdtElement] = []
        if text is not None:
            self.add_text(text, style)

    # ------------------------------------------------------------------
    # Styles
    # ------------------------------------------------------------------
    def _text_style_name(self, style: Optional[Mapping[str, Any]]) -> Optional[str]:
        mapped = StyleMapper.map_text(style)
        if not mapped:
            return None
        name = generate_style_name(mapped)
        self.text_styles[name] = mapped
        return name

    @property
    def paragraph_style(self) -> Optional[str]:
        """
        Effective paragraph style name.

        Paragraphs carrying style options get an anonymous name derived from
        their final options; an explicit name then becomes its parent style.
        """
        if self.paragraph_style_options:
            return generate_style_name(self._paragraph_properties())
        return self._paragraph_style

    @property
    def base_style(self) -> Optional[str]:
        """The explicitly set paragraph style name, if any."""
        return self._paragraph_style

    def _paragraph_properties(self) -> Dict[str, Any]:
        properties = StyleMapper.map_paragraph(self.paragraph_style_options)
        if self._paragraph_style:
            properties["style:parent-style-name"] = self._paragraph_style
        return properties

    def set_paragraph_style(self, name: Optional[str], options: Optional[Mapping[str, Any]] = None) -> "Paragraph":
        self._paragraph_style = name
        if options is not None:
            self.paragraph_style_options = dict(options)
        return self

    def own_styles(self) -> StyleMap:
        styles: StyleMap = {}
        if self.text_styles:
            styles[StyleFamily.TEXT] = dict(self.text_styles)
        if self.paragraph_style_options:
            properties = self._paragraph_properties()
            styles[StyleFamily.PARAGRAPH] = {generate_style_name(properties): properties}
        return styles

    def embedded_elements(self) -> List[OdtElement]:
        return list(self._embedded)

    # ------------------------------------------------------------------
    # Inline parts
    # ------------------------------------------------------------------
    def add_text(self, text: Any, style: Optional[Mapping[str, Any]] = None) -> "Paragraph":
        self.parts.append(TextRun("" if text is None else str(text), self._text_style_name(style)))
        return self

    def add_line_break(self, count: int = 1) -> "Paragraph":
        for _ in range(max(count, 1)):
            self.parts.append(LineBreak())
        return self

    def add_tab(self) -> "Paragraph":
        self.parts.append(Tab())
        return self

    def add_tab_stop_definition(self, position: float, alignment: str = "left") -> "Paragraph":
        """Add a tab stop (position in cm) to the paragraph's own style."""
        self.paragraph_style_options.setdefault("tab-stops", []).append(
            {"position": position, "alignment": alignment or "left"}
        )
        return self

    def add_tab_stop(
        self,
        position: float,
        alignment: str = "left",
        text: Optional[str] = None,
        style: Optional[Mapping[str, Any]] = None,
    ) -> "Paragraph":
        """Jump to a tab stop at ``position`` and optionally write text there."""
        defined = [
            _tab_position_key(tab["position"])
            for tab in self.paragraph_style_options.get("tab-stops", [])
            if isinstance(tab, Mapping) and "position" in tab
        ]
        if _tab_position_key(position) not in defined:
            self.add_tab_stop_definition(position, alignment)
        self.parts.append(TabStop(position, alignment, text, self._text_style_name(style)))
        return self

    def add_tabs_with_texts(self, entries: Iterable[Mapping[str, Any]]) -> "Paragraph":
        """
        Add one tab stop plus text per entry.

        Args:
            entries: ``{"position", "alignment", "text", "style"}`` mappings
        """
        for entry in entries:
            self.add_tab_stop_definition(entry["position"], entry.get("alignment", "left"))
            self.add_tab()
            self.add_text(entry.get("text", ""), entry.get("style"))
        return self

    def add_tabular_lines(
        self,
        lines: Sequence[Sequence[Any]],
        tab_defs: Iterable[Mapping[str, Any]],
        header_style: Optional[Mapping[str, Any]] = None,
        cell_styles: Optional[Mapping[Tuple[int, int], Mapping[str, Any]]] = None,
    ) -> "Paragraph":
        """
        Lay out rows of values on tab stops, one line per row.

        Args:
            lines: Rows of column values
            tab_defs: ``{"position", "alignment"}`` per tab stop
            header_style: Text style for the first row
            cell_styles: Optional ``(row, column) -> style`` overrides
        """
        for tab in tab_defs:
            self.add_tab_stop_definition(tab["position"], tab.get("alignment", "left"))

        cell_styles = cell_styles or {}
        for row_index, columns in enumerate(lines):
            self.add_tab()
            for column_index, value in enumerate(columns):
                if column_index > 0:
                    self.add_tab()
                style = cell_styles.get((row_index, column_index))
                if style is None and row_index == 0:
                    style = header_style
                self.add_text(value, style)
            if row_index < len(lines) - 1:
                self.add_line_break()
        return self

    def add_key_value_line(
        self,
        key: str,
        value: Any,
        tab_position: float = 10.0,
        style: Optional[Mapping[str, Any]] = None,
    ) -> "Paragraph":
        self.add_tab_stop_definition(tab_position, "right")
        return self.add_text(key, style).add_tab().add_text(value, style)

    def add_hyperlink(self, text: str, href: str, style: Optional[Mapping[str, Any]] = None) -> "Paragraph":
        self.parts.append(Hyperlink(text, href, self._text_style_name(style)))
        return self

    def embed(self, element: OdtElement) -> "Paragraph":
        """Embed an inline element (e.g. an image) at the end of the paragraph."""
        self._embedded.append(element)
        return self

    # ------------------------------------------------------------------
    # Lists
    # ------------------------------------------------------------------
    def set_bulleted(self) -> "Paragraph":
        self.list_kind = ListKind.BULLETED
        return self

    def set_numbered(self, continue_numbering: bool = False) -> "Paragraph":
        self.list_kind = ListKind.NUMBERED
        self.continue_numbering = continue_numbering
        return self

    @property
    def list_style(self) -> Optional[str]:
        return LIST_STYLES.get(self.list_kind)

    # ------------------------------------------------------------------
    def get_text(self) -> str:
        chunks = []
        for part in self.parts:
            if isinstance(part, (TextRun, Hyperlink)):
                chunks.append(part.text)
            elif isinstance(part, LineBreak):
                chunks.append("\n")
            elif isinstance(part, Tab):
                chunks.append("\t")
            elif isinstance(part, TabStop):
                chunks.append("\t" + (part.text or ""))
        return "".join(chunks)

    def to_xml(self, registry: StyleRegistry) -> List[etree._Element]:
        self.register_styles(registry)

        p = make_element("text:p", {"text:style-name": self.paragraph_style or DEFAULT_PARAGRAPH_STYLE})
        for part in self.parts:
            if isinstance(part, TextRun):
                self._render_run(p, part.text, part.style_name)
            elif isinstance(part, LineBreak):
                sub_element(p, "text:line-break")
            elif isinstance(part, Tab):
                sub_element(p, "text:tab")
            elif isinstance(part, TabStop):
                sub_element(p, "text:tab")
                if part.text:
                    self._render_run(p, part.text, part.style_name)
            elif isinstance(part, Hyperlink):
                link = sub_element(
                    p,
                    "text:a",
                    {"xlink:type": "simple", "xlink:href": part.href, "xlink:show": "new"},
                )
                self._render_run(link, part.text, part.style_name)

        for element in self._embedded:
            for node in element.to_xml(registry):
                # Disabled images render as an empty paragraph; drop it inline.
                if is_tag(node, "text:p") and not len(node) and not node.text:
                    continue
                p.append(node)

        if self.list_kind is ListKind.NONE:
            return [p]

        text_list = make_element("text:list", {"text:style-name": self.list_style})
        if self.list_kind is ListKind.NUMBERED and self.continue_numbering:
            text_list.set(qn("text:continue-numbering"), "true")
        item = sub_element(text_list, "text:list-item")
        item.append(p)
        return [text_list]

    @staticmethod
    def _render_run(parent: etree._Element, text: str, style_name: Optional[str]) -> None:
        if style_name:
            span = sub_element(parent, "text:span", {"text:style-name": style_name})
            span.text = text
        else:
            _append_text(parent, text)

    def __repr__(self) -> str:
        return f"Paragraph({self.get_text()!r}, style={self.paragraph_style!r})"
