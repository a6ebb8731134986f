"""
Rich tables - ``table:table`` built from rows of cells.

Cells hold a Paragraph or RichText, carry their own table-cell style and may
span several columns or rows. Tables can also be generated from plain
two-dimensional data with a named style preset.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from lxml import etree

from ..config import DEFAULT_CONFIG, EngineConfig
from ..styles.defaults import align_paragraph_style
from ..styles.style_mapper import StyleMapper
from ..styles.style_registry import StyleFamily, StyleRegistry, generate_style_name
from ..utils.namespaces import make_element, qn, sub_element
from .base import OdtElement, StyleMap
from .paragraph import Paragraph
from .rich_text import RichText

logger = logging.getLogger(__name__)

CellContent = Union[str, Paragraph, RichText, OdtElement, None]

# Role -> style options, per preset. Roles: header, row, row-alt, summary, highlight.
PRESET_STYLES: Dict[str, Dict[str, Dict[str, str]]] = {
    "default": {
        "header": {
            "background": "#dddddd",
            "font-weight": "bold",
            "text-align": "left",
            "padding": "0.15cm",
            "border": "0.05pt solid #999999",
        },
        "row": {"background": "#f9f9f9", "padding": "0.15cm", "border": "0.05pt solid #dddddd"},
        "row-alt": {"background": "#ffffff", "padding": "0.15cm", "border": "0.05pt solid #dddddd"},
    },
    "finance": {
        "header": {
            "background": "#004080",
            "color": "#ffffff",
            "font-weight": "bold",
            "text-align": "center",
            "padding": "0.2cm",
            "border": "0.1pt solid #003366",
        },
        "row": {
            "background": "#e6f0ff",
            "text-align": "right",
            "padding": "0.2cm",
            "border": "0.1pt solid #b3c6ff",
        },
        "row-alt": {
            "background": "#ffffff",
            "text-align": "right",
            "padding": "0.2cm",
            "border": "0.1pt solid #b3c6ff",
        },
    },
    "finance-light": {
        "header": {"background": "#004d40", "color": "#ffffff", "font-weight": "bold", "text-align": "center"},
        "row": {"background": "#e0f2f1", "text-align": "right"},
        "row-alt": {"background": "#b2dfdb", "text-align": "right"},
        "summary": {"background": "#00796b", "color": "#ffffff", "font-weight": "bold"},
    },
    "marketing": {
        "header": {"background": "#1e88e5", "color": "#ffffff", "font-weight": "bold", "text-align": "center"},
        "row": {"background": "#e3f2fd", "text-align": "left"},
        "row-alt": {"background": "#bbdefb", "text-align": "left"},
    },
    "report": {
        "header": {"background": "#212121", "color": "#ffffff", "font-weight": "bold", "text-align": "left"},
        "row": {"background": "#f5f5f5", "text-align": "justify"},
        "row-alt": {"background": "#eeeeee", "text-align": "justify"},
    },
    "highlighted": {
        "header": {"background": "#ff6f00", "color": "#ffffff", "font-weight": "bold", "text-align": "center"},
        "row": {"background": "#fff3e0", "text-align": "center"},
        "row-alt": {"background": "#ffe0b2", "text-align": "center"},
        "highlight": {"background": "#ffcc80", "font-weight": "bold"},
    },
}


class RichTableCell(OdtElement):
    """One ``table:table-cell`` with content, style and spans."""

    def __init__(self, content: CellContent = "", style: Optional[Mapping[str, Any]] = None,
                 colspan: int = 1, rowspan: int = 1):
        """
        Args:
            content: Text, Paragraph, RichText or another element
            style: Table cell style options
            colspan: Number of columns spanned (at least 1)
            rowspan: Number of rows spanned (at least 1)
        """
        self.content: OdtElement = Paragraph()
        self.style_options: Dict[str, Any] = {}
        self.style: Dict[str, Any] = {}
        self.style_name: Optional[str] = None
        self.colspan = 1
        self.rowspan = 1
        self.set_content(content)
        self.set_style(style or {})
        self.set_colspan(colspan)
        self.set_rowspan(rowspan)

    # ------------------------------------------------------------------
    def set_content(self, content: CellContent) -> "RichTableCell":
        if isinstance(content, (Paragraph, RichText, RichTable)):
            self.content = content
        elif isinstance(content, OdtElement):
            self.content = Paragraph().embed(content)
        else:
            self.content = Paragraph("" if content is None else str(content))
        return self

    def get_content(self) -> OdtElement:
        return self.content

    def set_style(self, style: Mapping[str, Any]) -> "RichTableCell":
        self.style_options = dict(style)
        return self._update_style()

    def update_style(self, **options: Any) -> "RichTableCell":
        self.style_options.update(options)
        return self._update_style()

    def _update_style(self) -> "RichTableCell":
        self.style = StyleMapper.map_table_cell(self.style_options)
        self.style_name = generate_style_name(self.style) if self.style else None
        return self

    @property
    def has_style(self) -> bool:
        return bool(self.style)

    def set_colspan(self, colspan: int) -> "RichTableCell":
        self.colspan = max(1, int(colspan))
        return self

    def set_rowspan(self, rowspan: int) -> "RichTableCell":
        self.rowspan = max(1, int(rowspan))
        return self

    # Convenience setters
    def set_background(self, color: str) -> "RichTableCell":
        return self.update_style(background=color)

    def set_border(self, border: str) -> "RichTableCell":
        return self.update_style(border=border)

    def set_border_top(self, border: str) -> "RichTableCell":
        return self.update_style(**{"border-top": border})

    def set_border_bottom(self, border: str) -> "RichTableCell":
        return self.update_style(**{"border-bottom": border})

    def set_border_left(self, border: str) -> "RichTableCell":
        return self.update_style(**{"border-left": border})

    def set_border_right(self, border: str) -> "RichTableCell":
        return self.update_style(**{"border-right": border})

    def set_padding(self, padding: str) -> "RichTableCell":
        return self.update_style(padding=padding)

    def set_padding_top(self, padding: str) -> "RichTableCell":
        return self.update_style(**{"padding-top": padding})

    def set_padding_bottom(self, padding: str) -> "RichTableCell":
        return self.update_style(**{"padding-bottom": padding})

    def set_padding_left(self, padding: str) -> "RichTableCell":
        return self.update_style(**{"padding-left": padding})

    def set_padding_right(self, padding: str) -> "RichTableCell":
        return self.update_style(**{"padding-right": padding})

    def set_vertical_align(self, align: str) -> "RichTableCell":
        return self.update_style(**{"vertical-align": align})

    def align(self, alignment: str) -> "RichTableCell":
        """Align cell paragraphs via the matching alignment paragraph style."""
        paragraph_style = align_paragraph_style(alignment)
        for paragraph in self._paragraphs():
            paragraph.set_paragraph_style(paragraph_style)
        return self

    def align_left(self) -> "RichTableCell":
        return self.align("left")

    def align_center(self) -> "RichTableCell":
        return self.align("center")

    def align_right(self) -> "RichTableCell":
        return self.align("right")

    def _paragraphs(self) -> List[Paragraph]:
        if isinstance(self.content, Paragraph):
            return [self.content]
        if isinstance(self.content, RichText):
            return [element for element in self.content.elements if isinstance(element, Paragraph)]
        return []

    # ------------------------------------------------------------------
    def own_styles(self) -> StyleMap:
        if not self.style_name:
            return {}
        return {StyleFamily.TABLE_CELL: {self.style_name: dict(self.style)}}

    def embedded_elements(self) -> List[OdtElement]:
        return [self.content]

    def to_xml(self, registry: StyleRegistry) -> List[etree._Element]:
        self.register_styles(registry)
        cell = make_element("table:table-cell", {"office:value-type": "string"})
        if self.colspan > 1:
            cell.set(qn("table:number-columns-spanned"), str(self.colspan))
        if self.rowspan > 1:
            cell.set(qn("table:number-rows-spanned"), str(self.rowspan))
        if self.style_name:
            cell.set(qn("table:style-name"), self.style_name)

        nodes = self.content.to_xml(registry)
        if not nodes:
            nodes = [make_element("text:p")]
        for node in nodes:
            cell.append(node)
        return [cell]


@dataclass
class TableRow:
    cells: List[RichTableCell] = field(default_factory=list)
    style: Dict[str, Any] = field(default_factory=dict)


class RichTable(OdtElement):
    """
    A table of RichTableCell rows.

    Short rows are padded with empty cells up to the column count; cells
    hidden by a column or row span are emitted as covered cells.
    """

    def __init__(self, name: Optional[str] = None, config: Optional[EngineConfig] = None):
        """
        Args:
            name: Table name; unnamed tables are numbered per build at render time
            config: Engine defaults
        """
        self.config = config or DEFAULT_CONFIG
        self.table_name = name
        self.rows: List[TableRow] = []
        self.header_row_count = 0
        self.table_style_name: Optional[str] = None
        self.custom_styles: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.summary_keywords: List[str] = list(self.config.summary_keywords)

    # ------------------------------------------------------------------
    def add_row(self, cells: Iterable[Any], style: Optional[Mapping[str, Any]] = None) -> "RichTable":
        """
        Append a row.

        Args:
            cells: RichTableCell instances or anything a cell accepts as content
            style: Cell style applied to cells of this row without a style
        """
        row = TableRow(style=dict(style or {}))
        for cell in cells:
            if not isinstance(cell, RichTableCell):
                cell = RichTableCell(cell)
            if row.style and not cell.has_style:
                cell.set_style(row.style)
            row.cells.append(cell)
        self.rows.append(row)
        return self

    def set_header_row_count(self, count: int) -> "RichTable":
        self.header_row_count = max(0, int(count))
        return self

    def set_table_style_name(self, style_name: str) -> "RichTable":
        self.table_style_name = style_name
        return self

    def set_table_name(self, name: str) -> "RichTable":
        self.table_name = name
        return self

    def add_custom_style(self, name: str, style_set: Mapping[str, Mapping[str, Any]]) -> "RichTable":
        self.custom_styles[name] = {role: dict(options) for role, options in style_set.items()}
        return self

    def get_custom_style(self, name: str) -> Optional[Dict[str, Dict[str, Any]]]:
        return self.custom_styles.get(name)

    def set_summary_keywords(self, keywords: Iterable[str]) -> "RichTable":
        self.summary_keywords = list(keywords)
        return self

    def _style_set(self, name: str) -> Dict[str, Dict[str, Any]]:
        if name in self.custom_styles:
            return self.custom_styles[name]
        if name not in PRESET_STYLES:
            logger.debug(f"Unknown table style set {name!r}, using default")
        return copy.deepcopy(PRESET_STYLES.get(name, PRESET_STYLES["default"]))

    def matches_summary_keywords(self, value: Any) -> bool:
        text = value.get_text() if isinstance(value, Paragraph) else str(value)
        text = text.strip().lower()
        return any(keyword.lower() in text for keyword in self.summary_keywords)

    def build_table_from_array(self, data: Sequence[Sequence[Any]], style_set: str = "default") -> "RichTable":
        """
        Populate the table from rows of values.

        Row 0 gets the ``header`` role; later rows alternate ``row`` (even
        index) and ``row-alt`` unless their first cell contains a summary
        keyword, which selects ``summary`` or ``highlight``.
        """
        styles = self._style_set(style_set)
        for row_index, row in enumerate(data):
            row = list(row)
            is_summary = bool(row) and self.matches_summary_keywords(row[0])

            if row_index == 0 and "header" in styles:
                role = "header"
            elif is_summary and "summary" in styles:
                role = "summary"
            elif is_summary and "highlight" in styles:
                role = "highlight"
            elif row_index % 2 == 0 and "row" in styles:
                role = "row"
            elif "row-alt" in styles:
                role = "row-alt"
            else:
                role = None
            style = styles.get(role) if role else None

            cells = []
            for value in row:
                content = value if isinstance(value, Paragraph) else Paragraph("" if value is None else str(value))
                cell = RichTableCell(content)
                if style:
                    cell.set_style(style)
                    if "text-align" in style:
                        content.set_paragraph_style(align_paragraph_style(style["text-align"]))
                cells.append(cell)
            self.add_row(cells)
        return self

    # ------------------------------------------------------------------
    def _grid(self) -> List[List[Optional[Union[RichTableCell, str]]]]:
        """
        Lay out the rows on a column grid.

        Each slot is a cell, ``"covered"`` for a position hidden by a span,
        or None for padding.
        """
        grid: List[List[Optional[Union[RichTableCell, str]]]] = []
        pending: Dict[int, int] = {}
        for row in self.rows:
            slots: List[Optional[Union[RichTableCell, str]]] = []
            column = 0
            for cell in row.cells:
                while pending.get(column, 0) > 0:
                    slots.append("covered")
                    pending[column] -= 1
                    column += 1
                slots.append(cell)
                for offset in range(cell.colspan):
                    if cell.rowspan > 1:
                        pending[column + offset] = cell.rowspan - 1
                    if offset:
                        slots.append("covered")
                column += cell.colspan
            # Rows spanned from above at the end of a short row.
            for position in sorted(pending):
                if position >= column and pending[position] > 0:
                    while column < position:
                        slots.append(None)
                        column += 1
                    slots.append("covered")
                    pending[position] -= 1
                    column += 1
            grid.append(slots)

        width = self.column_count
        for slots in grid:
            slots.extend([None] * (width - len(slots)))
        return grid

    @property
    def column_count(self) -> int:
        """Widest row, counting column spans."""
        width = 0
        for row in self.rows:
            width = max(width, sum(cell.colspan for cell in row.cells))
        return width

    def embedded_elements(self) -> List[OdtElement]:
        return [cell for row in self.rows for cell in row.cells]

    def to_xml(self, registry: StyleRegistry) -> List[etree._Element]:
        self.register_styles(registry)

        name = self.table_name or registry.next_table_name()
        table = make_element("table:table", {"table:name": name})
        if self.table_style_name:
            table.set(qn("table:style-name"), self.table_style_name)

        grid = self._grid()
        width = max([self.column_count] + [len(slots) for slots in grid])
        if width:
            sub_element(table, "table:table-column", {"table:number-columns-repeated": str(width)})

        header_rows = None
        for row_index, slots in enumerate(grid):
            if row_index < self.header_row_count:
                if header_rows is None:
                    header_rows = sub_element(table, "table:table-header-rows")
                parent = header_rows
            else:
                parent = table
            table_row = sub_element(parent, "table:table-row")
            slots = slots + [None] * (width - len(slots))
            for slot in slots:
                if slot == "covered":
                    sub_element(table_row, "table:covered-table-cell")
                elif slot is None:
                    empty = sub_element(table_row, "table:table-cell")
                    sub_element(empty, "text:p")
                else:
                    for node in slot.to_xml(registry):
                        table_row.append(node)
        return [table]

    def __repr__(self) -> str:
        return f"RichTable({self.table_name!r}, rows={len(self.rows)}, columns={self.column_count})"
