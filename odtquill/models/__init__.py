"""Content model: elements that render themselves to ODF XML fragments."""

from .base import ImageAsset, OdtElement
from .paragraph import Hyperlink, LineBreak, ListKind, Paragraph, Tab, TabStop, TextRun
from .rich_text import RichText
from .table import PRESET_STYLES, RichTable, RichTableCell, TableRow
from .image import ImageElement

__all__ = [
    "ImageAsset",
    "OdtElement",
    "Hyperlink",
    "LineBreak",
    "ListKind",
    "Paragraph",
    "Tab",
    "TabStop",
    "TextRun",
    "RichText",
    "PRESET_STYLES",
    "RichTable",
    "RichTableCell",
    "TableRow",
    "ImageElement",
]
