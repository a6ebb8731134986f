"""
odtquill - fill OpenDocument Text templates from Python.

Bind values, loops and conditionals to ``{{...}}`` placeholders, inject
paragraphs, tables, images and imported HTML, and save a valid ODT file.
"""

from .config import DEFAULT_CONFIG, EngineConfig
from .exceptions import (
    AssetError,
    OdtQuillError,
    PackagingError,
    StyleError,
    TemplateLoadError,
    TemplateStateError,
)
from .models import ImageElement, OdtElement, Paragraph, RichTable, RichTableCell, RichText
from .parser import HtmlImporter, html_to_rich_text
from .styles import StyleMapper, StyleRegistry
from .template import OdtTemplate
from .utils.logger import configure_logging, set_log_level

__version__ = "0.1.0"

__all__ = [
    "OdtTemplate",
    "EngineConfig",
    "DEFAULT_CONFIG",
    "OdtElement",
    "Paragraph",
    "RichText",
    "RichTable",
    "RichTableCell",
    "ImageElement",
    "HtmlImporter",
    "html_to_rich_text",
    "StyleMapper",
    "StyleRegistry",
    "OdtQuillError",
    "TemplateLoadError",
    "AssetError",
    "StyleError",
    "PackagingError",
    "TemplateStateError",
    "configure_logging",
    "set_log_level",
]
