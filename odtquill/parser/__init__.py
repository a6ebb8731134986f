"""Readers: ODT package extraction and HTML import."""

from .package_reader import PackageReader
from .html_importer import HtmlImporter, html_to_rich_text

__all__ = ["PackageReader", "HtmlImporter", "html_to_rich_text"]
