"""
HTML Importer - converts a restricted HTML fragment into RichText.

Supported:
- ``p``, ``br``, ``h1``..``h6``, ``blockquote``
- inline emphasis (``strong``/``b``, ``em``/``i``, ``u``, ``s``, ``span``)
- links (``a href``)
- bulleted and numbered lists (``ul``/``ol`` with ``li``)
- local images (``img``) with CSS-like positioning hints

Unknown tags contribute their children only.
"""

from __future__ import annotations

import logging
import os
import re
from html.parser import HTMLParser
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from ..config import DEFAULT_CONFIG, EngineConfig
from ..models.image import ImageElement
from ..models.paragraph import Paragraph
from ..models.rich_text import RichText
from ..styles.defaults import heading_style_name
from ..styles.style_mapper import parse_inline_style
from ..utils.units import format_length, parse_length

logger = logging.getLogger(__name__)

VOID_TAGS = ("br", "img", "hr", "meta", "link", "input")
SKIPPED_TAGS = ("script", "style", "head", "title")
HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")

INLINE_STYLES = {
    "strong": {"bold": True},
    "b": {"bold": True},
    "em": {"italic": True},
    "i": {"italic": True},
    "u": {"underline": True},
    "s": {"strike": True},
    "strike": {"strike": True},
    "del": {"strike": True},
}

LINK_STYLE = {"color": "#0000ff", "underline": True}

PX_PER_CM = 96 / 2.54

WHITESPACE = re.compile(r"\s+")


def css_length(value: Optional[str]) -> Optional[str]:
    """Convert an HTML/CSS length to an ODF length; pixels become centimetres."""
    parsed = parse_length(value, default_unit="px")
    if not parsed:
        return None
    number, unit = parsed
    if unit == "px":
        return format_length(number / PX_PER_CM, "cm")
    return format_length(number, unit)


def css_text_style(css: Dict[str, str]) -> Dict[str, Any]:
    """Text style options from inline CSS declarations."""
    style: Dict[str, Any] = {}
    if "color" in css:
        style["color"] = css["color"]
    if "background-color" in css:
        style["background-color"] = css["background-color"]
    if "font-size" in css:
        style["font-size"] = css["font-size"]
    if "font-family" in css:
        style["font-family"] = css["font-family"].strip("'\"")
    if css.get("font-weight") in ("bold", "bolder", "600", "700", "800", "900"):
        style["bold"] = True
    if css.get("font-style") == "italic":
        style["italic"] = True
    decoration = css.get("text-decoration", "")
    if "underline" in decoration:
        style["underline"] = True
    if "line-through" in decoration:
        style["strike"] = True
    return style


def parse_image_style(style: Optional[str]) -> Optional[Dict[str, Any]]:
    """
    Translate an ``img`` style attribute into ImageElement options.

    Returns:
        Options mapping, or None when the image is hidden (``display: none``)
    """
    css = parse_inline_style(style)
    options: Dict[str, Any] = {}

    if css.get("display") == "none":
        return None

    for key in ("width", "height"):
        if key in css:
            length = css_length(css[key])
            if length:
                options[key] = length

    float_value = css.get("float")
    if float_value in ("left", "right"):
        options["anchor"] = "paragraph"
        options["wrap"] = "none"
        options["align"] = float_value
    elif float_value == "none":
        options["anchor"] = "as-char"

    if css.get("position") == "absolute":
        options["anchor"] = "paragraph"
        options["align"] = "absolute"
        options["horizontal-pos"] = "from-left"
        options["horizontal-rel"] = "page-content"

    for key, target in (("left", "x"), ("margin-left", "x"), ("top", "y"), ("margin-top", "y")):
        if key in css:
            length = css_length(css[key])
            if length:
                options[target] = length

    display = css.get("display")
    if "anchor" not in options:
        if display == "block":
            options["anchor"] = "paragraph"
        else:
            options["anchor"] = "as-char"
    return options


class HTMLContentParser(HTMLParser):
    """Event-driven parser that fills a RichText from HTML markup."""

    def __init__(self, base_path: Optional[Path] = None, config: Optional[EngineConfig] = None):
        super().__init__(convert_charrefs=True)
        self.base_path = base_path
        self.config = config or DEFAULT_CONFIG
        self.rich_text = RichText()
        self.current_paragraph: Optional[Paragraph] = None
        self.tag_stack: List[Tuple[str, Dict[str, Any]]] = []
        self.list_stack: List[Dict[str, Any]] = []
        self.block_styles: List[str] = []
        self.href_stack: List[str] = []
        self.skip_depth = 0

    # ------------------------------------------------------------------
    # Paragraph context
    # ------------------------------------------------------------------
    def _open_paragraph(self, style_name: Optional[str] = None,
                        options: Optional[Dict[str, Any]] = None) -> Paragraph:
        if style_name is None and self.block_styles:
            style_name = self.block_styles[-1]
        paragraph = Paragraph(paragraph_style=style_name, paragraph_style_options=options or None)
        self.rich_text.add_paragraph(paragraph)
        self.current_paragraph = paragraph
        return paragraph

    def _close_paragraph(self) -> None:
        self.current_paragraph = None

    def _paragraph(self) -> Paragraph:
        return self.current_paragraph or self._open_paragraph()

    def _in_list_item(self) -> bool:
        return any(tag == "li" for tag, _ in self.tag_stack)

    def _text_style(self) -> Dict[str, Any]:
        merged: Dict[str, Any] = {}
        for _, style in self.tag_stack:
            merged.update(style)
        return merged

    # ------------------------------------------------------------------
    # HTMLParser events
    # ------------------------------------------------------------------
    def handle_starttag(self, tag: str, attrs: list) -> None:
        tag = tag.lower()
        attributes = {name.lower(): (value or "") for name, value in attrs}

        if tag in SKIPPED_TAGS:
            self.skip_depth += 1
            return
        if self.skip_depth:
            return

        if tag == "br":
            self._paragraph().add_line_break()
            return
        if tag == "img":
            self._handle_image(attributes)
            return
        if tag in VOID_TAGS:
            return

        css = parse_inline_style(attributes.get("style"))
        style = dict(INLINE_STYLES.get(tag, {}))
        style.update(css_text_style(css))

        if tag == "p":
            if not self._in_list_item():
                options = {"text-align": css["text-align"]} if "text-align" in css else None
                self._open_paragraph(options=options)
        elif tag in HEADING_TAGS:
            if not self._in_list_item():
                self._open_paragraph(heading_style_name(int(tag[1])))
        elif tag == "blockquote":
            self.block_styles.append("Quote")
            self._close_paragraph()
        elif tag in ("ul", "ol"):
            self.list_stack.append({"tag": tag, "items": 0})
            self._close_paragraph()
        elif tag == "li":
            paragraph = self._open_paragraph()
            if self.list_stack and self.list_stack[-1]["tag"] == "ol":
                paragraph.set_numbered(continue_numbering=self.list_stack[-1]["items"] > 0)
            else:
                paragraph.set_bulleted()
            if self.list_stack:
                self.list_stack[-1]["items"] += 1
        elif tag == "a":
            style = {**LINK_STYLE, **style}
            self.href_stack.append(attributes.get("href", ""))

        self.tag_stack.append((tag, style))

    def handle_startendtag(self, tag: str, attrs: list) -> None:
        self.handle_starttag(tag, attrs)
        if tag.lower() not in VOID_TAGS:
            self.handle_endtag(tag)

    def handle_endtag(self, tag: str) -> None:
        tag = tag.lower()
        if tag in SKIPPED_TAGS:
            self.skip_depth = max(0, self.skip_depth - 1)
            return
        if self.skip_depth or tag in VOID_TAGS:
            return
        if not any(open_tag == tag for open_tag, _ in self.tag_stack):
            logger.debug(f"Ignoring unmatched closing tag </{tag}>")
            return

        while self.tag_stack:
            open_tag, _ = self.tag_stack.pop()
            self._on_close(open_tag)
            if open_tag == tag:
                break

    def _on_close(self, tag: str) -> None:
        if tag in ("p",) + HEADING_TAGS:
            if not self._in_list_item():
                self._close_paragraph()
        elif tag == "li":
            self._close_paragraph()
        elif tag in ("ul", "ol"):
            if self.list_stack:
                self.list_stack.pop()
            self._close_paragraph()
        elif tag == "blockquote":
            if self.block_styles:
                self.block_styles.pop()
            self._close_paragraph()
        elif tag == "a":
            if self.href_stack:
                self.href_stack.pop()

    def handle_data(self, data: str) -> None:
        if self.skip_depth:
            return
        text = WHITESPACE.sub(" ", data)
        if self.current_paragraph is None or not self.current_paragraph.parts:
            text = text.lstrip()
        if not text:
            return

        paragraph = self._paragraph()
        style = self._text_style()
        if self.href_stack and self.href_stack[-1]:
            paragraph.add_hyperlink(text, self.href_stack[-1], style)
        else:
            paragraph.add_text(text, style or None)

    # ------------------------------------------------------------------
    def _resolve_source(self, src: str) -> Optional[str]:
        if src.startswith("file://"):
            src = src[len("file://"):]
        if not src or re.match(r"^[a-z][a-z0-9+.-]*://", src, re.IGNORECASE) or src.startswith("data:"):
            logger.warning(f"Skipping non-local image source: {src[:60]!r}")
            return None
        path = Path(src)
        if not path.is_absolute() and self.base_path is not None:
            path = self.base_path / path
        return os.path.realpath(path)

    def _handle_image(self, attributes: Dict[str, str]) -> None:
        options = parse_image_style(attributes.get("style"))
        if options is None:
            logger.debug("Skipping image hidden with display:none")
            return
        path = self._resolve_source(attributes.get("src", ""))
        if path is None:
            return

        for key in ("width", "height"):
            if key not in options and attributes.get(key):
                length = css_length(attributes[key])
                if length:
                    options[key] = length

        image = ImageElement(path, options, config=self.config)
        if self.current_paragraph is not None:
            self.current_paragraph.embed(image)
        else:
            self.rich_text.add_image(image)


class HtmlImporter:
    """
    Converts HTML fragments into RichText.

    Image sources must be local files; relative paths resolve against
    ``base_path``.
    """

    def __init__(self, base_path: Optional[Union[str, Path]] = None,
                 config: Optional[EngineConfig] = None):
        self.base_path = Path(base_path) if base_path else None
        self.config = config or DEFAULT_CONFIG

    def import_html(self, html: str) -> RichText:
        """
        Parse ``html`` and return the resulting RichText.

        Raises:
            AssetError: If an ``img`` points at a missing local file
        """
        parser = HTMLContentParser(self.base_path, self.config)
        parser.feed(html or "")
        parser.close()
        logger.debug(f"Imported HTML into {len(parser.rich_text)} elements")
        return parser.rich_text


def html_to_rich_text(html: str, base_path: Optional[Union[str, Path]] = None,
                      config: Optional[EngineConfig] = None) -> RichText:
    return HtmlImporter(base_path, config).import_html(html)
