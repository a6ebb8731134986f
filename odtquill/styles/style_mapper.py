"""
Style Mapper - translates friendly style options into ODF attributes.

One pure mapping per style family:
- text runs (``bold``, ``italic``, ``color`` ...)
- paragraphs (margins, alignment, tab stops ...)
- table cells (``background``, ``padding``, ``border`` ...)
- graphics/images (size, wrap, anchor, position)

Keys that already carry an ODF prefix pass through unchanged, known aliases
are translated and anything else is dropped.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

logger = logging.getLogger(__name__)

ODF_PREFIXES = ("fo:", "style:", "svg:", "draw:", "text:", "table:")

TEXT_ALIASES = {
    "color": "fo:color",
    "background": "fo:background-color",
    "background-color": "fo:background-color",
    "font-size": "fo:font-size",
    "font-family": "fo:font-family",
    "font-name": "style:font-name",
    "font-weight": "fo:font-weight",
    "font-style": "fo:font-style",
}

PARAGRAPH_ALIASES = {
    "margin-left": "fo:margin-left",
    "margin-right": "fo:margin-right",
    "margin-top": "fo:margin-top",
    "margin-bottom": "fo:margin-bottom",
    "text-align": "fo:text-align",
    "align": "fo:text-align",
    "text-indent": "fo:text-indent",
    "line-height": "fo:line-height",
    "background-color": "fo:background-color",
    "keep-with-next": "fo:keep-with-next",
    "break-before": "fo:break-before",
    "break-after": "fo:break-after",
    "padding": "fo:padding",
    "border": "fo:border",
    "writing-mode": "style:writing-mode",
    "number-lines": "text:number-lines",
    "line-number": "text:line-number",
}

TABLE_CELL_ALIASES = {
    "background": "fo:background-color",
    "background-color": "fo:background-color",
    "padding": "fo:padding",
    "padding-top": "fo:padding-top",
    "padding-bottom": "fo:padding-bottom",
    "padding-left": "fo:padding-left",
    "padding-right": "fo:padding-right",
    "border": "fo:border",
    "border-top": "fo:border-top",
    "border-bottom": "fo:border-bottom",
    "border-left": "fo:border-left",
    "border-right": "fo:border-right",
    "text-align": "fo:text-align",
    "align": "fo:text-align",
    "weight": "fo:font-weight",
    "font-weight": "fo:font-weight",
    "font-style": "fo:font-style",
    "font-size": "fo:font-size",
    "color": "fo:color",
    "vertical-align": "style:vertical-align",
}

IMAGE_ALIASES = {
    "width": "svg:width",
    "height": "svg:height",
    "x": "svg:x",
    "y": "svg:y",
    "horizontal-pos": "style:horizontal-pos",
    "horizontal-rel": "style:horizontal-rel",
    "vertical-pos": "style:vertical-pos",
    "vertical-rel": "style:vertical-rel",
}

VALID_WRAPS = ("none", "left", "right", "parallel", "run-through", "dynamic", "biggest")
VALID_ALIGNS = ("left", "right", "center", "absolute")
VALID_ANCHORS = ("paragraph", "page", "char", "as-char", "frame")
VALID_TAB_TYPES = ("left", "right", "center", "char")


def _is_prefixed(key: str) -> bool:
    return key.startswith(ODF_PREFIXES)


def _is_true(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in ("", "0", "false", "no", "off")
    return bool(value)


class StyleMapper:
    """Pure translation of style options, one method per style family."""

    @staticmethod
    def map_text(options: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        """
        Map text run options to ``style:text-properties`` attributes.

        Args:
            options: Options such as ``{"bold": True, "color": "#ff0000"}``

        Returns:
            Attribute mapping, e.g. ``{"fo:font-weight": "bold", ...}``
        """
        mapped: Dict[str, Any] = {}
        for key, value in (options or {}).items():
            if _is_prefixed(key):
                mapped[key] = value
            elif key == "bold":
                if _is_true(value):
                    mapped["fo:font-weight"] = "bold"
            elif key == "italic":
                if _is_true(value):
                    mapped["fo:font-style"] = "italic"
            elif key == "underline":
                if _is_true(value):
                    mapped["style:text-underline-style"] = "solid"
                    mapped["style:text-underline-type"] = "single"
                    mapped["style:text-underline-width"] = "auto"
                    mapped["style:text-underline-color"] = "font-color"
            elif key == "strike":
                if _is_true(value):
                    mapped["style:text-line-through-style"] = "solid"
                    mapped["style:text-line-through-type"] = "single"
            elif key in TEXT_ALIASES:
                mapped[TEXT_ALIASES[key]] = value
            else:
                logger.debug(f"Dropping unknown text style option: {key}")
        return mapped

    @staticmethod
    def map_paragraph(options: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        """
        Map paragraph options to paragraph (and text) property attributes.

        ``tab-stops`` expands to ``style:tab-stops``: a list of
        ``{"style:position": "<n>cm", "style:type": <alignment>}`` entries.
        Text options (``bold``, ``color`` ...) are accepted as well and end
        up in the style's text properties.
        """
        mapped: Dict[str, Any] = {}
        text_options: Dict[str, Any] = {}
        for key, value in (options or {}).items():
            if key == "tab-stops":
                mapped["style:tab-stops"] = StyleMapper.map_tab_stops(value)
            elif _is_prefixed(key):
                mapped[key] = value
            elif key in PARAGRAPH_ALIASES:
                mapped[PARAGRAPH_ALIASES[key]] = value
            else:
                text_options[key] = value
        mapped.update(StyleMapper.map_text(text_options))
        return mapped

    @staticmethod
    def map_tab_stops(tab_stops: Iterable[Any]) -> List[Dict[str, str]]:
        """Expand ``[{position, alignment}, ...]`` into tab-stop attribute maps."""
        result = []
        for tab in tab_stops or []:
            if isinstance(tab, Mapping):
                position = tab.get("position", tab.get("style:position", 0))
                alignment = tab.get("alignment", tab.get("style:type", "left"))
            else:
                position, alignment = (list(tab) + ["left"])[:2]
            if isinstance(position, str) and not position.replace(".", "", 1).isdigit():
                position_text = position
            else:
                position_text = f"{float(position):g}cm"
            alignment = alignment or "left"
            if alignment not in VALID_TAB_TYPES:
                logger.debug(f"Unknown tab alignment {alignment!r}, using left")
                alignment = "left"
            result.append({"style:position": position_text, "style:type": alignment})
        return result

    @staticmethod
    def map_table_cell(options: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        """Map table cell options (``background``, ``padding``, ``border`` ...)."""
        mapped: Dict[str, Any] = {}
        for key, value in (options or {}).items():
            if _is_prefixed(key):
                mapped[key] = value
            elif key in TABLE_CELL_ALIASES:
                mapped[TABLE_CELL_ALIASES[key]] = value
            elif key == "bold":
                if _is_true(value):
                    mapped["fo:font-weight"] = "bold"
            else:
                logger.debug(f"Dropping unknown table cell option: {key}")
        return mapped

    @staticmethod
    def map_image(options: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        """
        Map image options to graphic style and frame attributes.

        ``align`` is kept under its own name: it only steers positioning
        at render time and is excluded from the style identity.
        """
        mapped: Dict[str, Any] = {}
        for key, value in (options or {}).items():
            if _is_prefixed(key):
                mapped[key] = value
            elif key == "wrap":
                if value in VALID_WRAPS:
                    mapped["style:wrap"] = value
                else:
                    logger.debug(f"Ignoring invalid wrap value: {value!r}")
            elif key == "align":
                if value in VALID_ALIGNS:
                    mapped["align"] = value
                else:
                    logger.debug(f"Ignoring invalid align value: {value!r}")
            elif key == "anchor":
                if value in VALID_ANCHORS:
                    mapped["text:anchor-type"] = value
                else:
                    logger.debug(f"Ignoring invalid anchor value: {value!r}")
            elif key in IMAGE_ALIASES:
                mapped[IMAGE_ALIASES[key]] = value
        return mapped


def parse_inline_style(style: Optional[str]) -> Dict[str, str]:
    """
    Parse a CSS declaration list (``"float: left; width: 4cm"``).

    Property names are lower-cased; values keep their case, trimmed.
    """
    result: Dict[str, str] = {}
    if not style:
        return result
    for declaration in style.split(";"):
        if ":" not in declaration:
            continue
        name, value = declaration.split(":", 1)
        name = name.strip().lower()
        if name:
            result[name] = value.strip()
    return result
