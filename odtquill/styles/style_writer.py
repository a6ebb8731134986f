"""
Style Writer - serializes registered styles into the document stylesheets.

Text and paragraph styles land in ``office:styles`` of ``styles.xml``;
table-cell and graphic styles land in ``office:automatic-styles`` of both
``content.xml`` and ``styles.xml`` so references from either part resolve.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from lxml import etree

from ..exceptions import StyleError
from ..utils.namespaces import get_attr, is_tag, make_element, qn, sub_element
from .defaults import (
    BULLET_LIST_STYLE,
    DEFAULT_PARAGRAPH_STYLES,
    HEADING_PROPERTIES,
    NUMBER_LIST_STYLE,
    heading_style_name,
)
from .style_registry import FamilyArg, StyleFamily, StyleRegistry

logger = logging.getLogger(__name__)

TEXT_PROPERTY_PREFIXES = ("fo:font-", "fo:color", "fo:letter-spacing", "style:font-", "style:text-")
CELL_PROPERTY_PREFIXES = ("fo:background", "fo:border", "fo:padding", "style:vertical-align", "style:border")

GRAPHIC_PROPERTIES = (
    "style:wrap",
    "style:horizontal-pos",
    "style:horizontal-rel",
    "style:vertical-pos",
    "style:vertical-rel",
    "style:run-through",
    "style:number-wrapped-paragraphs",
    "style:wrap-contour",
    "style:mirror",
    "fo:margin-left",
    "fo:margin-right",
    "fo:margin-top",
    "fo:margin-bottom",
    "fo:clip",
    "draw:fill",
    "draw:fill-color",
    "draw:stroke",
    "draw:opacity",
    "draw:luminance",
    "draw:contrast",
)

AUTOMATIC_FAMILIES = (StyleFamily.TABLE_CELL, StyleFamily.GRAPHIC)


def _is_text_property(key: str) -> bool:
    return key.startswith(TEXT_PROPERTY_PREFIXES)


def _attr_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _stringify(properties: Dict[str, Any]) -> Dict[str, str]:
    return {key: _attr_value(value) for key, value in properties.items()}


def build_style_element(
    family: FamilyArg,
    name: str,
    properties: Dict[str, Any],
    display_name: Optional[str] = None,
    parent: Optional[str] = None,
) -> etree._Element:
    """
    Build a detached ``style:style`` element for one style definition.

    Args:
        family: Style family
        name: Style name
        properties: Mapped ODF attributes
        display_name: Optional human readable name
        parent: Parent style name; a family default is used when None.
            A ``style:parent-style-name`` entry in ``properties`` wins.

    Returns:
        The ``style:style`` element
    """
    family = StyleFamily(family)
    properties = dict(properties)
    parent = properties.pop("style:parent-style-name", parent)
    attrs = {"style:name": name, "style:family": family.value}
    if display_name:
        attrs["style:display-name"] = display_name

    if family is StyleFamily.PARAGRAPH:
        parent = "Standard" if parent is None else parent
        if parent and parent != name:
            attrs["style:parent-style-name"] = parent
        attrs["style:class"] = "text"
        style = make_element("style:style", attrs)

        tab_stops = properties.get("style:tab-stops") or []
        paragraph_props = {
            key: value
            for key, value in properties.items()
            if key != "style:tab-stops" and not _is_text_property(key)
        }
        text_props = {key: value for key, value in properties.items() if _is_text_property(key)}
        if paragraph_props or tab_stops:
            props = sub_element(style, "style:paragraph-properties", _stringify(paragraph_props))
            if tab_stops:
                tabs = sub_element(props, "style:tab-stops")
                for tab in tab_stops:
                    sub_element(tabs, "style:tab-stop", _stringify(tab))
        if text_props:
            sub_element(style, "style:text-properties", _stringify(text_props))

    elif family is StyleFamily.TABLE_CELL:
        attrs["style:parent-style-name"] = parent or "Default"
        style = make_element("style:style", attrs)
        cell_props: Dict[str, Any] = {}
        paragraph_props = {}
        text_props = {}
        for key, value in properties.items():
            if key.startswith(CELL_PROPERTY_PREFIXES):
                cell_props[key] = value
            elif key == "fo:text-align":
                paragraph_props[key] = value
            elif _is_text_property(key):
                text_props[key] = value
            else:
                cell_props[key] = value
        if cell_props:
            sub_element(style, "style:table-cell-properties", _stringify(cell_props))
        if paragraph_props:
            sub_element(style, "style:paragraph-properties", _stringify(paragraph_props))
        if text_props:
            sub_element(style, "style:text-properties", _stringify(text_props))

    elif family is StyleFamily.GRAPHIC:
        attrs["style:parent-style-name"] = parent or "Graphics"
        style = make_element("style:style", attrs)
        graphic_props = {key: value for key, value in properties.items() if key in GRAPHIC_PROPERTIES}
        sub_element(style, "style:graphic-properties", _stringify(graphic_props))

    else:
        if parent:
            attrs["style:parent-style-name"] = parent
        style = make_element("style:style", attrs)
        sub_element(style, "style:text-properties", _stringify(properties))

    return style


class StyleWriter:
    """
    Writes style definitions into parsed ``styles.xml`` / ``content.xml`` trees.

    Existing styles (same name and family) are never duplicated.
    """

    def __init__(self, styles_root: etree._Element, content_root: Optional[etree._Element] = None):
        """
        Args:
            styles_root: Root element of ``styles.xml``
            content_root: Root element of ``content.xml`` (optional)
        """
        self.styles_root = styles_root
        self.content_root = content_root

    # ------------------------------------------------------------------
    def _office_styles(self) -> etree._Element:
        container = self.styles_root.find(qn("office:styles"))
        if container is None:
            raise StyleError("Stylesheet has no office:styles section", "styles.xml")
        return container

    def _automatic_styles(self, root: etree._Element) -> etree._Element:
        container = root.find(qn("office:automatic-styles"))
        if container is not None:
            return container
        container = etree.Element(qn("office:automatic-styles"))
        # Schema order: automatic styles precede master styles and body.
        anchor = None
        for tag in ("office:master-styles", "office:body"):
            anchor = root.find(qn(tag))
            if anchor is not None:
                break
        if anchor is not None:
            anchor.addprevious(container)
        else:
            root.append(container)
        logger.debug("Created missing office:automatic-styles section")
        return container

    def _containers_for(self, family: StyleFamily) -> List[etree._Element]:
        if family not in AUTOMATIC_FAMILIES:
            return [self._office_styles()]
        roots = [self.styles_root]
        if self.content_root is not None:
            roots.insert(0, self.content_root)
        return [self._automatic_styles(root) for root in roots]

    @staticmethod
    def has_style(container: etree._Element, name: str, family: Optional[str] = None) -> bool:
        for child in container:
            if not isinstance(child.tag, str) or get_attr(child, "style:name") != name:
                continue
            if family is None or get_attr(child, "style:family") == family:
                return True
        return False

    # ------------------------------------------------------------------
    def write_registry(self, registry: StyleRegistry) -> int:
        """
        Flush every registered style that the stylesheets do not yet contain.

        Returns:
            Number of style elements written
        """
        written = 0
        for definition in registry:
            written += self.ensure_style(definition.family, definition.name, definition.properties)
        logger.debug(f"Flushed {written} style elements")
        return written

    def ensure_style(
        self,
        family: FamilyArg,
        name: str,
        properties: Dict[str, Any],
        display_name: Optional[str] = None,
        parent: Optional[str] = None,
    ) -> int:
        """
        Append a style unless a style with that name and family exists.

        Returns:
            Number of style elements written (one per target section)
        """
        family = StyleFamily(family)
        written = 0
        for container in self._containers_for(family):
            if self.has_style(container, name, family.value):
                continue
            container.append(build_style_element(family, name, properties, display_name, parent))
            written += 1
        return written

    # ------------------------------------------------------------------
    def ensure_default_styles(self) -> None:
        """Add heading, alignment, quote and list styles the template lacks."""
        heading_parent = "Heading" if self.has_style(self._office_styles(), "Heading", "paragraph") else None
        for level in range(1, 7):
            self.ensure_style(
                StyleFamily.PARAGRAPH,
                heading_style_name(level),
                HEADING_PROPERTIES,
                display_name=f"Heading {level}",
                parent=heading_parent,
            )
        for name, (display_name, properties) in DEFAULT_PARAGRAPH_STYLES.items():
            self.ensure_style(StyleFamily.PARAGRAPH, name, properties, display_name=display_name)
        self.ensure_list_style(BULLET_LIST_STYLE, bulleted=True)
        self.ensure_list_style(NUMBER_LIST_STYLE, bulleted=False)

    def ensure_list_style(self, name: str, bulleted: bool = True) -> int:
        container = self._office_styles()
        for child in container:
            if is_tag(child, "text:list-style") and get_attr(child, "style:name") == name:
                return 0

        list_style = sub_element(
            container,
            "text:list-style",
            {"style:name": name, "style:display-name": name.replace("_20_", " ")},
        )
        if bulleted:
            level = sub_element(
                list_style,
                "text:list-level-style-bullet",
                {"text:level": "1", "text:bullet-char": "•"},
            )
        else:
            level = sub_element(
                list_style,
                "text:list-level-style-number",
                {"text:level": "1", "style:num-suffix": ".", "style:num-format": "1"},
            )
        sub_element(
            level,
            "style:list-level-properties",
            {"text:space-before": "0.5cm", "text:min-label-width": "0.5cm"},
        )
        return 1
