"""
Base class for renderable content elements.

Every element renders itself to a list of detached ODF XML nodes and
reports the styles and image assets it needs, including those of the
elements embedded in it.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List

from lxml import etree

from ..styles.style_registry import StyleFamily, StyleRegistry
from ..styles.style_writer import build_style_element

logger = logging.getLogger(__name__)

StyleMap = Dict[StyleFamily, Dict[str, Dict[str, Any]]]


@dataclass(frozen=True)
class ImageAsset:
    """An image file that has to be copied into the package."""

    id: str
    path: str


def merge_style_maps(target: StyleMap, source: StyleMap) -> StyleMap:
    for family, styles in source.items():
        target.setdefault(family, {}).update(styles)
    return target


class OdtElement(ABC):
    """Abstract base for paragraphs, rich text, tables, cells and images."""

    @abstractmethod
    def to_xml(self, registry: StyleRegistry) -> List[etree._Element]:
        """
        Render the element.

        Args:
            registry: Style registry of the current build; the element's
                styles are registered into it

        Returns:
            Detached XML nodes, in document order
        """

    def own_styles(self) -> StyleMap:
        """Styles defined by this element itself (not by embedded elements)."""
        return {}

    def embedded_elements(self) -> List["OdtElement"]:
        return []

    def required_styles(self) -> StyleMap:
        styles: StyleMap = {}
        merge_style_maps(styles, self.own_styles())
        for element in self.embedded_elements():
            merge_style_maps(styles, element.required_styles())
        return styles

    def register_styles(self, registry: StyleRegistry) -> None:
        for family, styles in self.required_styles().items():
            for name, properties in styles.items():
                registry.register(family, name, properties)

    def image_assets(self) -> List[ImageAsset]:
        assets: List[ImageAsset] = []
        for element in self.embedded_elements():
            for asset in element.image_assets():
                if asset not in assets:
                    assets.append(asset)
        return assets

    def to_style_xml(self) -> List[etree._Element]:
        """Standalone ``style:style`` nodes for every style the element needs."""
        nodes = []
        for family, styles in self.required_styles().items():
            for name, properties in styles.items():
                nodes.append(build_style_element(family, name, properties))
        return nodes
