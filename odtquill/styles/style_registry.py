"""
Style Registry - deduplicated store of style definitions for one build.

Styles are grouped by family. Anonymous styles are named after a hash of
their normalized properties, so equivalent option sets always share a name.
"""

from __future__ import annotations

import copy
import hashlib
import itertools
import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple, Union

from ..exceptions import StyleError

logger = logging.getLogger(__name__)

# Render-time hints that never become part of a style's identity.
TRANSIENT_KEYS = ("align", "style-name")


class StyleFamily(str, Enum):
    """ODF style families managed by the registry."""

    TEXT = "text"
    PARAGRAPH = "paragraph"
    TABLE_CELL = "table-cell"
    GRAPHIC = "graphic"


@dataclass
class StyleDefinition:
    """A named set of mapped style properties."""

    name: str
    family: StyleFamily
    properties: Dict[str, Any] = field(default_factory=dict)


def normalize_properties(properties: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Drop transient keys and order the rest by key."""
    return {
        key: copy.deepcopy(properties[key])
        for key in sorted(properties or {})
        if key not in TRANSIENT_KEYS
    }


def generate_style_name(properties: Optional[Mapping[str, Any]], prefix: str = "auto_") -> str:
    """
    Derive a stable style name from a property mapping.

    Args:
        properties: Style properties (mapped or raw options)
        prefix: Name prefix

    Returns:
        ``prefix`` followed by the first 8 hex digits of an md5 digest
    """
    encoded = json.dumps(
        normalize_properties(properties),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    )
    return prefix + hashlib.md5(encoded.encode("utf-8")).hexdigest()[:8]


FamilyArg = Union[StyleFamily, str]


class StyleRegistry:
    """
    Build-scoped registry of text, paragraph, table-cell and graphic styles.

    Pass one instance to every render call of a build; never share it
    between unrelated documents.
    """

    def __init__(self) -> None:
        self._styles: Dict[StyleFamily, Dict[str, StyleDefinition]] = {
            family: {} for family in StyleFamily
        }
        self._table_numbers = itertools.count(1)

    def resolve(self, family: FamilyArg, properties: Optional[Mapping[str, Any]]) -> str:
        """
        Return the style name for ``properties``, creating the entry if needed.

        Resolving equivalent properties twice yields the same name and a
        single entry.
        """
        family = StyleFamily(family)
        normalized = normalize_properties(properties)
        name = generate_style_name(normalized)
        styles = self._styles[family]
        if name not in styles:
            styles[name] = StyleDefinition(name=name, family=family, properties=normalized)
            logger.debug(f"Registered {family.value} style {name}")
        return name

    def register(self, family: FamilyArg, name: str, properties: Optional[Mapping[str, Any]]) -> str:
        """
        Register a style under an explicit name.

        Raises:
            StyleError: If ``name`` already holds different properties
        """
        family = StyleFamily(family)
        normalized = normalize_properties(properties)
        styles = self._styles[family]
        existing = styles.get(name)
        if existing is not None:
            if existing.properties != normalized:
                raise StyleError(
                    f"Conflicting definitions for {family.value} style '{name}'",
                    f"{existing.properties} != {normalized}",
                )
            return name
        styles[name] = StyleDefinition(name=name, family=family, properties=normalized)
        logger.debug(f"Registered {family.value} style {name}")
        return name

    def next_table_name(self, prefix: str = "Table_") -> str:
        """Next generated table name of this build: ``Table_1``, ``Table_2`` ..."""
        return f"{prefix}{next(self._table_numbers)}"

    def get(self, family: FamilyArg, name: str) -> Optional[Dict[str, Any]]:
        definition = self._styles[StyleFamily(family)].get(name)
        return definition.properties if definition else None

    def get_all(self, family: FamilyArg) -> Dict[str, Dict[str, Any]]:
        """Mapping of style name to properties, in registration order."""
        return {
            name: definition.properties
            for name, definition in self._styles[StyleFamily(family)].items()
        }

    def merge(self, other: "StyleRegistry") -> None:
        """Copy every definition of ``other`` into this registry."""
        for definition in other:
            self.register(definition.family, definition.name, definition.properties)

    def __iter__(self) -> Iterator[StyleDefinition]:
        for family in StyleFamily:
            yield from self._styles[family].values()

    def __contains__(self, item: Tuple[FamilyArg, str]) -> bool:
        family, name = item
        return name in self._styles[StyleFamily(family)]

    def __len__(self) -> int:
        return sum(len(styles) for styles in self._styles.values())
