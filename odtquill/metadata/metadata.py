"""
Document metadata (meta.xml).

Maps a fixed set of friendly keys onto Dublin Core and ODF meta elements.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Union

from lxml import etree

from ..utils.namespaces import qn, sub_element

logger = logging.getLogger(__name__)

META_FIELDS: Dict[str, str] = {
    "title": "dc:title",
    "subject": "dc:subject",
    "description": "dc:description",
    "keywords": "meta:keyword",
    "initial_author": "meta:initial-creator",
    "author": "dc:creator",
    "language": "dc:language",
    "creation_date": "meta:creation-date",
    "date": "dc:date",
    "editing_cycles": "meta:editing-cycles",
    "editing_duration": "meta:editing-duration",
    "generator": "meta:generator",
}


class DocumentMetadata:
    """
    Read and write access to the fields of a parsed ``meta.xml`` tree.

    Only the keys of :data:`META_FIELDS` are supported.
    """

    def __init__(self, root: etree._Element):
        self.root = root

    def _office_meta(self, create: bool = False) -> Optional[etree._Element]:
        container = self.root.find(qn("office:meta"))
        if container is None and create:
            container = sub_element(self.root, "office:meta")
        return container

    def _field(self, key: str, create: bool = False) -> Optional[etree._Element]:
        tag = qn(META_FIELDS[key])
        node = next(self.root.iter(tag), None)
        if node is None and create:
            node = sub_element(self._office_meta(create=True), META_FIELDS[key])
        return node

    def set(self, key_or_values: Union[str, Mapping[str, Any]], value: Any = None) -> int:
        """
        Set one field, or several from a mapping.

        Unknown keys are skipped with a warning.

        Returns:
            Number of fields written
        """
        values = key_or_values if isinstance(key_or_values, Mapping) else {key_or_values: value}
        written = 0
        for key, field_value in values.items():
            if key not in META_FIELDS:
                logger.warning(f"Unknown metadata key ignored: {key}")
                continue
            node = self._field(key, create=True)
            for child in list(node):
                node.remove(child)
            node.text = "" if field_value is None else str(field_value)
            written += 1
            logger.debug(f"Metadata {key} = {node.text!r}")
        return written

    def get(self, key: str) -> Optional[str]:
        if key not in META_FIELDS:
            logger.warning(f"Unknown metadata key: {key}")
            return None
        node = self._field(key)
        if node is None:
            return None
        return "".join(node.itertext())

    def get_all(self) -> Dict[str, str]:
        """All supported fields present in the document."""
        result = {}
        for key in META_FIELDS:
            node = self._field(key)
            if node is not None:
                result[key] = "".join(node.itertext())
        return result
