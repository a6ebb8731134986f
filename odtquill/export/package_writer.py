"""
Package writer for ODT files.

Serializes the modified XML parts back into the scratch directory, registers
new pictures in the manifest and zips everything into the output document.
"""

from __future__ import annotations

import logging
import mimetypes
import zipfile
from pathlib import Path
from typing import Iterable, List, Optional, Union

from lxml import etree

from ..config import DEFAULT_CONFIG, EngineConfig
from ..exceptions import PackagingError
from ..parser.package_reader import MANIFEST_PART, MIMETYPE_PART, PackageReader
from ..utils.namespaces import PARAGRAPH_TAGS, get_attr, is_tag, qn, sub_element

logger = logging.getLogger(__name__)


def minify_tree(root: etree._Element) -> None:
    """
    Drop whitespace-only text between structural elements.

    Text inside paragraphs and headings is left alone; spaces there are
    content.
    """

    def walk(element: etree._Element, inside: bool) -> None:
        inside = inside or is_tag(element, *PARAGRAPH_TAGS)
        if not inside and element.text and not element.text.strip():
            element.text = None
        for child in element:
            walk(child, inside)
            if not inside and child.tail and not child.tail.strip():
                child.tail = None

    walk(root, False)


def media_type(name: str) -> str:
    guessed, _ = mimetypes.guess_type(name)
    return guessed or "application/octet-stream"


class PackageWriter:
    """Writes a :class:`PackageReader` scratch directory out as an ODT file."""

    def __init__(self, reader: PackageReader, config: Optional[EngineConfig] = None):
        self.reader = reader
        self.config = config or DEFAULT_CONFIG

    def register_in_manifest(self, names: Iterable[str]) -> int:
        """
        Add ``manifest:file-entry`` elements for package members not yet listed.

        Returns:
            Number of entries added
        """
        if not self.reader.has_part(MANIFEST_PART):
            logger.debug("Template has no manifest; skipping picture registration")
            return 0
        root = self.reader.get_xml_tree(MANIFEST_PART).getroot()
        listed = {get_attr(entry, "manifest:full-path") for entry in root.iter(qn("manifest:file-entry"))}
        added = 0
        for name in names:
            if name in listed:
                continue
            sub_element(root, "manifest:file-entry", {
                "manifest:full-path": name,
                "manifest:media-type": media_type(name),
            })
            listed.add(name)
            added += 1
        if added:
            logger.debug(f"Registered {added} new manifest entries")
        return added

    def write_parts(self) -> None:
        """Serialize every parsed XML part back to the scratch directory."""
        for name, tree in self.reader.parsed_parts.items():
            if self.config.minify_xml and name != MANIFEST_PART:
                minify_tree(tree.getroot())
            tree.write(str(self.reader.part_path(name)), xml_declaration=True, encoding="UTF-8")

    def write(self, output_path: Union[str, Path], added_files: Iterable[str] = ()) -> Path:
        """
        Build the output document.

        Args:
            output_path: Target ``.odt`` path
            added_files: Package member names added since loading (pictures)

        Returns:
            The output path

        Raises:
            PackagingError: If ``mimetype`` is missing or the file cannot be written
        """
        output_path = Path(output_path)
        if not self.reader.has_part(MIMETYPE_PART):
            raise PackagingError("Package has no mimetype entry", str(self.reader.extract_to))

        self.register_in_manifest(added_files)
        self.write_parts()

        members: List[str] = [name for name in self.reader.list_members() if name != MIMETYPE_PART]
        try:
            with zipfile.ZipFile(output_path, "w") as archive:
                archive.write(self.reader.part_path(MIMETYPE_PART), MIMETYPE_PART, compress_type=zipfile.ZIP_STORED)
                for name in members:
                    archive.write(self.reader.part_path(name), name, compress_type=zipfile.ZIP_DEFLATED)
        except OSError as e:
            raise PackagingError("Cannot write output document", f"{output_path}: {e}")

        logger.info(f"Document saved: {output_path} ({len(members) + 1} members)")
        return output_path
