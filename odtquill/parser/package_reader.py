"""
Package reader for ODT files.

Extracts the template archive into a scratch directory and parses the XML
parts the engine rewrites (content, styles and metadata).
"""

from __future__ import annotations

import logging
import shutil
import tempfile
import zipfile
from pathlib import Path
from typing import Dict, List, Optional, Union

from lxml import etree

from ..exceptions import AssetError, TemplateLoadError

logger = logging.getLogger(__name__)

CONTENT_PART = "content.xml"
STYLES_PART = "styles.xml"
META_PART = "meta.xml"
MANIFEST_PART = "META-INF/manifest.xml"
MIMETYPE_PART = "mimetype"

REQUIRED_PARTS = (CONTENT_PART, STYLES_PART, META_PART)


class PackageReader:
    """
    Reads and manages ODT package contents.

    The archive is extracted once into ``extract_to``; XML parts are parsed
    lazily and cached so every consumer mutates the same tree.
    """

    def __init__(self, odt_path: Union[str, Path], extract_to: Optional[Path] = None,
                 prefix: str = "odt_"):
        """
        Initialize package reader.

        Args:
            odt_path: Path to the ODT template
            extract_to: Directory to extract to (a temp dir if None)
            prefix: Prefix of the temp dir name

        Raises:
            TemplateLoadError: If the archive or a required part is missing or broken
        """
        self.odt_path = Path(odt_path)
        if not self.odt_path.is_file():
            raise TemplateLoadError("Template not found", str(self.odt_path))

        self.extract_to = Path(extract_to) if extract_to else Path(tempfile.mkdtemp(prefix=prefix))
        self._trees: Dict[str, etree._ElementTree] = {}

        try:
            self._extract_files()
            for part in REQUIRED_PARTS:
                self.get_xml_tree(part)
        except TemplateLoadError:
            self.cleanup()
            raise

        logger.info(f"Opened ODT package: {self.odt_path}")

    def _extract_files(self) -> None:
        """Extract all members, refusing paths that leave the scratch directory."""
        root = self.extract_to.resolve()
        root.mkdir(parents=True, exist_ok=True)
        try:
            with zipfile.ZipFile(self.odt_path, "r") as archive:
                for info in archive.infolist():
                    if info.is_dir():
                        continue
                    target = (root / info.filename).resolve()
                    if root != target and root not in target.parents:
                        raise TemplateLoadError("Unsafe member path in template", info.filename)
                    target.parent.mkdir(parents=True, exist_ok=True)
                    with archive.open(info) as source, open(target, "wb") as destination:
                        shutil.copyfileobj(source, destination)
        except zipfile.BadZipFile as e:
            raise TemplateLoadError("Template is not a valid ODT archive", f"{self.odt_path}: {e}")

        logger.debug(f"Extracted {len(self.list_members())} files to {self.extract_to}")

    # ------------------------------------------------------------------
    def part_path(self, name: str) -> Path:
        return self.extract_to / name

    def has_part(self, name: str) -> bool:
        return self.part_path(name).is_file()

    def list_members(self) -> List[str]:
        """Relative names of every extracted file, sorted."""
        return sorted(
            path.relative_to(self.extract_to).as_posix()
            for path in self.extract_to.rglob("*")
            if path.is_file()
        )

    def get_xml_tree(self, name: str) -> etree._ElementTree:
        """
        Parsed tree of an XML part (cached).

        Raises:
            TemplateLoadError: If the part is missing or not well-formed
        """
        if name in self._trees:
            return self._trees[name]
        path = self.part_path(name)
        if not path.is_file():
            raise TemplateLoadError("Required template part is missing", name)
        try:
            tree = etree.parse(str(path), etree.XMLParser(huge_tree=True))
        except etree.XMLSyntaxError as e:
            raise TemplateLoadError("Template part is not well-formed XML", f"{name}: {e}")
        self._trees[name] = tree
        logger.debug(f"Parsed XML part {name}")
        return tree

    @property
    def parsed_parts(self) -> Dict[str, etree._ElementTree]:
        return dict(self._trees)

    def add_file(self, source: Union[str, Path], name: str) -> Path:
        """
        Copy a file into the package, e.g. ``Pictures/logo.png``.

        Raises:
            AssetError: If the source cannot be copied
        """
        target = self.part_path(name)
        target.parent.mkdir(parents=True, exist_ok=True)
        try:
            shutil.copyfile(source, target)
        except OSError as e:
            raise AssetError("Cannot copy asset into package", f"{source}: {e}")
        logger.debug(f"Added {name} from {source}")
        return target

    def cleanup(self) -> None:
        """Remove the scratch directory."""
        if self.extract_to.exists():
            shutil.rmtree(self.extract_to, ignore_errors=True)
            logger.debug(f"Removed scratch directory {self.extract_to}")
