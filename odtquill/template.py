"""
ODT template facade.

Loads a template archive, applies bindings, loops, conditionals and element
injections to its XML parts, and packages the result as a new document.
"""

from __future__ import annotations

import logging
import weakref
from collections.abc import Mapping as MappingABC
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from lxml import etree

from .config import DEFAULT_CONFIG, EngineConfig
from .engine.filters import FilterSet
from .engine.normalizer import normalize_placeholders
from .engine.placeholder_engine import PlaceholderEngine, is_renderable, is_repeating
from .exceptions import OdtQuillError, TemplateStateError
from .export.package_writer import PackageWriter
from .metadata.metadata import DocumentMetadata
from .models.base import OdtElement
from .models.image import ImageElement
from .parser.package_reader import CONTENT_PART, META_PART, STYLES_PART, PackageReader
from .styles.style_registry import StyleRegistry
from .styles.style_writer import StyleWriter
from .utils.namespaces import get_attr, is_tag, qn, set_attr

logger = logging.getLogger(__name__)


class OdtTemplate:
    """
    An ODT template being filled.

    Example:
        >>> with OdtTemplate("invoice.odt") as template:
        ...     template.assign({"customer": "Anna", "total": 120})
        ...     template.assign_repeating("items", [{"name": "Pen"}, {"name": "Ink"}])
        ...     template.save("out.odt")
    """

    def __init__(self, path: Union[str, Path], config: Optional[EngineConfig] = None,
                 registry: Optional[StyleRegistry] = None):
        """
        Open a template.

        Args:
            path: Template ``.odt`` file
            config: Engine defaults
            registry: Style registry to collect element styles into

        Raises:
            TemplateLoadError: If the archive or a required part is broken
            StyleError: If ``styles.xml`` has no ``office:styles`` section
        """
        self.config = config or DEFAULT_CONFIG
        self.template_path = Path(path)
        self.registry = registry if registry is not None else StyleRegistry()
        self.filters = FilterSet(self.config)
        self.engine = PlaceholderEngine(self.filters, self.config)
        self.values: Dict[str, Any] = {}
        self.repeating: Dict[str, List[Mapping[str, Any]]] = {}
        self._added_files: List[str] = []
        self._closed = False

        self.reader = PackageReader(self.template_path, prefix=self.config.scratch_prefix)
        self._finalizer = weakref.finalize(self, self.reader.cleanup)
        try:
            merged = sum(normalize_placeholders(root) for root in self._roots())
            if merged:
                logger.debug(f"Merged split placeholders in {merged} paragraphs")
            StyleWriter(self.styles_root, self.content_root).ensure_default_styles()
        except OdtQuillError:
            self.cleanup()
            raise
        self.metadata = DocumentMetadata(self.meta_root)
        logger.info(f"Template loaded: {self.template_path}")

    # ------------------------------------------------------------------
    # Parts
    # ------------------------------------------------------------------
    @property
    def content_root(self) -> etree._Element:
        return self.reader.get_xml_tree(CONTENT_PART).getroot()

    @property
    def styles_root(self) -> etree._Element:
        return self.reader.get_xml_tree(STYLES_PART).getroot()

    @property
    def meta_root(self) -> etree._Element:
        return self.reader.get_xml_tree(META_PART).getroot()

    def _roots(self) -> List[etree._Element]:
        return [self.content_root, self.styles_root]

    def _check_open(self) -> None:
        if self._closed:
            raise TemplateStateError("Template has been cleaned up", str(self.template_path))

    # ------------------------------------------------------------------
    # Bindings
    # ------------------------------------------------------------------
    def _scalars(self) -> Dict[str, Any]:
        return {key: value for key, value in self.values.items() if not is_renderable(value)}

    def _apply(self, elements: Optional[Mapping[str, OdtElement]] = None) -> None:
        scalars = self._scalars()
        for root in self._roots():
            self.engine.expand_loops(root, self.repeating, scalars)
        for key, element in (elements or {}).items():
            self.set_element(key, element)
        for root in self._roots():
            self.engine.expand_line_breaks(root, scalars)
            self.engine.substitute(root, scalars)
            self.engine.apply_conditionals(root, scalars)

    def assign(self, values: Mapping[str, Any]) -> None:
        """
        Merge ``values`` into the bindings and apply them.

        Lists of mappings become repeating data, :class:`OdtElement` values
        are injected, everything else is substituted as text.
        """
        self._check_open()
        elements: Dict[str, OdtElement] = {}
        for key, value in values.items():
            if is_repeating(value):
                self.repeating[key] = list(value)
            elif is_renderable(value):
                elements[key] = value
            else:
                self.values[key] = value
        self._apply(elements)
        logger.debug(f"Assigned {len(values)} values")

    set_values = assign

    def assign_repeating(self, key: str, rows: Sequence[Mapping[str, Any]]) -> None:
        """Bind the rows of ``{{#foreach:key}}`` and expand the block."""
        self._check_open()
        rows = list(rows)
        for row in rows:
            if not isinstance(row, MappingABC):
                raise TypeError(f"Rows of {key!r} must be mappings, got {type(row).__name__}")
        self.repeating[key] = rows
        self._apply()

    def set_repeating_data(self, data: Mapping[str, Sequence[Mapping[str, Any]]]) -> None:
        self._check_open()
        for key, rows in data.items():
            self.repeating[key] = list(rows)
        self._apply()

    # ------------------------------------------------------------------
    # Elements and images
    # ------------------------------------------------------------------
    def _add_picture(self, path: str, name: str) -> str:
        member = f"{self.config.pictures_dir}/{name}"
        self.reader.add_file(path, member)
        if member not in self._added_files:
            self._added_files.append(member)
        return member

    def set_element(self, placeholder: str, element: OdtElement) -> int:
        """
        Replace each paragraph containing ``{{placeholder}}`` with ``element``.

        Returns:
            Number of paragraphs replaced
        """
        self._check_open()
        for asset in element.image_assets():
            self._add_picture(asset.path, asset.id)
        replaced = sum(
            self.engine.inject(root, placeholder, lambda: element.to_xml(self.registry))
            for root in self._roots()
        )
        if not replaced:
            logger.debug(f"Placeholder {{{{{placeholder}}}}} not found for element")
        return replaced

    def set_image(self, key: str, path: str, options: Optional[Mapping[str, Any]] = None) -> int:
        """Replace ``{{key}}`` with an image; the frame is named after ``key``."""
        options = dict(options or {})
        options.setdefault("name", key)
        return self.set_element(key, ImageElement(path, options, self.config))

    def replace_image_by_name(self, name: str, path: str, options: Optional[Mapping[str, Any]] = None) -> int:
        """
        Point every ``draw:frame`` named ``name`` at a new image file.

        Returns:
            Number of frames updated
        """
        self._check_open()
        image = ImageElement(path, dict(options or {}, name=name), self.config)
        member = self._add_picture(image.path, image.basename)
        updated = 0
        for root in self._roots():
            for frame in root.iter(qn("draw:frame")):
                if get_attr(frame, "draw:name") != name:
                    continue
                set_attr(frame, "svg:width", image.width)
                set_attr(frame, "svg:height", image.height)
                for child in frame:
                    if is_tag(child, "draw:image"):
                        set_attr(child, "xlink:href", member)
                updated += 1
        if not updated:
            logger.warning(f"No image frame named {name!r}")
        return updated

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------
    def set_meta(self, key_or_values: Union[str, Mapping[str, Any]], value: Any = None) -> int:
        self._check_open()
        return self.metadata.set(key_or_values, value)

    def get_meta(self, key: str) -> Optional[str]:
        self._check_open()
        return self.metadata.get(key)

    def get_all_meta(self) -> Dict[str, str]:
        self._check_open()
        return self.metadata.get_all()

    # ------------------------------------------------------------------
    def extract_template_variables(self) -> Dict[str, Any]:
        """Placeholder names, loops, conditions and filters still in the template."""
        self._check_open()
        return self.engine.extract_variables(self._roots())

    def save(self, output_path: Union[str, Path]) -> Path:
        """
        Flush styles and write the finished document.

        Returns:
            The output path

        Raises:
            PackagingError: If the document cannot be written
        """
        self._check_open()
        StyleWriter(self.styles_root, self.content_root).write_registry(self.registry)
        return PackageWriter(self.reader, self.config).write(output_path, self._added_files)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def cleanup(self) -> None:
        """Remove the scratch directory; the template cannot be used afterwards."""
        if self._closed:
            return
        self._finalizer()
        self._closed = True

    close = cleanup

    def __enter__(self) -> "OdtTemplate":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.cleanup()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"OdtTemplate({str(self.template_path)!r}, {state})"
