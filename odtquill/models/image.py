"""
Image element - a ``draw:frame`` holding one picture from the local filesystem.

The display size defaults to 5cm x 3cm; when only one dimension is given the
other one follows the native aspect ratio read with Pillow. The ``align``
option drives wrap and horizontal positioning.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Mapping, Optional, Tuple

from lxml import etree
from PIL import Image as PILImage
from PIL import UnidentifiedImageError

from ..config import DEFAULT_CONFIG, EngineConfig
from ..exceptions import AssetError
from ..styles.style_mapper import StyleMapper
from ..styles.style_registry import StyleFamily, StyleRegistry, generate_style_name
from ..utils.namespaces import make_element, sub_element
from ..utils.units import format_length, scale_dimensions
from .base import ImageAsset, OdtElement, StyleMap

logger = logging.getLogger(__name__)

# align -> (wrap, horizontal-pos, horizontal-rel)
ALIGN_POSITIONS = {
    "left": ("right", "left", "paragraph"),
    "right": ("left", "right", "paragraph"),
    "center": ("none", "center", "paragraph"),
    "absolute": ("none", "from-left", "page-content"),
}

FALSE_STRINGS = ("0", "false", "no", "off", "")


def read_pixel_size(path: str) -> Optional[Tuple[int, int]]:
    """Native ``(width, height)`` of an image, or None if Pillow cannot read it."""
    try:
        with PILImage.open(path) as img:
            return img.size
    except (UnidentifiedImageError, OSError) as e:
        logger.warning(f"Could not read image size of {path}: {e}")
        return None


def _as_length(value: Any) -> Any:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return format_length(float(value))
    return value


class ImageElement(OdtElement):
    """
    An image rendered as ``draw:frame`` / ``draw:image``.

    Raises:
        AssetError: If the image is enabled and its file is missing or unreadable
    """

    def __init__(self, path: str, options: Optional[Mapping[str, Any]] = None,
                 config: Optional[EngineConfig] = None):
        """
        Args:
            path: Image file on the local filesystem
            options: ``width``, ``height``, ``align``, ``wrap``, ``anchor``,
                ``horizontal-pos``/``-rel``, ``vertical-pos``/``-rel``,
                ``x``, ``y``, ``name`` and ``enabled``
            config: Engine defaults
        """
        self.config = config or DEFAULT_CONFIG
        options = dict(options or {})
        enabled = options.pop("enabled", True)
        if isinstance(enabled, str):
            enabled = enabled.strip().lower() not in FALSE_STRINGS
        self.enabled = bool(enabled)
        self.path = str(path)
        self.name = options.pop("name", None)
        self.pixel_size: Optional[Tuple[int, int]] = None

        if self.enabled:
            if not os.path.isfile(self.path):
                raise AssetError("Image file not found", self.path)
            if not os.access(self.path, os.R_OK):
                raise AssetError("Image file is not readable", self.path)
            self.pixel_size = read_pixel_size(self.path)

        self.width, self.height = self._resolve_size(
            _as_length(options.pop("width", None)),
            _as_length(options.pop("height", None)),
        )
        options["width"] = self.width
        options["height"] = self.height
        for key in ("x", "y"):
            if key in options:
                options[key] = _as_length(options[key])

        self.style = self._resolve_position(StyleMapper.map_image(options))
        self.style_name = generate_style_name(self.style)

    # ------------------------------------------------------------------
    def _resolve_size(self, width, height) -> Tuple[str, str]:
        if width is None and height is None:
            return self.config.default_image_width, self.config.default_image_height
        if self.pixel_size:
            width, height = scale_dimensions(self.pixel_size, width, height)
        return (
            width if width is not None else self.config.default_image_width,
            height if height is not None else self.config.default_image_height,
        )

    @staticmethod
    def _resolve_position(style: Dict[str, Any]) -> Dict[str, Any]:
        align = style.get("align")
        if align in ALIGN_POSITIONS:
            wrap, horizontal_pos, horizontal_rel = ALIGN_POSITIONS[align]
            style["style:wrap"] = wrap
            style["style:horizontal-pos"] = horizontal_pos
            style["style:horizontal-rel"] = horizontal_rel
            if align == "absolute":
                style.setdefault("svg:x", "0cm")
                style.setdefault("svg:y", "0cm")
        style.setdefault("style:vertical-rel", "paragraph")
        return style

    @property
    def basename(self) -> str:
        return os.path.basename(self.path)

    @property
    def anchor_type(self) -> str:
        return self.style.get("text:anchor-type", "paragraph")

    # ------------------------------------------------------------------
    def own_styles(self) -> StyleMap:
        if not self.enabled:
            return {}
        return {StyleFamily.GRAPHIC: {self.style_name: dict(self.style)}}

    def image_assets(self) -> List[ImageAsset]:
        if not self.enabled:
            return []
        return [ImageAsset(id=self.basename, path=self.path)]

    def frame_attributes(self) -> Dict[str, str]:
        attrs = {
            "draw:style-name": self.style_name,
            "draw:name": self.name or self.basename,
            "text:anchor-type": self.anchor_type,
            "svg:width": str(self.width),
            "svg:height": str(self.height),
        }
        for key in ("svg:x", "svg:y"):
            if key in self.style:
                attrs[key] = str(self.style[key])
        return attrs

    def image_attributes(self) -> Dict[str, str]:
        return {
            "xlink:href": f"{self.config.pictures_dir}/{self.basename}",
            "xlink:type": "simple",
            "xlink:show": "embed",
            "xlink:actuate": "onLoad",
        }

    def to_xml(self, registry: StyleRegistry) -> List[etree._Element]:
        if not self.enabled:
            return [make_element("text:p")]

        self.register_styles(registry)
        frame = make_element("draw:frame", self.frame_attributes())
        sub_element(frame, "draw:image", self.image_attributes())
        return [frame]

    def __repr__(self) -> str:
        return f"ImageElement({self.path!r}, {self.width}x{self.height})"
