"""
Tests for ImageElement sizing, positioning and rendering.
"""

import pytest

from odtquill.config import EngineConfig
from odtquill.exceptions import AssetError
from odtquill.models.base import ImageAsset
from odtquill.models.image import ImageElement
from odtquill.styles.style_registry import StyleRegistry
from odtquill.utils.namespaces import get_attr, qn


class TestImageSizing:
    """Test dimension resolution."""

    def test_width_only_keeps_aspect_ratio(self, sample_image):
        """A 200x100 image at 10cm wide is 5cm high."""
        image = ImageElement(str(sample_image), {"width": "10cm"})
        assert (image.width, image.height) == ("10cm", "5cm")

    def test_height_only_keeps_aspect_ratio(self, sample_image):
        """A 200x100 image at 2cm high is 4cm wide."""
        image = ImageElement(str(sample_image), {"height": "2cm"})
        assert (image.width, image.height) == ("4cm", "2cm")

    def test_numeric_width_means_centimetres(self, image_factory):
        """Numbers are read as centimetres."""
        image = ImageElement(str(image_factory(300, 100)), {"width": 6})
        assert (image.width, image.height) == ("6cm", "2cm")

    def test_defaults_without_size(self, sample_image):
        """Without width and height the configured defaults apply."""
        image = ImageElement(str(sample_image))
        assert (image.width, image.height) == ("5cm", "3cm")

    def test_config_defaults(self, sample_image):
        """Default sizes come from the configuration."""
        config = EngineConfig(default_image_width="8cm", default_image_height="4cm")
        image = ImageElement(str(sample_image), config=config)
        assert (image.width, image.height) == ("8cm", "4cm")

    def test_unreadable_image_uses_defaults(self, temp_dir):
        """A file Pillow cannot read falls back to default sizes for the missing side."""
        path = temp_dir / "broken.png"
        path.write_bytes(b"not an image")
        image = ImageElement(str(path), {"width": "10cm"})
        assert (image.width, image.height) == ("10cm", "3cm")


class TestImageErrors:
    """Test asset validation."""

    def test_missing_file_raises(self, temp_dir):
        """Enabled images must exist."""
        with pytest.raises(AssetError):
            ImageElement(str(temp_dir / "nope.png"))

    def test_disabled_missing_file_is_allowed(self, temp_dir):
        """Disabled images are not checked and render an empty paragraph."""
        image = ImageElement(str(temp_dir / "nope.png"), {"enabled": "false"})
        (node,) = image.to_xml(StyleRegistry())
        assert node.tag == qn("text:p")
        assert image.image_assets() == []
        assert image.required_styles() == {}


class TestImageRendering:
    """Test frame output."""

    def test_frame_and_image(self, sample_image):
        """A draw:frame wraps a draw:image pointing into Pictures/."""
        registry = StyleRegistry()
        image = ImageElement(str(sample_image), {"width": "4cm", "anchor": "as-char", "name": "logo"})
        (frame,) = image.to_xml(registry)

        assert frame.tag == qn("draw:frame")
        assert get_attr(frame, "draw:name") == "logo"
        assert get_attr(frame, "text:anchor-type") == "as-char"
        assert get_attr(frame, "svg:width") == "4cm"
        assert get_attr(frame, "svg:height") == "2cm"
        inner = frame.find(qn("draw:image"))
        assert get_attr(inner, "xlink:href") == "Pictures/image.png"
        assert get_attr(inner, "xlink:actuate") == "onLoad"
        assert registry.get("graphic", get_attr(frame, "draw:style-name")) is not None

    def test_assets(self, sample_image):
        """The image file is reported as an asset."""
        image = ImageElement(str(sample_image))
        assert image.image_assets() == [ImageAsset(id="image.png", path=str(sample_image))]

    def test_align_left_positions(self, sample_image):
        """Left alignment sets wrap and horizontal position."""
        image = ImageElement(str(sample_image), {"align": "left"})
        assert image.style["style:horizontal-pos"] == "left"
        assert image.style["style:wrap"] == "right"

    def test_absolute_has_coordinates(self, sample_image):
        """Absolute alignment places the frame at x/y."""
        image = ImageElement(str(sample_image), {"align": "absolute", "x": 2, "y": "1cm"})
        attributes = image.frame_attributes()
        assert attributes["svg:x"] == "2cm"
        assert attributes["svg:y"] == "1cm"
