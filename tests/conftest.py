"""
Pytest configuration for odtquill
"""

import logging
import sys
import tempfile
import zipfile
from pathlib import Path

import pytest
from lxml import etree
from PIL import Image

from tests.odf_samples import (
    CONTENT_TEMPLATE,
    MANIFEST,
    META_TEMPLATE,
    MIMETYPE,
    NS,
    OFFICE_STYLES,
    STYLES_TEMPLATE,
    paragraph_xml,
)


@pytest.fixture(autouse=True)
def configure_logging():
    """Configure logging for tests to avoid file handler issues."""
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(logging.Formatter("%(name)s - %(levelname)s - %(message)s"))

    root_logger.addHandler(console_handler)
    root_logger.setLevel(logging.WARNING)

    yield

    root_logger.handlers.clear()


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def template_factory(temp_dir):
    """
    Build a minimal ODT template.

    Usage: ``template_factory(["Hello {{name}}"], header=[...], name="t.odt")``
    """

    def build(paragraphs=(), header=(), name="template.odt", with_mimetype=True,
              with_office_styles=True, content_xml=None):
        path = temp_dir / name
        body = "".join(paragraph_xml(item) for item in paragraphs)
        header_xml = "".join(paragraph_xml(item) for item in header)
        styles = STYLES_TEMPLATE.replace("{office_styles}", OFFICE_STYLES if with_office_styles else "")
        with zipfile.ZipFile(path, "w") as archive:
            if with_mimetype:
                archive.writestr("mimetype", MIMETYPE, compress_type=zipfile.ZIP_STORED)
            archive.writestr("content.xml", content_xml or CONTENT_TEMPLATE.replace("{body}", body))
            archive.writestr("styles.xml", styles.replace("{header}", header_xml))
            archive.writestr("meta.xml", META_TEMPLATE)
            archive.writestr("META-INF/manifest.xml", MANIFEST)
        return path

    return build


@pytest.fixture
def image_factory(temp_dir):
    """Create a PNG of the given pixel size with Pillow."""

    def build(width=200, height=100, name="image.png", color=(200, 30, 30)):
        path = temp_dir / name
        Image.new("RGB", (width, height), color).save(path, format="PNG")
        return path

    return build


@pytest.fixture
def sample_image(image_factory):
    """A 200x100 pixel PNG."""
    return image_factory()


@pytest.fixture
def read_part():
    """Return a parsed XML part of a saved ODT file."""

    def read(odt_path, name="content.xml"):
        with zipfile.ZipFile(odt_path) as archive:
            return etree.fromstring(archive.read(name))

    return read


@pytest.fixture
def body_text(read_part):
    """Concatenated text of every paragraph in the saved document body."""

    def read(odt_path):
        root = read_part(odt_path)
        paragraphs = root.iter(f"{{{NS['text']}}}p", f"{{{NS['text']}}}h")
        return "\n".join("".join(p.itertext()) for p in paragraphs)

    return read


@pytest.fixture
def registry():
    from odtquill.styles.style_registry import StyleRegistry
    return StyleRegistry()
