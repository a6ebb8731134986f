"""
Tests for writing styles into ODF stylesheets.
"""

import pytest
from lxml import etree

from odtquill.exceptions import StyleError
from odtquill.models.image import ImageElement
from odtquill.models.paragraph import Paragraph
from odtquill.models.table import RichTable, RichTableCell
from odtquill.styles.style_registry import StyleFamily, StyleRegistry
from odtquill.styles.style_writer import StyleWriter, build_style_element
from odtquill.utils.namespaces import get_attr, qn

from tests.odf_samples import XMLNS


def styles_root(office_styles=True):
    inner = "<office:styles/>" if office_styles else ""
    return etree.fromstring(
        f"<office:document-styles {XMLNS}>{inner}<office:master-styles/></office:document-styles>"
    )


def content_root():
    return etree.fromstring(
        f"<office:document-content {XMLNS}><office:body><office:text/></office:body></office:document-content>"
    )


def find_style(root, name):
    for style in root.iter(qn("style:style")):
        if get_attr(style, "style:name") == name:
            return style
    return None


def etree_root(nodes):
    root = etree.Element("styles")
    root.extend(nodes)
    return root


class TestBuildStyleElement:
    """Test style element construction per family."""

    def test_paragraph_style_splits_text_properties(self):
        """Paragraph styles separate paragraph and text properties."""
        style = build_style_element("paragraph", "Body", {"fo:margin-top": "1cm", "fo:font-weight": "bold"})
        assert get_attr(style, "style:parent-style-name") == "Standard"
        paragraph_props = style.find(qn("style:paragraph-properties"))
        text_props = style.find(qn("style:text-properties"))
        assert get_attr(paragraph_props, "fo:margin-top") == "1cm"
        assert get_attr(text_props, "fo:font-weight") == "bold"

    def test_paragraph_tab_stops(self):
        """Tab stops become nested style:tab-stop elements."""
        style = build_style_element("paragraph", "Tabs", {
            "style:tab-stops": [{"style:position": "5cm", "style:type": "right"}],
        })
        tab = style.find(f"{qn('style:paragraph-properties')}/{qn('style:tab-stops')}/{qn('style:tab-stop')}")
        assert get_attr(tab, "style:position") == "5cm"
        assert get_attr(tab, "style:type") == "right"

    def test_parent_from_properties(self):
        """A parent carried in the properties becomes the parent attribute only."""
        style = build_style_element("paragraph", "auto_1", {
            "style:parent-style-name": "Quote",
            "fo:text-align": "center",
        })
        assert get_attr(style, "style:parent-style-name") == "Quote"
        paragraph_props = style.find(qn("style:paragraph-properties"))
        assert dict(paragraph_props.attrib) == {qn("fo:text-align"): "center"}

    def test_table_cell_properties_split(self):
        """Cell styles split cell, paragraph and text properties."""
        style = build_style_element(StyleFamily.TABLE_CELL, "Cell", {
            "fo:background-color": "#eeeeee",
            "fo:text-align": "center",
            "fo:color": "#ffffff",
        })
        assert get_attr(style.find(qn("style:table-cell-properties")), "fo:background-color") == "#eeeeee"
        assert get_attr(style.find(qn("style:paragraph-properties")), "fo:text-align") == "center"
        assert get_attr(style.find(qn("style:text-properties")), "fo:color") == "#ffffff"

    def test_graphic_properties_are_filtered(self):
        """Only graphic attributes reach style:graphic-properties."""
        style = build_style_element("graphic", "Img", {"style:wrap": "none", "svg:width": "5cm"})
        props = style.find(qn("style:graphic-properties"))
        assert get_attr(props, "style:wrap") == "none"
        assert get_attr(props, "svg:width") is None


class TestStyleWriter:
    """Test flushing registries into stylesheets."""

    def test_text_and_paragraph_styles_go_to_office_styles(self):
        """Text and paragraph styles are written to office:styles."""
        root = styles_root()
        registry = StyleRegistry()
        text_name = registry.resolve("text", {"fo:font-weight": "bold"})
        registry.register("paragraph", "Body", {"fo:margin-top": "1cm"})

        written = StyleWriter(root).write_registry(registry)

        office_styles = root.find(qn("office:styles"))
        assert written == 2
        assert find_style(office_styles, text_name) is not None
        assert find_style(office_styles, "Body") is not None

    def test_cell_styles_go_to_both_automatic_sections(self):
        """Table-cell styles are written to content and styles automatic styles."""
        styles, content = styles_root(), content_root()
        registry = StyleRegistry()
        name = registry.resolve("table-cell", {"fo:background-color": "#eeeeee"})

        StyleWriter(styles, content).write_registry(registry)

        for root in (styles, content):
            automatic = root.find(qn("office:automatic-styles"))
            assert automatic is not None
            assert find_style(automatic, name) is not None

    def test_automatic_styles_created_before_body(self):
        """A missing office:automatic-styles is inserted before the body."""
        content = content_root()
        StyleWriter(styles_root(), content).ensure_style("graphic", "G1", {"style:wrap": "none"})
        children = [child.tag for child in content]
        assert children.index(qn("office:automatic-styles")) < children.index(qn("office:body"))

    def test_existing_styles_are_not_duplicated(self):
        """Writing the same registry twice adds nothing the second time."""
        root = styles_root()
        registry = StyleRegistry()
        registry.resolve("text", {"fo:font-style": "italic"})
        writer = StyleWriter(root)
        assert writer.write_registry(registry) == 1
        assert writer.write_registry(registry) == 0

    def test_missing_office_styles_raises(self):
        """A stylesheet without office:styles is a StyleError."""
        registry = StyleRegistry()
        registry.resolve("text", {"fo:font-weight": "bold"})
        with pytest.raises(StyleError):
            StyleWriter(styles_root(office_styles=False)).write_registry(registry)

    def test_default_styles(self):
        """Headings, alignment helpers, Quote and list styles are ensured."""
        root = styles_root()
        StyleWriter(root).ensure_default_styles()
        office_styles = root.find(qn("office:styles"))

        heading = find_style(office_styles, "Heading_20_1")
        assert get_attr(heading, "style:display-name") == "Heading 1"
        for name in ("Heading_20_6", "CenterPara", "LeftPara", "RightPara", "JustifyPara", "Quote"):
            assert find_style(office_styles, name) is not None

        list_styles = {get_attr(node, "style:name") for node in office_styles.iter(qn("text:list-style"))}
        assert list_styles == {"Bullet_20_Symbol", "Numbering_20_Symbol"}

    def test_default_styles_idempotent(self):
        """Ensuring defaults twice does not duplicate them."""
        root = styles_root()
        writer = StyleWriter(root)
        writer.ensure_default_styles()
        count = len(root.find(qn("office:styles")))
        writer.ensure_default_styles()
        assert len(root.find(qn("office:styles"))) == count


class TestElementStyleXml:
    """Test standalone style nodes reported by content elements."""

    @staticmethod
    def families(nodes):
        return sorted((get_attr(node, "style:family"), get_attr(node, "style:name")) for node in nodes)

    def test_styled_paragraph(self):
        """A paragraph yields its text style and its derived paragraph style."""
        paragraph = Paragraph("x", {"bold": True}, paragraph_style="Quote",
                              paragraph_style_options={"margin-top": "1cm"})
        nodes = paragraph.to_style_xml()
        text_name = paragraph.parts[0].style_name
        assert self.families(nodes) == sorted([("paragraph", paragraph.paragraph_style), ("text", text_name)])

        paragraph_style = find_style(etree_root(nodes), paragraph.paragraph_style)
        assert get_attr(paragraph_style, "style:parent-style-name") == "Quote"
        props = paragraph_style.find(qn("style:paragraph-properties"))
        assert get_attr(props, "fo:margin-top") == "1cm"

    def test_table_collects_cell_and_content_styles(self):
        """A table reports the styles of its cells and their paragraphs."""
        cell = RichTableCell(Paragraph("a", {"italic": True}), {"background": "#eeeeee"})
        nodes = RichTable("T").add_row([cell, "plain"]).to_style_xml()
        assert [family for family, _ in self.families(nodes)] == ["table-cell", "text"]
        cell_style = find_style(etree_root(nodes), cell.style_name)
        props = cell_style.find(qn("style:table-cell-properties"))
        assert get_attr(props, "fo:background-color") == "#eeeeee"

    def test_image(self, sample_image):
        """An image yields one graphic style."""
        image = ImageElement(str(sample_image), {"align": "left"})
        (node,) = image.to_style_xml()
        assert get_attr(node, "style:family") == "graphic"
        assert get_attr(node, "style:name") == image.style_name
        props = node.find(qn("style:graphic-properties"))
        assert get_attr(props, "style:horizontal-pos") == "left"

    def test_plain_paragraph_has_none(self):
        """Unstyled content needs no style nodes."""
        assert Paragraph("x").to_style_xml() == []

