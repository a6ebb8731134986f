"""
Tests for RichText composition.
"""

from odtquill.models.paragraph import Paragraph
from odtquill.models.rich_text import RichText
from odtquill.models.table import RichTable
from odtquill.styles.style_registry import StyleRegistry
from odtquill.utils.namespaces import get_attr, qn


class TestRichText:
    """Test block composition."""

    def test_empty(self):
        """A new RichText is empty and renders nothing."""
        rich_text = RichText()
        assert rich_text.is_empty()
        assert rich_text.to_xml(StyleRegistry()) == []

    def test_paragraphs_in_order(self):
        """Paragraphs render in insertion order."""
        rich_text = RichText().add_paragraph("one").add_paragraph(Paragraph("two"), style_name="Quote")
        nodes = rich_text.to_xml(StyleRegistry())
        assert [node.text for node in nodes] == ["one", "two"]
        assert get_attr(nodes[1], "text:style-name") == "Quote"

    def test_text_goes_to_current_paragraph(self):
        """add_text and add_line_break extend the last paragraph."""
        rich_text = RichText().add_text("a").add_line_break().add_text("b")
        assert len(rich_text) == 1
        assert rich_text.elements[0].get_text() == "a\nb"

    def test_multi_paragraph_first_bold(self):
        """Only the first line is bold."""
        registry = StyleRegistry()
        nodes = RichText().add_multi_paragraph("Title\nBody", first_bold=True).to_xml(registry)
        assert nodes[0].find(qn("text:span")) is not None
        assert nodes[1].text == "Body"
        assert len(registry.get_all("text")) == 1

    def test_lists(self):
        """Bullet and numbered helpers create one list per item."""
        nodes = RichText().add_bullet_list(["a", "b"]).add_numbered_list(["x", "y"]).to_xml(StyleRegistry())
        assert [node.tag for node in nodes] == [qn("text:list")] * 4
        assert get_attr(nodes[2], "text:continue-numbering") is None
        assert get_attr(nodes[3], "text:continue-numbering") == "true"

    def test_paragraph_break_and_table(self):
        """Breaks are empty paragraphs; tables render in place."""
        table = RichTable("T").add_row(["x"])
        nodes = RichText().add_paragraph_break(2).add_table(table).to_xml(StyleRegistry())
        assert [node.tag for node in nodes] == [qn("text:p"), qn("text:p"), qn("table:table")]

    def test_required_styles_include_nested(self):
        """Styles of nested elements are reported."""
        rich_text = RichText().add_paragraph(Paragraph("b", {"bold": True}))
        styles = rich_text.required_styles()
        assert sum(len(names) for names in styles.values()) == 1
