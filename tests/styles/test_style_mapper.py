"""
Tests for StyleMapper option translation.
"""

from odtquill.styles.style_mapper import StyleMapper, parse_inline_style


class TestMapText:
    """Test text run option mapping."""

    def test_bold_italic_color(self):
        """Common aliases translate to fo: attributes."""
        mapped = StyleMapper.map_text({"bold": True, "italic": True, "color": "#ff0000"})
        assert mapped == {
            "fo:font-weight": "bold",
            "fo:font-style": "italic",
            "fo:color": "#ff0000",
        }

    def test_false_flags_are_skipped(self):
        """A false boolean flag produces no attribute."""
        assert StyleMapper.map_text({"bold": False, "underline": "no"}) == {}

    def test_underline_and_strike(self):
        """Underline and strike expand into their style attributes."""
        mapped = StyleMapper.map_text({"underline": True, "strike": True})
        assert mapped["style:text-underline-style"] == "solid"
        assert mapped["style:text-line-through-style"] == "solid"

    def test_prefixed_keys_pass_through(self):
        """Keys with an ODF prefix are kept as given."""
        assert StyleMapper.map_text({"fo:letter-spacing": "0.1cm"}) == {"fo:letter-spacing": "0.1cm"}

    def test_unknown_keys_are_dropped(self):
        """Unknown options do not reach the style."""
        assert StyleMapper.map_text({"sparkle": True}) == {}

    def test_none_options(self):
        """None maps to an empty style."""
        assert StyleMapper.map_text(None) == {}


class TestMapParagraph:
    """Test paragraph option mapping."""

    def test_margins_and_alignment(self):
        """Margins and alignment map onto fo: attributes."""
        mapped = StyleMapper.map_paragraph({"margin-top": "1cm", "align": "center"})
        assert mapped == {"fo:margin-top": "1cm", "fo:text-align": "center"}

    def test_tab_stops_from_mappings_and_tuples(self):
        """Tab stops accept mappings and tuples."""
        mapped = StyleMapper.map_paragraph({"tab-stops": [{"position": 5, "alignment": "right"}, (10.5, "center")]})
        assert mapped["style:tab-stops"] == [
            {"style:position": "5cm", "style:type": "right"},
            {"style:position": "10.5cm", "style:type": "center"},
        ]

    def test_invalid_tab_alignment_falls_back_to_left(self):
        """Unknown tab alignment becomes 'left'."""
        mapped = StyleMapper.map_tab_stops([{"position": 3, "alignment": "diagonal"}])
        assert mapped == [{"style:position": "3cm", "style:type": "left"}]

    def test_text_options_are_accepted(self):
        """Text options on a paragraph end up as text attributes."""
        mapped = StyleMapper.map_paragraph({"bold": True})
        assert mapped == {"fo:font-weight": "bold"}


class TestMapTableCell:
    """Test table cell option mapping."""

    def test_cell_options(self):
        """Background, padding, border and weight are mapped."""
        mapped = StyleMapper.map_table_cell({
            "background": "#eeeeee",
            "padding": "0.1cm",
            "border-top": "0.5pt solid #000000",
            "weight": "bold",
            "vertical-align": "middle",
        })
        assert mapped == {
            "fo:background-color": "#eeeeee",
            "fo:padding": "0.1cm",
            "fo:border-top": "0.5pt solid #000000",
            "fo:font-weight": "bold",
            "style:vertical-align": "middle",
        }


class TestMapImage:
    """Test image option mapping."""

    def test_valid_options(self):
        """Size, wrap, anchor and align are translated."""
        mapped = StyleMapper.map_image({"width": "4cm", "wrap": "run-through", "anchor": "as-char", "align": "left"})
        assert mapped == {
            "svg:width": "4cm",
            "style:wrap": "run-through",
            "text:anchor-type": "as-char",
            "align": "left",
        }

    def test_invalid_enumerations_are_dropped(self):
        """Invalid wrap, align and anchor values are ignored."""
        mapped = StyleMapper.map_image({"wrap": "sideways", "align": "middle", "anchor": "sky"})
        assert mapped == {}


class TestParseInlineStyle:
    """Test CSS declaration parsing."""

    def test_declarations(self):
        """Names are lower-cased and values trimmed."""
        assert parse_inline_style("Float: left; WIDTH: 4cm ;;broken") == {"float": "left", "width": "4cm"}

    def test_empty(self):
        """Empty or missing styles give an empty mapping."""
        assert parse_inline_style(None) == {}
        assert parse_inline_style("") == {}
