"""
Tests for placeholder filters and value formatting.
"""

from datetime import date, datetime

import pytest

from odtquill.config import EngineConfig
from odtquill.engine.filters import FilterSet, format_date, format_number, is_truthy, parse_date


class TestTruthiness:
    """Test truthiness of bound values."""

    @pytest.mark.parametrize("value", [None, False, "", 0, "0", "false", "No", " off ", [], {}])
    def test_false_values(self, value):
        """Empty, zero and negative words are false."""
        assert is_truthy(value) is False

    @pytest.mark.parametrize("value", [True, 1, "1", "yes", "anything", [0]])
    def test_true_values(self, value):
        """Everything else is true."""
        assert is_truthy(value) is True


class TestDates:
    """Test date parsing and formatting."""

    def test_parse_iso(self):
        """ISO strings parse."""
        assert parse_date("2025-08-15") == datetime(2025, 8, 15)

    def test_parse_european(self):
        """Day.month.year strings parse."""
        assert parse_date("15.08.2025") == datetime(2025, 8, 15)

    def test_parse_date_object(self):
        """date objects become midnight datetimes."""
        assert parse_date(date(2025, 8, 15)) == datetime(2025, 8, 15)

    def test_parse_garbage(self):
        """Unparseable input gives None."""
        assert parse_date("soon") is None

    def test_php_letters(self):
        """PHP-style letters are expanded; other characters are literal."""
        moment = datetime(2025, 8, 5, 9, 7, 3)
        assert format_date(moment, "d.m.Y") == "05.08.2025"
        assert format_date(moment, "j.n.y") == "5.8.25"
        assert format_date(moment, "H:i:s") == "09:07:03"
        assert format_date(moment, "G") == "9"

    def test_escaped_letter(self):
        """A backslash keeps the next letter literal."""
        assert format_date(datetime(2025, 8, 5), "\\d d") == "d 05"

    def test_strftime_pattern(self):
        """Patterns with % are passed to strftime."""
        assert format_date(datetime(2025, 8, 5), "%Y/%m/%d") == "2025/08/05"


class TestFormatNumber:
    """Test number formatting."""

    def test_grouping_and_decimals(self):
        """Thousands are grouped with '.' and decimals use ','."""
        assert format_number("1234.567") == "1.234,57"

    def test_round_half_up(self):
        """Halves round away from zero."""
        assert format_number("2.345") == "2,35"

    def test_custom_separators(self):
        """Separators can be changed."""
        assert format_number(1234567, 0, ".", ",") == "1,234,567"

    def test_comma_decimal_input(self):
        """A single comma in the input is the decimal separator."""
        assert format_number("1234,567") == "1.234,57"
        assert format_number("1.345,5") == "1.345,50"

    def test_not_a_number(self):
        """Non-numeric values give None."""
        assert format_number("abc") is None


class TestFilterSet:
    """Test the named filters."""

    def setup_method(self):
        self.filters = FilterSet()

    def test_case_filters(self):
        """upper, lower and trim transform text."""
        assert self.filters.apply("upper", "a@b.com") == "A@B.COM"
        assert self.filters.apply("lower", "MiXed") == "mixed"
        assert self.filters.apply("trim", "  x  ") == "x"

    def test_date_with_option(self):
        """The date option is the output format."""
        assert self.filters.apply("date", "2025-08-15", "Y-m-d") == "2025-08-15"

    def test_date_default_format(self):
        """Without option the configured default format is used."""
        assert self.filters.apply("date", "2025-08-15") == "15.08.2025"

    def test_date_unparseable_passes_through(self):
        """Values that are not dates are returned unchanged."""
        assert self.filters.apply("date", "tomorrow") == "tomorrow"

    def test_number_decimals_option(self):
        """The number option selects decimal places."""
        assert self.filters.apply("number", "1234.5") == "1.234,50"
        assert self.filters.apply("number", "1234.5", "0") == "1.235"

    def test_currency(self):
        """Currency uses two decimals and a symbol suffix."""
        assert self.filters.apply("currency", "1345.5") == "1.345,50 €"
        assert self.filters.apply("currency", "10", "USD") == "10,00 USD"

    def test_comma_decimal_values(self):
        """number and currency accept comma decimals."""
        assert self.filters.apply("currency", "1345,5") == "1.345,50 €"
        assert self.filters.apply("number", "1234,567", "2") == "1.234,57"

    def test_checkbox(self):
        """Checkbox renders checked or unchecked symbols."""
        assert self.filters.apply("checkbox", True) == "☑"
        assert self.filters.apply("checkbox", "0") == "☐"

    def test_unknown_filter(self, caplog):
        """Unknown filters return None and warn."""
        assert self.filters.apply("sparkle", "x") is None
        assert "Unknown filter" in caplog.text

    def test_register_custom_filter(self):
        """Custom filters can be registered."""
        self.filters.register("reverse", lambda value, option: str(value)[::-1])
        assert "reverse" in self.filters
        assert self.filters.apply("reverse", "abc") == "cba"

    def test_config_controls_formatting(self):
        """Separators and currency come from the configuration."""
        filters = FilterSet(EngineConfig(decimal_separator=".", thousands_separator=",", currency_symbol="$"))
        assert filters.apply("currency", "1345.5") == "1,345.50 $"
