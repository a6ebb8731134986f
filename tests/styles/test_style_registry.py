"""
Tests for the style registry and style name generation.
"""

import pytest

from odtquill.exceptions import StyleError
from odtquill.styles.style_registry import (
    StyleFamily,
    StyleRegistry,
    generate_style_name,
    normalize_properties,
)


class TestGenerateStyleName:
    """Test deterministic style naming."""

    def test_name_has_prefix_and_eight_hex_digits(self):
        """Generated names are 'auto_' plus eight hex digits."""
        name = generate_style_name({"fo:font-weight": "bold"})
        assert name.startswith("auto_")
        assert len(name) == len("auto_") + 8
        int(name[5:], 16)

    def test_key_order_does_not_matter(self):
        """Equivalent mappings in different insertion order share a name."""
        first = generate_style_name({"fo:color": "#ff0000", "fo:font-weight": "bold"})
        second = generate_style_name({"fo:font-weight": "bold", "fo:color": "#ff0000"})
        assert first == second

    def test_transient_keys_are_ignored(self):
        """'align' and 'style-name' never change the identity."""
        base = {"svg:width": "5cm"}
        assert generate_style_name(base) == generate_style_name({**base, "align": "left"})
        assert generate_style_name(base) == generate_style_name({**base, "style-name": "X"})

    def test_different_values_give_different_names(self):
        """Different properties produce different names."""
        assert generate_style_name({"fo:color": "#000000"}) != generate_style_name({"fo:color": "#ffffff"})

    def test_normalize_sorts_and_drops_transient(self):
        """normalize_properties returns sorted keys without transient hints."""
        normalized = normalize_properties({"b": 1, "align": "left", "a": 2})
        assert list(normalized) == ["a", "b"]


class TestStyleRegistry:
    """Test registration, deduplication and conflicts."""

    def test_resolve_deduplicates(self, registry):
        """Resolving equal properties twice yields one entry."""
        first = registry.resolve("text", {"fo:font-weight": "bold"})
        second = registry.resolve(StyleFamily.TEXT, {"fo:font-weight": "bold"})
        assert first == second
        assert len(registry) == 1

    def test_families_are_separate(self, registry):
        """The same properties in two families are two entries."""
        registry.resolve("text", {"fo:color": "#ff0000"})
        registry.resolve("table-cell", {"fo:color": "#ff0000"})
        assert len(registry) == 2
        assert len(registry.get_all("text")) == 1
        assert len(registry.get_all("table-cell")) == 1

    def test_register_same_properties_is_noop(self, registry):
        """Re-registering an identical definition keeps one entry."""
        registry.register("paragraph", "Body", {"fo:margin-top": "1cm"})
        registry.register("paragraph", "Body", {"fo:margin-top": "1cm"})
        assert len(registry) == 1
        assert registry.get("paragraph", "Body") == {"fo:margin-top": "1cm"}

    def test_register_conflict_raises(self, registry):
        """Different properties under one name raise StyleError."""
        registry.register("paragraph", "Body", {"fo:margin-top": "1cm"})
        with pytest.raises(StyleError):
            registry.register("paragraph", "Body", {"fo:margin-top": "2cm"})

    def test_contains_and_iteration(self, registry):
        """Membership is checked per family; iteration yields definitions."""
        name = registry.resolve("graphic", {"style:wrap": "none"})
        assert ("graphic", name) in registry
        assert ("text", name) not in registry
        definitions = list(registry)
        assert definitions[0].family is StyleFamily.GRAPHIC
        assert definitions[0].name == name

    def test_merge_copies_definitions(self, registry):
        """merge() copies every definition of another registry."""
        other = StyleRegistry()
        other.resolve("text", {"fo:font-style": "italic"})
        other.register("paragraph", "Note", {"fo:margin-left": "1cm"})
        registry.merge(other)
        assert len(registry) == 2
        assert registry.get("paragraph", "Note") == {"fo:margin-left": "1cm"}

    def test_unknown_family_rejected(self, registry):
        """Unknown family names are rejected."""
        with pytest.raises(ValueError):
            registry.resolve("chart", {})
