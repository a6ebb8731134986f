"""Style handling: option mapping, deduplicating registry and stylesheet writer."""

from .style_mapper import StyleMapper, parse_inline_style
from .style_registry import StyleDefinition, StyleFamily, StyleRegistry, generate_style_name
from .style_writer import StyleWriter

__all__ = [
    "StyleMapper",
    "parse_inline_style",
    "StyleDefinition",
    "StyleFamily",
    "StyleRegistry",
    "generate_style_name",
    "StyleWriter",
]
