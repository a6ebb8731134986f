"""Template engine: normalization, filters, conditions, blocks and substitution."""

from .blocks import apply_conditionals, expand_loops, parse_blocks
from .conditions import evaluate_condition
from .filters import FilterSet, format_date, format_number, is_truthy
from .normalizer import normalize_placeholders
from .placeholder_engine import PlaceholderEngine

__all__ = [
    "apply_conditionals",
    "expand_loops",
    "parse_blocks",
    "evaluate_condition",
    "FilterSet",
    "format_date",
    "format_number",
    "is_truthy",
    "normalize_placeholders",
    "PlaceholderEngine",
]
