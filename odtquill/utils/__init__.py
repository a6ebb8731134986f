"""Utility helpers for odtquill."""

from .namespaces import NAMESPACES, qn, make_element, sub_element, get_attr, set_attr, is_tag, element_text
from .units import parse_length, format_length, scale_dimensions
from .logger import configure_logging, set_log_level

__all__ = [
    "NAMESPACES",
    "qn",
    "make_element",
    "sub_element",
    "get_attr",
    "set_attr",
    "is_tag",
    "element_text",
    "parse_length",
    "format_length",
    "scale_dimensions",
    "configure_logging",
    "set_log_level",
]
