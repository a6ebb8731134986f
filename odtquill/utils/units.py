"""
Length helpers for ODF measurements.

ODF lengths are strings with an explicit unit (``"5cm"``). Only the unit of
the supplied value is used; no conversion between units is attempted.
"""

import re
from typing import Optional, Tuple
import logging

logger = logging.getLogger(__name__)

LENGTH_PATTERN = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*([a-z%]*)\s*$", re.IGNORECASE)


def parse_length(value, default_unit: str = "cm") -> Optional[Tuple[float, str]]:
    """
    Split a length into number and unit.

    Args:
        value: Length such as ``"5cm"``, ``"2.5"`` or ``4``
        default_unit: Unit used when the value carries none

    Returns:
        ``(number, unit)`` or None if the value is not a length
    """
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value), default_unit
    match = LENGTH_PATTERN.match(str(value))
    if not match:
        return None
    return float(match.group(1)), (match.group(2) or default_unit).lower()


def format_number(number: float, precision: int = 3) -> str:
    text = f"{round(number, precision):.{precision}f}".rstrip("0").rstrip(".")
    return text or "0"


def format_length(number: float, unit: str = "cm", precision: int = 3) -> str:
    """Format a number as an ODF length, e.g. ``2.5`` -> ``"2.5cm"``."""
    return f"{format_number(number, precision)}{unit}"


def scale_dimensions(
    pixel_size: Tuple[int, int],
    width=None,
    height=None,
) -> Tuple[Optional[str], Optional[str]]:
    """
    Fill in a missing display dimension from the native aspect ratio.

    Args:
        pixel_size: Native ``(width, height)`` in pixels
        width: Requested display width or None
        height: Requested display height or None

    Returns:
        ``(width, height)``; unchanged when both or neither are given
    """
    pixel_width, pixel_height = pixel_size
    if not pixel_width or not pixel_height:
        return width, height

    if width is not None and height is None:
        parsed = parse_length(width)
        if parsed:
            number, unit = parsed
            height = format_length(number * pixel_height / pixel_width, unit)
            logger.debug(f"Scaled height to {height} for width {width}")
    elif height is not None and width is None:
        parsed = parse_length(height)
        if parsed:
            number, unit = parsed
            width = format_length(number * pixel_width / pixel_height, unit)
            logger.debug(f"Scaled width to {width} for height {height}")

    return width, height
