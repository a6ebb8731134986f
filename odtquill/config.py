"""
Engine configuration.

Defaults shared by the template engine, the filters and the content model.
"""

from dataclasses import dataclass, field
from typing import Tuple


@dataclass
class EngineConfig:
    """Tunable defaults for one document build."""

    default_paragraph_style: str = "Standard"
    default_image_width: str = "5cm"
    default_image_height: str = "3cm"
    pictures_dir: str = "Pictures"

    default_date_format: str = "d.m.Y"
    number_decimals: int = 2
    decimal_separator: str = ","
    thousands_separator: str = "."
    currency_symbol: str = "€"
    checkbox_checked: str = "☑"
    checkbox_unchecked: str = "☐"

    summary_keywords: Tuple[str, ...] = field(default_factory=lambda: ("summe", "gesamt", "total"))

    minify_xml: bool = True
    scratch_prefix: str = "odt_"


DEFAULT_CONFIG = EngineConfig()
