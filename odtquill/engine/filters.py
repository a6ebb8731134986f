"""
Placeholder filters: ``{{filter:key}}`` and ``{{filter:key|option}}``.

Each filter turns a bound value into the text written into the document.
Unknown filters yield None so callers can leave the token untouched.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Callable, Dict, Optional

from ..config import DEFAULT_CONFIG, EngineConfig

logger = logging.getLogger(__name__)

# PHP-style date letters -> strftime directives
DATE_TOKENS = {
    "d": "%d",
    "j": "{day}",
    "m": "%m",
    "n": "{month}",
    "Y": "%Y",
    "y": "%y",
    "H": "%H",
    "G": "{hour}",
    "i": "%M",
    "s": "%S",
    "D": "%a",
    "l": "%A",
    "M": "%b",
    "F": "%B",
}

INPUT_DATE_FORMATS = (
    "%d.%m.%Y",
    "%d.%m.%Y %H:%M",
    "%d/%m/%Y",
    "%Y/%m/%d",
    "%Y%m%d",
)

FALSE_STRINGS = ("", "0", "false", "no", "off")


def is_truthy(value: Any) -> bool:
    """Truthiness of a bound value; ``"0"``, ``"false"``, ``"no"``, ``"off"`` are false."""
    if isinstance(value, str):
        return value.strip().lower() not in FALSE_STRINGS
    return bool(value)


def to_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def parse_date(value: Any) -> Optional[datetime]:
    """Accept datetime/date objects, ISO strings, timestamps and common European formats."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value)
    text = to_text(value).strip()
    if not text:
        return None
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        pass
    for fmt in INPUT_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def format_date(moment: datetime, fmt: str) -> str:
    """Format with PHP-style letters (``d.m.Y``) or a strftime pattern (contains ``%``)."""
    if "%" in fmt:
        return moment.strftime(fmt)
    chunks = []
    escaped = False
    for char in fmt:
        if escaped:
            chunks.append(char)
            escaped = False
        elif char == "\\":
            escaped = True
        elif char in DATE_TOKENS:
            token = DATE_TOKENS[char]
            if token.startswith("{"):
                chunks.append(token.format(day=moment.day, month=moment.month, hour=moment.hour))
            else:
                chunks.append(moment.strftime(token))
        else:
            chunks.append(char)
    return "".join(chunks)


def format_number(value: Any, decimals: int = 2, decimal_separator: str = ",",
                  thousands_separator: str = ".") -> Optional[str]:
    """
    Format a number with fixed decimals and grouping, e.g. ``1.234,56``.

    A single ``,`` in the input is read as the decimal separator
    (``"1345,5"``, ``"1.345,5"``).

    Returns:
        Formatted text, or None if ``value`` is not numeric
    """
    text = to_text(value).strip().replace(" ", "")
    if text.count(",") == 1:
        text = text.replace(".", "").replace(",", ".")
    try:
        number = Decimal(text)
    except InvalidOperation:
        return None
    if not number.is_finite():
        return None
    decimals = max(0, int(decimals))
    quantum = Decimal(1).scaleb(-decimals)
    grouped = f"{number.quantize(quantum, rounding=ROUND_HALF_UP):,.{decimals}f}"
    return grouped.replace(",", "\0").replace(".", decimal_separator).replace("\0", thousands_separator)


class FilterSet:
    """Registry of named placeholder filters bound to an engine configuration."""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or DEFAULT_CONFIG
        self._filters: Dict[str, Callable[[Any, Optional[str]], str]] = {
            "upper": lambda value, option: to_text(value).upper(),
            "lower": lambda value, option: to_text(value).lower(),
            "trim": lambda value, option: to_text(value).strip(),
            "nl2br": lambda value, option: to_text(value),
            "date": self._date,
            "number": self._number,
            "currency": self._currency,
            "checkbox": self._checkbox,
        }

    def register(self, name: str, func: Callable[[Any, Optional[str]], str]) -> None:
        """Add or replace a filter; ``func(value, option)`` returns text."""
        self._filters[name] = func

    def __contains__(self, name: str) -> bool:
        return name in self._filters

    def apply(self, name: str, value: Any, option: Optional[str] = None) -> Optional[str]:
        """
        Apply filter ``name``.

        Returns:
            Filtered text, or None for an unknown filter
        """
        func = self._filters.get(name)
        if func is None:
            logger.warning(f"Unknown filter: {name}")
            return None
        return func(value, option)

    # ------------------------------------------------------------------
    def _date(self, value: Any, option: Optional[str]) -> str:
        moment = parse_date(value)
        if moment is None:
            logger.debug(f"date filter: cannot parse {value!r}")
            return to_text(value)
        return format_date(moment, option or self.config.default_date_format)

    def _decimals(self, option: Optional[str], default: int) -> int:
        if option is None or not option.strip().isdigit():
            return default
        return int(option)

    def _number(self, value: Any, option: Optional[str]) -> str:
        formatted = format_number(
            value,
            self._decimals(option, self.config.number_decimals),
            self.config.decimal_separator,
            self.config.thousands_separator,
        )
        return to_text(value) if formatted is None else formatted

    def _currency(self, value: Any, option: Optional[str]) -> str:
        formatted = format_number(value, 2, self.config.decimal_separator, self.config.thousands_separator)
        if formatted is None:
            return to_text(value)
        symbol = option.strip() if option and option.strip() else self.config.currency_symbol
        return f"{formatted} {symbol}"

    def _checkbox(self, value: Any, option: Optional[str]) -> str:
        return self.config.checkbox_checked if is_truthy(value) else self.config.checkbox_unchecked
