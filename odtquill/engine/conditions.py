"""
Condition expressions used by ``{{#if:...}}`` blocks.

An expression is a bare key (truthiness of the bound value) or a
comparison ``key OP literal`` with OP in ``== != > < >= <=``.
"""

from __future__ import annotations

import logging
import operator
import re
from typing import Any, Mapping, Optional

from .filters import is_truthy, to_text

logger = logging.getLogger(__name__)

COMPARISON_PATTERN = re.compile(r"^([\w.\-]+)\s*(==|!=|>=|<=|>|<)\s*(.+)$")

OPERATORS = {
    "==": operator.eq,
    "!=": operator.ne,
    ">": operator.gt,
    "<": operator.lt,
    ">=": operator.ge,
    "<=": operator.le,
}


def to_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(to_text(value).strip())
    except ValueError:
        return None


def evaluate_condition(expression: str, bindings: Mapping[str, Any]) -> bool:
    """
    Evaluate a condition against the current bindings.

    Both sides compare numerically when both look numeric; otherwise they
    compare as strings. Unbound keys read as an empty value.
    """
    expression = expression.strip()
    match = COMPARISON_PATTERN.match(expression)
    if not match:
        return is_truthy(bindings.get(expression))

    key, op, literal = match.groups()
    literal = literal.strip().strip("\"'")
    left = bindings.get(key)

    left_number = to_number(left)
    right_number = to_number(literal)
    if left_number is not None and right_number is not None:
        result = OPERATORS[op](left_number, right_number)
    else:
        result = OPERATORS[op](to_text(left), literal)
    logger.debug(f"Condition {expression!r} -> {result}")
    return result


def condition_key(expression: str) -> str:
    """The binding key an expression refers to."""
    match = COMPARISON_PATTERN.match(expression.strip())
    return match.group(1) if match else expression.strip()
