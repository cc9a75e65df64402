"""
Convert resolved JSON values into text tokens.

Scalars become a single token. A flat list becomes one token per element,
joined later with the primary separator. A ragged list (a list holding at
least one list) becomes one token per outer element, where every inner list
is already joined with the primary separator; the flattener joins the outer
tokens with the secondary separator.

Example:
    {"tags": ["a", ["b", "c"]]} with separators "|" and ";":
        coerce_value(...) -> ["a", "b|c"]
        joined column     -> "a;b|c"
"""

import math
from typing import Any, List

from .config import RunConfig
from .errors import MalformedValueError
from .resolver import ABSENT


def format_number(value: float, precision: int) -> str:
    """
    Format a JSON number.

    Integral values are written without decimals. Other values use the
    general format with `precision` significant digits, which drops
    trailing zeros and switches to exponent notation for very large or
    very small magnitudes.

    Examples:
        >>> format_number(7.0, 2)
        '7'
        >>> format_number(3.14159, 3)
        '3.14'
        >>> format_number(0.000012345, 2)
        '1.2E-05'
    """
    if isinstance(value, int):
        return str(value)
    if math.isfinite(value) and value.is_integer():
        return f"{value:.0f}"
    return format(value, f".{precision}G")


def _coerce_scalar(value: Any, config: RunConfig, field: str) -> str:
    if value is None or value is ABSENT:
        return config.null_value
    # bool before numbers: bool is a subclass of int
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        if value == "" and config.zero_as_null:
            return config.null_value
        return value
    if isinstance(value, (int, float)):
        return format_number(value, config.precision)
    raise MalformedValueError(field, value)


def is_ragged(value: Any) -> bool:
    """Return True for a list that holds at least one list."""
    return isinstance(value, list) and any(isinstance(item, list) for item in value)


def is_real_value(value: Any, zero_as_null: bool = False) -> bool:
    """
    Return True if a resolved value carries data.

    Missing values, nulls and lists holding nothing but nulls do not count,
    nor do empty strings when they are written as null.
    """
    if value is None or value is ABSENT:
        return False
    if zero_as_null and value == "":
        return False
    if isinstance(value, list):
        return any(is_real_value(item, zero_as_null) for item in value)
    return True


def coerce_value(value: Any, config: RunConfig, field: str = "") -> List[str]:
    """
    Convert a resolved value into text tokens.

    Args:
        value: Result of resolver.resolve
        config: Run configuration (null value, precision, zero-as-null)
        field: Field specifier, used in error messages

    Returns:
        List of tokens; empty for an empty list

    Raises:
        MalformedValueError: For objects, lists nested more than two
            levels deep and any non-JSON type
    """
    if not isinstance(value, list):
        return [_coerce_scalar(value, config, field)]

    if not is_ragged(value):
        return [_coerce_scalar(item, config, field) for item in value]

    tokens = []
    for item in value:
        if isinstance(item, list):
            if is_ragged(item):
                raise MalformedValueError(field, value)
            inner = [_coerce_scalar(element, config, field) for element in item]
            tokens.append(config.separator.join(inner))
        else:
            tokens.append(_coerce_scalar(item, config, field))
    return tokens
