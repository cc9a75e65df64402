"""
Locate the value addressed by a dotted field path inside a document.
"""

from typing import Any, Dict, Tuple

from .constants import FIELD_PATH_SEPARATOR
from .errors import ConfigError


class _Absent:
    """Marker for a path that does not exist in a document"""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "ABSENT"

    def __bool__(self):
        return False


ABSENT = _Absent()


def parse_field_path(field: str) -> Tuple[str, ...]:
    """
    Split a field specifier into its path segments.

    Args:
        field: Dotted field specifier, e.g. "user.address.city"

    Returns:
        Tuple of non-empty segments

    Raises:
        ConfigError: If the specifier is empty or has an empty segment

    Examples:
        >>> parse_field_path("user.address.city")
        ('user', 'address', 'city')
    """
    if not isinstance(field, str) or not field:
        raise ConfigError(f"Field names must be non-empty strings, got {field!r}")

    segments = tuple(field.split(FIELD_PATH_SEPARATOR))
    if any(not segment for segment in segments):
        raise ConfigError(f"Field '{field}' contains an empty path segment")
    return segments


def resolve(document: Dict[str, Any], path: Tuple[str, ...]) -> Any:
    """
    Walk a document along a field path and return the leaf value.

    Descends while the value under the current segment is an object. The
    first value that is not an object is the leaf, even if segments remain:
    resolving "a.b.c" against {"a": {"b": 5}} gives 5. A missing segment
    gives ABSENT. A path that ends on an object returns that object.

    Args:
        document: Decoded JSON object
        path: Segments from parse_field_path

    Returns:
        The leaf value, or ABSENT
    """
    current = document
    for segment in path:
        if not isinstance(current, dict) or segment not in current:
            return ABSENT
        value = current[segment]
        if not isinstance(value, dict):
            return value
        current = value
    return current
