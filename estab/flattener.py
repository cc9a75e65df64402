"""
Flatten a document into one row of text columns.
"""

from dataclasses import dataclass
from typing import Any, Dict, List

from .coercer import coerce_value, is_ragged, is_real_value
from .config import RunConfig
from .resolver import resolve


@dataclass
class Row:
    """Formatted columns for one document, in field order"""

    columns: List[str]
    has_data: bool

    def render(self, delimiter: str) -> str:
        return delimiter.join(self.columns)


def flatten_values(document: Dict[str, Any], config: RunConfig) -> List[List[str]]:
    """
    Resolve and coerce every configured field without joining.

    Returns:
        One token list per field, in field order
    """
    return [
        coerce_value(resolve(document, path), config, field)
        for field, path in zip(config.fields, config.paths)
    ]


def flatten(document: Dict[str, Any], config: RunConfig) -> Row:
    """
    Flatten a document against the configured fields.

    Each field is resolved along its dotted path and coerced to tokens.
    The tokens of a field are joined with the separator, or with the
    secondary separator when the field holds a ragged list. Missing fields
    are filled with the null value, so the row always has one column per
    field.

    Args:
        document: Decoded JSON object
        config: Run configuration

    Returns:
        Row with the columns and whether any field carried data

    Raises:
        MalformedValueError: If a field resolves to an unsupported value

    Examples:
        >>> config = RunConfig(fields=("name", "tags"))
        >>> flatten({"name": "Alice", "tags": ["x", "y"]}, config).columns
        ['Alice', 'x|y']
    """
    columns = []
    has_data = False

    for field, path in zip(config.fields, config.paths):
        value = resolve(document, path)
        tokens = coerce_value(value, config, field)
        if is_real_value(value, config.zero_as_null):
            has_data = True

        joiner = config.secondary_separator if is_ragged(value) else config.separator
        columns.append(joiner.join(tokens))

    return Row(columns=columns, has_data=has_data)
