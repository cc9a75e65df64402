"""
Run configuration shared by every stage of an export.
"""

import logging
from dataclasses import dataclass, field
from typing import Tuple

from .constants import (
    DELIMITER,
    NULL_VALUE,
    PRECISION,
    SECONDARY_SEPARATOR,
    SEPARATOR,
)
from .errors import ConfigError
from .resolver import parse_field_path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunConfig:
    """
    Immutable settings for one export run.

    The configuration is built once before the pipeline starts and passed
    explicitly to the coercer, flattener and consumer. Field paths are
    derived here so that every row shares the same parsed paths.

    Attributes:
        fields: Ordered field specifiers, each a dotted path
        null_value: Text written for missing or null values
        separator: Joins the values of a multi-valued field
        secondary_separator: Joins the outer level of a ragged list
        delimiter: Joins columns
        precision: Significant digits for non-integral numbers
        zero_as_null: Write empty strings as null_value
        skip_empty: Drop documents without a value for any field
        header: Write the field names before the first row
        raw: Write each document as a JSON line instead of flattening it
        single_value: Write every value of the single field on its own line

    Raises:
        ConfigError: If any setting is inconsistent
    """

    fields: Tuple[str, ...]
    null_value: str = NULL_VALUE
    separator: str = SEPARATOR
    secondary_separator: str = SECONDARY_SEPARATOR
    delimiter: str = DELIMITER
    precision: int = PRECISION
    zero_as_null: bool = False
    skip_empty: bool = False
    header: bool = False
    raw: bool = False
    single_value: bool = False
    paths: Tuple[Tuple[str, ...], ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if isinstance(self.fields, str):
            raise ConfigError("fields must be a sequence of field names, not a string")
        fields = tuple(self.fields)
        if not fields:
            raise ConfigError("At least one field is required")
        object.__setattr__(self, "fields", fields)
        object.__setattr__(self, "paths", tuple(parse_field_path(f) for f in fields))

        if isinstance(self.precision, bool) or not isinstance(self.precision, int) or self.precision < 0:
            raise ConfigError(f"precision must be a non-negative integer, got {self.precision!r}")
        if not self.separator:
            raise ConfigError("separator must not be empty")
        if not self.secondary_separator:
            raise ConfigError("secondary separator must not be empty")
        if self.separator == self.secondary_separator:
            raise ConfigError(
                f"separator and secondary separator must differ, both are {self.separator!r}"
            )
        if not self.delimiter:
            raise ConfigError("delimiter must not be empty")
        if self.raw and self.single_value:
            raise ConfigError("raw and single value output are mutually exclusive")
        if self.single_value and len(fields) > 1:
            raise ConfigError(
                f"single value output works only with a single field, {len(fields)} given: {' '.join(fields)}"
            )
        if self.delimiter in (self.separator, self.secondary_separator):
            logger.warning(f"Column delimiter {self.delimiter!r} is also used as a value separator")

    @classmethod
    def from_field_string(cls, fields: str, **options) -> "RunConfig":
        """Build a configuration from a whitespace separated field list."""
        return cls(fields=tuple(fields.split()), **options)

    def header_line(self) -> str:
        return self.delimiter.join(self.fields)
