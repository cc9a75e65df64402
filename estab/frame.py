"""
Flatten documents into a pandas DataFrame.

Library entry point for callers working in pandas; the command line tool
writes delimited text through the pipeline instead.
"""

import logging
from typing import Any, Dict, Iterable

import pandas as pd

from .config import RunConfig
from .flattener import flatten

logger = logging.getLogger(__name__)


def rows_to_frame(documents: Iterable[Dict[str, Any]], config: RunConfig) -> pd.DataFrame:
    """
    Flatten documents into a DataFrame with one column per field.

    Every cell holds the same text the delimited export would write, so
    the frame can be inspected or handed to other pandas tooling.

    Args:
        documents: Decoded JSON objects
        config: Run configuration

    Returns:
        DataFrame whose columns are the field specifiers, in field order

    Examples:
        Input documents:
            {"name": "Alice", "address": {"city": "NYC"}, "tags": ["a", "b"]}
            {"name": "Bob"}

        Fields name, address.city, tags give:
            name   address.city  tags
            Alice  NYC           a|b
            Bob    NA            NA
    """
    records = []
    skipped = 0
    for document in documents:
        row = flatten(document, config)
        if config.skip_empty and not row.has_data:
            skipped += 1
            continue
        records.append(row.columns)

    if skipped:
        logger.info(f"Skipped {skipped} documents without a value for any field")

    return pd.DataFrame(records, columns=list(config.fields), dtype=object)
