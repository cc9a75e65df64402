"""
Default values for exporting search index documents as delimited text.

This module defines the defaults used throughout the export pipeline, most of
them exposed as command line options.

Usage Patterns:
    - Field paths: user.address.city descends into nested objects
    - Flat arrays: {"tags": ["a", "b"]} -> a|b
    - Ragged arrays: {"tags": ["a", ["b", "c"]]} -> a;b|c
"""

# Separator between the segments of a dotted field path
# Example: "user.address.city" -> ("user", "address", "city")
FIELD_PATH_SEPARATOR = "."

# Text written for missing or null values
NULL_VALUE = "NA"

# Separator used to join the values of a multi-valued field
# Example: {"tags": ["a", "b"]} -> "a|b"
SEPARATOR = "|"

# Separator used for the outer level of a list that contains lists
# Example: {"tags": ["a", ["b", "c"]]} -> "a;b|c"
SECONDARY_SEPARATOR = ";"

# Column delimiter
DELIMITER = "\t"

# Significant digits for non-integral numbers
PRECISION = 2

# Elasticsearch connection and scroll defaults
HOST = "http://localhost"
PORT = "9200"
SCROLL_SIZE = 10000
SCROLL_TIMEOUT = "10m"
MATCH_ALL_QUERY = '{"query": {"match_all": {}}}'

# Documents read from a JSON Lines file per page
JSONL_PAGE_SIZE = 1000

# Documents the producer may publish ahead of the consumer.
# A queue.Queue of size 0 is unbounded, so 1 is the tightest handoff.
DEFAULT_CHANNEL_CAPACITY = 1

# Seconds a blocked worker waits before re-checking for cancellation
CHANNEL_POLL_INTERVAL = 0.05
