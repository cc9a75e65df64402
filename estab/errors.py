"""
Exceptions raised while exporting documents.
"""

from typing import Any


class EstabError(Exception):
    """Base class for export errors"""


class ConfigError(EstabError, ValueError):
    """Raised when a run configuration is invalid"""


class FetchError(EstabError):
    """Raised when a cursor fails to produce the next page"""


class MalformedValueError(EstabError):
    """Raised when a field resolves to a value that cannot be written as text"""

    def __init__(self, field: str, value: Any):
        self.field = field
        self.value = value
        super().__init__(
            f"Field '{field}' has unsupported value of type {type(value).__name__}: {value!r}"
        )


class WriteError(EstabError):
    """Raised when the output sink rejects a write"""


class PipelineCancelled(EstabError):
    """Raised by a worker that stopped because the other side failed"""
