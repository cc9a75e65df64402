"""
Line oriented output sink.
"""

import json
import logging
from typing import IO, Any, Dict

from .errors import WriteError

logger = logging.getLogger(__name__)


class LineWriter:
    """
    Write newline terminated lines to a text stream.

    Stream failures are raised as WriteError. Used as a context manager,
    the stream is flushed on exit whether or not the export failed; the
    stream itself stays open and belongs to the caller.
    """

    def __init__(self, stream: IO[str]):
        self.stream = stream

    def write_line(self, text: str) -> None:
        try:
            self.stream.write(text + "\n")
        except (OSError, ValueError) as e:
            raise WriteError(f"Error writing output: {str(e)}") from e

    def write_document(self, document: Dict[str, Any]) -> None:
        """Write a document as one compact JSON line."""
        self.write_line(json.dumps(document, ensure_ascii=False, separators=(",", ":")))

    def flush(self) -> None:
        try:
            self.stream.flush()
        except (OSError, ValueError) as e:
            raise WriteError(f"Error flushing output: {str(e)}") from e

    def __enter__(self) -> "LineWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            self.flush()
        except WriteError:
            if exc_type is None:
                raise
            logger.error("Flush failed after an earlier error", exc_info=True)
