"""Export search index documents as delimited text."""

__version__ = "0.3.0"

from .config import RunConfig
from .frame import rows_to_frame
from .pipeline import ExportStats, export

__all__ = ["ExportStats", "RunConfig", "export", "rows_to_frame"]
