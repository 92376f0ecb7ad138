"""Exceptions raised by the extract ingestion pipeline.

Every error here aborts the whole run; nothing is recovered per file.
"""

from typing import Optional


class IngestionError(Exception):
    """Base class for failures that abort an ingestion run."""


class ConfigurationError(IngestionError):
    """Raised when the pipeline configuration is missing or unusable."""


class SchemaDetectionError(IngestionError):
    """Raised when a file's header lines cannot be turned into a table schema."""


class RowShapeError(IngestionError):
    """Raised when a data row's field count disagrees with the header."""

    def __init__(self, message: str, source_file: str, line_number: int):
        super().__init__(message)
        self.source_file = source_file
        self.line_number = line_number


class StoreStatementError(IngestionError):
    """Raised when the store is unreachable or a create/insert/commit fails.

    Statement failures roll the transaction back before this is raised.
    """

    def __init__(self, message: str, source_file: Optional[str], statement: Optional[str] = None):
        super().__init__(message)
        self.source_file = source_file
        self.statement = statement


class ArchiveError(IngestionError):
    """Raised when a processed file cannot be moved into the archive."""
