"""Call-record extract ingestion modules.

Provides the parse-and-load pipeline that turns delimited extract files into
rows of a relational store.

Modules:
    schema_detector: Infer column names and store types from the header lines.
    row_encoder: Tokenize data lines into value tuples, enforcing column count.
    statement_builder: Build the create-table and parameterized insert statements.
    extract_ingestor: Discover, load and archive extract files one at a time.
    archiver: Move committed files into the year/month archive.
    errors: Exceptions that abort an ingestion run.
"""

from .errors import (
    IngestionError,
    ConfigurationError,
    SchemaDetectionError,
    RowShapeError,
    StoreStatementError,
    ArchiveError,
)
from .schema_detector import (
    ColumnSpec,
    infer_column_spec,
    translate_type,
    build_create_statement,
)
from .row_encoder import (
    split_data_lines,
    encode_rows,
)
from .statement_builder import (
    build_create_table,
    build_insert_statement,
    iter_insert_statements,
    render_statement,
)
from .archiver import archive_file
from .extract_ingestor import (
    ExtractFile,
    IngestResult,
    RunSummary,
    classify_entry,
    connect_store,
    discover_extract_files,
    parse_extract,
    ingest_file,
    run_ingestion,
)

__all__ = [
    # Errors
    "IngestionError",
    "ConfigurationError",
    "SchemaDetectionError",
    "RowShapeError",
    "StoreStatementError",
    "ArchiveError",
    # Schema detection
    "ColumnSpec",
    "infer_column_spec",
    "translate_type",
    "build_create_statement",
    # Row encoding
    "split_data_lines",
    "encode_rows",
    # Statement building
    "build_create_table",
    "build_insert_statement",
    "iter_insert_statements",
    "render_statement",
    # Archiving
    "archive_file",
    # Driver
    "ExtractFile",
    "IngestResult",
    "RunSummary",
    "classify_entry",
    "connect_store",
    "discover_extract_files",
    "parse_extract",
    "ingest_file",
    "run_ingestion",
]
