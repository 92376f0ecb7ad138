"""Extract ingestion driver.

Scans a directory for call-record extract files, loads each one into its
record-type table inside a single transaction, and archives every committed
file. Files are processed strictly one at a time; the first failure aborts
the run, leaving earlier commits (and their archived files) in place.
"""

import logging
import os
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from .archiver import archive_file
from .errors import StoreStatementError
from .row_encoder import RowValues, encode_rows, split_data_lines
from .schema_detector import ColumnSpec, infer_column_spec
from .statement_builder import (
    DEFAULT_BATCH_SIZE,
    build_create_table,
    iter_insert_statements,
    render_statement,
)
from cdr_pipelines.utils.logging_config import extract_logging_context
from cdr_pipelines.utils.postgres_client import run_connection, table_exists

log = logging.getLogger(__name__)

PREFIX_LENGTH = 3

# Failing statements are echoed in diagnostics up to this many characters
_STATEMENT_ECHO_LIMIT = 2000


@dataclass
class ExtractFile:
    """A discovered extract file and the table its record type maps to."""

    path: str
    name: str
    record_type: str
    table_name: str


@dataclass
class ParsedExtract:
    """Schema and encoded rows of one extract file."""

    extract: ExtractFile
    spec: ColumnSpec
    rows: List[RowValues]


@dataclass
class IngestResult:
    """Outcome of one committed file: rows inserted and where the file was archived."""

    table_name: str
    rows_inserted: int
    table_created: bool
    source_file: str = ""
    archive_path: Optional[str] = None


@dataclass
class RunSummary:
    """Totals for a completed run, with the per-file results in processing order."""

    total_entries: int = 0
    parsed_files: int = 0
    elapsed_seconds: float = 0.0
    results: List[IngestResult] = field(default_factory=list)


def classify_entry(scan_path: str, name: str, record_tables: Dict[str, str]) -> Optional[ExtractFile]:
    """Return an ExtractFile for ``name``, or None if the entry is not an extract.

    Directories, names with an extension, and names without a known
    record-type prefix are skipped.
    """
    path = os.path.abspath(os.path.join(scan_path, name))
    if os.path.isdir(path):
        return None
    if os.path.splitext(name)[1] != "":
        return None

    record_type = name[:PREFIX_LENGTH].lower()
    table_name = record_tables.get(record_type)
    if table_name is None:
        return None
    return ExtractFile(path=path, name=name, record_type=record_type, table_name=table_name)


def discover_extract_files(scan_path: str, record_tables: Dict[str, str]) -> List[ExtractFile]:
    """List ``scan_path`` once and return its extract files in name order."""
    extracts = []
    for name in sorted(os.listdir(scan_path)):
        extract = classify_entry(scan_path, name, record_tables)
        if extract is None:
            log.debug("Skipping '%s'", name)
            continue
        extracts.append(extract)

    log.info("Found %d extract files in '%s'", len(extracts), scan_path)
    return extracts


def parse_extract(extract: ExtractFile) -> ParsedExtract:
    """Read an extract file and infer its schema and rows.

    Raises:
        SchemaDetectionError: If the header lines are unusable.
        RowShapeError: If any data row has the wrong number of fields.
    """
    # Invalid UTF-8 bytes load as U+FFFD
    with open(extract.path, "r", encoding="utf-8", errors="replace") as f:
        content = f.read()

    spec = infer_column_spec(content)
    rows = encode_rows(len(spec), split_data_lines(content), extract.path)
    return ParsedExtract(extract=extract, spec=spec, rows=rows)


def ingest_file(
    conn: Connection,
    parsed: ParsedExtract,
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> IngestResult:
    """Create the target table if absent and insert all rows in one transaction.

    Args:
        conn: The run's connection; must not have a transaction open.
        parsed: Output of ``parse_extract``.
        batch_size: Maximum rows per INSERT statement.

    Returns:
        IngestResult for the committed file.

    Raises:
        StoreStatementError: If any statement or the commit fails. The
            transaction is rolled back before raising.
    """
    extract = parsed.extract
    table_name = extract.table_name
    # Holds the most recently executed statement for the failure diagnostic
    statement = build_create_table(table_name, parsed.spec)
    rows_inserted = 0

    try:
        with conn.begin():
            created = not table_exists(conn, table_name.lower())
            conn.execute(statement)
            for statement in iter_insert_statements(table_name, parsed.spec, parsed.rows, batch_size):
                result = conn.execute(statement)
                rows_inserted += result.rowcount
    except SQLAlchemyError as exc:
        statement_text = render_statement(statement, conn.dialect)[:_STATEMENT_ECHO_LIMIT]
        log.error("Unable to insert content from file: %s", extract.name)
        log.error("Failing statement: %s", statement_text)
        raise StoreStatementError(
            f"Unable to insert content from file '{extract.name}': {exc}",
            source_file=extract.name,
            statement=statement_text,
        ) from exc

    if created:
        log.info("Created table %s", table_name)
    return IngestResult(
        table_name=table_name,
        rows_inserted=rows_inserted,
        table_created=created,
        source_file=extract.name,
    )


def connect_store(engine: Engine) -> Connection:
    """Check out the connection a run uses for all of its files.

    Raises:
        StoreStatementError: If the store cannot be reached.
    """
    try:
        return engine.connect()
    except SQLAlchemyError as exc:
        url = engine.url.render_as_string(hide_password=True)
        log.error("Unable to connect to the database at %s", url)
        raise StoreStatementError(
            f"Unable to connect to the database at {url}: {exc}",
            source_file=None,
        ) from exc


def run_ingestion(config, engine: Engine) -> RunSummary:
    """Process every extract file in the configured scan directory.

    Args:
        config: PipelineConfig with ``scan_path``, ``record_tables`` and
            ``insert_batch_size``.
        engine: SQLAlchemy engine for the store.

    Returns:
        RunSummary with totals and per-file results.

    Raises:
        IngestionError: On an unreachable store, or on the first schema, row
            shape, statement or archive failure. Files processed before it
            stay committed and archived.
    """
    summary = RunSummary()
    start_time = time.monotonic()
    extracts = discover_extract_files(config.scan_path, config.record_tables)

    with run_connection(connect_store(engine)) as conn:
        for extract in extracts:
            with extract_logging_context(extract.name, extract.record_type):
                parsed = parse_extract(extract)
                result = ingest_file(conn, parsed, config.insert_batch_size)
                result.archive_path = archive_file(extract.path, config.scan_path)

                summary.total_entries += result.rows_inserted
                summary.parsed_files += 1
                summary.results.append(result)
                log.info(
                    "Inserted %d entries from %s Elapsed time: %.3f seconds Total entries added: %d",
                    result.rows_inserted,
                    extract.name,
                    time.monotonic() - start_time,
                    summary.total_entries,
                )

    summary.elapsed_seconds = time.monotonic() - start_time
    log.info(
        "Inserted %d entries from %d files in %.3f seconds",
        summary.total_entries,
        summary.parsed_files,
        summary.elapsed_seconds,
    )
    return summary
