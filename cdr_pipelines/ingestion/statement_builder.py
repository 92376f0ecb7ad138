"""Statement synthesis for extract loads.

Data values are never interpolated into SQL text: inserts are SQLAlchemy
multi-row ``INSERT ... VALUES`` constructs with bound parameters. Only the
validated table/column identifiers and type tokens appear in statement text.
"""

from typing import Iterator, List, Optional

from sqlalchemy import String, column, insert, table, text
from sqlalchemy.dialects import postgresql
from sqlalchemy.engine import Dialect
from sqlalchemy.sql import ClauseElement
from sqlalchemy.sql.elements import TextClause, quoted_name

from .row_encoder import RowValues
from .schema_detector import ColumnSpec, build_create_statement, validate_identifier

DEFAULT_BATCH_SIZE = 1000

# SQLite's default limit; PostgreSQL allows 65535
MAX_BIND_PARAMS = 32766


def _unquoted(name: str) -> quoted_name:
    # Match the case folding of the unquoted names in CREATE TABLE
    return quoted_name(name, quote=False)


def build_create_table(table_name: str, spec: ColumnSpec) -> TextClause:
    """Return the create-table-if-absent statement as an executable clause."""
    return text(build_create_statement(table_name, spec))


def build_insert_statement(table_name: str, spec: ColumnSpec, rows: List[RowValues]):
    """Return a multi-row INSERT for ``rows`` with every value bound as a parameter."""
    validate_identifier(table_name, kind="table")
    if not rows:
        raise ValueError("Cannot build an INSERT statement without rows")

    target = table(
        _unquoted(table_name),
        *[column(_unquoted(name), String) for name in spec.names],
    )
    values = [dict(zip(spec.names, row)) for row in rows]
    return insert(target).values(values)


def batch_size_for(column_count: int, batch_size: int = DEFAULT_BATCH_SIZE) -> int:
    """Rows per INSERT so that one statement stays below the bind-parameter limit."""
    return max(1, min(batch_size, MAX_BIND_PARAMS // max(1, column_count)))


def iter_insert_statements(
    table_name: str,
    spec: ColumnSpec,
    rows: List[RowValues],
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> Iterator:
    """Yield INSERT statements covering ``rows`` in order, chunked by batch size."""
    size = batch_size_for(len(spec), batch_size)
    for start in range(0, len(rows), size):
        yield build_insert_statement(table_name, spec, rows[start:start + size])


def render_statement(statement: ClauseElement, dialect: Optional[Dialect] = None) -> str:
    """Render a statement with literal values, for diagnostics only."""
    if isinstance(statement, TextClause):
        return str(statement)
    compiled = statement.compile(
        dialect=dialect or postgresql.dialect(),
        compile_kwargs={"literal_binds": True},
    )
    return str(compiled)
