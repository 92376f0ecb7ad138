"""Schema detection for call-record extract files.

Each extract starts with two header lines: the column names and the source
(MS SQL) column types. The types are translated to PostgreSQL equivalents and
rendered into an idempotent ``CREATE TABLE IF NOT EXISTS`` statement.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import List

from .errors import SchemaDetectionError

log = logging.getLogger(__name__)


# Whole-token replacements from source type names to store type names
_TOKEN_TYPE_MAP = {
    "UNIQUEIDENTIFIER": "UUID",
}

# Observed INT values overflow 32 bits, so every INT becomes BIGINT
_INT_PATTERN = re.compile(r"\bINT\b", re.IGNORECASE)

_IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_TYPE_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_ ()]*$")


@dataclass
class ColumnSpec:
    """Ordered, index-aligned column names and store types."""

    names: List[str] = field(default_factory=list)
    types: List[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.names)

    @property
    def columns(self) -> List[tuple]:
        return list(zip(self.names, self.types))


def split_lines(content: str) -> List[str]:
    """Split file content on newlines, dropping a trailing carriage return per line."""
    return [line[:-1] if line.endswith("\r") else line for line in content.split("\n")]


def translate_type(token: str) -> str:
    """Translate a source column type token to its store equivalent.

    Idempotent: translating an already translated token returns it unchanged.
    """
    token = token.strip()
    mapped = _TOKEN_TYPE_MAP.get(token.upper())
    if mapped is not None:
        return mapped
    return _INT_PATTERN.sub("BIGINT", token)


def validate_identifier(name: str, kind: str = "column") -> str:
    """Return ``name`` if it is a plain SQL identifier, else raise."""
    if not _IDENTIFIER_PATTERN.match(name):
        raise SchemaDetectionError(f"Invalid {kind} name {name!r}")
    return name


def infer_column_spec(content: str) -> ColumnSpec:
    """Build a ColumnSpec from the first two lines of an extract file.

    Args:
        content: Full text content of the file.

    Returns:
        ColumnSpec with names from line 1 and translated types from line 2.

    Raises:
        SchemaDetectionError: If a header line is missing or empty, the name
            and type counts differ, or a name/type is not safe to render.
    """
    lines = split_lines(content)
    if len(lines) < 2 or not lines[0].strip() or not lines[1].strip():
        raise SchemaDetectionError(
            "Extract file must start with a column name line and a column type line"
        )

    names = [name.strip() for name in lines[0].replace('"', "").split(",")]
    types = [translate_type(token) for token in lines[1].replace('"', "").split(",")]

    if len(names) != len(types):
        raise SchemaDetectionError(
            f"Header declares {len(names)} column names but {len(types)} column types"
        )

    for name in names:
        validate_identifier(name)
    for type_name in types:
        if not _TYPE_PATTERN.match(type_name):
            raise SchemaDetectionError(f"Invalid column type {type_name!r}")

    return ColumnSpec(names=names, types=types)


def build_create_statement(table_name: str, spec: ColumnSpec) -> str:
    """Render the create-table-if-absent statement for ``spec``."""
    validate_identifier(table_name, kind="table")
    columns = ", ".join(f"{name} {type_name}" for name, type_name in spec.columns)
    sql = f"CREATE TABLE IF NOT EXISTS {table_name} ({columns})"
    log.debug("Create statement for '%s': %s", table_name, sql)
    return sql
