"""Tokenize extract data lines into row value tuples."""

import logging
import os
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from .errors import RowShapeError
from .schema_detector import split_lines

log = logging.getLogger(__name__)

HEADER_LINE_COUNT = 2

RowValues = Tuple[Optional[str], ...]


def split_data_lines(content: str) -> List[str]:
    """Return the data lines of an extract, without the two header lines.

    A single trailing empty line (the file's terminating newline) is dropped.
    """
    lines = split_lines(content)[HEADER_LINE_COUNT:]
    if lines and len(lines[-1]) == 0:
        lines.pop()
    return lines


def encode_line(line: str) -> RowValues:
    """Split one data line into values; fields empty after quote removal are None."""
    fields = line.replace('"', "").split(",")
    return tuple(value if value != "" else None for value in fields)


def encode_rows(column_count: int, lines: List[str], file_path: str) -> List[RowValues]:
    """Encode data lines into row tuples, enforcing the header's column count.

    Args:
        column_count: Number of columns declared by the header.
        lines: Data lines with the header lines already removed.
        file_path: Source file, used in the diagnostic on failure.

    Returns:
        One tuple of values per data line.

    Raises:
        RowShapeError: On the first line whose field count differs from
            ``column_count``. No rows are returned for a malformed file.
    """
    file_name = os.path.basename(file_path)
    rows: List[RowValues] = []

    for index, line in enumerate(lines):
        values = encode_line(line)
        if len(values) != column_count:
            line_number = index + HEADER_LINE_COUNT + 1
            message = (
                f"Timestamp: {datetime.now(timezone.utc).isoformat()} "
                f"File: {file_name} Line: {line_number} "
                f"(expected {column_count} fields, found {len(values)})"
            )
            raise RowShapeError(message, source_file=file_name, line_number=line_number)
        rows.append(values)

    log.debug("Encoded %d rows from '%s'", len(rows), file_name)
    return rows
