"""Tests for the row encoder module."""

import pytest

from cdr_pipelines.ingestion.errors import RowShapeError
from cdr_pipelines.ingestion.row_encoder import encode_line, encode_rows, split_data_lines


class TestSplitDataLines:
    """Tests for split_data_lines."""

    def test_drops_header_and_terminating_newline(self):
        lines = split_data_lines("a,b\nINT,INT\n1,2\n3,4\n")
        assert lines == ["1,2", "3,4"]

    def test_without_terminating_newline(self):
        assert split_data_lines("a,b\nINT,INT\n1,2") == ["1,2"]

    def test_only_one_trailing_empty_line_is_dropped(self):
        assert split_data_lines("a\nINT\n1\n\n") == ["1", ""]

    def test_header_only(self):
        assert split_data_lines("a,b\nINT,INT\n") == []


class TestEncodeLine:
    """Tests for encode_line."""

    def test_strips_double_quotes(self):
        assert encode_line('"abc-123","Bob"') == ("abc-123", "Bob")

    def test_empty_fields_become_none(self):
        assert encode_line("id,,") == ("id", None, None)

    def test_quoted_empty_field_becomes_none(self):
        assert encode_line('1,""') == ("1", None)

    def test_single_quotes_are_kept_as_data(self):
        assert encode_line("O'Brien,2") == ("O'Brien", "2")


class TestEncodeRows:
    """Tests for encode_rows."""

    def test_encodes_all_rows(self):
        rows = encode_rows(2, ['"a",1', '"b",'], "/scan/cdr001")
        assert rows == [("a", "1"), ("b", None)]

    def test_no_rows(self):
        assert encode_rows(3, [], "/scan/cdr001") == []

    def test_short_row_raises_with_file_line(self):
        lines = ["1,2,3", "4,5"]

        with pytest.raises(RowShapeError) as exc_info:
            encode_rows(3, lines, "/scan/cdr001")

        err = exc_info.value
        assert err.source_file == "cdr001"
        # Second data line is line 4 of the file
        assert err.line_number == 4
        assert "File: cdr001 Line: 4" in str(err)
        assert "Timestamp: " in str(err)

    def test_long_row_raises(self):
        with pytest.raises(RowShapeError, match="expected 2 fields, found 3"):
            encode_rows(2, ["1,2,3"], "/scan/cmr001")

    def test_blank_line_in_middle_raises(self):
        with pytest.raises(RowShapeError, match="Line: 4"):
            encode_rows(2, ["1,2", "", "3,4"], "/scan/cdr001")
