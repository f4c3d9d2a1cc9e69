"""
Tests for table_extract.schema
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from table_extract.errors import ErrorKind
from table_extract.schema import (
    ErrorDetail,
    ErrorResponse,
    ExtractionResult,
    TableDisplay,
    validate_table,
)


class TestValidateTable:
    def test_accepts_ragged_string_rows(self):
        assert validate_table([["A", "B"], ["1"]]) == [["A", "B"], ["1"]]

    @pytest.mark.parametrize("value", [{"a": 1}, ["A"], [["A", 2]], [["A", None]], "[]"])
    def test_rejects_other_shapes(self, value):
        with pytest.raises(ValidationError):
            validate_table(value)


class TestExtractionResult:
    def test_table_only(self):
        result = ExtractionResult(table=[["A"]])
        assert result.ok
        assert result.error is None

    def test_error_only(self):
        result = ExtractionResult(error=ErrorDetail(kind=ErrorKind.TRANSPORT, message="m"))
        assert not result.ok

    def test_empty_table_is_still_a_result(self):
        assert ExtractionResult(table=[]).ok

    def test_both_or_neither_rejected(self):
        with pytest.raises(ValidationError):
            ExtractionResult()
        with pytest.raises(ValidationError):
            ExtractionResult(
                table=[["A"]], error=ErrorDetail(kind=ErrorKind.EXTRACTION, message="m")
            )

    def test_frozen(self):
        result = ExtractionResult(table=[["A"]])
        with pytest.raises(ValidationError):
            result.table = []


class TestTableDisplay:
    def test_padding_is_display_only(self):
        rows = [["1"], ["1", "2", "3"]]
        display = TableDisplay(headers=["A", "B"], rows=rows)

        assert display.width == 3
        assert display.padded_headers() == ["A", "B", ""]
        assert display.padded_rows() == [["1", "", ""], ["1", "2", "3"]]
        assert display.rows == [["1"], ["1", "2", "3"]]


def test_error_response_shape():
    assert ErrorResponse(error="boom").model_dump() == {"error": "boom"}
