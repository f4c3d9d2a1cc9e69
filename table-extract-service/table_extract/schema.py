"""
Data models and schema definitions for extracted tables and relay responses.

All external components (extractor, relay API, client, CLI) should use these
types to ensure a consistent contract. A table is kept as a plain
``List[List[str]]`` so it serializes directly to the wire format; the Pydantic
models wrap it where validation or a richer shape is needed.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator

from .errors import ErrorKind

Row = List[str]
Table = List[Row]

TABLE_ADAPTER: TypeAdapter[Table] = TypeAdapter(Table)


def validate_table(value: object) -> Table:
    """
    Validate that ``value`` is an array of arrays of strings.

    Unlike Pydantic's default lax mode, numbers are not coerced into strings:
    a cell that is not already a string is a format error.

    Raises
    ------
    pydantic.ValidationError
        If the value does not match the table shape.
    """
    return TABLE_ADAPTER.validate_python(value, strict=True)


class ErrorResponse(BaseModel):
    """
    JSON body returned by the relay for every non-success response.
    """

    model_config = ConfigDict(frozen=True)

    error: str = Field(..., description="Human-readable error message.")


class ErrorDetail(BaseModel):
    """
    Error half of an extraction result: a kind plus a display-ready message.
    """

    model_config = ConfigDict(frozen=True)

    kind: ErrorKind
    message: str


class ExtractionResult(BaseModel):
    """
    Outcome of a single extraction: either a table or an error, never both.
    """

    model_config = ConfigDict(frozen=True)

    table: Optional[Table] = Field(
        default=None, description="Extracted rows; row 0 holds the headers."
    )
    error: Optional[ErrorDetail] = Field(
        default=None, description="Failure details when no table was produced."
    )

    @model_validator(mode="after")
    def check_exactly_one(self) -> "ExtractionResult":
        if (self.table is None) == (self.error is None):
            raise ValueError("exactly one of 'table' or 'error' must be set")
        return self

    @property
    def ok(self) -> bool:
        return self.table is not None


class TableDisplay(BaseModel):
    """
    Display form of a non-empty table: the header row split from the data rows.
    """

    model_config = ConfigDict(frozen=True)

    headers: Row = Field(..., description="First row of the table.")
    rows: Table = Field(
        default_factory=list, description="Remaining rows; may be empty."
    )

    @property
    def has_data_rows(self) -> bool:
        return len(self.rows) > 0

    @property
    def width(self) -> int:
        """
        Widest row length across headers and data rows.
        """
        return max([len(self.headers)] + [len(row) for row in self.rows])

    def padded_headers(self) -> Row:
        return list(self.headers) + [""] * (self.width - len(self.headers))

    def padded_rows(self) -> Table:
        """
        Data rows right-padded with empty cells to ``width``.

        Only for rendering: the underlying rows are left untouched.
        """
        width = self.width
        return [list(row) + [""] * (width - len(row)) for row in self.rows]
