"""
Display and export helpers for extracted tables.

- `to_display` splits a table into headers and data rows (or nothing at all)
- `to_clipboard_text` produces TSV for pasting into spreadsheet applications
- `render_table` prints a table to the terminal with rich

TSV export is lossy when a cell contains a tab or a newline: such values are
written unchanged and will split cells or rows when pasted.
"""

from __future__ import annotations

from typing import Optional

from rich import box
from rich.console import Console
from rich.table import Table as RichTable
from rich.text import Text

from .schema import Table, TableDisplay

NOTHING_EXTRACTED_NOTICE = "Nothing was extracted from the image."
NO_DATA_ROWS_NOTICE = "No data rows were extracted from the image."
HEADERS_ONLY_NOTICE = "Only headers were found."

CELL_SEPARATOR = "\t"
ROW_SEPARATOR = "\n"


def to_display(table: Table) -> Optional[TableDisplay]:
    """
    Split ``table`` into its header row and data rows.

    Returns ``None`` for an empty table, meaning there is nothing to render.
    """
    if not table:
        return None
    return TableDisplay(headers=table[0], rows=table[1:])


def to_clipboard_text(table: Table) -> str:
    """
    Tab-separated export of every row, header row included.
    """
    return ROW_SEPARATOR.join(CELL_SEPARATOR.join(row) for row in table)


def build_rich_table(display: TableDisplay, title: Optional[str] = "Extracted Data") -> RichTable:
    """
    Build a rich table from a display model.

    Short rows are padded with empty cells so the grid stays aligned; the
    display model itself is not changed. Cell values are plain text, never
    rich markup.
    """
    rich_table = RichTable(title=title, box=box.SIMPLE_HEAVY, show_lines=False)
    for header in display.padded_headers():
        rich_table.add_column(Text(header), overflow="fold")
    for row in display.padded_rows():
        rich_table.add_row(*(Text(cell) for cell in row))
    return rich_table


def render_table(table: Table, console: Optional[Console] = None) -> None:
    console = console or Console()

    display = to_display(table)
    if display is None:
        console.print(NOTHING_EXTRACTED_NOTICE)
        return

    console.print(build_rich_table(display))
    if not display.has_data_rows:
        console.print(NO_DATA_ROWS_NOTICE)
        console.print(HEADERS_ONLY_NOTICE)
