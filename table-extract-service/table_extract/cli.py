"""
Command-line interface for the Table Extract Service.

Usage examples:
    table-extract extract receipt.png
    table-extract extract receipt.png --format tsv --output output/receipt.tsv
    table-extract extract receipt.png --server http://localhost:8000/api/extract --format json
    table-extract serve --port 8000 --reload
"""

from __future__ import annotations

import asyncio
import json
from enum import Enum
from pathlib import Path
from typing import Optional

import typer
import uvicorn
from rich.console import Console

from .client import TableExtractClient
from .config import configure_logging, get_settings
from .errors import ExtractionError
from .presentation import render_table, to_clipboard_text
from .schema import Table

app = typer.Typer(help="Extract tables from images through the Table Extract relay.")


class OutputFormat(str, Enum):
    table = "table"
    tsv = "tsv"
    json = "json"


def _ensure_parent_directory(path: Path) -> None:
    """
    Ensure the parent directory for a file path exists.
    """
    if path.parent and not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)


def _format_table(table: Table, output_format: OutputFormat) -> str:
    if output_format is OutputFormat.json:
        return json.dumps(table, indent=2, ensure_ascii=False)
    return to_clipboard_text(table)


async def _extract(image_path: Path, server: Optional[str]) -> Table:
    async with TableExtractClient(relay_url=server) as client:
        return await client.extract_file(image_path)


@app.callback()
def main_callback(
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Logging level (defaults to the LOG_LEVEL setting).",
    ),
) -> None:
    configure_logging(log_level or get_settings().log_level)


@app.command()
def extract(
    image: str = typer.Argument(..., help="Image file containing a table."),
    server: Optional[str] = typer.Option(
        None,
        "--server",
        help="Relay extract endpoint URL (defaults to the RELAY_URL setting).",
    ),
    output_format: OutputFormat = typer.Option(
        OutputFormat.table,
        "--format",
        help="Output format: rendered table, TSV for spreadsheets, or JSON.",
    ),
    output: Optional[str] = typer.Option(
        None,
        "--output",
        help="Write the TSV/JSON result to this file instead of stdout.",
    ),
) -> None:
    """
    Extract the table from an image and print or save it.
    """
    image_path = Path(image)
    if not image_path.is_file():
        typer.echo(f"Image file not found: {image_path}", err=True)
        raise typer.Exit(code=1)

    try:
        table = asyncio.run(_extract(image_path, server))
    except (ExtractionError, ValueError, OSError) as exc:
        typer.echo(f"Extraction failed: {exc}", err=True)
        raise typer.Exit(code=1)

    if output_format is OutputFormat.table and output is None:
        render_table(table, Console())
        return

    # A rendered grid only makes sense on a terminal; files get TSV.
    text_format = OutputFormat.tsv if output_format is OutputFormat.table else output_format
    text = _format_table(table, text_format)
    if output is None:
        typer.echo(text)
        return

    output_path = Path(output)
    _ensure_parent_directory(output_path)
    output_path.write_text(text, encoding="utf-8")
    typer.echo(f"Extracted {len(table)} rows to {output_path}")


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind."),
    port: int = typer.Option(8000, "--port", help="Port to listen on."),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes."),
) -> None:
    """
    Run the relay API with uvicorn.
    """
    uvicorn.run("table_extract.api.main:app", host=host, port=port, reload=reload)


def main() -> None:
    """
    Entrypoint used when executing as a module.
    """
    app()


if __name__ == "__main__":
    main()
