"""
Table extraction from images through an external multimodal model.

Features:
- Narrow provider interface (`TableExtractor.invoke`) so the relay never sees
  the concrete AI SDK
- Gemini implementation using structured output constrained to an array of
  arrays of strings
- Strict validation of the model's JSON before it is returned as a table
- One process-wide extractor, built lazily from settings

All failures inside `invoke` are logged with their cause and surfaced as a
single generic `ExtractionError`, so callers see the same message no matter
how the provider misbehaves.
"""

from __future__ import annotations

import abc
import json
import logging
from typing import Any, Optional

from google import genai
from google.genai import types
from pydantic import ValidationError

from .config import Settings
from .errors import GENERIC_EXTRACTION_MESSAGE, ErrorKind, ExtractionError, TableFormatError
from .schema import Table, validate_table

logger = logging.getLogger(__name__)

EXTRACTION_PROMPT = (
    "Analyze the image and extract the tabular data. Return the data as a valid "
    "JSON array of arrays. The first inner array must represent the column "
    "headers, and each subsequent inner array must represent a data row. All "
    "values in the arrays should be strings. Make sure the output is only the "
    "JSON text."
)

TABLE_RESPONSE_SCHEMA = types.Schema(
    type=types.Type.ARRAY,
    description=(
        "An array of arrays representing the table. The first inner array is "
        "the header row, and subsequent arrays are data rows."
    ),
    items=types.Schema(
        type=types.Type.ARRAY,
        items=types.Schema(type=types.Type.STRING),
    ),
)


def parse_table_response(text: str) -> Table:
    """
    Parse raw model output into a table.

    Parameters
    ----------
    text:
        Model response text, expected to be JSON only.

    Returns
    -------
    Table
        The parsed rows, header row first.

    Raises
    ------
    TableFormatError
        If the text is not JSON, the top-level value is not an array, or any
        row is not an array of strings.
    """
    try:
        parsed = json.loads(text.strip())
    except json.JSONDecodeError as exc:
        raise TableFormatError() from exc

    if not isinstance(parsed, list) or not all(isinstance(row, list) for row in parsed):
        raise TableFormatError()

    try:
        return validate_table(parsed)
    except ValidationError as exc:
        raise TableFormatError() from exc


class TableExtractor(abc.ABC):
    """
    Provider-agnostic extraction capability: image in, table out.
    """

    @abc.abstractmethod
    async def invoke(self, image_bytes: bytes, mime_type: str) -> Table:
        """
        Extract a table from an image.

        Raises
        ------
        ExtractionError
            On any provider or format failure.
        """


class GeminiTableExtractor(TableExtractor):
    """
    `TableExtractor` backed by a Gemini model with a response schema.
    """

    def __init__(self, api_key: str, model_name: str, client: Optional[Any] = None) -> None:
        self.model_name = model_name
        self._client = client if client is not None else genai.Client(api_key=api_key)
        self._config = types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=TABLE_RESPONSE_SCHEMA,
        )

    @staticmethod
    def build_contents(image_bytes: bytes, mime_type: str) -> list:
        # The SDK base64-encodes inline data on the wire.
        return [
            EXTRACTION_PROMPT,
            types.Part.from_bytes(data=image_bytes, mime_type=mime_type),
        ]

    async def invoke(self, image_bytes: bytes, mime_type: str) -> Table:
        try:
            response = await self._client.aio.models.generate_content(
                model=self.model_name,
                contents=self.build_contents(image_bytes, mime_type),
                config=self._config,
            )
            table = parse_table_response(response.text or "")
        except Exception as exc:
            logger.exception("Error in Gemini API call (model=%s): %s", self.model_name, exc)
            raise ExtractionError(GENERIC_EXTRACTION_MESSAGE, kind=ErrorKind.EXTRACTION) from exc

        logger.info("Extracted table with %d rows (model=%s)", len(table), self.model_name)
        return table


_extractor: Optional[TableExtractor] = None


def get_extractor(settings: Settings) -> TableExtractor:
    """
    Return the process-wide extractor, constructing it on first use.
    """
    global _extractor

    if _extractor is None:
        _extractor = GeminiTableExtractor(
            api_key=settings.api_key, model_name=settings.gemini_model
        )
        logger.info("Gemini extractor initialised (model=%s)", settings.gemini_model)
    return _extractor


def reset_extractor() -> None:
    global _extractor
    _extractor = None
