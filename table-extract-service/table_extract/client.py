"""
Async client for the Table Extract relay.

Every failure (network error, non-success status, or a body that is not a
table) is normalized to an `ExtractionError` whose message can be shown to an
end user as-is. Raw bodies that cannot be interpreted are logged, never put in
the message.
"""

from __future__ import annotations

import io
import json
import logging
from pathlib import Path
from typing import Optional, Union

import httpx
from PIL import Image, UnidentifiedImageError

from .config import get_settings
from .errors import (
    MISSING_API_KEY_MESSAGE,
    TRANSPORT_ERROR_MESSAGE,
    UNEXPECTED_RESPONSE_MESSAGE,
    UNKNOWN_EXTRACTION_ERROR_MESSAGE,
    ErrorKind,
    ExtractionError,
)
from .schema import ErrorDetail, ExtractionResult, Table, validate_table

logger = logging.getLogger(__name__)

IMAGE_FIELD = "image"


def detect_mime_type(data: bytes) -> str:
    """
    Identify the image format of ``data`` and return its MIME type.

    Raises
    ------
    ValueError
        If the bytes are not an image Pillow can identify.
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            fmt = img.format
    except (UnidentifiedImageError, OSError) as exc:
        raise ValueError("File is not a recognised image.") from exc
    mime_type = Image.MIME.get(fmt or "")
    if not mime_type:
        raise ValueError(f"No MIME type known for image format {fmt!r}.")
    return mime_type


def _kind_for(status_code: int, message: str) -> ErrorKind:
    if message == MISSING_API_KEY_MESSAGE:
        return ErrorKind.SERVER_CONFIG
    if 400 <= status_code < 500:
        return ErrorKind.CLIENT_INPUT
    return ErrorKind.EXTRACTION


def error_from_response(response: httpx.Response) -> ExtractionError:
    """
    Build the error for a non-success relay response.

    The body is read as text once; a JSON ``error`` field becomes the message,
    anything else degrades to a generic message.
    """
    error_text = response.text
    try:
        body = json.loads(error_text)
    except ValueError:
        logger.error(
            "Non-JSON error response from server (status %d): %s",
            response.status_code,
            error_text,
        )
        return ExtractionError(UNEXPECTED_RESPONSE_MESSAGE, kind=ErrorKind.RESPONSE_PARSE)

    message = body.get("error") if isinstance(body, dict) else None
    if not isinstance(message, str) or not message:
        message = UNKNOWN_EXTRACTION_ERROR_MESSAGE
    return ExtractionError(message, kind=_kind_for(response.status_code, message))


class TableExtractClient:
    """
    Submit images to the relay and receive tables.

    Parameters
    ----------
    relay_url:
        Full URL of the relay's extract endpoint. Defaults to the
        ``RELAY_URL`` setting.
    client:
        Optional pre-built ``httpx.AsyncClient``; the caller keeps ownership.
    transport:
        Optional transport for a client built here (e.g. ``httpx.ASGITransport``).
    """

    def __init__(
        self,
        relay_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.relay_url = relay_url or get_settings().relay_url
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(transport=transport)

    async def __aenter__(self) -> "TableExtractClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def extract(self, image: bytes, mime_type: str, filename: str = "image") -> Table:
        """
        Send one image to the relay and return the extracted table.

        Exactly one request is made; nothing is retried.

        Raises
        ------
        ValueError
            If ``image`` is empty.
        ExtractionError
            On any transport, status or response-format failure.
        """
        if not image:
            raise ValueError("image must be non-empty bytes")

        files = {IMAGE_FIELD: (filename, image, mime_type)}
        try:
            response = await self._client.post(self.relay_url, files=files)
        except httpx.HTTPError as exc:
            logger.error("Error calling extraction API: %s", exc)
            raise ExtractionError(TRANSPORT_ERROR_MESSAGE, kind=ErrorKind.TRANSPORT) from exc

        if not response.is_success:
            error = error_from_response(response)
            logger.error("Error calling extraction API: %r", error)
            raise error

        try:
            return validate_table(response.json())
        except ValueError as exc:
            logger.error("Unexpected success response from server: %s", response.text)
            raise ExtractionError(
                UNEXPECTED_RESPONSE_MESSAGE, kind=ErrorKind.RESPONSE_PARSE
            ) from exc

    async def extract_file(self, path: Union[str, Path]) -> Table:
        """
        Read an image file, detect its MIME type and extract its table.
        """
        path = Path(path)
        data = path.read_bytes()
        return await self.extract(data, detect_mime_type(data), filename=path.name)

    async def try_extract(
        self, image: bytes, mime_type: str, filename: str = "image"
    ) -> ExtractionResult:
        """
        Like `extract`, but returns the failure as part of the result.
        """
        try:
            table = await self.extract(image, mime_type, filename=filename)
        except ExtractionError as exc:
            return ExtractionResult(error=ErrorDetail(kind=exc.kind, message=exc.message))
        return ExtractionResult(table=table)


async def extract_table_from_image(
    path: Union[str, Path], relay_url: Optional[str] = None
) -> Table:
    """
    One-shot helper: extract the table from an image file through the relay.
    """
    async with TableExtractClient(relay_url=relay_url) as client:
        return await client.extract_file(path)
