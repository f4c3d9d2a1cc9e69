"""
Error taxonomy shared by the relay, the extractor and the client.

A single exception type, ``ExtractionError``, crosses every boundary towards
the presentation layer. Its ``kind`` records where the failure originated and
its ``message`` is always safe to show to an end user.
"""

from __future__ import annotations

from enum import Enum

GENERIC_EXTRACTION_MESSAGE = "Failed to extract data from AI service."
MISSING_API_KEY_MESSAGE = "Server configuration error: Missing API Key."
NO_IMAGE_MESSAGE = "No image file uploaded."
UNKNOWN_SERVER_ERROR_MESSAGE = "An unknown server error occurred."
TRANSPORT_ERROR_MESSAGE = "An unknown error occurred."
UNKNOWN_EXTRACTION_ERROR_MESSAGE = "An unknown error occurred during extraction."
UNEXPECTED_RESPONSE_MESSAGE = "Server returned an unexpected error."
TABLE_FORMAT_MESSAGE = "AI response is not in the expected table format."


class ErrorKind(str, Enum):
    TRANSPORT = "transport"
    CLIENT_INPUT = "client_input"
    SERVER_CONFIG = "server_config"
    EXTRACTION = "extraction"
    RESPONSE_PARSE = "response_parse"


class ExtractionError(Exception):
    """
    An extraction failed; ``message`` is display-ready.
    """

    status_code = 500

    def __init__(self, message: str, kind: ErrorKind = ErrorKind.EXTRACTION) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.value!r}, message={self.message!r})"


class ServerConfigError(ExtractionError):
    """
    The relay is missing required configuration (the API credential).
    """

    def __init__(self, message: str = MISSING_API_KEY_MESSAGE) -> None:
        super().__init__(message, kind=ErrorKind.SERVER_CONFIG)


class ClientInputError(ExtractionError):
    """
    The uploaded request did not carry a usable image.
    """

    status_code = 400

    def __init__(self, message: str = NO_IMAGE_MESSAGE) -> None:
        super().__init__(message, kind=ErrorKind.CLIENT_INPUT)


class TableFormatError(ValueError):
    """
    The model's output is not an array of arrays of strings.

    Internal to the extractor: it is logged and replaced by a generic
    ``ExtractionError`` before leaving the extraction step.
    """

    def __init__(self, message: str = TABLE_FORMAT_MESSAGE) -> None:
        super().__init__(message)
