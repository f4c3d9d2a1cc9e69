"""
FastAPI application for the Table Extract relay.

Endpoints
---------
- GET /health
- POST /api/extract  (multipart form, file field ``image``)

The relay holds the AI credential, forwards the uploaded image to the
extractor and returns the table as a JSON array of arrays of strings. Every
non-success response is a JSON object ``{"error": <message>}``; internal
failure causes are logged here and never returned to the caller.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import List

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..config import Settings, configure_logging, get_settings
from ..errors import (
    NO_IMAGE_MESSAGE,
    UNKNOWN_SERVER_ERROR_MESSAGE,
    ClientInputError,
    ErrorKind,
    ExtractionError,
    ServerConfigError,
)
from ..extractor import TableExtractor, get_extractor
from ..schema import ErrorResponse

logger = logging.getLogger(__name__)

IMAGE_FIELD = "image"

configure_logging(get_settings().log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    if settings.api_key:
        get_extractor(settings)
    else:
        logger.warning("API_KEY is not set; extraction requests will be rejected.")
    yield


app = FastAPI(title="Table Extract Service", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ExtractionError)
async def extraction_error_handler(request: Request, exc: ExtractionError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=exc.message).model_dump(),
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """
    Render framework errors (404, 405, malformed bodies) in the relay's error shape.

    Headers such as ``Allow`` on a 405 are preserved.
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=str(exc.detail)).model_dump(),
        headers=exc.headers,
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning("Rejected request to %s: %s", request.url.path, exc.errors())
    return JSONResponse(
        status_code=ClientInputError.status_code,
        content=ErrorResponse(error=NO_IMAGE_MESSAGE).model_dump(),
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(error=UNKNOWN_SERVER_ERROR_MESSAGE).model_dump(),
    )


def get_table_extractor(settings: Settings = Depends(get_settings)) -> TableExtractor:
    """
    Resolve the process-wide extractor, failing fast when no credential is set.
    """
    if not settings.api_key:
        logger.error("API_KEY environment variable not set on server.")
        raise ServerConfigError()
    return get_extractor(settings)


@app.get("/health")
async def health() -> dict:
    """
    Simple health-check endpoint.
    """
    return {"status": "ok"}


@app.post(
    "/api/extract",
    response_model=List[List[str]],
    responses={
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {
                "multipart/form-data": {
                    "schema": {
                        "type": "object",
                        "required": [IMAGE_FIELD],
                        "properties": {
                            IMAGE_FIELD: {"type": "string", "format": "binary"}
                        },
                    }
                }
            },
        }
    },
)
async def extract(
    request: Request,
    extractor: TableExtractor = Depends(get_table_extractor),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    """
    Extract a table from an uploaded image.

    The form is parsed only after the credential check, so a misconfigured
    server answers every request with the configuration error.
    """
    form = await request.form()
    try:
        upload = form.get(IMAGE_FIELD)
        if not isinstance(upload, UploadFile):
            raise ClientInputError()

        image_bytes = await upload.read()
        if not image_bytes:
            raise ClientInputError()

        mime_type = upload.content_type or settings.default_mime_type
        logger.info(
            "Received %s (%s, %d bytes)", upload.filename, mime_type, len(image_bytes)
        )

        try:
            table = await extractor.invoke(image_bytes, mime_type)
        except ExtractionError:
            raise
        except Exception as exc:
            logger.exception("Error processing file upload: %s", exc)
            raise ExtractionError(UNKNOWN_SERVER_ERROR_MESSAGE, kind=ErrorKind.EXTRACTION) from exc
    finally:
        await form.close()

    return JSONResponse(status_code=200, content=table)


# For local development convenience:
#   uvicorn table_extract.api.main:app --reload
#   or: table-extract serve --reload
