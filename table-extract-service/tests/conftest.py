"""
Common test fixtures.
"""

from __future__ import annotations

import io
from typing import List, Optional, Tuple

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from table_extract.api.main import app, get_table_extractor
from table_extract.config import Settings, get_settings
from table_extract.extractor import TableExtractor, reset_extractor
from table_extract.schema import Table


class FakeExtractor(TableExtractor):
    """Records calls and returns a canned table or raises a canned error."""

    def __init__(self, table: Optional[Table] = None, error: Optional[Exception] = None):
        self.table = table if table is not None else [["A", "B"], ["1", "2"]]
        self.error = error
        self.calls: List[Tuple[bytes, str]] = []

    async def invoke(self, image_bytes: bytes, mime_type: str) -> Table:
        self.calls.append((image_bytes, mime_type))
        if self.error is not None:
            raise self.error
        return self.table


def make_settings(**overrides) -> Settings:
    values = {"api_key": "test-key"}
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def png_bytes() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (4, 4), color="white").save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def fake_extractor() -> FakeExtractor:
    return FakeExtractor()


@pytest.fixture
def api_client(fake_extractor):
    app.dependency_overrides[get_settings] = lambda: make_settings()
    app.dependency_overrides[get_table_extractor] = lambda: fake_extractor
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def _reset_extractor_singleton():
    reset_extractor()
    yield
    reset_extractor()
