"""
Runtime configuration, read from the environment (and an optional ``.env`` file).
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


class Settings(BaseSettings):
    api_key: str = Field(
        default="", description="Credential for the external AI vision service."
    )
    gemini_model: str = "gemini-2.5-flash"
    default_mime_type: str = "image/png"

    relay_url: str = "http://127.0.0.1:8000/api/extract"
    cors_origins: List[str] = ["*"]

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        extra="ignore", env_file=os.getenv("ENV_FILE", ".env"), env_file_encoding="utf-8"
    )


@lru_cache
def get_settings() -> Settings:
    """
    Process-wide settings instance.

    Used as a FastAPI dependency so tests can swap it out through
    ``app.dependency_overrides``.
    """
    return Settings()


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
