"""Application configuration helpers."""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


class ConfigError(RuntimeError):
    """Raised when mandatory configuration is missing."""


@dataclass(frozen=True)
class Settings:
    google_api_key: str
    sheet_id: str
    sheet_index: int = 0
    table_index: int = 0
    worker_port: int = 9000
    max_workers: int = 8
    data_cache_seconds: int = 60


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from environment variables with sensible defaults."""
    load_dotenv()

    google_api_key = os.getenv("GOOGLE_API_KEY", "")
    sheet_id = os.getenv("SHEET_ID", "")
    sheet_index = int(os.getenv("SHEET_INDEX", "0"))
    table_index = int(os.getenv("TABLE_INDEX", "0"))
    worker_port = int(os.getenv("WORKER_PORT", "9000"))
    max_workers = int(os.getenv("WORKER_MAX_WORKERS", "8"))
    data_cache_seconds = int(os.getenv("DATA_CACHE_SECONDS", "60"))

    if not google_api_key:
        logger.warning("GOOGLE_API_KEY is not configured; Google API requests will fail.")
    if not sheet_id:
        logger.warning("SHEET_ID is not set; the dataset cannot be built.")

    return Settings(
        google_api_key=google_api_key,
        sheet_id=sheet_id,
        sheet_index=sheet_index,
        table_index=table_index,
        worker_port=worker_port,
        max_workers=max(1, max_workers),
        data_cache_seconds=data_cache_seconds,
    )


def require_settings() -> Settings:
    """Return settings, failing fast when the sheet cannot be reached."""
    settings = get_settings()
    if not settings.google_api_key:
        raise ConfigError("GOOGLE_API_KEY must be set to read the sheet and look up places.")
    if not settings.sheet_id:
        raise ConfigError("SHEET_ID must be set to locate the source spreadsheet.")
    return settings
