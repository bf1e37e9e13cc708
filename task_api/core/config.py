"""
Configuration helpers for the task API.

Settings are read from environment variables once and cached, so that
routers/services/storage never fetch os.environ directly.
"""

from dataclasses import dataclass
from functools import lru_cache
import os


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    database_directory: str
    database_filename: str
    log_level: str
    default_page_limit: int
    max_page_limit: int


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        database_directory=os.getenv("TASKS_DB_DIR") or os.getcwd(),
        database_filename=os.getenv("TASKS_DB_FILE") or "db.json",
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        default_page_limit=max(1, _int(os.getenv("TASKS_DEFAULT_LIMIT", "10"), 10)),
        max_page_limit=max(1, _int(os.getenv("TASKS_MAX_LIMIT", "100"), 100)),
    )
