"""
Process settings and logging setup.

Values load from environment variables prefixed LEAGUEKIT_ (or a .env file),
e.g. LEAGUEKIT_DATABASE_PATH=/var/lib/leaguekit/app.db.
"""
from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_db_path() -> Path:
    return Path(__file__).resolve().parent.parent / "data" / "leaguekit.db"


class Settings(BaseSettings):
    """Runtime configuration for the API process and scripts."""

    model_config = SettingsConfigDict(
        env_prefix="LEAGUEKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    database_path: Path = _default_db_path()
    log_level: str = "INFO"
    # Seed the built-in sport templates when the API starts
    seed_templates: bool = True
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]


@lru_cache
def get_settings() -> Settings:
    return Settings()


_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | int | None = None) -> None:
    """Install a root handler once; later calls only adjust the level."""
    if level is None:
        level = get_settings().log_level
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=_LOG_FORMAT)
    root.setLevel(level)
