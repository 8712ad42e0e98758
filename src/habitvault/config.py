"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {value!r}") from exc


class BaseConfig:
    """Environment-driven settings for the CLI and library."""

    DB_FILENAME = "habitvault.db"
    LOG_FILENAME = "habitvault.log"

    def __init__(self) -> None:
        self.DEV_MODE = _env_bool("HABITVAULT_DEV_MODE", default=True)
        self.DATA_DIR = self._resolve_data_dir()
        self.DATABASE_URL = os.getenv("HABITVAULT_DATABASE_URL", self._build_sqlite_url())
        self.USER_ID = _env_int("HABITVAULT_USER_ID", default=1)
        self.DEFAULT_WINDOW = os.getenv("HABITVAULT_ANALYTICS_WINDOW", "week").strip().lower()
        default_level = "DEBUG" if self.DEV_MODE else "INFO"
        self.LOG_LEVEL = os.getenv("HABITVAULT_LOG_LEVEL", default_level).strip().upper()
        if self.LOG_LEVEL not in _LOG_LEVELS:
            raise ValueError(
                f"HABITVAULT_LOG_LEVEL must be one of {sorted(_LOG_LEVELS)}, got {self.LOG_LEVEL!r}"
            )

    def _resolve_data_dir(self) -> Path:
        """Return the directory holding the SQLite file, logs and exports."""

        data_root = os.getenv("HABITVAULT_DATA_DIR", "instance")
        path = Path(data_root).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _build_sqlite_url(self) -> str:
        return f"sqlite:///{self.DATA_DIR / self.DB_FILENAME}"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        if self.DATABASE_URL.startswith("sqlite"):
            return {"connect_args": {"check_same_thread": False}}
        return {}


__all__ = ["BaseConfig"]
