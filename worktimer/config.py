from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import IoFailure

logger = logging.getLogger(__name__)

FALLBACK_DATA_DIR = Path("./data")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="WORKTIMER_", env_file=".env", case_sensitive=False, extra="ignore")
    """Runtime configuration shared by the CLI and the interactive editor."""

    app_name: str = "work-tuimer"
    data_dir: Optional[Path] = None
    poll_interval_ms: int = Field(default=500, ge=50)
    history_depth: int = Field(default=50, ge=1)
    log_level: str = "WARNING"

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        if not value:
            return "WARNING"
        level = str(value).strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level

    @field_validator("data_dir", mode="before")
    @classmethod
    def _empty_data_dir(cls, value: Optional[str]) -> Optional[str]:
        if isinstance(value, str) and not value.strip():
            return None
        return value


def platform_data_dir() -> Optional[Path]:
    """Return the per-user data directory of the current platform, if known."""
    if sys.platform.startswith("win"):
        base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA")
        return Path(base) if base else None
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support"
    xdg = os.environ.get("XDG_DATA_HOME")
    if xdg:
        return Path(xdg)
    try:
        return Path.home() / ".local" / "share"
    except RuntimeError:
        return None


def resolve_data_dir(config: Optional[Settings] = None) -> Path:
    """Pick and create the directory holding day files and the timer file.

    An explicit ``data_dir`` wins. Otherwise the platform data directory
    joined with ``app_name`` is used, and ``./data`` when that cannot be
    created.
    """
    config = config or settings
    if config.data_dir is not None:
        return ensure_dir(config.data_dir)

    base = platform_data_dir()
    if base is not None:
        candidate = base / config.app_name
        try:
            candidate.mkdir(parents=True, exist_ok=True)
            return candidate
        except OSError as exc:
            logger.warning("Cannot use data directory %s (%s), falling back to %s", candidate, exc, FALLBACK_DATA_DIR)

    return ensure_dir(FALLBACK_DATA_DIR)


def ensure_dir(path: Path) -> Path:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise IoFailure(f"Failed to create data directory: {path}", path=path) from exc
    return path


settings = Settings()
