"""Environment-driven settings for the feedback service."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Tuple


_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """Runtime configuration collected from environment variables.

    Attributes:
        database_dir: Directory holding the SQLite file (`DATABASE_DIR`).
        database_reset: Delete and recreate the database on startup (`DATABASE_RESET`).
        ws_idle_timeout: Seconds without an inbound frame before a websocket is
            treated as lost (`WS_IDLE_TIMEOUT`, 0 disables).
        cors_origins: Allowed origins for the HTTP routes (`CORS_ORIGINS`).
        log_level: Root logging level name (`LOG_LEVEL`).
    """

    database_dir: Path
    database_reset: bool = False
    ws_idle_timeout: float = 60.0
    cors_origins: Tuple[str, ...] = field(default_factory=lambda: ("*",))
    log_level: str = "INFO"


def _read_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name}={raw!r} is not a number") from exc
    if value < 0:
        raise RuntimeError(f"{name}={raw!r} must not be negative")
    return value


def load_settings() -> Settings:
    """Build a `Settings` instance from the current environment.

    Raises:
        RuntimeError: If DATABASE_DIR is missing or a numeric value is invalid.
    """
    env_dir = os.getenv("DATABASE_DIR")
    if env_dir is None or not env_dir.strip():
        raise RuntimeError(
            "DATABASE_DIR environment variable must be set to a writable "
            "directory path where the SQLite database file will be stored."
        )

    origins = tuple(
        origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()
    ) or ("*",)

    return Settings(
        database_dir=Path(env_dir).expanduser(),
        database_reset=os.getenv("DATABASE_RESET", "false").strip().lower() in _TRUTHY,
        ws_idle_timeout=_read_float("WS_IDLE_TIMEOUT", 60.0),
        cors_origins=origins,
        log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO",
    )
