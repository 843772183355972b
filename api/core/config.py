"""
Process settings, read once from the environment at startup.
"""

from __future__ import annotations

import os
from dataclasses import dataclass


DEFAULT_PORT = 5000
DEFAULT_POOL_MAX_SIZE = 20
DEFAULT_IDLE_TIMEOUT_S = 30.0
DEFAULT_ACQUIRE_TIMEOUT_S = 2.0


def _env_str(name: str, default: str = "") -> str:
    return os.environ.get(name, default).strip() or default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


_LOG_LEVEL_ALIASES = {"WARN": "WARNING", "FATAL": "CRITICAL"}
_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def _log_level(name: str, default: str) -> str:
    """
    A level name both `logging` and uvicorn accept; unknown values fall back to `default`.
    """
    level = _env_str(name, default).upper()
    level = _LOG_LEVEL_ALIASES.get(level, level)
    return level if level in _LOG_LEVELS else default


def _env_list(name: str, default: list[str]) -> list[str]:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    app_env: str = "production"
    log_level: str = "INFO"
    cors_origins: tuple[str, ...] = ("*",)

    database_url: str = ""
    database_user: str = ""
    database_host: str = ""
    database_name: str = ""
    database_password: str = ""
    database_port: int | None = None

    pool_max_size: int = DEFAULT_POOL_MAX_SIZE
    pool_idle_timeout_s: float = DEFAULT_IDLE_TIMEOUT_S
    acquire_timeout_s: float = DEFAULT_ACQUIRE_TIMEOUT_S

    @property
    def is_development(self) -> bool:
        return self.app_env.lower() == "development"


def load_settings() -> Settings:
    port = _env_int("DATABASE_PORT", 0)
    return Settings(
        host=_env_str("HOST", "0.0.0.0"),
        port=_env_int("PORT", DEFAULT_PORT),
        app_env=_env_str("APP_ENV", "production"),
        log_level=_log_level("LOG_LEVEL", "INFO"),
        cors_origins=tuple(_env_list("CORS_ORIGINS", ["*"])),
        database_url=_env_str("DATABASE_URL"),
        database_user=_env_str("DATABASE_USER"),
        database_host=_env_str("DATABASE_HOST"),
        database_name=_env_str("DATABASE_NAME"),
        database_password=os.environ.get("DATABASE_PASSWORD", ""),
        database_port=port if port > 0 else None,
        pool_max_size=max(1, _env_int("DATABASE_POOL_MAX", DEFAULT_POOL_MAX_SIZE)),
        pool_idle_timeout_s=_env_float("DATABASE_IDLE_TIMEOUT", DEFAULT_IDLE_TIMEOUT_S),
        acquire_timeout_s=_env_float("DATABASE_ACQUIRE_TIMEOUT", DEFAULT_ACQUIRE_TIMEOUT_S),
    )
