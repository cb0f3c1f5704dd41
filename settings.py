from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Tuple


_STORE_NAME_ENV = "BINLYTICS_STORE_NAME"
_STORE_PATH_ENV = "BINLYTICS_STORE_PATH"
_TIMEZONE_ENV = "BINLYTICS_TIMEZONE"
_RECENT_LIMIT_ENV = "BINLYTICS_RECENT_LIMIT"
_CORS_ORIGINS_ENV = "BINLYTICS_CORS_ORIGINS"
_LOG_LEVEL_ENV = "LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    store_name: str
    store_path: Optional[str]
    timezone: str
    recent_limit: int
    cors_origins: Tuple[str, ...]
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_positive_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_origins(default: Tuple[str, ...]) -> Tuple[str, ...]:
    value = os.getenv(_CORS_ORIGINS_ENV)
    if value is None:
        return default
    origins = tuple(part.strip() for part in value.split(",") if part.strip())
    return origins or default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        store_name=_read_str_env(_STORE_NAME_ENV, "readings"),
        store_path=_read_optional_env(_STORE_PATH_ENV, "./tmp/readings.json"),
        timezone=_read_str_env(_TIMEZONE_ENV, "UTC"),
        recent_limit=_read_positive_int(_RECENT_LIMIT_ENV, 50),
        cors_origins=_read_origins(("*",)),
        log_level=_read_log_level("INFO"),
    )
