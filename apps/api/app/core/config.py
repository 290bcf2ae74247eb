from __future__ import annotations

"""Configuration helpers and environment-driven settings."""

import os
from dataclasses import dataclass
from functools import lru_cache


def _get_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, default))
    except ValueError:
        return default


def _get_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except ValueError:
        return default


def _get_str(name: str, default: str) -> str:
    return os.getenv(name, default)


@dataclass(frozen=True)
class Settings:
    """Typed configuration values used across the mock backend."""

    host: str
    port: int
    db_path: str
    location_strategy: str
    origin_lat: float
    origin_lng: float
    jitter_degrees: float
    default_points: int
    cors_origins: list[str]
    log_level: str


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from environment with defaults."""
    cors_raw = _get_str("CORS_ORIGINS", "*")
    cors_origins = [o.strip() for o in cors_raw.split(",") if o.strip()]
    if not cors_origins:
        cors_origins = ["*"]
    return Settings(
        host=_get_str("HOST", "0.0.0.0"),
        port=_get_int("PORT", 10000),
        db_path=_get_str("DB_PATH", "data/db.json"),
        location_strategy=_get_str("LOCATION_STRATEGY", "route"),
        origin_lat=_get_float("ORIGIN_LAT", 36.7538),
        origin_lng=_get_float("ORIGIN_LNG", 3.0588),
        jitter_degrees=_get_float("JITTER_DEGREES", 0.0004),
        default_points=_get_int("DEFAULT_POINTS", 10),
        cors_origins=cors_origins,
        log_level=_get_str("LOG_LEVEL", "INFO").upper(),
    )
