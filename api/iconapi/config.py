from __future__ import annotations

import os
from dataclasses import dataclass

from iconapi.icons.cache import DEFAULT_CACHE_MAX_BYTES

DEFAULT_FETCH_TIMEOUT = 30.0


@dataclass(frozen=True)
class IconConfig:
    renderer_root: str
    cache_max_bytes: int
    fetch_timeout: float
    local_raster_recolor: bool
    publish_variants: bool


@dataclass(frozen=True)
class LoggingConfig:
    level: str
    log_file: str


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


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in {"1", "true", "yes", "on"}


def get_icon_config() -> IconConfig:
    return IconConfig(
        renderer_root=_env_str("ICON_RENDERER_ROOT").rstrip("/"),
        cache_max_bytes=max(_env_int("ICON_CACHE_MAX_BYTES", DEFAULT_CACHE_MAX_BYTES), 0),
        fetch_timeout=_env_float("ICON_FETCH_TIMEOUT", DEFAULT_FETCH_TIMEOUT),
        local_raster_recolor=_env_flag("ICON_LOCAL_RASTER_RECOLOR"),
        publish_variants=_env_flag("ICON_PUBLISH_VARIANTS"),
    )


def get_logging_config() -> LoggingConfig:
    return LoggingConfig(
        level=_env_str("LOG_LEVEL", "INFO"),
        log_file=_env_str("LOG_FILE"),
    )
