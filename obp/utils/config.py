"""Environment-driven settings for the pricing engine."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


@dataclass(frozen=True)
class Settings:
    app_name: str
    app_version: str
    log_level: str
    default_locale: str
    combination_warning_threshold: int
    default_rounding_rule: str
    default_child_age_group: str


@lru_cache
def get_settings() -> Settings:
    """Read settings once per process; call ``get_settings.cache_clear()`` to reload."""
    return Settings(
        app_name=os.getenv("OBP_APP_NAME", "Occupancy Based Pricing Engine"),
        app_version="1.0.0",
        log_level=os.getenv("OBP_LOG_LEVEL", "INFO"),
        default_locale=os.getenv("OBP_DEFAULT_LOCALE", "tr"),
        combination_warning_threshold=_env_int("OBP_COMBINATION_WARNING_THRESHOLD", 300),
        default_rounding_rule=os.getenv("OBP_DEFAULT_ROUNDING_RULE", "none"),
        default_child_age_group=os.getenv("OBP_DEFAULT_CHILD_AGE_GROUP", "first"),
    )
