"""
Typed readers for TIDEPOOL_* environment overrides.

Unset or blank variables yield the caller's default; so do values that fail
to parse, so a typo in the environment never stops a render.
"""
import logging
import os
from typing import Optional

_TRUTHY = frozenset({"1", "true", "t", "yes", "y", "on"})


def _raw(name: str) -> Optional[str]:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def env_bool(name: str, default: bool = False) -> bool:
    raw = _raw(name)
    return default if raw is None else raw.lower() in _TRUTHY


def env_str(name: str, default: str = "") -> str:
    raw = _raw(name)
    return default if raw is None else raw


def env_float(name: str, default: Optional[float] = None) -> Optional[float]:
    raw = _raw(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def env_log_level(name: str = "TIDEPOOL_LOG_LEVEL", default: int = logging.INFO) -> int:
    """
    Logging level from a name ("debug", "WARNING") or a number ("10").

    Unknown names fall back to `default`.
    """
    raw = _raw(name)
    if raw is None:
        return default
    if raw.isdigit():
        return int(raw)
    level = logging.getLevelName(raw.upper())
    return level if isinstance(level, int) else default
