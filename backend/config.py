"""Environment-driven settings for AwardScope."""
from __future__ import annotations

import logging
import os
from typing import Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_UPSTREAM_URL = "https://api.usaspending.gov/api/v2"
DEFAULT_TIMEOUT_SECONDS = 60.0
DEFAULT_RETRIES = 0


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r; using %s", name, raw, default)
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r; using %s", name, raw, default)
        return default


def _env_log_level(name: str, default: Optional[int] = logging.INFO) -> Optional[int]:
    raw = (os.getenv(name) or "").strip().upper()
    if not raw:
        return default
    level = logging.getLevelName(raw)
    if isinstance(level, int):
        return level
    logger.warning("Ignoring unknown %s=%r", name, raw)
    return default


class Settings(BaseModel):
    """Settings for the upstream client and logging.

    Environment variables:
        AWARDSCOPE_UPSTREAM_URL: USAspending API base URL
        AWARDSCOPE_UPSTREAM_TIMEOUT: seconds to wait for each upstream call
        AWARDSCOPE_UPSTREAM_RETRIES: retries on 5xx/connection errors (default 0)
        AWARDSCOPE_LOG_LEVEL: logging level name (default INFO)
        AWARDSCOPE_UPSTREAM_LOG_LEVEL: level for upstream.log (defaults to the log level)
    """

    upstream_url: str = DEFAULT_UPSTREAM_URL
    upstream_timeout: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)
    upstream_retries: int = Field(default=DEFAULT_RETRIES, ge=0)
    log_level: int = logging.INFO
    upstream_log_level: Optional[int] = None

    @classmethod
    def from_env(cls, upstream_url: Optional[str] = None) -> "Settings":
        timeout = _env_float("AWARDSCOPE_UPSTREAM_TIMEOUT", DEFAULT_TIMEOUT_SECONDS)
        retries = _env_int("AWARDSCOPE_UPSTREAM_RETRIES", DEFAULT_RETRIES)
        return cls(
            upstream_url=(upstream_url or os.getenv("AWARDSCOPE_UPSTREAM_URL") or DEFAULT_UPSTREAM_URL).rstrip("/"),
            upstream_timeout=timeout if timeout > 0 else DEFAULT_TIMEOUT_SECONDS,
            upstream_retries=max(retries, 0),
            log_level=_env_log_level("AWARDSCOPE_LOG_LEVEL"),
            upstream_log_level=_env_log_level("AWARDSCOPE_UPSTREAM_LOG_LEVEL", default=None),
        )


__all__ = ["Settings", "DEFAULT_UPSTREAM_URL", "DEFAULT_TIMEOUT_SECONDS", "DEFAULT_RETRIES"]
