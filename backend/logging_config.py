"""Central logging configuration for AwardScope.

Application records go to the console and ``app.log``. Upstream traffic from
``backend.connectors`` is split into ``upstream.log`` with its own level, so
payload-level debugging of the USAspending calls does not flood the app log.
"""
from __future__ import annotations

import logging
from logging.config import dictConfig
from pathlib import Path
from typing import Any, Dict, Optional

from backend.runtime import ensure_runtime_directories

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
MAX_LOG_BYTES = 5 * 1024 * 1024
LOG_BACKUPS = 3
UPSTREAM_LOGGER = "backend.connectors"
QUIET_LOGGERS = ("urllib3",)


def _rotating(path: Path, level: int) -> Dict[str, Any]:
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "formatter": "standard",
        "level": level,
        "filename": str(path),
        "maxBytes": MAX_LOG_BYTES,
        "backupCount": LOG_BACKUPS,
        "encoding": "utf-8",
    }


def configure_logging(level: int = logging.INFO, upstream_level: Optional[int] = None) -> Dict[str, Path]:
    """Configure console and rotating file logging; returns the runtime paths.

    ``upstream_level`` defaults to ``level``. The returned mapping adds
    ``app_log`` and ``upstream_log`` to the runtime directories.
    """
    upstream_level = level if upstream_level is None else upstream_level
    paths = dict(ensure_runtime_directories())
    paths["app_log"] = paths["logs"] / "app.log"
    paths["upstream_log"] = paths["logs"] / "upstream.log"

    loggers: Dict[str, Any] = {
        UPSTREAM_LOGGER: {
            "handlers": ["upstream_file", "console"],
            "level": min(level, upstream_level),
            "propagate": False,
        },
    }
    # Retry chatter from the HTTP pool is only interesting when it fails.
    for name in QUIET_LOGGERS:
        loggers[name] = {"level": max(level, logging.WARNING)}

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"standard": {"format": LOG_FORMAT}},
            "handlers": {
                "console": {"class": "logging.StreamHandler", "formatter": "standard", "level": level},
                "app_file": _rotating(paths["app_log"], level),
                "upstream_file": _rotating(paths["upstream_log"], upstream_level),
            },
            "root": {"handlers": ["console", "app_file"], "level": level},
            "loggers": loggers,
        }
    )
    return paths


__all__ = ["configure_logging", "UPSTREAM_LOGGER"]
