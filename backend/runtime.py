"""Runtime utilities for ensuring directories and shared paths."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Dict

PROJECT_ROOT = Path(__file__).resolve().parent.parent
LOGS_DIR = PROJECT_ROOT / "logs"


def logs_dir() -> Path:
    override = os.getenv("AWARDSCOPE_LOG_DIR")
    return Path(override).expanduser() if override else LOGS_DIR


def ensure_runtime_directories() -> Dict[str, Path]:
    """Ensure the log directory exists and return useful paths."""
    log_path = logs_dir()
    log_path.mkdir(parents=True, exist_ok=True)
    return {
        "root": PROJECT_ROOT,
        "logs": log_path,
    }


__all__ = [
    "PROJECT_ROOT",
    "LOGS_DIR",
    "logs_dir",
    "ensure_runtime_directories",
]
