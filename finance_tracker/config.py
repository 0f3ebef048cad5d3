"""Configuration management for the finance tracker.

This module centralizes all configuration values including paths,
defaults, and environment variable overrides.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

# Base project root - assumes this file is in finance_tracker/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

DATA_DIR = Path(os.getenv("FINTRACK_DATA_DIR", _PROJECT_ROOT / "data"))

# Snapshot file written through on every ledger mutation
DATA_FILE = Path(
    os.getenv("FINTRACK_DATA_FILE", DATA_DIR / "finance_tracker_data.json")
).resolve()

LOG_LEVEL = os.getenv("FINTRACK_LOG_LEVEL", "WARNING")
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging for scripts and embedding applications.

    Args:
        level: Level name such as ``"INFO"``. Defaults to ``FINTRACK_LOG_LEVEL``.
    """
    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format=LOG_FORMAT,
    )
