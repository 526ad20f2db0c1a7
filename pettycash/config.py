"""Configuration for the petty cash tracker.

Paths and defaults live here so the store, the app and the tests agree on
them. Environment variables override the file locations and log level.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

# Base project root - assumes this file is in pettycash/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

DATA_DIR = Path(os.getenv("PETTYCASH_DATA_DIR", _PROJECT_ROOT / "data"))
DATA_FILE = Path(os.getenv("PETTYCASH_DATA_FILE", DATA_DIR / "expenses.json")).resolve()

LOG_LEVEL = os.getenv("PETTYCASH_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

PAGE_SIZE = 10
TOP_EXPENSES_LIMIT = 5
TREND_DAYS = 7


def ensure_data_directories() -> None:
    """Create the data directory if it doesn't exist."""
    DATA_FILE.parent.mkdir(parents=True, exist_ok=True)


def configure_logging(level: str | None = None) -> logging.Logger:
    """Attach a stream handler to the package logger once."""
    logger = logging.getLogger("pettycash")
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(level or LOG_LEVEL)
    return logger
