"""
Logging setup for the monitor process.
"""

from __future__ import annotations

import logging
import os
from typing import Iterable

# Third-party loggers that flood INFO with per-request/per-inference lines.
NOISY_LOGGERS = ("ultralytics", "uvicorn.access", "httpx")


def setup_logging(
    log_path: str,
    log_level: str,
    quiet: Iterable[str] = NOISY_LOGGERS,
) -> None:
    """
    Log to both the log file and stderr.

    Args:
        log_path: File to append to; parent directories are created.
        log_level: Standard level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        quiet: Logger names raised to WARNING unless running at DEBUG.
    """
    level = getattr(logging, str(log_level).upper(), None)
    if not isinstance(level, int):
        raise ValueError(f"Invalid log_level: {log_level}")

    log_dir = os.path.dirname(log_path)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.FileHandler(log_path),
            logging.StreamHandler(),
        ],
        force=True,
    )

    if level > logging.DEBUG:
        for name in quiet:
            logging.getLogger(name).setLevel(logging.WARNING)
