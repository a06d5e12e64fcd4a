"""Opt-in file logging for sprite runs, driven by environment variables."""
from __future__ import annotations

import logging
import os
from pathlib import Path


logger = logging.getLogger(__name__)

DEBUG_ENV = "SPRITE_PAIRS_DEBUG"
DEBUG_LOG_ENV = "SPRITE_PAIRS_DEBUG_LOG"
DEFAULT_DEBUG_LOG = "sprite_pairs_debug.log"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

DEBUG_LOG_PATH: Path | None = None


def setup_debug_logging() -> Path | None:
    """Send DEBUG records to a log file when ``SPRITE_PAIRS_DEBUG`` is set.

    Returns the log path, or ``None`` when debug logging stays off.
    """

    global DEBUG_LOG_PATH
    if not os.environ.get(DEBUG_ENV):
        package_logger = logging.getLogger("sprite_pairs")
        if not package_logger.handlers:
            package_logger.addHandler(logging.NullHandler())
        return None
    log_path = Path(os.environ.get(DEBUG_LOG_ENV, DEFAULT_DEBUG_LOG))
    if not log_path.is_absolute():
        log_path = Path.cwd() / log_path
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    # drop file handlers from an earlier call so records are not duplicated
    for existing in [h for h in root_logger.handlers if isinstance(h, logging.FileHandler)]:
        root_logger.removeHandler(existing)
        existing.close()
    root_logger.addHandler(handler)
    DEBUG_LOG_PATH = log_path
    root_logger.info("sprite-pairs debug logging enabled at %s", log_path)
    return log_path
