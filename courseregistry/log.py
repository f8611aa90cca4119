"""
Logging setup for the courseregistry application.

All modules log through logging.getLogger(__name__), i.e. below the
"courseregistry" logger configured here.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOGGER_NAME = "courseregistry"


def setup_logging(level: str | int = logging.WARNING, log_file: Optional[Path] = None) -> logging.Logger:
    """
    Configure the "courseregistry" logger.

    Console output always goes to stderr, so it never mixes with command output.
    When `log_file` is given, a rotating file handler (1 MB, 3 backups) is added.
    Calling this again only updates the level.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Prevent adding handlers multiple times
    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(log_file, maxBytes=1024 * 1024, backupCount=3, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger
