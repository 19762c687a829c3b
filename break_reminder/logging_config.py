"""Logging setup.

While the Textual UI owns the terminal, records go to textual's devtools
console (`textual console`) and optionally to a file.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from textual.logging import TextualHandler

LOGGER_NAME = "break_reminder"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """Configure the package logger.

    Args:
        level: Level name or number.
        log_file: Also append records to this file.

    Returns:
        The configured package logger.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    # avoid duplicate handlers when called twice
    logger.handlers.clear()
    logger.propagate = False

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    textual_handler = TextualHandler()
    textual_handler.setFormatter(formatter)
    logger.addHandler(textual_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
