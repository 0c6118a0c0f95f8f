"""
Logging utilities.

WHAT: One-time logging setup for the service, wizard and collaborator clients
WHY: Wizard transitions and collaborator failures must be traceable per conversation
HOW: Root logger with console + optional file handler, chatty HTTP loggers capped
"""

import logging
import sys
from pathlib import Path
from typing import Optional

from ..core.config import settings

CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(pathname)s:%(lineno)d - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# httpx logs every polled request at INFO; the watcher polls every few seconds
QUIET_LOGGERS = ("httpx", "httpcore", "sse_starlette")


def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """
    Configure application logging.

    WHAT: Attach console and file handlers to the root logger
    WHY: Wizard DEBUG transitions go to the file, warnings show on console
    HOW: Replace existing root handlers; an empty LOG_FILE disables the file handler

    Args:
        level: Override for settings.LOG_LEVEL
        log_file: Override for settings.LOG_FILE
    """
    level_name = (level or settings.LOG_LEVEL).upper()
    target = settings.LOG_FILE if log_file is None else log_file

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level_name, logging.INFO))
    root_logger.handlers.clear()

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(logging.INFO)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    root_logger.addHandler(console)

    if target:
        path = Path(target)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
        root_logger.addHandler(file_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    root_logger.info(f"Logging initialized (level={level_name}, file={target or 'disabled'})")


def get_logger(name: str) -> logging.Logger:
    """Module logger, e.g. get_logger(__name__)."""
    return logging.getLogger(name)
