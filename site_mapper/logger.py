# File: site_mapper/logger.py
"""
Logging for SiteMapper.

Every module logs through the ``SiteMapper`` logger. It writes to stdout and,
when the CLI is given ``--log-file``, also to a size-rotated file. Calling
:func:`init_logging` again swaps the handlers, which is how the CLI applies
its ``--log-*`` options after import.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, Optional, Union

LOGGER_NAME: Final[str] = "SiteMapper"
DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# rotate crawl logs at 5 MB, keep three old files
LOG_FILE_MAX_BYTES: Final[int] = 5 * 1024 * 1024
LOG_FILE_BACKUPS: Final[int] = 3


def init_logging(
    level: Union[int, str] = "INFO",
    log_file: Optional[Union[str, Path]] = None,
    log_format: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """Point the SiteMapper logger at stdout (and ``log_file``) with ``level``."""
    crawl_logger = logging.getLogger(LOGGER_NAME)
    crawl_logger.setLevel(level)
    crawl_logger.propagate = False

    for old in list(crawl_logger.handlers):
        crawl_logger.removeHandler(old)
        old.close()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        handlers.append(
            RotatingFileHandler(
                log_file,
                maxBytes=LOG_FILE_MAX_BYTES,
                backupCount=LOG_FILE_BACKUPS,
                encoding="utf-8",
            )
        )
    formatter = logging.Formatter(log_format)
    for handler in handlers:
        handler.setFormatter(formatter)
        crawl_logger.addHandler(handler)
    return crawl_logger


logger: logging.Logger = init_logging()

__all__ = ["logger", "init_logging", "LOGGER_NAME", "DEFAULT_FORMAT"]
