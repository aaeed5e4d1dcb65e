# app/utils/logger.py
"""
Logging setup shared by every module: one console handler and one size-rotated
file handler on the root logger, configured on the first get_logger() call.
Level, directory, file name and rotation come from settings (LOG_*).
"""

import logging
import os
from logging.handlers import RotatingFileHandler

from app.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that log every HTTP request/retry at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "openai")

_configured = False


def log_path() -> str:
    log_dir = settings.LOG_DIR or os.path.join(
        os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))), "logs"
    )
    return os.path.join(log_dir, settings.LOG_FILE)


def _configure_root_logger():
    global _configured
    if _configured:
        return
    _configured = True

    level = settings.LOG_LEVEL.upper()
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    path = log_path()
    os.makedirs(os.path.dirname(path), exist_ok=True)

    handlers = [
        logging.StreamHandler(),
        RotatingFileHandler(
            filename=path,
            maxBytes=settings.LOG_MAX_BYTES,
            backupCount=settings.LOG_BACKUP_COUNT,
            encoding="utf-8",
        ),
    ]

    root = logging.getLogger()
    root.setLevel(level)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Named logger; call at module top level."""
    _configure_root_logger()
    return logging.getLogger(name)
