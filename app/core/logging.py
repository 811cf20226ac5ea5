"""
Logging setup shared by every module.

Usage::

    from app.core.logging import get_logger

    logger = get_logger(__name__)
"""

import logging
import sys

from app.core.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

_configured = False


def setup_logging(level: str | None = None) -> None:
    """Configure the root logger once. Later calls only adjust the level."""
    global _configured

    log_level = (level or settings.LOG_LEVEL).upper()
    root = logging.getLogger()

    if not _configured:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
        # SQL echo is controlled by DATABASE_ECHO, keep the engine logger quiet
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
        _configured = True

    root.setLevel(log_level)


def get_logger(name: str) -> logging.Logger:
    setup_logging()
    return logging.getLogger(name)
