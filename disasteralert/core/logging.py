"""
DisasterAlert - Logging Configuration
Centralized logging setup for the API and the enrichment providers.
"""

import logging
import sys
from typing import List, Optional
from functools import lru_cache

from disasteralert.core.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers kept at WARNING; PIL logs every EXIF tag at DEBUG
NOISY_LOGGERS = (
    "httpx",
    "httpcore",
    "google_genai",
    "sqlalchemy.engine",
    "PIL",
)


def setup_logging(
    level: Optional[str] = None,
    format_string: Optional[str] = None,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Configure and return the application logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_string: Custom format string for log messages
        log_file: Optional file that receives the same records as stdout

    Returns:
        Configured "disasteralert" logger
    """
    log_level = getattr(logging, (level or settings.log_level).upper())
    formatter = logging.Formatter(format_string or LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    log_file = log_file or settings.log_file
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(formatter)

    logger = logging.getLogger("disasteralert")
    logger.setLevel(log_level)
    # Repeated setup replaces the handlers instead of adding to them
    logger.handlers = handlers
    logger.propagate = False

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger


@lru_cache()
def get_logger(name: str = "disasteralert") -> logging.Logger:
    """
    Get a logger instance with the given name.

    Args:
        name: Logger name (typically module name)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
