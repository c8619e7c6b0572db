"""Logging configuration for the mapping layer."""

import logging
import sys
from enum import Enum

ROOT_LOGGER_NAME = "odm"


class LogLevel(Enum):
    """Logging level enumeration."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def setup_logging(
    level: str | LogLevel = LogLevel.INFO,
    format_string: str | None = None,
    include_timestamp: bool = True,
) -> logging.Logger:
    """Configure a stdout handler for the `odm` logger hierarchy.

    Unlike a root-level configuration, this leaves the host application's own
    logging untouched.

    Args:
        level: Logging level as string or LogLevel enum
        format_string: Custom format string (optional)
        include_timestamp: Whether to include timestamps in logs

    Returns:
        The `odm` logger

    """
    level_str = level.value if isinstance(level, LogLevel) else level.upper()
    numeric_level = getattr(logging, level_str, logging.INFO)

    if format_string is None:
        if include_timestamp:
            format_string = "%(asctime)s  %(name)s  %(levelname)s  %(message)s"
        else:
            format_string = "%(name)s  %(levelname)s  %(message)s"

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(format_string, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(handler)
    logger.setLevel(numeric_level)
    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a specific module.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance

    """
    return logging.getLogger(name)
