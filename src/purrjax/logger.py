"""Package logger configuration."""

from __future__ import annotations

import logging
import sys

from .config import settings

__all__ = ["logger", "setup_logger"]


def setup_logger(
    name: str = "purrjax",
    level: str | None = None,
    format_string: str | None = None,
) -> logging.Logger:
    """
    Configure and return the package logger.

    Opt-in: importing purrjax only installs a ``NullHandler``, so records
    propagate to the application's logging config until this is called.

    Args:
        name: Logger name; module loggers under ``purrjax.`` propagate here.
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL). Defaults to
            ``PURRJAX_LOG_LEVEL``.
        format_string: Custom format string

    Returns:
        Configured logger instance
    """
    level = level or settings.log_level
    format_string = format_string or "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logger = logging.getLogger(name)

    # Only configure if not already configured
    if not [h for h in logger.handlers if not isinstance(h, logging.NullHandler)]:
        handler = logging.StreamHandler(sys.stderr)
        formatter = logging.Formatter(fmt=format_string, datefmt="%Y-%m-%d %H:%M:%S")
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(getattr(logging, level.upper()))
        logger.propagate = False

    return logger


logger = logging.getLogger("purrjax")
logger.addHandler(logging.NullHandler())
