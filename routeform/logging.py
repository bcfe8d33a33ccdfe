"""Logging for routeform.

All modules log through children of the ``routeform`` logger, which owns the
only handler. Levels are changed in one place with :func:`set_global_log_level`.
"""

import logging
import sys
from typing import Optional

PACKAGE_LOGGER = "routeform"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_configured = False


def _package_logger() -> logging.Logger:
    return logging.getLogger(PACKAGE_LOGGER)


def setup_root_logger(
    level: int = logging.INFO,
    format_string: Optional[str] = None,
    handler: Optional[logging.Handler] = None,
) -> None:
    """Install the package handler once.

    Later calls do nothing until :func:`reset_logging` runs.

    Args:
        level: Initial package level.
        format_string: Record format; ``DEFAULT_FORMAT`` if omitted.
        handler: Destination; a stdout stream handler if omitted.
    """
    global _configured
    if _configured:
        return

    package = _package_logger()
    package.handlers.clear()
    package.setLevel(level)

    handler = handler or logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(format_string or DEFAULT_FORMAT))
    package.addHandler(handler)
    # Records still reach the root logger (pytest caplog listens there)
    package.propagate = True

    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Module logger; its level is left unset so the package level applies."""
    setup_root_logger()
    logger = logging.getLogger(name)
    logger.setLevel(logging.NOTSET)
    return logger


def set_global_log_level(level: int) -> None:
    """Apply ``level`` to the package logger and its handlers."""
    setup_root_logger()
    package = _package_logger()
    package.setLevel(level)
    for handler in package.handlers:
        handler.setLevel(level)


def enable_debug_logging() -> None:
    set_global_log_level(logging.DEBUG)


def disable_debug_logging() -> None:
    """Back to INFO."""
    set_global_log_level(logging.INFO)


def reset_logging() -> None:
    """Drop the package handler and level; used by tests."""
    global _configured
    _configured = False
    package = _package_logger()
    package.handlers.clear()
    package.setLevel(logging.NOTSET)


setup_root_logger()
