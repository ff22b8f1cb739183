"""
Structured logging helpers for neo-access.

Library modules obtain loggers with ``get_logger(__name__)`` and attach
context through ``extra={...}``. Nothing is emitted until the application
configures handlers, either itself or through ``configure_logging``.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

ROOT_LOGGER_NAME = "neo_access"
DEFAULT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger under the ``neo_access`` namespace.

    Args:
        name: Module name (usually ``__name__``)

    Returns:
        Logger instance
    """
    if not name or name == ROOT_LOGGER_NAME:
        return logging.getLogger(ROOT_LOGGER_NAME)
    if not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def configure_logging(
    level: Union[int, str] = logging.INFO,
    fmt: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """
    Attach a stream handler to the package logger.

    Calling it again replaces the handler installed previously, so it is
    safe to call from application entry points and tests.
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(root.handlers):
        if getattr(handler, "_neo_access_handler", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt))
    handler._neo_access_handler = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    set_level(level)
    return root


def set_level(level: Union[int, str]) -> None:
    """Set the package log level ("DEBUG", "INFO", ... or an int)."""
    if isinstance(level, str):
        level = level.upper()
    logging.getLogger(ROOT_LOGGER_NAME).setLevel(level)
