"""Logging configuration for elementfinder.

Library modules only create loggers; applications (or tests) call
``configure_logging`` to attach a handler to the package logger.
"""

import logging
from typing import Optional, Union

from .custom_levels import TRACE_LEVEL_NUMBER

PACKAGE_LOGGER = "elementfinder"
LOG_PREFIX = "[ElementFinder]"


class PrefixFormatter(logging.Formatter):
    """Formatter that tags every record with the package prefix.

    Records carrying ``exc_info`` for an ``ElementFinderError`` are rendered
    on one line with the error details instead of a full traceback.
    """

    def __init__(self, fmt: Optional[str] = None, prefix: str = LOG_PREFIX):
        super().__init__(fmt or "%(asctime)s %(levelname)s %(name)s: %(message)s")
        self._prefix = prefix

    def format(self, record: logging.LogRecord) -> str:
        from elementfinder.exceptions import ElementFinderError

        if record.exc_info and isinstance(record.exc_info[1], ElementFinderError):
            exc = record.exc_info[1]
            record = logging.makeLogRecord(record.__dict__)
            record.msg = f"{record.getMessage()} ({exc.message}; details={exc.details})"
            record.args = None
            record.exc_info = None
            record.exc_text = None
        return f"{self._prefix} {super().format(record)}"


def configure_logging(
    level: Union[int, str] = logging.INFO,
    debug: bool = False,
    handler: Optional[logging.Handler] = None,
) -> logging.Logger:
    """Attach a prefixed handler to the package logger.

    Args:
        level: Log level for the package logger
        debug: When True, lower the level to TRACE to log every match
        handler: Handler to install (defaults to a StreamHandler)

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    if debug:
        level = TRACE_LEVEL_NUMBER
    logger.setLevel(level)

    # Replace handlers we installed earlier so repeated calls stay idempotent
    for existing in list(logger.handlers):
        if getattr(existing, "_elementfinder_handler", False):
            logger.removeHandler(existing)

    handler = handler or logging.StreamHandler()
    handler.setFormatter(PrefixFormatter())
    handler._elementfinder_handler = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    return logger


__all__ = [
    "PrefixFormatter",
    "configure_logging",
    "PACKAGE_LOGGER",
    "LOG_PREFIX",
]
