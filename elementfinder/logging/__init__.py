"""Logging helpers: the TRACE level and package logger configuration."""

from .config import LOG_PREFIX, PACKAGE_LOGGER, PrefixFormatter, configure_logging
from .custom_levels import (
    TRACE_LEVEL_NUMBER,
    add_custom_log_level,
    trace,
)

__all__ = [
    "configure_logging",
    "PrefixFormatter",
    "PACKAGE_LOGGER",
    "LOG_PREFIX",
    "add_custom_log_level",
    "trace",
    "TRACE_LEVEL_NUMBER",
]
