"""Custom log level utilities for elementfinder logging.

Traversals can touch thousands of nodes; per-node chatter ("match found
for node 42") is logged at a dedicated TRACE level below DEBUG so it can
be enabled independently of ordinary debug output.
"""

import logging
from typing import Any, Optional


def add_custom_log_level(
    level_name: str, level_number: int, method_name: Optional[str] = None
) -> int:
    """Add a custom log level to Python's logging system.

    Registers the level name with the logging module and adds a matching
    method to the Logger class.

    Args:
        level_name: Name of the log level (e.g., "TRACE")
        level_number: Numeric value for the level (DEBUG is 10)
        method_name: Optional Logger method name, defaults to level_name.lower()

    Returns:
        The level number that was registered

    Raises:
        ValueError: If the name is already registered with another number

    Note:
        Calling this repeatedly with the same name and number is safe.
    """
    if method_name is None:
        method_name = level_name.lower()

    existing_level = logging.getLevelName(level_name)
    if existing_level != f"Level {level_name}":
        if existing_level == level_number:
            return level_number
        raise ValueError(
            f"Log level '{level_name}' already exists with number {existing_level}"
        )

    logging.addLevelName(level_number, level_name)
    setattr(logging, level_name, level_number)

    def log_for_level(self, message: str, *args: Any, **kwargs: Any) -> None:
        """Log a message at the custom level."""
        if self.isEnabledFor(level_number):
            self._log(level_number, message, args, **kwargs)

    setattr(logging.getLoggerClass(), method_name, log_for_level)

    return level_number


def trace(logger: logging.Logger, message: str, *args: Any) -> None:
    """Log ``message`` at TRACE level on ``logger``."""
    if logger.isEnabledFor(TRACE_LEVEL_NUMBER):
        logger.log(TRACE_LEVEL_NUMBER, message, *args)


TRACE_LEVEL_NUMBER = 5
add_custom_log_level("TRACE", TRACE_LEVEL_NUMBER)


__all__ = [
    "add_custom_log_level",
    "trace",
    "TRACE_LEVEL_NUMBER",
]
