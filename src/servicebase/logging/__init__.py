"""
Structured logging module.

Provides JSON and console formatters and a factory for standalone loggers.
"""

from servicebase.logging.formatters import ConsoleFormatter, JSONFormatter
from servicebase.logging.setup import (
    DEFAULT_LOGGER_LEVEL,
    DEFAULT_LOGGER_NAME,
    get_logger,
    new_logger,
)

__all__ = [
    # Setup
    "new_logger",
    "get_logger",
    "DEFAULT_LOGGER_LEVEL",
    "DEFAULT_LOGGER_NAME",
    # Formatters
    "JSONFormatter",
    "ConsoleFormatter",
]
