"""Logger construction."""

import functools
import io
import logging
import sys
from typing import BinaryIO, TextIO

from servicebase.logging.formatters import ConsoleFormatter, JSONFormatter

DEFAULT_LOGGER_NAME = "servicebase"
DEFAULT_LOGGER_LEVEL = logging.INFO


@functools.cache
def _utf8_writer(buffer: BinaryIO) -> TextIO:
    # One wrapper per buffer: a discarded wrapper closes the buffer it wraps
    return io.TextIOWrapper(buffer, encoding="utf-8", errors="replace")


def _default_stream() -> TextIO:
    if sys.platform == "win32":
        return _utf8_writer(sys.stdout.buffer)
    return sys.stdout


def new_logger(
    name: str = DEFAULT_LOGGER_NAME,
    level: int | str = DEFAULT_LOGGER_LEVEL,
    stream: TextIO | None = None,
    json_format: bool = True,
) -> logging.Logger:
    """
    Create a standalone logger that writes one record per line to a stream.

    The logger is not registered with the logging module's global manager
    and does not propagate to the root logger, so creating one never
    changes process-wide logging configuration and two calls never share
    handlers.

    Args:
        name: Logger name, emitted as the ``logger`` field
        level: Minimum level (default: INFO)
        stream: Output stream (default: stdout)
        json_format: JSON lines when True, console format otherwise

    Returns:
        Configured logger instance
    """
    logger = logging.Logger(name)
    logger.setLevel(level)
    logger.propagate = False

    handler = logging.StreamHandler(stream if stream is not None else _default_stream())
    handler.setFormatter(JSONFormatter() if json_format else ConsoleFormatter())
    logger.addHandler(handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a module logger.

    Library modules log through the standard hierarchy so applications
    can route or silence them with their own logging configuration.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
