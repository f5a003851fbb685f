"""
Bootstrap configuration and defaulting.

Every field is optional. ``with_defaults()`` returns a fully populated
copy; explicitly supplied values pass through unchanged. Defaults are
created fresh on each call, never taken from process-wide singletons.

The transport and cookie jar defaults are aiohttp objects bound to the
running event loop, so ``with_defaults()`` must be called from a
coroutine.
"""

import logging
import os
from dataclasses import dataclass, field, replace
from datetime import timedelta

import aiohttp
from aiohttp.abc import AbstractCookieJar

from servicebase.logging.setup import DEFAULT_LOGGER_LEVEL, new_logger
from servicebase.timezone import DEFAULT_TIME_LOCATION

DEFAULT_HTTP_CLIENT_TIMEOUT = 10.0  # seconds


@dataclass(frozen=True)
class HTTPClientConfig:
    """HTTP client settings."""

    # Connection strategy; None means a standard aiohttp TCPConnector
    transport: aiohttp.BaseConnector | None = None
    # None means no cookie jar: cookies are neither stored nor sent
    cookie_jar: AbstractCookieJar | None = None
    # Whole-request timeout in seconds; zero or negative means the default
    timeout: float | timedelta = 0

    @property
    def timeout_seconds(self) -> float:
        if isinstance(self.timeout, timedelta):
            return self.timeout.total_seconds()
        return float(self.timeout)

    def with_defaults(self) -> "HTTPClientConfig":
        timeout = self.timeout_seconds
        return replace(
            self,
            transport=self.transport if self.transport is not None else aiohttp.TCPConnector(),
            cookie_jar=self.cookie_jar if self.cookie_jar is not None else aiohttp.DummyCookieJar(),
            timeout=timeout if timeout > 0 else DEFAULT_HTTP_CLIENT_TIMEOUT,
        )


@dataclass(frozen=True)
class Config:
    """
    Resources to initialise at startup.

    Attributes:
        logger: Logger to hand out. None creates a JSON logger at INFO
            writing to stdout.
        time_location: IANA zone name. Empty means UTC.
        http_client: HTTP client settings
        env_file: Optional dotenv file read underneath the process
            environment when loading environment variables
    """

    logger: logging.Logger | None = None
    time_location: str = ""
    http_client: HTTPClientConfig = field(default_factory=HTTPClientConfig)
    env_file: str | os.PathLike | None = None

    def with_defaults(self) -> "Config":
        return replace(
            self,
            logger=self.logger if self.logger is not None else new_logger(level=DEFAULT_LOGGER_LEVEL),
            time_location=self.time_location or DEFAULT_TIME_LOCATION,
            http_client=self.http_client.with_defaults(),
        )


__all__ = [
    "Config",
    "HTTPClientConfig",
    "DEFAULT_HTTP_CLIENT_TIMEOUT",
    "DEFAULT_LOGGER_LEVEL",
    "DEFAULT_TIME_LOCATION",
]
