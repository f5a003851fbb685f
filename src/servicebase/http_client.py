"""
HTTP client construction using aiohttp.

The client is a plain aiohttp.ClientSession; connection pooling, TLS and
request behaviour are aiohttp's. This module only wires in the configured
connector, cookie jar and total request timeout.
"""

import aiohttp

from servicebase.config import HTTPClientConfig


def create_http_client(config: HTTPClientConfig) -> aiohttp.ClientSession:
    """
    Create an aiohttp ClientSession from HTTP client settings.

    Defaults are applied first, so an empty HTTPClientConfig yields a
    session with a standard TCPConnector, no cookie jar and a 10 second
    total timeout.

    Args:
        config: HTTP client settings

    Returns:
        Configured aiohttp.ClientSession

    Example:
        session = create_http_client(HTTPClientConfig(timeout=5))
        try:
            async with session.get(url) as response:
                body = await response.read()
        finally:
            await session.close()

    Note:
        Caller is responsible for session lifecycle management. The
        session owns the connector and closes it on close().
    """
    config = config.with_defaults()

    return aiohttp.ClientSession(
        connector=config.transport,
        cookie_jar=config.cookie_jar,
        timeout=aiohttp.ClientTimeout(total=config.timeout_seconds),
    )


__all__ = ["create_http_client"]
