"""
Resource bundle: the shared runtime resources of a service.

``build`` runs once at startup and returns a frozen Bundle holding:
- a cancellable context and its cancellation trigger
- the typed environment
- a structured logger
- a time location and a clock in that location
- an HTTP client

Construction is all-or-nothing. Misconfiguration raises a BootstrapError;
whether that ends the process is the caller's decision.

Usage:
    class ServiceEnv(BaseModel):
        environment: Annotated[str, Env("ENVIRONMENT")]
        version: Annotated[str, Env("VERSION")]

    async def main() -> None:
        try:
            bundle = await build(ServiceEnv, Config(time_location="America/Sao_Paulo"))
        except BootstrapError as e:
            sys.exit(f"startup failed: {e}")

        bundle.logger.info("Starting", extra={"version": bundle.env.version})
        ...
        await bundle.close()
"""

import logging
import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Generic
from zoneinfo import ZoneInfo

import aiohttp
from dotenv import dotenv_values

from servicebase.config import Config
from servicebase.context import CancelContext, with_cancel
from servicebase.env import EnvT, load_env
from servicebase.errors import EnvironmentLoadError
from servicebase.http_client import create_http_client
from servicebase.timezone import load_time_location


@dataclass(frozen=True)
class Bundle(Generic[EnvT]):
    """
    Immutable handle to the resources created by build().

    The logger and HTTP client are shared by reference; every holder of
    the bundle uses the same instances.
    """

    ctx: CancelContext
    cancel_ctx: Callable[[], None]
    env: EnvT
    logger: logging.Logger
    time_location: ZoneInfo
    http_client: aiohttp.ClientSession

    def time_now(self) -> datetime:
        """Current time in the bundle's time location."""
        return datetime.now(self.time_location)

    async def close(self) -> None:
        """Cancel the context and close the HTTP client. Safe to call twice."""
        self.cancel_ctx()
        if not self.http_client.closed:
            await self.http_client.close()


def _read_environ(env_file: str | os.PathLike | None) -> Mapping[str, str]:
    if env_file is None:
        return os.environ
    if not Path(env_file).is_file():
        raise EnvironmentLoadError(
            f"Environment file not found: {os.fspath(env_file)}",
            context={"env_file": os.fspath(env_file)},
        )
    file_values = {
        key: value for key, value in dotenv_values(env_file).items() if value is not None
    }
    return {**file_values, **os.environ}


async def build(env_shape: type[EnvT], config: Config | None = None) -> Bundle[EnvT]:
    """
    Initialise the resources used by almost every service.

    Steps, in order:
    1. apply configuration defaults
    2. create a cancellable context
    3. load environment variables into ``env_shape``
    4. resolve the time location
    5. create the HTTP client

    Args:
        env_shape: pydantic model declaring the environment bindings
        config: Resource configuration (default: all defaults)

    Returns:
        Ready bundle

    Raises:
        EnvironmentLoadError: environment variables are missing or invalid,
            or ``env_file`` does not exist
        TimeLocationError: the time zone name is unknown
    """
    config = config or Config()
    owns_transport = config.http_client.transport is None
    config = config.with_defaults()

    ctx, cancel = with_cancel()

    try:
        env = load_env(env_shape, environ=_read_environ(config.env_file))
        time_location = load_time_location(config.time_location)
    except BaseException:
        cancel()
        if owns_transport:
            await config.http_client.transport.close()
        raise

    bundle = Bundle(
        ctx=ctx,
        cancel_ctx=cancel,
        env=env,
        logger=config.logger,
        time_location=time_location,
        http_client=create_http_client(config.http_client),
    )

    config.logger.debug(
        "Service resources initialized",
        extra={
            "env_shape": env_shape.__name__,
            "time_location": time_location.key,
            "http_timeout_seconds": config.http_client.timeout_seconds,
        },
    )

    return bundle


__all__ = ["Bundle", "build"]
