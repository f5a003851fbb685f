"""
servicebase: shared runtime resources for service startup.

Modules:
    bundle       - build() and the immutable Bundle it returns
    config       - Config / HTTPClientConfig and their defaults
    env          - Typed environment variable loading into pydantic models
    context      - Cancellable context shared across threads and event loops
    timezone     - IANA time zone resolution
    http_client  - aiohttp ClientSession construction
    logging      - Structured JSON logging
    errors       - Exception hierarchy
"""

from servicebase.bundle import Bundle, build
from servicebase.config import DEFAULT_HTTP_CLIENT_TIMEOUT, Config, HTTPClientConfig
from servicebase.context import CancelContext, ContextCancelled, with_cancel
from servicebase.env import Env, load_env
from servicebase.errors import BootstrapError, EnvironmentLoadError, TimeLocationError
from servicebase.http_client import create_http_client
from servicebase.logging.setup import DEFAULT_LOGGER_LEVEL, new_logger
from servicebase.timezone import DEFAULT_TIME_LOCATION, LOCAL_TIME_LOCATION, load_time_location

__version__ = "0.1.0"

__all__ = [
    # Builder
    "build",
    "Bundle",
    # Configuration
    "Config",
    "HTTPClientConfig",
    "DEFAULT_HTTP_CLIENT_TIMEOUT",
    "DEFAULT_LOGGER_LEVEL",
    "DEFAULT_TIME_LOCATION",
    "LOCAL_TIME_LOCATION",
    # Resources
    "Env",
    "load_env",
    "CancelContext",
    "ContextCancelled",
    "with_cancel",
    "load_time_location",
    "create_http_client",
    "new_logger",
    # Errors
    "BootstrapError",
    "EnvironmentLoadError",
    "TimeLocationError",
]
