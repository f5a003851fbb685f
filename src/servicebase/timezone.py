"""Time zone resolution backed by the IANA database (zoneinfo + tzdata)."""

import os
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from servicebase.errors import TimeLocationError

DEFAULT_TIME_LOCATION = "UTC"
LOCAL_TIME_LOCATION = "Local"

LOCALTIME_PATH = Path("/etc/localtime")


def _local_zone() -> ZoneInfo:
    """
    The host's zone: ``TZ`` when set, else the system zone file, else UTC.

    An empty ``TZ`` means UTC.
    """
    tz = os.environ.get("TZ")
    if tz is not None:
        tz = tz.removeprefix(":")
        return ZoneInfo(tz) if tz else ZoneInfo("UTC")
    try:
        with LOCALTIME_PATH.open("rb") as f:
            return ZoneInfo.from_file(f, key=LOCAL_TIME_LOCATION)
    except FileNotFoundError:
        return ZoneInfo("UTC")


def load_time_location(name: str) -> ZoneInfo:
    """
    Resolve an IANA zone identifier such as "America/Sao_Paulo".

    "Local" resolves to the host's zone.

    Raises:
        TimeLocationError: name is empty, malformed or unknown
    """
    if not name:
        raise TimeLocationError(name, cause=ValueError("empty time zone name"))
    try:
        if name == LOCAL_TIME_LOCATION:
            return _local_zone()
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError) as e:
        # ValueError: malformed keys (absolute paths, ".." components)
        # OSError: keys that name a directory in the zone database
        raise TimeLocationError(name, cause=e) from e


__all__ = ["DEFAULT_TIME_LOCATION", "LOCAL_TIME_LOCATION", "load_time_location"]
