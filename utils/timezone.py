"""UTC-everywhere time handling and duration parsing."""

import re
from datetime import datetime, timedelta, timezone

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|h|m|s)")

_UNIT_SECONDS = {
    "h": 3600.0,
    "m": 60.0,
    "s": 1.0,
    "ms": 0.001,
}


def now_utc() -> datetime:
    """
    Current time in UTC.

    Use this instead of datetime.now() everywhere so tests can patch one place.
    """
    return datetime.now(timezone.utc)


def parse_iso(iso_string: str) -> datetime:
    """
    Parse ISO 8601 datetime string to UTC datetime.

    Accepts a trailing 'Z'. Raises ValueError if string has no timezone info.
    """
    if iso_string.endswith("Z"):
        iso_string = iso_string[:-1] + "+00:00"
    dt = datetime.fromisoformat(iso_string)
    if dt.tzinfo is None:
        raise ValueError(
            "Cannot parse naive datetime string. "
            "Include timezone offset (e.g., 'Z' or '+00:00')."
        )
    return dt.astimezone(timezone.utc)


def parse_duration(value: str) -> timedelta:
    """
    Parse a duration string such as '5m', '1h', '90s' or '1h30m'.

    Same unit letters the deployment env files use for TTLs and windows.

    Raises:
        ValueError: If the string is empty or contains anything but
            <number><unit> pairs.
    """
    text = value.strip()
    if not text:
        raise ValueError("Duration string is empty")

    position = 0
    total = 0.0
    for match in _DURATION_PART.finditer(text):
        if match.start() != position:
            break
        total += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        position = match.end()

    if position != len(text):
        raise ValueError(f"Invalid duration: {value!r}")

    return timedelta(seconds=total)
