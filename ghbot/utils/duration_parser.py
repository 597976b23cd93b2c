"""Duration parsing for interval options (ex. 5ms, 10s, 1m30s, 3h)."""

import re
from datetime import timedelta

_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_GROUP = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")
_PLAIN_NUMBER = re.compile(r"\d+(?:\.\d*)?|\.\d+")


def parse_duration(text: str) -> timedelta:
    """Parse a duration string into a timedelta.

    Supports:
    - Single units: 500ms, 10s, 5m, 3h
    - Combined units: 1h30m, 1m30s
    - Fractions: 1.5h
    - Bare numbers, read as seconds: 30

    Args:
        text: Duration string to parse

    Returns:
        Parsed timedelta

    Raises:
        ValueError: If the duration is empty, negative or malformed
    """
    value = text.strip()
    if not value:
        raise ValueError("Duration cannot be empty")

    if value.startswith("-"):
        raise ValueError(f"Duration '{text}' cannot be negative")

    if _PLAIN_NUMBER.fullmatch(value):
        return timedelta(seconds=float(value))

    seconds = 0.0
    position = 0
    for match in _GROUP.finditer(value):
        if match.start() != position:
            break
        seconds += float(match.group(1)) * _UNITS[match.group(2)]
        position = match.end()

    if position == 0 or position != len(value):
        raise ValueError(
            f"Unable to parse duration '{text}'. "
            f"Use a number followed by a unit, e.g. 5ms, 10s, 1m, 3h or 1m30s"
        )

    return timedelta(seconds=seconds)


def format_duration(duration: timedelta) -> str:
    """Render a timedelta compactly, e.g. 1h30m, 2.05s, 500ms."""
    total = duration.total_seconds()
    if total == 0:
        return "0s"
    if total < 1:
        return f"{round(total * 1000)}ms"

    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)

    parts = []
    if hours:
        parts.append(f"{int(hours)}h")
    if minutes:
        parts.append(f"{int(minutes)}m")
    if seconds:
        parts.append(f"{seconds:g}s")
    return "".join(parts)

