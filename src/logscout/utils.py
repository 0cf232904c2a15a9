"""Shared utilities for logscout."""

from __future__ import annotations

import json
import re
from datetime import UTC, datetime, timedelta

import dateparser

_TIME_UNITS: dict[str, str] = {
    "s": "seconds",
    "sec": "seconds",
    "seconds": "seconds",
    "m": "minutes",
    "min": "minutes",
    "minute": "minutes",
    "minutes": "minutes",
    "h": "hours",
    "hour": "hours",
    "hours": "hours",
    "d": "days",
    "day": "days",
    "days": "days",
    "w": "weeks",
    "week": "weeks",
    "weeks": "weeks",
}

_RELATIVE_RE = re.compile(r"^(\d+)\s*([a-z]+)$")


def parse_time(value: str, reference: datetime | None = None) -> datetime:
    """Parse a time value into an aware UTC datetime.

    Supports:
    - Relative shorthand: 5m, 1h, 2d, 30s, 1week (counted back from ``reference``)
    - Natural language: "yesterday 7:58", "2 days ago"
    - ISO 8601: 2024-01-15T10:30:00Z
    """
    stripped = value.strip()
    ref = reference or datetime.now(tz=UTC)

    match = _RELATIVE_RE.match(stripped.lower())
    if match and match.group(2) in _TIME_UNITS:
        delta = timedelta(**{_TIME_UNITS[match.group(2)]: int(match.group(1))})
        return ref - delta

    settings: dict[str, object] = {
        "TIMEZONE": "UTC",
        "RETURN_AS_TIMEZONE_AWARE": True,
        "PREFER_DATES_FROM": "past",
        "RELATIVE_BASE": ref.replace(tzinfo=None),
    }
    result = dateparser.parse(stripped, settings=settings)
    if result is not None:
        return result

    msg = f"Cannot parse time: {value!r}"
    raise ValueError(msg)


def to_epoch_ms(dt: datetime) -> int:
    """Convert datetime to epoch milliseconds."""
    return int(dt.timestamp() * 1000)


def extract_message(raw_message: str, message_key: str | None) -> str:
    """Extract a nested message from a JSON log line.

    Falls back to the raw message if it is not a JSON object or lacks the key.
    """
    if not message_key:
        return raw_message
    try:
        parsed = json.loads(raw_message)
    except ValueError:
        return raw_message
    if isinstance(parsed, dict) and message_key in parsed:
        return str(parsed[message_key])
    return raw_message


def format_elapsed(seconds: float) -> str:
    """Format a duration compactly: 4.2s, 1m05s."""
    if seconds < 60:  # noqa: PLR2004
        return f"{seconds:.1f}s"
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}m{secs:02d}s"
