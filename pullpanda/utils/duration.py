"""Compact duration tokens such as ``7d`` or ``1mo``."""

import re
from datetime import datetime, timedelta
from typing import Optional

DATE_FORMAT = "%Y-%m-%d"

# A month is approximated as 30 days.
UNIT_SECONDS = {
    "s": 1,
    "m": 60,
    "h": 60 * 60,
    "d": 24 * 60 * 60,
    "w": 7 * 24 * 60 * 60,
    "mo": 30 * 24 * 60 * 60,
}

_INTEGER = re.compile(r"[0-9]+")


class DurationFormatError(ValueError):
    """Duration token could not be parsed."""
    pass


class InvalidDurationFormat(DurationFormatError):
    """Duration token is too short or its value is not an integer."""
    pass


class InvalidDurationUnit(DurationFormatError):
    """Duration token ends with an unknown unit."""
    pass


def parse_duration(token: str) -> timedelta:
    """Parse a duration token into a time span.

    Supported units are ``s``, ``m``, ``h``, ``d``, ``w`` and ``mo``.
    ``5m`` is five minutes while ``5mo`` is five 30-day months.

    Args:
        token: Duration token, e.g. "1mo", "2w", "30m"

    Returns:
        Parsed time span

    Raises:
        InvalidDurationFormat: If the token is shorter than two characters or
            the value is not an integer, or the span is too large
        InvalidDurationUnit: If the unit is not supported
    """
    if len(token) < 2:
        raise InvalidDurationFormat(f"Invalid duration format: {token!r}")

    unit = token[-1]
    value = token[:-1]

    # Two-character unit must win over the single-character minute unit
    if len(token) > 2 and token[-2:] == "mo":
        unit = "mo"
        value = token[:-2]

    if not _INTEGER.fullmatch(value):
        raise InvalidDurationFormat(
            f"Invalid duration format: {token!r} (value {value!r} is not an integer)"
        )

    if unit not in UNIT_SECONDS:
        raise InvalidDurationUnit(f"Invalid duration unit {unit!r} in {token!r}")

    try:
        return timedelta(seconds=int(value) * UNIT_SECONDS[unit])
    except OverflowError as e:
        raise InvalidDurationFormat(f"Duration {token!r} is too large") from e


def resolve_start_date(
    start_date: Optional[str] = None,
    duration: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Optional[str]:
    """Resolve the effective start date of the search window.

    A duration overrides an explicit start date: the start date becomes
    ``now - duration`` formatted as YYYY-MM-DD.

    Args:
        start_date: Explicit start date (YYYY-MM-DD)
        duration: Duration token relative to now
        now: Reference time (defaults to the current local time)

    Returns:
        Start date string, or None when neither input is given

    Raises:
        DurationFormatError: If the duration is malformed or reaches back
            before year 1
    """
    if not duration:
        return start_date or None

    span = parse_duration(duration)
    reference = now or datetime.now()
    try:
        start = reference - span
    except OverflowError as e:
        raise InvalidDurationFormat(f"Duration {duration!r} reaches back before year 1") from e
    # isoformat always pads the year to four digits
    return start.date().isoformat()
