"""Night-time detection for the night surcharge."""

import logging
from datetime import UTC, datetime
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "Asia/Kolkata"
NIGHT_START_HOUR = 22
NIGHT_END_HOUR = 6

TimeDetection = Literal["manual", "auto-detected"]


def is_night_hour(
    hour: int, start: int = NIGHT_START_HOUR, end: int = NIGHT_END_HOUR
) -> bool:
    """Whether ``hour`` falls inside the night window [start, end).

    The window wraps midnight when start > end (the default 22:00-06:00).
    """
    if start > end:
        return hour >= start or hour < end
    return start <= hour < end


def local_hour(timezone: str = DEFAULT_TIMEZONE, now: datetime | None = None) -> int:
    """Hour of day in ``timezone``.

    An unknown timezone falls back to the system local time instead of
    failing the request.
    """
    now = now or datetime.now(UTC)
    try:
        tz = ZoneInfo(timezone)
    except (ZoneInfoNotFoundError, ValueError, OSError) as e:
        logger.warning(f"Could not resolve timezone {timezone!r}, using system time: {e}")
        if now.tzinfo is None:
            return now.hour
        return now.astimezone().hour

    if now.tzinfo is None:
        now = now.astimezone()
    return now.astimezone(tz).hour


def is_night_time(
    timezone: str = DEFAULT_TIMEZONE,
    now: datetime | None = None,
    start: int = NIGHT_START_HOUR,
    end: int = NIGHT_END_HOUR,
) -> bool:
    return is_night_hour(local_hour(timezone, now), start, end)


def resolve_night_time(
    explicit: bool | None,
    timezone: str = DEFAULT_TIMEZONE,
    now: datetime | None = None,
    start: int = NIGHT_START_HOUR,
    end: int = NIGHT_END_HOUR,
) -> tuple[bool, TimeDetection]:
    """Use the caller's flag when given, otherwise detect from the wall clock."""
    if explicit is not None:
        return explicit, "manual"
    return is_night_time(timezone, now, start, end), "auto-detected"
