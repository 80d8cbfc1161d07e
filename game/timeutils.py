"""Timezone-aware time utilities for the game."""

import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from .config import TIMEZONE
from .errors import ConfigurationError


def get_timezone():
    """Get the timezone object for the game."""
    return ZoneInfo(TIMEZONE)


def now() -> datetime.datetime:
    """Get current timezone-aware datetime."""
    return datetime.datetime.now(ZoneInfo(TIMEZONE))


def parse_clock(value: str) -> datetime.time:
    """Parse an ``HH:MM`` string into a timezone-aware time of day."""
    hour, minute = (int(part) for part in value.split(":"))
    return datetime.time(hour=hour, minute=minute, tzinfo=get_timezone())


def next_occurrence(clock: str, after: Optional[datetime.datetime] = None) -> datetime.datetime:
    """Get the next moment the wall clock reads ``clock``, strictly after ``after``."""
    after = after or now()
    at = parse_clock(clock)
    candidate = after.replace(hour=at.hour, minute=at.minute, second=0, microsecond=0)
    if candidate <= after:
        candidate += datetime.timedelta(days=1)
    return candidate


def check_phase_times(play_start: str, horde_start: str):
    """Both phase boundaries must be valid ``HH:MM`` and fall at different times."""
    try:
        play_at, horde_at = parse_clock(play_start), parse_clock(horde_start)
    except ValueError as e:
        raise ConfigurationError(f"Invalid phase time: {e}") from e
    if (play_at.hour, play_at.minute) == (horde_at.hour, horde_at.minute):
        raise ConfigurationError(f"Play Mode and Horde Mode cannot both start at {play_start}")
