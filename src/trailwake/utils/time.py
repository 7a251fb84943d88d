"""Timezone helpers.

All conversions go through zoneinfo so a dawn instant is never compared
across timezones without being converted first.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from trailwake.config import MINUTES_PER_DAY


def get_zone(tz: str) -> ZoneInfo:
    """Resolve an IANA timezone name.

    Raises:
        ValueError: If the name is unknown
    """
    try:
        return ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown timezone: {tz!r}") from e


def to_local(moment: datetime, tz: str) -> datetime:
    """Convert a datetime into tz. Naive datetimes are taken as already local."""
    zone = get_zone(tz)
    if moment.tzinfo is None:
        return moment.replace(tzinfo=zone)
    return moment.astimezone(zone)


def fmt_ymd_in_zone(moment: datetime, tz: str) -> str:
    """Format the calendar day of moment in tz as YYYY-MM-DD."""
    return to_local(moment, tz).strftime("%Y-%m-%d")


def tomorrow_in_zone(tz: str, now: Optional[datetime] = None) -> date:
    """Return tomorrow's calendar date in tz."""
    now = now or datetime.now(timezone.utc)
    return (to_local(now, tz) + timedelta(days=1)).date()


def minutes_since_midnight(moment: datetime, tz: str) -> int:
    """Minutes elapsed since local midnight of moment in tz."""
    local = to_local(moment, tz)
    return local.hour * 60 + local.minute


def parse_hhmm(value: str) -> int:
    """Parse "HH:MM" into minutes since midnight.

    Raises:
        ValueError: If the string is not a valid 24-hour time
    """
    try:
        hours_str, minutes_str = value.strip().split(":")
        hours, minutes = int(hours_str), int(minutes_str)
    except (AttributeError, ValueError) as e:
        raise ValueError(f"Expected HH:MM, got {value!r}") from e
    if not (0 <= hours < 24 and 0 <= minutes < 60):
        raise ValueError(f"Expected HH:MM, got {value!r}")
    return (hours * 60 + minutes) % MINUTES_PER_DAY


def format_minutes(total: int) -> str:
    """Format minutes since midnight as a 12-hour clock string."""
    total %= MINUTES_PER_DAY
    hours, minutes = divmod(total, 60)
    suffix = "AM" if hours < 12 else "PM"
    return f"{hours % 12 or 12}:{minutes:02d} {suffix}"
