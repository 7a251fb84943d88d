"""Daylight check: does a run start at or before dawn?"""

from typing import Optional

from trailwake.config import MINUTES_PER_DAY
from trailwake.models import DawnInfo, DaylightCheck, number_or_none
from trailwake.utils.time import minutes_since_midnight


def dawn_minutes(dawn_info: DawnInfo) -> int:
    """Dawn as minutes since midnight in the dawn's own timezone."""
    return minutes_since_midnight(dawn_info.date, dawn_info.tz)


def check_daylight_needed(
    run_start_minutes: Optional[int],
    dawn_info: Optional[DawnInfo],
) -> DaylightCheck:
    """Check whether a run starting at run_start_minutes begins in the dark.

    Args:
        run_start_minutes: Run start as minutes since local midnight
        dawn_info: Dawn instant and timezone

    Returns:
        DaylightCheck. Missing inputs (including a NaN or infinite run
        start) give needed=False with no message, since no data is not a
        hazard.

    Examples:
        A run at 5:45 with dawn at 6:15 gives
        "Check daylight (30 min before dawn)".
    """
    start = number_or_none(run_start_minutes)
    if start is None or dawn_info is None:
        return DaylightCheck(needed=False, message=None)

    minutes_from_dawn = (int(start) % MINUTES_PER_DAY) - dawn_minutes(dawn_info)
    if minutes_from_dawn > 0:
        return DaylightCheck(needed=False, message=None)

    minutes_before = -minutes_from_dawn
    if minutes_before == 0:
        message = "Check daylight (at dawn)"
    else:
        message = f"Check daylight ({minutes_before} min before dawn)"
    return DaylightCheck(needed=True, message=message, minutes_before=minutes_before)
