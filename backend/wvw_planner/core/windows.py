"""
Coverage time windows used to segment historical performance.
"""

from datetime import datetime, timedelta, timezone
from enum import Enum


SKIRMISH_DURATION = timedelta(hours=2)


class TimeWindow(str, Enum):
    """Coverage windows (UTC hours, end exclusive)."""
    NA_PRIME = "na_prime"    # 00:00 - 05:00, 7 PM - 12 AM ET
    EU_PRIME = "eu_prime"    # 18:00 - 23:00, 7 PM - 12 AM CET
    OCX = "ocx"              # 08:00 - 13:00, 7 PM - 12 AM AEDT
    OFF_HOURS = "off_hours"


WINDOW_HOURS = {
    TimeWindow.NA_PRIME: (0, 5),
    TimeWindow.EU_PRIME: (18, 23),
    TimeWindow.OCX: (8, 13),
}


def utc_hour(timestamp: datetime) -> int:
    """UTC hour of a timestamp. Naive timestamps are assumed to be UTC already."""
    if timestamp.tzinfo is not None and timestamp.utcoffset() is not None:
        timestamp = timestamp.astimezone(timezone.utc)
    return timestamp.hour


def time_window_for(timestamp: datetime) -> TimeWindow:
    """
    Get the coverage window a timestamp falls in.

    The prime time windows do not overlap, so the result is the same for
    both regions.
    """
    hour = utc_hour(timestamp)
    for window, (start, end) in WINDOW_HOURS.items():
        if start <= hour < end:
            return window
    return TimeWindow.OFF_HOURS
