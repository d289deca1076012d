"""
Core utilities: configuration, VP tiers and coverage windows.
"""

from .windows import TimeWindow, time_window_for
from .tiers import Region, award_table_for_time, build_schedule, region_from_match_id

__all__ = [
    "TimeWindow",
    "time_window_for",
    "Region",
    "award_table_for_time",
    "build_schedule",
    "region_from_match_id",
]
