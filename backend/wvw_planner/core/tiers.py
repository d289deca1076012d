"""
Victory point tiers and regions.

Each skirmish lasts two hours and awards victory points according to the
region's schedule for the UTC hour it starts in.
"""

import logging
from datetime import datetime
from enum import Enum
from typing import List

from .windows import SKIRMISH_DURATION, utc_hour
from ..simulator.models import AwardTable, Event


logger = logging.getLogger(__name__)


class Region(str, Enum):
    """Supported WvW regions."""
    NA = "na"
    EU = "eu"


class Tier(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    PEAK = "peak"


# (first, second, third) awards per tier
REGION_AWARDS = {
    Region.NA: {
        Tier.PEAK: (43, 32, 21),
        Tier.HIGH: (31, 24, 17),
        Tier.MEDIUM: (23, 18, 14),
        Tier.LOW: (19, 16, 13),
    },
    Region.EU: {
        Tier.PEAK: (51, 37, 24),
        Tier.HIGH: (31, 24, 17),
        Tier.MEDIUM: (22, 18, 14),
        Tier.LOW: (15, 14, 12),
    },
}

# Tier for each two-hour UTC block, indexed by hour // 2
VP_SCHEDULES = {
    Region.NA: [
        Tier.PEAK,    # 00-02
        Tier.PEAK,    # 02-04
        Tier.HIGH,    # 04-06
        Tier.MEDIUM,  # 06-08
        Tier.LOW,     # 08-10
        Tier.LOW,     # 10-12
        Tier.LOW,     # 12-14
        Tier.MEDIUM,  # 14-16
        Tier.MEDIUM,  # 16-18
        Tier.MEDIUM,  # 18-20
        Tier.MEDIUM,  # 20-22
        Tier.HIGH,    # 22-24
    ],
    Region.EU: [
        Tier.LOW,     # 00-02
        Tier.LOW,     # 02-04
        Tier.LOW,     # 04-06
        Tier.LOW,     # 06-08
        Tier.MEDIUM,  # 08-10
        Tier.MEDIUM,  # 10-12
        Tier.MEDIUM,  # 12-14
        Tier.HIGH,    # 14-16
        Tier.HIGH,    # 16-18
        Tier.PEAK,    # 18-20
        Tier.PEAK,    # 20-22
        Tier.HIGH,    # 22-24
    ],
}


def tier_for_time(start_time: datetime, region: Region = Region.NA) -> Tier:
    """Return the VP tier a skirmish starting at `start_time` falls in."""
    return VP_SCHEDULES[Region(region)][utc_hour(start_time) // 2]


def award_table_for_time(start_time: datetime, region: Region = Region.NA) -> AwardTable:
    """
    Get the victory point awards for a skirmish.

    Args:
        start_time: Skirmish start time (naive values are treated as UTC)
        region: Region whose schedule applies

    Returns:
        AwardTable with first/second/third place points
    """
    tier = tier_for_time(start_time, region)
    first, second, third = REGION_AWARDS[Region(region)][tier]
    return AwardTable(first=first, second=second, third=third)


def build_schedule(
    first_start: datetime,
    count: int,
    region: Region = Region.NA,
    first_id: int = 1
) -> List[Event]:
    """
    Build the remaining skirmishes of a match from the next start time.

    Args:
        first_start: Start time of the next skirmish
        count: Number of skirmishes left in the match
        region: Region whose VP schedule applies
        first_id: ID given to the first generated skirmish

    Returns:
        Events in chronological order with their award tables
    """
    events = []
    for offset in range(count):
        start = first_start + offset * SKIRMISH_DURATION
        events.append(Event(
            id=first_id + offset,
            awards=award_table_for_time(start, region),
            start_time=start
        ))
    return events


def region_from_match_id(match_id: str) -> Region:
    """
    Get the region from a match ID such as "1-5" (NA) or "2-3" (EU).
    """
    region_code = match_id.split("-")[0]
    if region_code not in ("1", "2"):
        logger.warning("Unknown region code in match id %s, assuming EU", match_id)
    return Region.NA if region_code == "1" else Region.EU
