"""
Overlap Detection

Half-open interval checks used both for slot listing and at commit time.
Two intervals [a_start, a_end) and [b_start, b_end) overlap iff each starts
strictly before the other ends, so back-to-back bookings are allowed.
"""
from datetime import datetime
from typing import Hashable, Iterable, NamedTuple, Optional, Set


class BusyInterval(NamedTuple):
    """A confirmed booking occupying one resource"""
    start: datetime
    end: datetime
    resource_id: Optional[int]


def intervals_overlap(
        a_start: datetime,
        a_end: datetime,
        b_start: datetime,
        b_end: datetime
) -> bool:
    return a_start < b_end and b_start < a_end


def occupied_resources(
        start: datetime,
        end: datetime,
        busy: Iterable[BusyInterval]
) -> Set[Hashable]:
    """Resource ids with at least one booking overlapping [start, end)"""
    return {
        interval.resource_id
        for interval in busy
        if intervals_overlap(start, end, interval.start, interval.end)
    }
