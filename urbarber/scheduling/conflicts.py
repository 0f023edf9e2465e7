"""Detection of scheduling conflicts between a requested slot and existing events."""

from datetime import timedelta
from typing import Iterable

from urbarber.schemas.calendar_schema import CalendarEvent, Interval


def scan_window(interval: Interval, hours: float) -> Interval:
    """Return the listing window used to fetch candidate events around ``interval``."""
    margin = timedelta(hours=hours)
    return Interval(interval.start - margin, interval.end + margin)


def find_conflicts(requested: Interval, existing_events: Iterable[CalendarEvent]) -> list[CalendarEvent]:
    """Return existing events that overlap the requested interval.

    Overlap rule: conflict if requested.start < event.end AND event.start < requested.end.
    Exact boundary touches (end == start) are NOT conflicts.
    """
    return [event for event in existing_events if requested.overlaps(event.interval)]
