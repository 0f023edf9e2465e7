"""Capability surface the scheduler needs from a calendar store."""

from datetime import datetime
from typing import Protocol, Sequence, runtime_checkable

from urbarber.schemas.calendar_schema import CalendarEvent, EventDraft, InsertedEvent


@runtime_checkable
class CalendarStore(Protocol):
    """
    An authoritative list of calendar events.

    ``list_events`` returns every event whose interval intersects
    ``[window_start, window_end)``, including events that start before the
    window or end after it. ``insert_event`` does not check for conflicts
    on its own. Implementations raise StoreError for any failure.
    """

    calendar_id: str

    def list_events(self, window_start: datetime, window_end: datetime) -> Sequence[CalendarEvent]:
        ...

    def insert_event(self, draft: EventDraft) -> InsertedEvent:
        ...
