"""
In-memory calendar store.

Used for local development (CALENDAR_BACKEND=memory) and tests. Behaves
like a remote calendar: it accepts overlapping inserts and leaves conflict
checking to the scheduler.
"""

import logging
import threading
import uuid
from datetime import datetime
from typing import Optional

from urbarber.schemas.calendar_schema import CalendarEvent, EventDraft, InsertedEvent

logger = logging.getLogger(__name__)


class InMemoryCalendarStore:
    """Thread-safe event list keyed by event id."""

    def __init__(self, calendar_id: str = "primary", link_base: str = "https://calendar.local/event") -> None:
        self.calendar_id = calendar_id
        self._link_base = link_base
        self._events: dict[str, CalendarEvent] = {}
        self._guard = threading.Lock()

    def list_events(self, window_start: datetime, window_end: datetime) -> list[CalendarEvent]:
        with self._guard:
            events = [
                event
                for event in self._events.values()
                if event.interval.start < window_end and window_start < event.interval.end
            ]
        return sorted(events, key=lambda e: e.interval.start)

    def insert_event(self, draft: EventDraft) -> InsertedEvent:
        event_id = uuid.uuid4().hex
        link = f"{self._link_base}/{event_id}"
        event = CalendarEvent.from_draft(draft, event_id, link)
        with self._guard:
            self._events[event_id] = event
        logger.info("Stored event %s (%s)", event_id, draft.title)
        return InsertedEvent(id=event_id, link=link)

    def add(self, event: CalendarEvent) -> None:
        """Place an event directly, bypassing the scheduler (manual edits, imports)."""
        with self._guard:
            self._events[event.id] = event

    def get(self, event_id: str) -> Optional[CalendarEvent]:
        with self._guard:
            return self._events.get(event_id)

    def all_events(self) -> list[CalendarEvent]:
        with self._guard:
            return sorted(self._events.values(), key=lambda e: e.interval.start)

    def reset(self) -> None:
        """Clear all events. Used by test fixtures for isolation."""
        with self._guard:
            self._events.clear()
