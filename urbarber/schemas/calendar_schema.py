"""Calendar event and time interval models."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional


@dataclass(frozen=True)
class Interval:
    """Half-open time range ``[start, end)``. Touching endpoints do not overlap."""
    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start.tzinfo is None or self.end.tzinfo is None:
            raise ValueError("Interval bounds must be timezone-aware")
        if self.start >= self.end:
            raise ValueError(
                f"Interval start must be before end: {self.start.isoformat()} >= {self.end.isoformat()}"
            )

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def overlaps(self, other: "Interval") -> bool:
        return self.start < other.end and other.start < self.end

    def padded(self, padding: timedelta) -> "Interval":
        """Widen the interval by ``padding`` on both sides."""
        if padding < timedelta(0):
            raise ValueError("Padding must be non-negative")
        return Interval(self.start - padding, self.end + padding)


@dataclass(frozen=True)
class Attendee:
    """Guest invited to a calendar event."""
    email: str
    display_name: Optional[str] = None


@dataclass(frozen=True)
class EventDraft:
    """An event not yet stored. The store assigns id and link on insert."""
    interval: Interval
    title: str
    description: str = ""
    location: str = ""
    attendee: Optional[Attendee] = None


@dataclass(frozen=True)
class CalendarEvent:
    """An event held by a calendar store."""
    id: str
    interval: Interval
    title: str = ""
    description: str = ""
    location: str = ""
    attendee: Optional[Attendee] = None
    link: Optional[str] = None

    @classmethod
    def from_draft(cls, draft: EventDraft, event_id: str, link: Optional[str] = None) -> "CalendarEvent":
        return cls(
            id=event_id,
            interval=draft.interval,
            title=draft.title,
            description=draft.description,
            location=draft.location,
            attendee=draft.attendee,
            link=link,
        )


@dataclass(frozen=True)
class InsertedEvent:
    """Identity of a freshly inserted event as reported by the store."""
    id: str
    link: Optional[str] = None
