"""
Booking scheduler: decides atomically whether a slot is free and records it.

Every attempt follows one linear protocol:
Validate -> Lock -> List nearby events -> Check overlap -> Insert -> Unlock.

The lock is held across the whole read-check-insert sequence. Releasing it
between the overlap check and the insert would let two concurrent requests
both see a free slot and both insert. The calendar store is the only source
of truth; the scheduler keeps no state between attempts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import TYPE_CHECKING, Any, Callable, Optional, Union

from urbarber.config import AppConfig, ShopConfig
from urbarber.errors import BookingError, InvalidRequest, StoreError
from urbarber.logging_context import get_request_logger
from urbarber.schemas.booking_schema import BookingRequest
from urbarber.schemas.calendar_schema import CalendarEvent, Interval
from urbarber.scheduling.conflicts import find_conflicts, scan_window
from urbarber.scheduling.event_builder import build_event
from urbarber.scheduling.lock import BookingLock
from urbarber.store.base import CalendarStore

if TYPE_CHECKING:
    from urbarber.notifications.dispatcher import NotificationDispatcher

logger = get_request_logger(__name__)

CONFLICT_MESSAGE = "This time slot is already booked. Please pick another time."


@dataclass(frozen=True)
class Booked:
    """The slot was free and the event is now in the calendar."""
    event: CalendarEvent

    @property
    def event_id(self) -> str:
        return self.event.id

    @property
    def event_link(self) -> Optional[str]:
        return self.event.link


@dataclass(frozen=True)
class Conflict:
    """The slot overlaps an existing event. Not an error: pick another time."""
    requested: Interval
    conflicting: tuple[CalendarEvent, ...] = field(default_factory=tuple)
    message: str = CONFLICT_MESSAGE


BookingResult = Union[Booked, Conflict]


class BookingScheduler:
    """Serializes booking attempts against a single calendar."""

    def __init__(
        self,
        store: CalendarStore,
        lock: BookingLock,
        shop: ShopConfig,
        padding: timedelta = timedelta(0),
        scan_window_hours: float = 12.0,
        notifications: Optional[NotificationDispatcher] = None,
    ) -> None:
        if padding < timedelta(0):
            raise ValueError(f"Padding must be non-negative, got {padding}")
        self._store = store
        self._lock = lock
        self._shop = shop
        self._padding = padding
        self._scan_window_hours = scan_window_hours
        self._notifications = notifications

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        store: CalendarStore,
        notifications: Optional[NotificationDispatcher] = None,
    ) -> BookingScheduler:
        return cls(
            store=store,
            lock=BookingLock(timeout=config.calendar.lock_timeout_ms / 1000),
            shop=config.shop,
            padding=timedelta(minutes=config.calendar.slot_padding_minutes),
            scan_window_hours=config.calendar.scan_window_hours,
            notifications=notifications,
        )

    @property
    def lock_key(self) -> str:
        return f"calendar:{self._store.calendar_id}"

    def attempt_booking(self, request: BookingRequest) -> BookingResult:
        """Book ``request`` if its padded slot is free.

        Returns Booked or Conflict. Raises InvalidRequest before touching the
        lock or the store, LockTimeout when the lock cannot be acquired in
        time, and StoreError when the calendar read or write fails. The lock
        is released on every path.
        """
        requested = self._validate(request)
        padded = requested.padded(self._padding)

        with self._lock.hold(self.lock_key):
            window = scan_window(padded, self._scan_window_hours)
            existing = self._call_store(self._store.list_events, window.start, window.end)

            conflicts = find_conflicts(padded, existing)
            if conflicts:
                logger.info(
                    "Slot %s - %s for %s conflicts with %d event(s)",
                    requested.start.isoformat(), requested.end.isoformat(),
                    request.client_name, len(conflicts),
                )
                return Conflict(requested=requested, conflicting=tuple(conflicts))

            draft = build_event(request, requested, self._shop)
            inserted = self._call_store(self._store.insert_event, draft)

        event = CalendarEvent.from_draft(draft, inserted.id, inserted.link)
        logger.info(
            "Booked %s for %s (%s - %s)",
            event.id, request.client_name,
            requested.start.isoformat(), requested.end.isoformat(),
        )
        if self._notifications is not None:
            self._notifications.dispatch(event, request)
        return Booked(event=event)

    @staticmethod
    def _call_store(operation: Callable[..., Any], *args: Any) -> Any:
        """Run a store call, reporting any non-booking failure as StoreError."""
        try:
            return operation(*args)
        except BookingError:
            raise
        except Exception as exc:
            raise StoreError(f"Calendar store call {operation.__name__} failed: {exc!r}") from exc

    @staticmethod
    def _validate(request: BookingRequest) -> Interval:
        if request.start is None or request.end is None:
            raise InvalidRequest("missing start/end")
        if request.start.tzinfo is None or request.end.tzinfo is None:
            raise InvalidRequest("start/end must carry a timezone")
        if request.start >= request.end:
            raise InvalidRequest("start must be before end")
        if not request.client_name.strip():
            raise InvalidRequest("client name is required")
        if request.in_home and not request.location_detail.strip():
            raise InvalidRequest("location is required for home service")
        return Interval(request.start, request.end)
