"""Shared test fixtures and helpers."""

import threading
import time
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional
from zoneinfo import ZoneInfo

import pytest

from urbarber.config import ShopConfig
from urbarber.errors import StoreError
from urbarber.scheduling.lock import BookingLock
from urbarber.scheduling.scheduler import BookingScheduler
from urbarber.schemas.booking_schema import BookingRequest, Contact, LocationMode
from urbarber.schemas.calendar_schema import CalendarEvent, EventDraft, InsertedEvent, Interval
from urbarber.store.memory import InMemoryCalendarStore

SHOP_TZ = ZoneInfo("America/Toronto")
DAY = (2025, 3, 18)


def at(hour: int, minute: int = 0) -> datetime:
    """An aware datetime on the fixed test day in the shop timezone."""
    return datetime(*DAY, hour, minute, tzinfo=SHOP_TZ)


def make_request(
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    name: str = "John Smith",
    email: str = "john.smith@email.com",
    phone: str = "4165550199",
    location_mode: LocationMode = LocationMode.IN_SHOP,
    location_detail: str = "",
    gender: str = "Male",
    notes: str = "",
    price: Optional[Decimal] = None,
) -> BookingRequest:
    return BookingRequest(
        client_name=name,
        contact=Contact(email=email, phone=phone),
        start=start,
        end=end,
        location_mode=location_mode,
        location_detail=location_detail,
        gender=gender,
        notes=notes,
        price=price,
    )


def make_event(start: datetime, end: datetime, event_id: str = "existing", title: str = "Walk-in") -> CalendarEvent:
    return CalendarEvent(id=event_id, interval=Interval(start, end), title=title)


class RecordingStore(InMemoryCalendarStore):
    """In-memory store that counts calls and can pause or fail on demand."""

    def __init__(self, list_delay: float = 0.0, fail_inserts: int = 0) -> None:
        super().__init__(calendar_id="test-calendar")
        self.list_calls = 0
        self.insert_calls = 0
        self.list_delay = list_delay
        self.fail_inserts = fail_inserts
        self._counter_guard = threading.Lock()

    def list_events(self, window_start: datetime, window_end: datetime) -> list[CalendarEvent]:
        with self._counter_guard:
            self.list_calls += 1
        events = super().list_events(window_start, window_end)
        if self.list_delay:
            # Widen the gap between reading and writing so racing attempts interleave.
            time.sleep(self.list_delay)
        return events

    def insert_event(self, draft: EventDraft) -> InsertedEvent:
        with self._counter_guard:
            self.insert_calls += 1
            should_fail = self.fail_inserts > 0
            if should_fail:
                self.fail_inserts -= 1
        if should_fail:
            raise StoreError("calendar unavailable")
        return super().insert_event(draft)


@pytest.fixture
def shop():
    return ShopConfig(
        name="Urbarber",
        location="Urbarber Barbershop",
        service_name="Standard cut",
        base_price=25.0,
        home_service_surcharge=10.0,
        timezone="America/Toronto",
    )


@pytest.fixture
def store():
    return RecordingStore()


@pytest.fixture
def lock():
    return BookingLock(timeout=5.0)


@pytest.fixture
def scheduler(store, lock, shop):
    return BookingScheduler(store=store, lock=lock, shop=shop)


@pytest.fixture
def padded_scheduler(store, lock, shop):
    return BookingScheduler(store=store, lock=lock, shop=shop, padding=timedelta(minutes=10))
