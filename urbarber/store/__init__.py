from urbarber.config import AppConfig
from urbarber.store.base import CalendarStore
from urbarber.store.memory import InMemoryCalendarStore


def build_store(config: AppConfig) -> CalendarStore:
    """Create the calendar store selected by CALENDAR_BACKEND."""
    if config.calendar.backend == "google":
        from urbarber.store.google_calendar import GoogleCalendarStore

        return GoogleCalendarStore.from_config(config.calendar, config.shop)
    return InMemoryCalendarStore(calendar_id=config.calendar.calendar_id)


__all__ = ["CalendarStore", "InMemoryCalendarStore", "build_store"]
