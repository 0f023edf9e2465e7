from urbarber.scheduling.conflicts import find_conflicts
from urbarber.scheduling.lock import BookingLock
from urbarber.scheduling.scheduler import (
    Booked,
    BookingResult,
    BookingScheduler,
    Conflict,
)

__all__ = [
    "BookingScheduler",
    "BookingResult",
    "Booked",
    "Conflict",
    "BookingLock",
    "find_conflicts",
]
