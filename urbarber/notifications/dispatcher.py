"""
Fire-and-forget dispatch of booking confirmations.

A confirmation runs on a worker thread after the booking is committed. Its
outcome is only logged: a failed email never turns a booking into a failure.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Optional

from urbarber.notifications.base import Notifier
from urbarber.schemas.booking_schema import BookingRequest
from urbarber.schemas.calendar_schema import CalendarEvent

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Runs a Notifier in the background for each committed booking."""

    def __init__(self, notifier: Notifier, max_workers: int = 2) -> None:
        self._notifier = notifier
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="notify")

    def dispatch(self, event: CalendarEvent, request: BookingRequest) -> Optional[Future]:
        """Queue a confirmation for ``event``. Returns None if it could not be queued."""
        try:
            future = self._executor.submit(self._notifier.send_confirmation, event, request)
        except RuntimeError:
            # Executor already shut down.
            logger.exception("Could not queue confirmation for event %s", event.id)
            return None
        future.add_done_callback(lambda f: self._log_outcome(f, event))
        return future

    @staticmethod
    def _log_outcome(future: Future, event: CalendarEvent) -> None:
        exc = future.exception()
        if exc is not None:
            logger.error(
                "Confirmation for event %s failed: %s", event.id, exc,
                exc_info=(type(exc), exc, exc.__traceback__),
            )

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
