"""Notifier contract and the logging fallback used when email is not configured."""

import logging
from typing import Protocol

from urbarber.schemas.booking_schema import BookingRequest
from urbarber.schemas.calendar_schema import CalendarEvent

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Sends a confirmation for a committed booking. May raise; callers contain failures."""

    def send_confirmation(self, event: CalendarEvent, request: BookingRequest) -> None:
        ...


class LoggingNotifier:
    """Records the confirmation in the log instead of sending it."""

    def send_confirmation(self, event: CalendarEvent, request: BookingRequest) -> None:
        logger.info(
            "Confirmation for event %s would be sent to %s",
            event.id, request.contact.email or "<no email>",
        )
