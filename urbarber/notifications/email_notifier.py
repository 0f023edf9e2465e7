"""
Confirmation emails over SMTP.

The calendar invite already reaches the client through the store's attendee
updates; this email is a plain-text confirmation with the appointment time
rendered in the shop's timezone.
"""

import logging
import smtplib
import ssl
from datetime import datetime
from email.message import EmailMessage
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from urbarber.config import NotifierConfig, ShopConfig
from urbarber.schemas.booking_schema import BookingRequest
from urbarber.schemas.calendar_schema import CalendarEvent

logger = logging.getLogger(__name__)

SMTP_TIMEOUT_SECONDS = 15


def _clock(moment: datetime) -> str:
    hour = moment.hour % 12 or 12
    return f"{hour}:{moment:%M} {moment:%p}"


def format_when(start: datetime, end: datetime, tz: ZoneInfo) -> str:
    """Render an appointment span, e.g. ``Tue, Mar 18, 2025 10:00 AM – 10:45 AM``."""
    local_start = start.astimezone(tz)
    local_end = end.astimezone(tz)
    day = f"{local_start:%a, %b} {local_start.day}, {local_start.year}"
    return f"{day} {_clock(local_start)} – {_clock(local_end)}"


class EmailNotifier:
    """Sends the booking confirmation to the client's email address."""

    def __init__(
        self,
        config: NotifierConfig,
        shop: ShopConfig,
        smtp_factory: Callable[..., smtplib.SMTP] = smtplib.SMTP,
    ) -> None:
        if not config.enabled:
            raise ValueError("EmailNotifier requires SMTP_HOST to be set")
        self._config = config
        self._shop = shop
        self._tz = ZoneInfo(shop.timezone)
        self._smtp_factory = smtp_factory

    def render(self, event: CalendarEvent, request: BookingRequest) -> Optional[EmailMessage]:
        """Build the confirmation message, or None when the client gave no email."""
        if not request.contact.email:
            return None

        when = format_when(event.interval.start, event.interval.end, self._tz)
        body = (
            f"Hi {request.client_name},\n\n"
            "Your appointment is confirmed.\n\n"
            f"When: {when}\n"
            f"Where: {event.location}\n\n"
            f"Details:\n{event.description}\n\n"
            "If you need to make changes, reply to this email.\n\n"
            f"— {self._shop.name}\n"
        )

        message = EmailMessage()
        message["Subject"] = f"{self._shop.name} Appointment Confirmation"
        message["From"] = self._config.email_from
        message["To"] = request.contact.email
        message.set_content(body)
        return message

    def send_confirmation(self, event: CalendarEvent, request: BookingRequest) -> None:
        message = self.render(event, request)
        if message is None:
            logger.debug("No email on booking %s, skipping confirmation", event.id)
            return

        with self._smtp_factory(
            self._config.smtp_host, self._config.smtp_port, timeout=SMTP_TIMEOUT_SECONDS
        ) as smtp:
            if self._config.smtp_use_tls:
                smtp.starttls(context=ssl.create_default_context())
            if self._config.smtp_username and self._config.smtp_password:
                smtp.login(self._config.smtp_username, self._config.smtp_password)
            smtp.send_message(message)
        logger.info("Confirmation email sent for event %s", event.id)
