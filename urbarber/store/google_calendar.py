"""Google Calendar API integration.

Reads and writes the shop calendar with a service account. The scheduler
only needs two calls: a windowed ``events.list`` and an ``events.insert``.
Every API, auth or transport failure is surfaced as StoreError.
"""

import logging
from datetime import datetime
from typing import Any, Optional
from zoneinfo import ZoneInfo

from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from urbarber.config import CalendarConfig, ShopConfig
from urbarber.errors import StoreError
from urbarber.schemas.calendar_schema import Attendee, CalendarEvent, EventDraft, InsertedEvent, Interval
from urbarber.utils import parse_timestamp

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/calendar"]
TOKEN_URI = "https://oauth2.googleapis.com/token"
PAGE_SIZE = 250

_STORE_FAILURES = (HttpError, GoogleAuthError, OSError)


def build_calendar_service(service_account_email: str, private_key: str) -> Any:
    """Build an authenticated Calendar v3 client from service account credentials.

    ``private_key`` may carry literal ``\\n`` sequences, as it does when the
    PEM is pasted into a single-line environment variable.
    """
    info = {
        "type": "service_account",
        "client_email": service_account_email,
        "private_key": private_key.replace("\\n", "\n"),
        "token_uri": TOKEN_URI,
    }
    creds = service_account.Credentials.from_service_account_info(info, scopes=SCOPES)
    return build("calendar", "v3", credentials=creds, cache_discovery=False)


def _parse_event_time(value: dict, tz: ZoneInfo) -> Optional[datetime]:
    # Timed events carry dateTime; all-day events carry date only.
    return parse_timestamp(value.get("dateTime") or value.get("date"), tz)


class GoogleCalendarStore:
    """CalendarStore backed by a Google Calendar."""

    def __init__(self, service: Any, calendar_id: str = "primary", timezone: str = "UTC") -> None:
        self._service = service
        self.calendar_id = calendar_id
        self.timezone = timezone
        self._tz = ZoneInfo(timezone)

    @classmethod
    def from_config(cls, calendar: CalendarConfig, shop: ShopConfig) -> "GoogleCalendarStore":
        if not calendar.service_account_email or not calendar.private_key:
            raise ValueError(
                "GOOGLE_SERVICE_ACCOUNT_EMAIL and GOOGLE_PRIVATE_KEY are required "
                "when CALENDAR_BACKEND=google"
            )
        service = build_calendar_service(calendar.service_account_email, calendar.private_key)
        return cls(service, calendar_id=calendar.calendar_id, timezone=shop.timezone)

    def list_events(self, window_start: datetime, window_end: datetime) -> list[CalendarEvent]:
        """List every event intersecting the window, following pagination."""
        events: list[CalendarEvent] = []
        page_token: Optional[str] = None
        try:
            while True:
                response = self._service.events().list(
                    calendarId=self.calendar_id,
                    timeMin=window_start.isoformat(),
                    timeMax=window_end.isoformat(),
                    singleEvents=True,
                    orderBy="startTime",
                    maxResults=PAGE_SIZE,
                    pageToken=page_token,
                ).execute()
                for item in response.get("items", []):
                    event = self._to_event(item)
                    if event is not None:
                        events.append(event)
                page_token = response.get("nextPageToken")
                if not page_token:
                    break
        except _STORE_FAILURES as exc:
            raise StoreError(f"Failed to list events on calendar '{self.calendar_id}'") from exc

        logger.debug(
            "Listed %d events on '%s' between %s and %s",
            len(events), self.calendar_id, window_start.isoformat(), window_end.isoformat(),
        )
        return events

    def insert_event(self, draft: EventDraft) -> InsertedEvent:
        body = self._to_body(draft)
        try:
            created = self._service.events().insert(
                calendarId=self.calendar_id,
                body=body,
                sendUpdates="all",
            ).execute()
        except _STORE_FAILURES as exc:
            raise StoreError(f"Failed to insert event on calendar '{self.calendar_id}'") from exc

        event_id = created.get("id")
        if not event_id:
            raise StoreError("Calendar API returned an event without an id")
        logger.info("Created Google Calendar event %s on '%s'", event_id, self.calendar_id)
        return InsertedEvent(id=event_id, link=created.get("htmlLink"))

    def _to_body(self, draft: EventDraft) -> dict:
        body: dict[str, Any] = {
            "summary": draft.title,
            "description": draft.description,
            "location": draft.location,
            "start": {"dateTime": draft.interval.start.isoformat(), "timeZone": self.timezone},
            "end": {"dateTime": draft.interval.end.isoformat(), "timeZone": self.timezone},
            "reminders": {"useDefault": True},
        }
        if draft.attendee is not None:
            attendee = {"email": draft.attendee.email}
            if draft.attendee.display_name:
                attendee["displayName"] = draft.attendee.display_name
            body["attendees"] = [attendee]
        return body

    def _to_event(self, item: dict) -> Optional[CalendarEvent]:
        if item.get("status") == "cancelled":
            return None
        start = _parse_event_time(item.get("start", {}), self._tz)
        end = _parse_event_time(item.get("end", {}), self._tz)
        if start is None or end is None or start >= end:
            logger.warning("Skipping event %s with unusable times", item.get("id"))
            return None

        attendee = None
        attendees = item.get("attendees") or []
        if attendees and attendees[0].get("email"):
            attendee = Attendee(
                email=attendees[0]["email"],
                display_name=attendees[0].get("displayName"),
            )
        return CalendarEvent(
            id=item.get("id", ""),
            interval=Interval(start, end),
            title=item.get("summary", ""),
            description=item.get("description", ""),
            location=item.get("location", ""),
            attendee=attendee,
            link=item.get("htmlLink"),
        )
