"""Tests for the Google Calendar store using a fake API client."""

import httplib2
import pytest
from googleapiclient.errors import HttpError

from urbarber.config import CalendarConfig
from urbarber.errors import StoreError
from urbarber.schemas.calendar_schema import Attendee, EventDraft, Interval
from urbarber.store import google_calendar
from urbarber.store.google_calendar import GoogleCalendarStore, build_calendar_service
from tests.conftest import at


class _Call:
    def __init__(self, result=None, error=None):
        self._result = result
        self._error = error

    def execute(self):
        if self._error is not None:
            raise self._error
        return self._result


class FakeEvents:
    def __init__(self, pages=None, inserted=None, list_error=None, insert_error=None):
        self.pages = pages or [{"items": []}]
        self.inserted = inserted or {"id": "evt-1", "htmlLink": "https://calendar.google.com/event?eid=evt-1"}
        self.list_error = list_error
        self.insert_error = insert_error
        self.list_kwargs = []
        self.insert_kwargs = []

    def list(self, **kwargs):
        self.list_kwargs.append(kwargs)
        page = self.pages[len(self.list_kwargs) - 1]
        return _Call(page, self.list_error)

    def insert(self, **kwargs):
        self.insert_kwargs.append(kwargs)
        return _Call(self.inserted, self.insert_error)


class FakeService:
    def __init__(self, events: FakeEvents):
        self._events = events

    def events(self):
        return self._events


def _item(event_id, start, end, **extra):
    item = {
        "id": event_id,
        "start": {"dateTime": start},
        "end": {"dateTime": end},
        "summary": f"Event {event_id}",
    }
    item.update(extra)
    return item


def _store(events: FakeEvents) -> GoogleCalendarStore:
    return GoogleCalendarStore(FakeService(events), calendar_id="shop@group.calendar.google.com", timezone="America/Toronto")


class TestListEvents:
    def test_window_and_query_parameters(self):
        events = FakeEvents()
        _store(events).list_events(at(0, 0), at(23, 0))
        kwargs = events.list_kwargs[0]
        assert kwargs["calendarId"] == "shop@group.calendar.google.com"
        assert kwargs["timeMin"] == at(0, 0).isoformat()
        assert kwargs["timeMax"] == at(23, 0).isoformat()
        assert kwargs["singleEvents"] is True

    def test_parses_timed_events(self):
        events = FakeEvents(pages=[{"items": [
            _item("a", "2025-03-18T10:00:00-04:00", "2025-03-18T10:45:00-04:00",
                  attendees=[{"email": "ana@email.com", "displayName": "Ana"}],
                  htmlLink="https://cal/a"),
        ]}])
        [event] = _store(events).list_events(at(0, 0), at(23, 0))
        assert event.id == "a"
        assert event.interval == Interval(at(10, 0), at(10, 45))
        assert event.attendee == Attendee(email="ana@email.com", display_name="Ana")
        assert event.link == "https://cal/a"

    def test_all_day_events_block_the_day(self):
        events = FakeEvents(pages=[{"items": [
            {"id": "holiday", "start": {"date": "2025-03-18"}, "end": {"date": "2025-03-19"}},
        ]}])
        [event] = _store(events).list_events(at(0, 0), at(23, 0))
        assert event.interval.overlaps(Interval(at(10, 0), at(10, 45)))

    def test_follows_pagination(self):
        events = FakeEvents(pages=[
            {"items": [_item("a", "2025-03-18T09:00:00Z", "2025-03-18T09:30:00Z")], "nextPageToken": "p2"},
            {"items": [_item("b", "2025-03-18T11:00:00Z", "2025-03-18T11:30:00Z")]},
        ])
        result = _store(events).list_events(at(0, 0), at(23, 0))
        assert [e.id for e in result] == ["a", "b"]
        assert events.list_kwargs[1]["pageToken"] == "p2"

    def test_skips_cancelled_and_broken_events(self):
        events = FakeEvents(pages=[{"items": [
            _item("gone", "2025-03-18T09:00:00Z", "2025-03-18T09:30:00Z", status="cancelled"),
            {"id": "broken", "start": {}, "end": {}},
            _item("ok", "2025-03-18T11:00:00Z", "2025-03-18T11:30:00Z"),
        ]}])
        result = _store(events).list_events(at(0, 0), at(23, 0))
        assert [e.id for e in result] == ["ok"]

    def test_transport_failure_becomes_store_error(self):
        events = FakeEvents(list_error=OSError("timed out"))
        with pytest.raises(StoreError, match="list events"):
            _store(events).list_events(at(0, 0), at(23, 0))


class TestInsertEvent:
    def _draft(self, attendee=None):
        return EventDraft(
            interval=Interval(at(10, 0), at(10, 45)),
            title="Urbarber - John Smith",
            description="Service: Standard cut (In-Shop)",
            location="Urbarber Barbershop",
            attendee=attendee,
        )

    def test_insert_body_and_updates(self):
        events = FakeEvents()
        inserted = _store(events).insert_event(
            self._draft(Attendee(email="john.smith@email.com", display_name="John Smith"))
        )
        kwargs = events.insert_kwargs[0]
        body = kwargs["body"]
        assert kwargs["sendUpdates"] == "all"
        assert body["summary"] == "Urbarber - John Smith"
        assert body["start"] == {"dateTime": at(10, 0).isoformat(), "timeZone": "America/Toronto"}
        assert body["end"] == {"dateTime": at(10, 45).isoformat(), "timeZone": "America/Toronto"}
        assert body["attendees"] == [{"email": "john.smith@email.com", "displayName": "John Smith"}]
        assert body["reminders"] == {"useDefault": True}
        assert inserted.id == "evt-1"
        assert inserted.link.endswith("evt-1")

    def test_no_attendees_without_contact(self):
        events = FakeEvents()
        _store(events).insert_event(self._draft())
        assert "attendees" not in events.insert_kwargs[0]["body"]

    def test_http_error_becomes_store_error(self):
        error = HttpError(httplib2.Response({"status": "500"}), b'{"error": {"message": "backend"}}')
        events = FakeEvents(insert_error=error)
        with pytest.raises(StoreError) as exc_info:
            _store(events).insert_event(self._draft())
        assert exc_info.value.__cause__ is error

    def test_missing_id_is_store_error(self):
        events = FakeEvents(inserted={"htmlLink": "https://cal/x"})
        with pytest.raises(StoreError, match="without an id"):
            _store(events).insert_event(self._draft())


class TestCredentials:
    def test_private_key_newlines_expanded(self, monkeypatch):
        captured = {}

        def fake_from_info(info, scopes):
            captured["info"] = info
            captured["scopes"] = scopes
            return "creds"

        def fake_build(name, version, credentials, cache_discovery):
            captured["build"] = (name, version, credentials)
            return "service"

        monkeypatch.setattr(
            google_calendar.service_account.Credentials, "from_service_account_info", fake_from_info
        )
        monkeypatch.setattr(google_calendar, "build", fake_build)

        service = build_calendar_service("svc@proj.iam.gserviceaccount.com", "-----BEGIN-----\\nabc\\n-----END-----")
        assert service == "service"
        assert captured["info"]["private_key"] == "-----BEGIN-----\nabc\n-----END-----"
        assert captured["info"]["client_email"] == "svc@proj.iam.gserviceaccount.com"
        assert captured["scopes"] == ["https://www.googleapis.com/auth/calendar"]
        assert captured["build"] == ("calendar", "v3", "creds")

    def test_from_config_requires_credentials(self, shop):
        with pytest.raises(ValueError, match="GOOGLE_SERVICE_ACCOUNT_EMAIL"):
            GoogleCalendarStore.from_config(
                CalendarConfig(backend="google", service_account_email=None, private_key=None), shop
            )
