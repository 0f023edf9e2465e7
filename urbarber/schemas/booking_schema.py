"""Booking request and response data models."""

from dataclasses import dataclass
from datetime import datetime, tzinfo
from decimal import Decimal
from enum import Enum
from typing import ClassVar, Optional

from pydantic import BaseModel, ConfigDict, Field

from urbarber.errors import InvalidRequest
from urbarber.utils import normalize_phone, parse_timestamp


class LocationMode(str, Enum):
    """Where the appointment takes place."""
    IN_SHOP = "in_shop"
    HOME_SERVICE = "home_service"


@dataclass(frozen=True)
class Contact:
    email: str
    phone: str


@dataclass(frozen=True)
class BookingRequest:
    """
    A single client's request for an appointment slot.

    ``start`` and ``end`` may be None when the caller omitted them or sent
    something unparseable; the scheduler rejects such requests before it
    touches the lock or the calendar.
    """
    client_name: str
    contact: Contact
    start: Optional[datetime]
    end: Optional[datetime]
    location_mode: LocationMode = LocationMode.IN_SHOP
    location_detail: str = ""
    gender: str = ""
    notes: str = ""
    price: Optional[Decimal] = None

    @property
    def in_home(self) -> bool:
        return self.location_mode is LocationMode.HOME_SERVICE


class BookingForm(BaseModel):
    """Inbound JSON payload posted by the booking form."""
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    full_name: Optional[str] = Field(default=None, alias="fullName")
    gender: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    start: Optional[str] = None
    end: Optional[str] = None
    in_home: Optional[bool] = Field(default=None, alias="inHome")
    location: Optional[str] = None
    notes: Optional[str] = None
    price: Optional[Decimal] = None

    REQUIRED_FIELDS: ClassVar[tuple[str, ...]] = ("fullName", "email", "phone")

    def missing_fields(self) -> list[str]:
        values = {"fullName": self.full_name, "email": self.email, "phone": self.phone}
        return [name for name in self.REQUIRED_FIELDS if not values[name]]

    def to_request(self, default_tz: tzinfo) -> BookingRequest:
        """Convert the form into a BookingRequest.

        Naive ``start``/``end`` values are read as wall-clock time in
        ``default_tz``. Raises InvalidRequest when a required contact field
        is missing.
        """
        missing = self.missing_fields()
        if missing:
            raise InvalidRequest(f"Missing required fields: {', '.join(missing)}")

        return BookingRequest(
            client_name=self.full_name or "",
            contact=Contact(email=self.email or "", phone=normalize_phone(self.phone or "")),
            start=parse_timestamp(self.start, default_tz),
            end=parse_timestamp(self.end, default_tz),
            location_mode=LocationMode.HOME_SERVICE if self.in_home else LocationMode.IN_SHOP,
            location_detail=self.location or "",
            gender=self.gender or "",
            notes=self.notes or "",
            price=self.price,
        )


class BookingResponse(BaseModel):
    """Booking outcome returned to the form."""
    model_config = ConfigDict(populate_by_name=True)

    ok: bool
    event_id: Optional[str] = Field(default=None, alias="eventId")
    event_link: Optional[str] = Field(default=None, alias="eventLink")
    conflict: Optional[bool] = None
    message: Optional[str] = None

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
