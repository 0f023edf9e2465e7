"""Composes the calendar event recorded for a booking."""

from decimal import Decimal

from urbarber.config import ShopConfig
from urbarber.schemas.booking_schema import BookingRequest
from urbarber.schemas.calendar_schema import Attendee, EventDraft, Interval


def resolve_price(request: BookingRequest, shop: ShopConfig) -> Decimal:
    """Use the quoted price when given, otherwise base price plus any home-service surcharge."""
    if request.price is not None:
        return request.price
    price = Decimal(str(shop.base_price))
    if request.in_home:
        price += Decimal(str(shop.home_service_surcharge))
    return price


def format_price(price: Decimal) -> str:
    """Render a price as dollars, dropping cents when they are zero ("$25", "$27.50")."""
    if price == price.to_integral_value():
        return f"${price.quantize(Decimal(1))}"
    return f"${price.quantize(Decimal('0.01'))}"


def resolve_location(request: BookingRequest, shop: ShopConfig) -> str:
    """Client address for home service, the shop otherwise."""
    if request.in_home:
        return request.location_detail
    return shop.location


def build_title(request: BookingRequest, shop: ShopConfig) -> str:
    """Event title, e.g. "Urbarber - John Smith"."""
    return f"{shop.name} - {request.client_name}"


def build_description(request: BookingRequest, shop: ShopConfig) -> str:
    """One "Label: value" line per booking detail, "-" for anything left blank."""
    service_mode = "Home Service" if request.in_home else "In-Shop"
    lines = [
        f"Service: {shop.service_name} ({service_mode})",
        f"Gender: {request.gender or '-'}",
        f"Price: {format_price(resolve_price(request, shop))}",
        f"Phone: {request.contact.phone or '-'}",
        f"Email: {request.contact.email or '-'}",
        f"In-home: {'Yes' if request.in_home else 'No'}",
        f"Notes: {request.notes or '-'}",
    ]
    return "\n".join(lines)


def build_event(request: BookingRequest, interval: Interval, shop: ShopConfig) -> EventDraft:
    """Build the draft stored for ``request`` over the (unpadded) ``interval``."""
    attendee = None
    if request.contact.email:
        attendee = Attendee(email=request.contact.email, display_name=request.client_name)
    return EventDraft(
        interval=interval,
        title=build_title(request, shop),
        description=build_description(request, shop),
        location=resolve_location(request, shop),
        attendee=attendee,
    )
