"""
Booking service entry point.

Serves the booking API with uvicorn. The calendar backend, shared secret
and SMTP settings come from the environment (see urbarber/config.py).

Usage:
    Serve API:     python main.py
    Check config:  python main.py check
"""

import logging
import sys

from urbarber.config import settings

logger = logging.getLogger(__name__)


def _run_server() -> None:
    """Start the HTTP server for the booking form."""
    import uvicorn

    from urbarber.api import build_application

    app = build_application(settings)
    logger.info(
        "Serving %s bookings on %s:%d", settings.shop.name, settings.api.host, settings.api.port
    )
    uvicorn.run(app, host=settings.api.host, port=settings.api.port, log_level=settings.log_level.lower())


def _run_check() -> None:
    """Build the store and notifier once to surface credential problems early."""
    from urbarber.notifications import build_notifier
    from urbarber.store import build_store

    store = build_store(settings)
    notifier = build_notifier(settings)
    logger.info(
        "Calendar '%s' via %s, notifier %s, padding %d min, lock timeout %d ms",
        store.calendar_id,
        type(store).__name__,
        type(notifier).__name__,
        settings.calendar.slot_padding_minutes,
        settings.calendar.lock_timeout_ms,
    )


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == "check":
        _run_check()
    else:
        _run_server()
