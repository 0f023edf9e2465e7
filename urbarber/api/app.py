"""
HTTP boundary for the booking form.

POST /api/book parses the form payload, checks the optional shared secret,
and hands the request to the BookingScheduler. Failures are mapped to the
JSON shapes the form understands; internal detail stays in the logs.
"""

import hmac
from contextlib import asynccontextmanager
from typing import Optional
from zoneinfo import ZoneInfo

from fastapi import Depends, FastAPI, Header, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from urbarber.config import AppConfig
from urbarber.errors import InvalidRequest, LockTimeout, StoreError, Unauthorized
from urbarber.logging_context import get_request_logger, new_request_id, set_request_id
from urbarber.notifications.dispatcher import NotificationDispatcher
from urbarber.scheduling.scheduler import Booked, BookingScheduler
from urbarber.schemas.booking_schema import BookingForm, BookingResponse

logger = get_request_logger(__name__)

BOOKING_KEY_HEADER = "X-Booking-Key"
BUSY_MESSAGE = "The booking system is busy right now. Please try again in a moment."
STORE_FAILURE_MESSAGE = "Failed to create calendar event"
LOCK_RETRY_AFTER_SECONDS = "2"


def _error(status_code: int, message: str, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=BookingResponse(ok=False, message=message).to_json(),
        headers=headers,
    )


async def _read_form(request: Request) -> BookingForm:
    try:
        payload = await request.json()
    except ValueError:
        raise InvalidRequest("Request body must be a JSON object") from None
    if not isinstance(payload, dict):
        raise InvalidRequest("Request body must be a JSON object")
    try:
        return BookingForm.model_validate(payload)
    except ValidationError as exc:
        fields = sorted({str(err["loc"][0]) for err in exc.errors() if err.get("loc")})
        raise InvalidRequest(f"Invalid fields: {', '.join(fields)}") from None


def create_app(
    config: AppConfig,
    scheduler: BookingScheduler,
    dispatcher: Optional[NotificationDispatcher] = None,
) -> FastAPI:
    """Build the FastAPI application around an already-wired scheduler."""
    shop_tz = ZoneInfo(config.shop.timezone)
    secret = config.api.booking_secret

    @asynccontextmanager
    async def lifespan(application: FastAPI):
        yield
        if dispatcher is not None:
            dispatcher.shutdown(wait=True)

    app = FastAPI(title=f"{config.shop.name} Booking API", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[config.api.allowed_origin],
        allow_methods=["POST", "OPTIONS"],
        allow_headers=["Content-Type", BOOKING_KEY_HEADER],
    )

    @app.middleware("http")
    async def assign_request_id(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or new_request_id()
        set_request_id(request_id)
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    def require_booking_key(
        booking_key: Optional[str] = Header(default=None, alias=BOOKING_KEY_HEADER),
    ) -> None:
        if secret is None:
            return
        if not booking_key or not hmac.compare_digest(booking_key.encode(), secret.encode()):
            raise Unauthorized("Unauthorized")

    @app.exception_handler(InvalidRequest)
    async def invalid_request_handler(request: Request, exc: InvalidRequest) -> JSONResponse:
        logger.info("Rejected booking request: %s", exc)
        return _error(400, str(exc))

    @app.exception_handler(Unauthorized)
    async def unauthorized_handler(request: Request, exc: Unauthorized) -> JSONResponse:
        logger.warning("Booking request with missing or wrong %s header", BOOKING_KEY_HEADER)
        return _error(401, "Unauthorized")

    @app.exception_handler(LockTimeout)
    async def lock_timeout_handler(request: Request, exc: LockTimeout) -> JSONResponse:
        logger.warning("Booking lock contention: %s", exc)
        return _error(503, BUSY_MESSAGE, headers={"Retry-After": LOCK_RETRY_AFTER_SECONDS})

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
        logger.error("Calendar store failure: %s", exc, exc_info=exc)
        return _error(502, STORE_FAILURE_MESSAGE)

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unexpected booking failure: %s", exc, exc_info=exc)
        return _error(500, STORE_FAILURE_MESSAGE)

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok", "shop": config.shop.name}

    @app.post("/api/book", dependencies=[Depends(require_booking_key)])
    async def book(request: Request) -> JSONResponse:
        form = await _read_form(request)
        booking = form.to_request(shop_tz)
        result = await run_in_threadpool(scheduler.attempt_booking, booking)

        if isinstance(result, Booked):
            body = BookingResponse(ok=True, event_id=result.event_id, event_link=result.event_link)
            return JSONResponse(status_code=200, content=body.to_json())

        body = BookingResponse(ok=False, conflict=True, message=result.message)
        return JSONResponse(status_code=409, content=body.to_json())

    return app
