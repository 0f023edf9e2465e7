"""Booking failure taxonomy.

A slot conflict is a normal outcome and is returned, not raised. Everything
here is a failure the caller has to handle:

- InvalidRequest: client-fixable input problem, reported verbatim.
- Unauthorized: shared-secret mismatch.
- LockTimeout: contention on the booking lock; transient, safe to retry.
- StoreError: the calendar store failed; cause is chained for logging only.
"""


class BookingError(Exception):
    """Base class for booking failures."""

    retryable: bool = False


class InvalidRequest(BookingError):
    """The booking request is malformed or incomplete."""


class Unauthorized(BookingError):
    """The request did not carry the configured shared secret."""


class LockTimeout(BookingError):
    """The booking lock could not be acquired within the bounded wait."""

    retryable = True

    def __init__(self, key: str, timeout: float) -> None:
        super().__init__(f"Could not acquire booking lock for '{key}' within {timeout:g} seconds.")
        self.key = key
        self.timeout = timeout


class StoreError(BookingError):
    """The calendar store rejected or failed a read or write."""

    retryable = True
