"""
Keyed mutual exclusion for booking attempts.

BookingLock hands out one ``threading.Lock`` per key (in practice the
calendar id) and acquires it with a bounded wait. It is suitable for a
single process serving requests on several threads. It is NOT shared
across processes or server instances: a multi-worker deployment needs a
cross-process lock (e.g. Redis SET NX PX) exposing the same ``hold`` API.

Usage:
    lock = BookingLock(timeout=5.0)
    with lock.hold("primary"):
        ...  # read, check and insert while holding the lock
"""

import logging
import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from urbarber.errors import LockTimeout

logger = logging.getLogger(__name__)


class BookingLock:
    """Process-wide keyed lock with bounded acquisition."""

    def __init__(self, timeout: float = 5.0) -> None:
        if timeout <= 0:
            raise ValueError(f"Lock timeout must be > 0, got {timeout}")
        self.timeout = timeout
        self._locks: dict[str, threading.Lock] = {}
        self._master_lock = threading.Lock()

    def _lock_for(self, key: str) -> threading.Lock:
        with self._master_lock:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    def is_locked(self, key: str) -> bool:
        with self._master_lock:
            lock = self._locks.get(key)
        return lock is not None and lock.locked()

    @contextmanager
    def hold(self, key: str, timeout: Optional[float] = None) -> Iterator[None]:
        """Hold the lock for ``key`` for the duration of the block.

        Raises LockTimeout if the lock is not acquired within ``timeout``
        seconds (defaults to the instance timeout). The lock is released on
        every exit path, including exceptions raised inside the block.
        """
        wait = self.timeout if timeout is None else timeout
        lock = self._lock_for(key)
        if not lock.acquire(timeout=wait):
            logger.warning("Booking lock '%s' not acquired within %.3fs", key, wait)
            raise LockTimeout(key, wait)
        logger.debug("Booking lock '%s' acquired", key)
        try:
            yield
        finally:
            lock.release()
            logger.debug("Booking lock '%s' released", key)
