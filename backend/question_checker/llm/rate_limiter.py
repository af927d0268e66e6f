"""
Process-wide pacing gate for outbound LLM requests.

wait() holds a single lock across check, sleep and record, so concurrent callers queue
up and are released at least min_interval apart. Callers may pass a monotonic deadline
and/or a threading.Event to give up while queued; an abandoned wait never records a dispatch.
"""
import logging
import threading
import time
from typing import Callable

from question_checker.config import settings
from question_checker.errors import DeadlineExceeded, ValidationCancelled

logger = logging.getLogger(__name__)


class RateLimiter:
    """Enforces a minimum interval between dispatch starts across all threads."""

    def __init__(
        self,
        min_interval_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        poll_interval: float = 0.05,
    ) -> None:
        self._min_interval = (
            settings.min_request_interval_seconds if min_interval_seconds is None else min_interval_seconds
        )
        self._clock = clock
        self._sleep = sleep
        self._poll_interval = poll_interval
        self._lock = threading.Lock()
        self._last_dispatch_at: float | None = None

    @property
    def last_dispatch_at(self) -> float | None:
        return self._last_dispatch_at

    def wait(self, deadline: float | None = None, cancel: threading.Event | None = None) -> float:
        """Block until min_interval has passed since the previous dispatch; record and return now."""
        self._acquire(deadline, cancel)
        try:
            now = self._clock()
            if self._last_dispatch_at is not None:
                remaining = self._last_dispatch_at + self._min_interval - now
                if remaining > 0:
                    if deadline is not None and now + remaining >= deadline:
                        raise DeadlineExceeded(
                            f"Next request slot is {remaining:.1f}s away, past the caller's deadline"
                        )
                    logger.info("Rate limiting: waiting %.1fs before next request...", remaining)
                    self._pause(remaining, cancel)
            self._last_dispatch_at = self._clock()
            return self._last_dispatch_at
        finally:
            self._lock.release()

    def _check_abandoned(self, deadline: float | None, cancel: threading.Event | None) -> None:
        if cancel is not None and cancel.is_set():
            raise ValidationCancelled("Validation cancelled while waiting for the rate limiter")
        if deadline is not None and self._clock() >= deadline:
            raise DeadlineExceeded("Deadline passed while waiting for the rate limiter")

    def _acquire(self, deadline: float | None, cancel: threading.Event | None) -> None:
        if deadline is None and cancel is None:
            self._lock.acquire()
            return
        while True:
            self._check_abandoned(deadline, cancel)
            timeout = self._poll_interval
            if deadline is not None:
                timeout = min(timeout, deadline - self._clock())
            if timeout > 0 and self._lock.acquire(timeout=timeout):
                return

    def _pause(self, seconds: float, cancel: threading.Event | None) -> None:
        if cancel is None:
            self._sleep(seconds)
            return
        end = self._clock() + seconds
        while True:
            if cancel.is_set():
                raise ValidationCancelled("Validation cancelled while waiting for the rate limiter")
            left = end - self._clock()
            if left <= 0:
                return
            self._sleep(min(self._poll_interval, left))
