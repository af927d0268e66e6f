"""
Request dispatcher: one logical LLM call spread over many API keys.

Each attempt waits on the shared rate limiter, takes the next key from the pool and
calls the completion client. Quota and invalid-key failures are credential-scoped and
rotate to the next key (tenacity drives the attempt loop); any other failure is
request-scoped and reaches the caller after a single attempt.
"""
import logging
import threading
import time
from typing import Callable

from tenacity import RetryError, Retrying, retry_if_exception_type, stop_after_attempt, wait_none

from question_checker.config import settings
from question_checker.errors import (
    CredentialScopedError,
    CredentialsExhausted,
    DeadlineExceeded,
    InvalidCredential,
    QuotaExceeded,
)
from question_checker.llm.base import CompletionClient
from question_checker.llm.rate_limiter import RateLimiter
from question_checker.services.credential_pool import CredentialPool

logger = logging.getLogger(__name__)

_QUOTA_MARKERS = ("quota", "rate limit", "rate_limit", "resource exhausted", "resource_exhausted")


def _status_code(exc: BaseException) -> int | None:
    for attr in ("code", "status_code", "status"):
        value = getattr(exc, attr, None)
        if isinstance(value, int):
            return value
    response = getattr(exc, "response", None)
    value = getattr(response, "status_code", None)
    return value if isinstance(value, int) else None


def classify_llm_error(exc: BaseException, credential_id: str | None = None) -> CredentialScopedError | None:
    """Map a provider exception to QuotaExceeded / InvalidCredential, or None when it is not key-related."""
    status = _status_code(exc)
    msg = str(exc)
    lowered = msg.lower()
    if status == 429 or any(m in lowered for m in _QUOTA_MARKERS):
        return QuotaExceeded(msg, credential_id=credential_id, status_code=status)
    if status == 401 or "api key" in lowered or "api_key_invalid" in lowered:
        return InvalidCredential(msg, credential_id=credential_id, status_code=status)
    return None


class RequestDispatcher:
    """Sends prompts through the rate limiter with round-robin key rotation."""

    def __init__(
        self,
        pool: CredentialPool,
        rate_limiter: RateLimiter,
        client: CompletionClient,
        retry_multiplier: int | None = None,
        max_attempts: int | None = None,
        call_timeout: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._pool = pool
        self._rate_limiter = rate_limiter
        self._client = client
        self._retry_multiplier = settings.retry_multiplier if retry_multiplier is None else retry_multiplier
        self._max_attempts = settings.max_attempts if max_attempts is None else max_attempts
        self._call_timeout = settings.llm_timeout_seconds if call_timeout is None else call_timeout
        self._clock = clock

    def max_attempts(self) -> int:
        """Retry budget: explicit override, else max(pool size, 1) * retry multiplier."""
        if self._max_attempts:
            return self._max_attempts
        return max(self._pool.size(), 1) * max(self._retry_multiplier, 1)

    def send(
        self,
        prompt: str,
        deadline: float | None = None,
        cancel: threading.Event | None = None,
    ) -> str:
        """Return the trimmed model text, or raise. CredentialsExhausted when every attempt hit a key error."""
        max_attempts = self.max_attempts()
        retrying = Retrying(
            retry=retry_if_exception_type(CredentialScopedError),
            stop=stop_after_attempt(max_attempts),
            wait=wait_none(),
        )
        try:
            for attempt in retrying:
                with attempt:
                    return self._attempt(
                        prompt,
                        attempt.retry_state.attempt_number,
                        max_attempts,
                        deadline,
                        cancel,
                    )
        except RetryError as e:
            last_error = e.last_attempt.exception()
            logger.error("All API keys exhausted after %s attempt(s). Last error: %s", max_attempts, last_error)
            raise CredentialsExhausted(max_attempts, last_error) from last_error
        raise CredentialsExhausted(max_attempts)

    def _attempt(
        self,
        prompt: str,
        attempt_number: int,
        max_attempts: int,
        deadline: float | None,
        cancel: threading.Event | None,
    ) -> str:
        self._timeout_for(deadline)
        self._rate_limiter.wait(deadline=deadline, cancel=cancel)
        timeout = self._timeout_for(deadline)
        credential = self._pool.next()
        logger.info("Attempt %s/%s with API key %s", attempt_number, max_attempts, credential.masked)
        try:
            text = self._client.complete(credential.secret, prompt, timeout=timeout)
        except Exception as e:
            classified = classify_llm_error(e, credential.id)
            if classified is None:
                e.add_note(f"LLM request failed on attempt {attempt_number}/{max_attempts}")
                logger.exception("LLM request failed with API key %s", credential.masked)
                raise
            logger.warning(
                "API key %s failed (%s), switching to next key: %s",
                credential.masked,
                type(classified).__name__,
                e,
            )
            self._pool.record_failure(credential.id)
            raise classified from e
        self._pool.record_success(credential.id)
        self._pool.record_use(credential.id)
        return (text or "").strip()

    def _timeout_for(self, deadline: float | None) -> float | None:
        if deadline is None:
            return self._call_timeout
        remaining = deadline - self._clock()
        if remaining <= 0:
            raise DeadlineExceeded("Deadline passed before the LLM request could be sent")
        return min(remaining, self._call_timeout) if self._call_timeout else remaining
