"""
Shared fakes: a manual clock, an in-memory credential store and scripted completion clients.
"""
import threading
from dataclasses import replace
from datetime import datetime

import pytest

from question_checker.errors import StorageUnavailable
from question_checker.services.credential_store import Credential


class FakeClock:
    """Monotonic clock that only moves when sleep() or advance() is called."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start
        self.sleeps: list[float] = []
        self._lock = threading.Lock()

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        with self._lock:
            self.sleeps.append(seconds)
            self.now += seconds

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeCredentialStore:
    """In-memory CredentialStore; list_active returns copies in the stored order."""

    def __init__(self, secrets=()) -> None:
        self.credentials = [Credential(id=f"key-{i}", secret=s) for i, s in enumerate(secrets)]
        self.list_calls = 0
        self.fail_reads = False
        self.fail_writes = False
        self.writes: list[tuple] = []
        self._lock = threading.Lock()

    def list_active(self) -> list[Credential]:
        self.list_calls += 1
        if self.fail_reads:
            raise StorageUnavailable("store offline")
        return [replace(c) for c in self.credentials if c.is_active]

    def _get(self, credential_id: str) -> Credential:
        return next(c for c in self.credentials if c.id == credential_id)

    def _write(self, op: str, credential_id: str) -> Credential:
        if self.fail_writes:
            raise StorageUnavailable("store offline")
        self.writes.append((op, credential_id))
        return self._get(credential_id)

    def touch_last_used(self, credential_id: str, when: datetime) -> None:
        self._write("touch", credential_id).last_used_at = when

    def increment_error_count(self, credential_id: str) -> None:
        with self._lock:
            self._write("increment", credential_id).error_count += 1

    def reset_error_count(self, credential_id: str) -> None:
        self._write("reset", credential_id).error_count = 0


class FakeAPIError(Exception):
    """Shaped like google.genai.errors.APIError: integer code plus message."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(f"{code} {message}")
        self.code = code
        self.message = message


class ScriptedClient:
    """CompletionClient returning (or raising) scripted results in order; the last one repeats."""

    def __init__(self, *results) -> None:
        self.results = list(results)
        self.calls: list[tuple[str, str, float | None]] = []
        self._lock = threading.Lock()

    def complete(self, secret: str, prompt: str, timeout: float | None = None) -> str:
        with self._lock:
            self.calls.append((secret, prompt, timeout))
            result = self.results[min(len(self.calls) - 1, len(self.results) - 1)]
        if isinstance(result, BaseException):
            raise result
        return result


class CountingRateLimiter:
    """RateLimiter stand-in that never sleeps."""

    def __init__(self) -> None:
        self.waits = 0
        self.deadlines: list[float | None] = []

    def wait(self, deadline=None, cancel=None) -> float:
        self.waits += 1
        self.deadlines.append(deadline)
        return float(self.waits)


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def store():
    return FakeCredentialStore(["AIzaKeyNumber0000000", "AIzaKeyNumber1111111", "AIzaKeyNumber2222222"])
