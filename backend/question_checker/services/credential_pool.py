"""
Credential pool: strict round robin over a cached snapshot of active API keys.

The snapshot is reloaded from the store when older than the TTL, so the rotation
order is stable inside one window and only reshuffles (least recently used first)
across windows. The rotation index lives only in memory and is shared by all callers.
Health bookkeeping (last use, error count) is best-effort: store failures are logged.
"""
import logging
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

from question_checker.config import settings
from question_checker.errors import NoCredentialsAvailable, StorageUnavailable
from question_checker.services.credential_store import Credential, CredentialStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CredentialSnapshot:
    """Active credentials in load order and the monotonic time they were fetched."""

    credentials: tuple[Credential, ...]
    fetched_at: float

    def __len__(self) -> int:
        return len(self.credentials)

    def is_fresh(self, now: float, ttl_seconds: float) -> bool:
        return bool(self.credentials) and (now - self.fetched_at) < ttl_seconds


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CredentialPool:
    """Thread-safe selector over the active credentials of a CredentialStore."""

    def __init__(
        self,
        store: CredentialStore,
        ttl_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._ttl = settings.credential_cache_ttl_seconds if ttl_seconds is None else ttl_seconds
        self._clock = clock
        self._now = now
        self._lock = threading.RLock()
        self._snapshot: CredentialSnapshot | None = None
        self._index = 0

    def refresh(self) -> CredentialSnapshot:
        """Reload active credentials. On StorageUnavailable, fall back to the cached snapshot if any."""
        with self._lock:
            try:
                credentials = self._store.list_active()
            except StorageUnavailable as e:
                if self._snapshot is not None:
                    logger.warning(
                        "Credential refresh failed, using stale snapshot of %s key(s): %s",
                        len(self._snapshot),
                        e,
                    )
                    return self._snapshot
                raise
            self._snapshot = CredentialSnapshot(tuple(credentials), self._clock())
            logger.info("Loaded %s active API key(s)", len(credentials))
            return self._snapshot

    def snapshot(self) -> CredentialSnapshot:
        """Cached snapshot if non-empty and younger than the TTL, else a refreshed one."""
        with self._lock:
            if self._snapshot is not None and self._snapshot.is_fresh(self._clock(), self._ttl):
                return self._snapshot
            return self.refresh()

    def size(self) -> int:
        return len(self.snapshot())

    def next(self) -> Credential:
        """Select the credential at index mod length and advance the shared index."""
        with self._lock:
            snap = self.snapshot()
            if not snap.credentials:
                raise NoCredentialsAvailable("No active API keys available. Add API keys first.")
            credential = snap.credentials[self._index % len(snap)]
            self._index += 1
            return credential

    def record_success(self, credential_id: str) -> None:
        """Reset the credential's error count."""
        with self._lock:
            for c in self._cached(credential_id):
                c.error_count = 0
        self._best_effort("reset error count", self._store.reset_error_count, credential_id)

    def record_failure(self, credential_id: str) -> None:
        """Increment the credential's error count by one."""
        with self._lock:
            for c in self._cached(credential_id):
                c.error_count += 1
        self._best_effort("increment error count", self._store.increment_error_count, credential_id)

    def record_use(self, credential_id: str) -> None:
        """Set the credential's last use to now."""
        when = self._now()
        with self._lock:
            for c in self._cached(credential_id):
                c.last_used_at = when
        self._best_effort("update last use", self._store.touch_last_used, credential_id, when)

    def _cached(self, credential_id: str) -> list[Credential]:
        if self._snapshot is None:
            return []
        return [c for c in self._snapshot.credentials if c.id == credential_id]

    def _best_effort(self, action: str, fn, *args) -> None:
        try:
            fn(*args)
        except Exception as e:
            logger.warning("Could not %s for API key %s: %s", action, args[0], e)
