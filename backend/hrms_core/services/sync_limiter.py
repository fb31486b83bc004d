"""Throttle for time-clock sync requests.

Every read of live attendance may piggy-back a sync with the biometric feed. The
limiter keeps the last trigger instant per ``SyncKey`` and lets a new sync through
only once the configured interval has passed.

The check is read-then-write with no lock: two requests racing on a stale entry
can both be told to fire. Upstream syncs are idempotent refreshes, so this stays a
best-effort throttle rather than an exactly-once gate. The cache is also local to
the process; with N instances the feed can see up to N syncs per interval.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from hrms_core.config import get_settings

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import date

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SyncKey:
    """Sync scope: all employees for a date, or a single employee when a code is set."""

    date: date
    employee_code: str | None = None

    @property
    def is_global(self) -> bool:
        return self.employee_code is None

    def __str__(self) -> str:
        base = f"essl_sync_{self.date.isoformat()}"
        return f"{base}_{self.employee_code}" if self.employee_code else base


@runtime_checkable
class SyncCacheStore(Protocol):
    """Key/value store of last-trigger instants (monotonic seconds)."""

    def get(self, key: SyncKey) -> float | None: ...

    def set(self, key: SyncKey, value: float) -> None: ...

    def items(self) -> list[tuple[SyncKey, float]]: ...

    def clear(self) -> None: ...


class InMemorySyncCacheStore:
    """Process-local cache. Entries are overwritten, never expired."""

    def __init__(self) -> None:
        self._entries: dict[SyncKey, float] = {}

    def get(self, key: SyncKey) -> float | None:
        return self._entries.get(key)

    def set(self, key: SyncKey, value: float) -> None:
        self._entries[key] = value

    def items(self) -> list[tuple[SyncKey, float]]:
        return list(self._entries.items())

    def clear(self) -> None:
        self._entries.clear()


class SyncRateLimiter:
    """Decides whether a sync for a key should fire now."""

    def __init__(
        self,
        interval_seconds: float = 60.0,
        store: SyncCacheStore | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.interval_seconds = interval_seconds
        self._store: SyncCacheStore = store if store is not None else InMemorySyncCacheStore()
        self._clock = clock

    def should_trigger(self, key: SyncKey, *, force: bool = False) -> bool:
        """Return True and record the current instant if a sync may fire.

        ``force`` skips the interval check but still records the trigger.
        """
        now = self._clock()
        last = self._store.get(key)
        if not force and last is not None and (now - last) <= self.interval_seconds:
            logger.debug("Skipping sync for %s, last trigger %.1fs ago", key, now - last)
            return False

        self._store.set(key, now)
        return True

    def status(self) -> dict[str, float]:
        """Seconds since the last trigger for every key."""
        now = self._clock()
        return {str(key): now - last for key, last in self._store.items()}

    def clear(self) -> None:
        """Forget every trigger (manual reset and tests)."""
        self._store.clear()
        logger.info("Sync cache cleared")


_sync_limiter: SyncRateLimiter | None = None


def get_sync_limiter() -> SyncRateLimiter:
    """FastAPI dependency for the process-wide sync limiter."""
    global _sync_limiter
    if _sync_limiter is None:
        _sync_limiter = SyncRateLimiter(interval_seconds=get_settings().essl_sync_interval_seconds)
    return _sync_limiter


def set_sync_limiter(limiter: SyncRateLimiter) -> None:
    """Override the limiter (for testing or production wiring)."""
    global _sync_limiter
    _sync_limiter = limiter
