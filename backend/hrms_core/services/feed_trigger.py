"""Fire-and-forget sync requests to the biometric time-clock feed.

A sync asks the feed to pull the device log for a date (optionally one employee)
and rewrite the attendance records. The caller never waits for the result: the
request runs as a background task bounded by a timeout, and its outcome is only
logged. Callers then sleep a short heuristic delay before reading the store,
accepting that the read may still see stale data.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

import httpx

from hrms_core.config import get_settings
from hrms_core.services.clock import local_today
from hrms_core.services.sync_limiter import SyncKey, SyncRateLimiter, get_sync_limiter

if TYPE_CHECKING:
    from datetime import date

logger = logging.getLogger(__name__)


class FeedTrigger:
    """Dispatches rate-limited sync requests to the time-clock feed."""

    def __init__(
        self,
        sync_url: str | None,
        limiter: SyncRateLimiter | None = None,
        *,
        timeout_seconds: float = 3.0,
        delay_seconds: float = 0.3,
        first_sync_delay_seconds: float = 1.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.sync_url = sync_url
        self._limiter = limiter
        self.timeout_seconds = timeout_seconds
        self.delay_seconds = delay_seconds
        self.first_sync_delay_seconds = first_sync_delay_seconds
        self._client = client
        self._owns_client = client is None
        self._pending: set[asyncio.Task[None]] = set()

    @property
    def limiter(self) -> SyncRateLimiter:
        """The limiter given at construction, else the current process-wide one."""
        return self._limiter if self._limiter is not None else get_sync_limiter()

    @property
    def enabled(self) -> bool:
        return bool(self.sync_url)

    @property
    def pending(self) -> int:
        """Number of dispatched syncs still in flight."""
        return len(self._pending)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient()
        return self._client

    def dispatch(
        self,
        target_date: date | None = None,
        employee_code: str | None = None,
        *,
        force: bool = False,
        timeout: float | None = None,
    ) -> asyncio.Task[None] | None:
        """Start a sync in the background if the limiter allows it.

        Returns the running task, or None when no sync was started (feed not
        configured, or a sync for the same key fired within the interval). The
        task never raises, so callers may ignore it or await it with a timeout.
        Must be called from a running event loop.
        """
        if not self.sync_url:
            return None

        key = SyncKey(target_date or local_today(), employee_code)
        if not self.limiter.should_trigger(key, force=force):
            return None

        task = asyncio.create_task(
            self._send(self.sync_url, key, timeout or self.timeout_seconds),
            name=f"feed-sync:{key}",
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        logger.info("Dispatched feed sync for %s (force=%s)", key, force)
        return task

    async def trigger(
        self,
        target_date: date | None = None,
        employee_code: str | None = None,
        *,
        force: bool = False,
        timeout: float | None = None,
    ) -> bool:
        """Fire-and-forget form of ``dispatch``. Returns whether a sync was started."""
        return self.dispatch(target_date, employee_code, force=force, timeout=timeout) is not None

    async def wait_for_sync(self, initiated: bool, *, first_sync: bool = False) -> None:
        """Give a just-dispatched sync a moment to land before the store is read.

        This is a fixed delay, not a completion check.
        """
        if not initiated:
            return
        await asyncio.sleep(self.first_sync_delay_seconds if first_sync else self.delay_seconds)

    async def wait_pending(self, timeout: float | None = None) -> None:
        """Wait up to ``timeout`` seconds for in-flight syncs.

        Syncs still running after the timeout are left alone.
        """
        if self._pending:
            await asyncio.wait(list(self._pending), timeout=timeout)

    async def _send(self, url: str, key: SyncKey, timeout: float) -> None:
        body = {
            "fromDate": f"{key.date.isoformat()} 00:00:00",
            "toDate": "now",
            "lookbackDays": 0,
        }
        params = {"emp_code": key.employee_code} if key.employee_code else None

        try:
            async with asyncio.timeout(timeout):
                response = await self._get_client().post(url, json=body, params=params, timeout=timeout)
            response.raise_for_status()
        except (TimeoutError, httpx.TimeoutException):
            logger.warning("Feed sync for %s timed out after %.1fs", key, timeout)
        except httpx.HTTPStatusError as exc:
            logger.warning("Feed sync for %s rejected with HTTP %d", key, exc.response.status_code)
        except httpx.HTTPError as exc:
            logger.warning("Feed sync for %s failed: %s", key, exc)
        except httpx.InvalidURL as exc:
            logger.warning("Feed sync for %s has an invalid URL: %s", key, exc)
        else:
            logger.info("Feed sync for %s accepted (HTTP %d)", key, response.status_code)

    async def aclose(self) -> None:
        """Cancel in-flight syncs and close the HTTP client. Call on app shutdown."""
        for task in list(self._pending):
            task.cancel()
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None


_feed_trigger: FeedTrigger | None = None


def get_feed_trigger() -> FeedTrigger:
    """FastAPI dependency for the process-wide feed trigger."""
    global _feed_trigger
    if _feed_trigger is None:
        settings = get_settings()
        _feed_trigger = FeedTrigger(
            settings.essl_sync_url,
            timeout_seconds=settings.essl_sync_timeout_seconds,
            delay_seconds=settings.essl_sync_delay_seconds,
            first_sync_delay_seconds=settings.essl_first_sync_delay_seconds,
        )
    return _feed_trigger


def set_feed_trigger(trigger: FeedTrigger | None) -> None:
    """Override the trigger (for testing or production wiring)."""
    global _feed_trigger
    _feed_trigger = trigger
