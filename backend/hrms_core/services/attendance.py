# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING

from hrms_core.config import get_settings
from hrms_core.schemas.attendance import LiveAttendanceResponse, SyncStatusResponse, SyncTriggerResponse
from hrms_core.services.clock import local_today, now_utc, punch_timezone
from hrms_core.services.punch_ledger import PunchLedger
from hrms_core.services.sync_limiter import SyncKey

if TYPE_CHECKING:
    from hrms_core.services.attendance_store import AttendanceStore
    from hrms_core.services.feed_trigger import FeedTrigger
    from hrms_core.services.sync_limiter import SyncRateLimiter

logger = logging.getLogger(__name__)


async def get_live_attendance(
    store: AttendanceStore,
    feed: FeedTrigger,
    company_id: uuid.UUID,
    employee_code: str,
    target_date: date | None = None,
    *,
    force_sync: bool = False,
    first_sync: bool = False,
    now: datetime | None = None,
) -> LiveAttendanceResponse:
    """Maybe refresh from the time clock, then evaluate the day's punches.

    The sync is fire-and-forget; after a short fixed wait the store is read as
    it is, which may still be the pre-sync state.
    """
    settings = get_settings()
    tz = punch_timezone()
    target_date = target_date or local_today(tz)

    sync_triggered = await feed.trigger(
        target_date,
        employee_code,
        force=force_sync,
        timeout=settings.essl_live_sync_timeout_seconds,
    )
    await feed.wait_for_sync(sync_triggered, first_sync=first_sync)

    record = await store.get_record(company_id, employee_code, target_date)
    now = now or now_utc()
    if record is None:
        return LiveAttendanceResponse(
            has_record=False,
            is_ongoing=False,
            employee_code=employee_code,
            date=target_date,
            sync_triggered=sync_triggered,
            last_updated=now,
        )

    ledger = PunchLedger.from_clock_times(record.clock_times, target_date, tz)
    live = ledger.evaluate(
        now,
        status=record.status,
        max_shift=timedelta(hours=settings.essl_max_shift_hours),
    )
    if not live.has_record:
        logger.debug("No usable punches for %s on %s", employee_code, target_date)
        return LiveAttendanceResponse(
            has_record=False,
            is_ongoing=False,
            employee_code=employee_code,
            employee_name=record.employee_name,
            date=target_date,
            clock_times=record.clock_times,
            status=record.status,
            shift_time=record.shift_time,
            sync_triggered=sync_triggered,
            last_updated=now,
        )

    return LiveAttendanceResponse(
        has_record=True,
        is_ongoing=live.is_ongoing,
        employee_code=employee_code,
        employee_name=record.employee_name,
        date=target_date,
        in_time=live.in_time,
        out_time=live.out_time.astimezone(tz) if live.out_time else None,
        clock_times=record.clock_times,
        total_hours=live.total_hours,
        login_hours=live.login_hours,
        break_hours=live.break_hours,
        status=live.status,
        shift_time=record.shift_time,
        sync_triggered=sync_triggered,
        last_updated=now,
    )


async def trigger_sync(
    feed: FeedTrigger,
    target_date: date | None = None,
    employee_code: str | None = None,
    *,
    force: bool = False,
) -> SyncTriggerResponse:
    """Manually request a sync for a date, optionally for one employee."""
    target_date = target_date or local_today()
    triggered = await feed.trigger(target_date, employee_code, force=force)
    return SyncTriggerResponse(triggered=triggered, key=str(SyncKey(target_date, employee_code)))


def get_sync_status(limiter: SyncRateLimiter) -> SyncStatusResponse:
    """Seconds since the last trigger for every cached key."""
    return SyncStatusResponse(entries=limiter.status(), interval_seconds=limiter.interval_seconds)
