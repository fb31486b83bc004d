# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query, status

from hrms_core.api.deps import (
    AttendanceStoreDep,
    AuthDep,
    FeedTriggerDep,
    HRDep,
    SyncLimiterDep,
    validate_company_scope,
)
from hrms_core.schemas.attendance import (
    LiveAttendanceResponse,
    SyncStatusResponse,
    SyncTriggerRequest,
    SyncTriggerResponse,
)
from hrms_core.services import attendance as attendance_service

attendance_router = APIRouter(
    prefix="/companies/{company_id}/attendance",
    tags=["attendance"],
    dependencies=[Depends(validate_company_scope)],
)


@attendance_router.get("/live", response_model=LiveAttendanceResponse)
async def get_live_attendance(
    store: AttendanceStoreDep,
    feed: FeedTriggerDep,
    auth: AuthDep,
    employee_code: str = Query(min_length=1, max_length=50),
    target_date: date | None = Query(default=None, alias="date"),
    force_sync: bool = Query(default=False),
    first_sync: bool = Query(default=False),
) -> LiveAttendanceResponse:
    """Live working, break and elapsed time for an employee-day."""
    return await attendance_service.get_live_attendance(
        store,
        feed,
        auth.company_id,
        employee_code,
        target_date,
        force_sync=force_sync,
        first_sync=first_sync,
    )


@attendance_router.post("/sync", response_model=SyncTriggerResponse, status_code=status.HTTP_202_ACCEPTED)
async def trigger_sync(
    payload: SyncTriggerRequest,
    feed: FeedTriggerDep,
    auth: HRDep,
) -> SyncTriggerResponse:
    """Request a time-clock sync for a date (HR/admin only)."""
    return await attendance_service.trigger_sync(feed, payload.date, payload.employee_code, force=payload.force)


@attendance_router.get("/sync/status", response_model=SyncStatusResponse)
async def get_sync_status(
    limiter: SyncLimiterDep,
    auth: HRDep,
) -> SyncStatusResponse:
    """Seconds since the last sync trigger, per key (HR/admin only)."""
    return attendance_service.get_sync_status(limiter)


@attendance_router.delete("/sync/cache", status_code=status.HTTP_204_NO_CONTENT)
async def clear_sync_cache(
    limiter: SyncLimiterDep,
    auth: HRDep,
) -> None:
    """Forget all sync triggers so the next read syncs immediately (HR/admin only)."""
    limiter.clear()
