# ruff: noqa: TC003
from __future__ import annotations

import datetime

from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Punch records
# ---------------------------------------------------------------------------


class PunchRecord(BaseModel):
    """One employee-day as stored by the time-clock feed."""

    employee_code: str
    employee_name: str | None = None
    date: datetime.date
    clock_times: list[str] = []
    status: str | None = None
    shift_time: str | None = None


class LiveAttendanceResponse(BaseModel):
    """Live view of an employee-day, evaluated at ``last_updated``."""

    has_record: bool
    is_ongoing: bool
    employee_code: str
    employee_name: str | None = None
    date: datetime.date
    in_time: datetime.datetime | None = None
    out_time: datetime.datetime | None = None
    clock_times: list[str] = []
    total_hours: str | None = None
    login_hours: str | None = None
    break_hours: str | None = None
    status: str | None = None
    shift_time: str | None = None
    sync_triggered: bool = False
    last_updated: datetime.datetime


# ---------------------------------------------------------------------------
# Feed synchronisation
# ---------------------------------------------------------------------------


class SyncTriggerRequest(BaseModel):
    """Request body for a manual feed sync."""

    date: datetime.date | None = None
    employee_code: str | None = Field(default=None, min_length=1, max_length=50)
    force: bool = False


class SyncTriggerResponse(BaseModel):
    """Whether a feed sync was dispatched."""

    triggered: bool
    key: str


class SyncStatusResponse(BaseModel):
    """Seconds elapsed since the last trigger, per sync key."""

    entries: dict[str, float]
    interval_seconds: float
