from __future__ import annotations

from datetime import UTC, date, datetime, timedelta, timezone

from hrms_core.config import get_settings


def punch_timezone(offset_minutes: int | None = None) -> timezone:
    """Fixed offset in which the time clock records wall-clock punches."""
    if offset_minutes is None:
        offset_minutes = get_settings().punch_utc_offset_minutes
    return timezone(timedelta(minutes=offset_minutes))


def now_utc() -> datetime:
    """Return the current UTC time."""
    return datetime.now(UTC)


def local_today(tz: timezone | None = None) -> date:
    """Today's date as seen by the time clock."""
    return now_utc().astimezone(tz or punch_timezone()).date()
