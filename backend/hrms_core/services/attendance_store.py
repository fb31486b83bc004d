# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from sqlalchemy import select
from sqlmodel import col

from hrms_core.models.attendance import AttendanceRecord
from hrms_core.schemas.attendance import PunchRecord
from hrms_core.services.punch_ledger import parse_clock_times

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


def _to_punch_record(row: AttendanceRecord) -> PunchRecord:
    return PunchRecord(
        employee_code=row.employee_code,
        employee_name=row.employee_name,
        date=row.date,
        clock_times=parse_clock_times(row.clock_times),
        status=row.status,
        shift_time=row.shift_time,
    )


@runtime_checkable
class AttendanceStore(Protocol):
    """Read access to the punch records written by the time-clock feed."""

    async def get_record(self, company_id: uuid.UUID, employee_code: str, day: date) -> PunchRecord | None:
        """Fetch one employee-day. Returns None if the feed has no record yet."""
        ...


class InMemoryAttendanceStore:
    """In-memory implementation for development and tests."""

    def __init__(self) -> None:
        self._records: dict[tuple[uuid.UUID, str, date], PunchRecord] = {}

    def seed(self, company_id: uuid.UUID, record: PunchRecord) -> None:
        """Seed a record, replacing any existing one for the same employee-day."""
        self._records[(company_id, record.employee_code, record.date)] = record

    async def get_record(self, company_id: uuid.UUID, employee_code: str, day: date) -> PunchRecord | None:
        return self._records.get((company_id, employee_code, day))


class SqlAttendanceStore:
    """Reads ``attendance_record`` rows through an async session."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_record(self, company_id: uuid.UUID, employee_code: str, day: date) -> PunchRecord | None:
        result = await self._session.execute(
            select(AttendanceRecord).where(
                col(AttendanceRecord.company_id) == company_id,
                col(AttendanceRecord.employee_code) == employee_code,
                col(AttendanceRecord.date) == day,
            )
        )
        row = result.scalar_one_or_none()
        return _to_punch_record(row) if row is not None else None
