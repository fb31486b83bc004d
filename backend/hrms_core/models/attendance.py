# ruff: noqa: TC003
from __future__ import annotations

import datetime

import sqlalchemy as sa
from sqlmodel import Field

from hrms_core.models.base import CompanyScoped, UpdatedAtMixin, UUIDBase


class AttendanceRecord(UUIDBase, CompanyScoped, UpdatedAtMixin, table=True):
    """One employee-day of punches as reconciled from the biometric time clock.

    Rows are written by the feed's own reconciliation process; this service only
    reads them.
    """

    __tablename__ = "attendance_record"
    __table_args__ = (
        sa.UniqueConstraint("company_id", "employee_code", "date", name="uq_attendance_employee_day"),
        sa.Index("ix_attendance_company_date", "company_id", "date"),
    )

    employee_code: str = Field(max_length=50, index=True)
    employee_name: str | None = Field(default=None, max_length=255)
    date: datetime.date
    clock_times: list[str] = Field(default_factory=list, sa_type=sa.JSON)
    status: str | None = Field(default=None, max_length=50)
    shift_time: str | None = Field(default=None, max_length=100)
