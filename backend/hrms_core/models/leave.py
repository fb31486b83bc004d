# ruff: noqa: TC003
from __future__ import annotations

import datetime

import sqlalchemy as sa
from sqlmodel import Field

from hrms_core.models.base import CompanyScoped, TimestampMixin, UpdatedAtMixin, UUIDBase


class LeaveRequest(UUIDBase, CompanyScoped, TimestampMixin, table=True):
    """A leave request with independent HR and manager approvals."""

    __tablename__ = "leave_request"
    __table_args__ = (
        sa.Index("ix_leave_employee_start", "company_id", "employee_code", "start_date"),
    )

    employee_code: str = Field(max_length=50, index=True)
    leave_type: str = Field(max_length=50)
    start_date: datetime.date
    end_date: datetime.date
    hr_approval: str | None = Field(default=None, max_length=20)
    manager_approval: str | None = Field(default=None, max_length=20)
    reason: str | None = None


class CompanyLeavePolicy(UUIDBase, CompanyScoped, UpdatedAtMixin, table=True):
    """Per-company overrides of the default leave policy."""

    __tablename__ = "company_leave_policy"
    __table_args__ = (sa.UniqueConstraint("company_id", name="uq_leave_policy_company"),)

    paid_leave_allocation: float | None = None
    sick_leave_allocation: float | None = None
    year_start_month: int | None = None
    carry_forward: bool = Field(default=False, sa_column_kwargs={"server_default": sa.false()})
    max_carry_forward: float | None = None
