# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Policy
# ---------------------------------------------------------------------------


class LeavePolicy(BaseModel):
    """Annual leave policy.

    ``year_start_month`` is zero-based: 0 is January, 3 is April for an
    April-March fiscal year.
    """

    model_config = ConfigDict(frozen=True)

    carry_forward: bool = False
    max_carry_forward: float | None = Field(default=None, ge=0)
    annual_reset: bool = True
    paid_leave_allocation: float = Field(default=12, ge=0)
    sick_leave_allocation: float = Field(default=6, ge=0)
    year_start_month: int = Field(default=0, ge=0, le=11)


class LeaveAllocation(BaseModel):
    """Entitlement granted for one policy year."""

    year: int
    paid_leave: float
    sick_leave: float
    carry_forward: float = 0


# ---------------------------------------------------------------------------
# Year boundary and spans
# ---------------------------------------------------------------------------


class LeaveYearBoundary(BaseModel):
    """First and last instant of a policy year."""

    model_config = ConfigDict(frozen=True)

    year: int
    year_start: datetime
    year_end: datetime


class LeaveSpan(BaseModel):
    """A leave request as read from the leave store."""

    id: uuid.UUID | None = None
    employee_code: str
    leave_type: str
    start_date: date
    end_date: date
    hr_approval: str | None = None
    manager_approval: str | None = None
    reason: str | None = None


# ---------------------------------------------------------------------------
# Balance
# ---------------------------------------------------------------------------


class LeaveBalance(BaseModel):
    """Used and remaining entitlement for one policy year."""

    year: int
    paid_allocation: float
    sick_allocation: float
    used_paid: float = 0
    used_sick: float = 0
    remaining_paid: float
    remaining_sick: float


class LeaveBalanceResponse(LeaveBalance):
    """Leave balance for an employee, with the spans that were counted."""

    employee_code: str
    year_start: datetime
    year_end: datetime
    carry_forward: bool
    approved_leaves: list[LeaveSpan]


# ---------------------------------------------------------------------------
# Year-end processing
# ---------------------------------------------------------------------------


class LeaveStatistics(BaseModel):
    """Counts of leave requests starting within a policy year."""

    year: int
    total: int = 0
    approved: int = 0
    pending: int = 0
    rejected: int = 0


class LeaveYearResponse(BaseModel):
    """Policy-year overview for administrators."""

    year: int
    current_year: int
    year_start: datetime
    year_end: datetime
    policy: LeavePolicy
    description: str
    statistics: LeaveStatistics
    can_reset: bool
    should_auto_reset: bool
    next_reset_date: datetime


class LeaveYearResetRequest(BaseModel):
    """Request body for a year-end reset."""

    year: int = Field(ge=1970, le=9998)
    confirm_reset: bool


class LeaveYearResetResponse(BaseModel):
    """Summary of a year-end reset under the no-carry-forward policy."""

    year: int
    previous_year: int
    reset_date: datetime
    carry_forward: bool
    new_allocation: LeaveAllocation
    previous_year_statistics: LeaveStatistics
    message: str
