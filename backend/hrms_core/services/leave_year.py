"""Policy-year windows for leave accounting.

A policy year starts on the first day of ``policy.year_start_month`` (zero-based,
0 = January) and ends one millisecond before the same day twelve months later.
Leave spans are clamped into the window so a span crossing the boundary counts
only its in-year days.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import NamedTuple

from hrms_core.schemas.leave import LeaveAllocation, LeavePolicy, LeaveYearBoundary
from hrms_core.services.clock import punch_timezone

_ONE_MS = timedelta(milliseconds=1)
_ONE_DAY = timedelta(days=1)


class DateRange(NamedTuple):
    """Closed interval of instants."""

    start: datetime
    end: datetime


def resolve_year_boundary(
    year: int,
    policy: LeavePolicy | None = None,
    tz: timezone | None = None,
) -> LeaveYearBoundary:
    """Return the first and last instant of policy year ``year``."""
    policy = policy or LeavePolicy()
    tz = tz or punch_timezone()
    month = policy.year_start_month + 1
    year_start = datetime(year, month, 1, tzinfo=tz)
    next_start = datetime(year + 1, month, 1, tzinfo=tz)
    return LeaveYearBoundary(year=year, year_start=year_start, year_end=next_start - _ONE_MS)


def policy_year_for(day: date, policy: LeavePolicy | None = None) -> int:
    """Policy year containing ``day``.

    With an April start, 2026-02-10 belongs to policy year 2025.
    """
    policy = policy or LeavePolicy()
    return day.year if day.month - 1 >= policy.year_start_month else day.year - 1


def _as_instant(value: date | datetime, tz: tzinfo | None) -> datetime:
    if isinstance(value, datetime):
        return value if value.tzinfo is not None else value.replace(tzinfo=tz)
    return datetime(value.year, value.month, value.day, tzinfo=tz)


def clamp_to_year(
    start: date | datetime,
    end: date | datetime,
    boundary: LeaveYearBoundary,
) -> DateRange | None:
    """Overlap of ``[start, end]`` with the policy year, or None if they do not meet.

    Plain dates are taken as the start of that day in the boundary's timezone.
    Clamping an already clamped range returns it unchanged.
    """
    tz = boundary.year_start.tzinfo
    span_start = _as_instant(start, tz)
    span_end = _as_instant(end, tz)

    clamped_start = max(span_start, boundary.year_start)
    clamped_end = min(span_end, boundary.year_end)
    if clamped_start > clamped_end:
        return None
    return DateRange(clamped_start, clamped_end)


def is_date_in_year(value: date | datetime, boundary: LeaveYearBoundary) -> bool:
    tz = boundary.year_start.tzinfo
    instant = _as_instant(value, tz)
    return boundary.year_start <= instant <= boundary.year_end


def calculate_leave_allocation(year: int, policy: LeavePolicy) -> LeaveAllocation:
    """Entitlement for ``year``.

    Carry-forward is always zero: unused leave never moves between years.
    """
    return LeaveAllocation(
        year=year,
        paid_leave=policy.paid_leave_allocation,
        sick_leave=policy.sick_leave_allocation,
        carry_forward=0,
    )


def should_reset_leaves(current: datetime, policy: LeavePolicy, tz: timezone | None = None) -> bool:
    """True during the first day of a policy year when annual reset is enabled."""
    if not policy.annual_reset:
        return False
    tz = tz or punch_timezone()
    local = _as_instant(current, tz).astimezone(tz)
    year_start = resolve_year_boundary(local.year, policy, tz).year_start
    return year_start <= local < year_start + _ONE_DAY


def describe_leave_policy(policy: LeavePolicy) -> str:
    """Human-readable summary for display next to balances."""
    start_month = calendar.month_name[policy.year_start_month + 1]
    end_month_index = (policy.year_start_month - 1) % 12 + 1
    end_month = calendar.month_name[end_month_index]
    end_day = calendar.monthrange(2001, end_month_index)[1]
    following = " of the following year" if policy.year_start_month else ""

    parts = [f"Leave year runs from {start_month} 1 to {end_month} {end_day}{following}."]
    if policy.annual_reset:
        parts.append("Leave balances reset annually.")
    if policy.carry_forward:
        cap = f" (maximum {policy.max_carry_forward:g} days)" if policy.max_carry_forward else ""
        parts.append(f"Unused leaves can be carried forward to the next year{cap}.")
    else:
        parts.append("No carry-forward of unused leaves from previous year.")
    parts.append(
        f"Annual allocation: {policy.paid_leave_allocation:g} paid leave days, "
        f"{policy.sick_leave_allocation:g} sick leave days."
    )
    return " ".join(parts)
