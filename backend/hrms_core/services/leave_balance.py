"""Used and remaining leave entitlement for a policy year.

A span counts only when both HR and the manager approved it, and only for the
working days (Mon-Fri, no holiday calendar) that fall inside the policy year.
Allocation always comes from the policy for the resolved year; there is no
carry-forward in either direction.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import TYPE_CHECKING

from hrms_core.models.enums import ApprovalStatus, LeaveBucket, LeaveType
from hrms_core.schemas.leave import LeaveBalance
from hrms_core.services.leave_year import clamp_to_year

if TYPE_CHECKING:
    from collections.abc import Iterable

    from hrms_core.schemas.leave import LeavePolicy, LeaveSpan, LeaveYearBoundary

# Bucket and per-day weight for each leave type. Types not listed draw nothing.
LEAVE_TYPE_WEIGHTS: dict[LeaveType, tuple[LeaveBucket, float]] = {
    LeaveType.PAID: (LeaveBucket.PAID, 1.0),
    LeaveType.MATERNITY: (LeaveBucket.PAID, 1.0),
    LeaveType.PATERNITY: (LeaveBucket.PAID, 1.0),
    LeaveType.SICK_FULL_DAY: (LeaveBucket.SICK, 1.0),
    LeaveType.SICK_HALF_DAY: (LeaveBucket.SICK, 0.5),
}

_TYPES_BY_NAME = {leave_type.value.lower(): leave_type for leave_type in LeaveType}


def parse_leave_type(value: str) -> LeaveType:
    """Match a stored leave type label, ignoring case. Unknown labels map to OTHER."""
    return _TYPES_BY_NAME.get(value.strip().lower(), LeaveType.OTHER)


def is_approved(span: LeaveSpan) -> bool:
    """Both approvals must be ``approved``; missing values count as not approved."""
    return (
        ApprovalStatus.parse(span.hr_approval) == ApprovalStatus.APPROVED
        and ApprovalStatus.parse(span.manager_approval) == ApprovalStatus.APPROVED
    )


def count_working_days(start: date, end: date) -> int:
    """Weekdays in the inclusive range ``[start, end]``."""
    count = 0
    current = start
    one_day = timedelta(days=1)
    while current <= end:
        if current.weekday() < 5:
            count += 1
        current += one_day
    return count


def span_usage(span: LeaveSpan, boundary: LeaveYearBoundary) -> tuple[LeaveBucket, float] | None:
    """Days a span draws from its bucket within the policy year.

    Returns None when the span is not fully approved, has a type that draws from
    no bucket, or does not overlap the year.
    """
    if not is_approved(span):
        return None
    weight = LEAVE_TYPE_WEIGHTS.get(parse_leave_type(span.leave_type))
    if weight is None:
        return None
    clamped = clamp_to_year(span.start_date, span.end_date, boundary)
    if clamped is None:
        return None

    tz = boundary.year_start.tzinfo
    days = count_working_days(clamped.start.astimezone(tz).date(), clamped.end.astimezone(tz).date())
    bucket, per_day = weight
    return bucket, days * per_day


def calculate_leave_balance(
    spans: Iterable[LeaveSpan],
    boundary: LeaveYearBoundary,
    policy: LeavePolicy,
) -> LeaveBalance:
    """Sum approved in-year usage and derive remaining entitlement.

    Remaining never goes below zero; over-drawn leave shows as 0 remaining.
    """
    used = {LeaveBucket.PAID: 0.0, LeaveBucket.SICK: 0.0}
    for span in spans:
        usage = span_usage(span, boundary)
        if usage is not None:
            bucket, days = usage
            used[bucket] += days

    paid_allocation = policy.paid_leave_allocation
    sick_allocation = policy.sick_leave_allocation
    return LeaveBalance(
        year=boundary.year,
        paid_allocation=paid_allocation,
        sick_allocation=sick_allocation,
        used_paid=used[LeaveBucket.PAID],
        used_sick=used[LeaveBucket.SICK],
        remaining_paid=max(0.0, paid_allocation - used[LeaveBucket.PAID]),
        remaining_sick=max(0.0, sick_allocation - used[LeaveBucket.SICK]),
    )
