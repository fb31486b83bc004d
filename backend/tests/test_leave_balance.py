"""Unit tests for leave balance calculation (no database)."""

from __future__ import annotations

from datetime import date, timedelta, timezone

import pytest

from hrms_core.models.enums import LeaveBucket, LeaveType
from hrms_core.schemas.leave import LeavePolicy, LeaveSpan
from hrms_core.services.leave_balance import (
    calculate_leave_balance,
    count_working_days,
    is_approved,
    parse_leave_type,
    span_usage,
)
from hrms_core.services.leave_year import resolve_year_boundary

IST = timezone(timedelta(hours=5, minutes=30))
POLICY = LeavePolicy()
YEAR_2025 = resolve_year_boundary(2025, POLICY, IST)


def _span(
    start: date,
    end: date,
    leave_type: str = LeaveType.PAID,
    hr: str | None = "approved",
    manager: str | None = "approved",
) -> LeaveSpan:
    return LeaveSpan(
        employee_code="1042",
        leave_type=leave_type,
        start_date=start,
        end_date=end,
        hr_approval=hr,
        manager_approval=manager,
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("start", "end", "expected"),
    [
        (date(2025, 3, 3), date(2025, 3, 7), 5),  # Mon-Fri
        (date(2025, 3, 8), date(2025, 3, 9), 0),  # weekend
        (date(2025, 3, 3), date(2025, 3, 16), 10),
        (date(2025, 3, 5), date(2025, 3, 5), 1),
        (date(2025, 3, 7), date(2025, 3, 3), 0),
    ],
)
def test_count_working_days(start: date, end: date, expected: int) -> None:
    assert count_working_days(start, end) == expected


@pytest.mark.parametrize(
    ("label", "expected"),
    [
        ("Paid Leave", LeaveType.PAID),
        ("paid leave", LeaveType.PAID),
        ("SICK LEAVE(HALFDAY)", LeaveType.SICK_HALF_DAY),
        ("Sick Leave(FullDay)", LeaveType.SICK_FULL_DAY),
        ("Maternity Leave", LeaveType.MATERNITY),
        ("Comp Off", LeaveType.OTHER),
    ],
)
def test_parse_leave_type(label: str, expected: LeaveType) -> None:
    assert parse_leave_type(label) == expected


@pytest.mark.parametrize(
    ("hr", "manager", "expected"),
    [
        ("approved", "approved", True),
        ("Approved", "APPROVED", True),
        ("approved", "pending", False),
        ("rejected", "approved", False),
        (None, "approved", False),
        ("approved", None, False),
        ("", "", False),
    ],
)
def test_dual_approval(hr: str | None, manager: str | None, expected: bool) -> None:
    assert is_approved(_span(date(2025, 3, 3), date(2025, 3, 3), hr=hr, manager=manager)) is expected


def test_span_usage_buckets() -> None:
    day = date(2025, 3, 3)
    assert span_usage(_span(day, day, LeaveType.PAID), YEAR_2025) == (LeaveBucket.PAID, 1.0)
    assert span_usage(_span(day, day, LeaveType.PATERNITY), YEAR_2025) == (LeaveBucket.PAID, 1.0)
    assert span_usage(_span(day, day, LeaveType.SICK_FULL_DAY), YEAR_2025) == (LeaveBucket.SICK, 1.0)
    assert span_usage(_span(day, day, LeaveType.SICK_HALF_DAY), YEAR_2025) == (LeaveBucket.SICK, 0.5)
    assert span_usage(_span(day, day, "Comp Off"), YEAR_2025) is None


def test_span_usage_outside_year_is_none() -> None:
    assert span_usage(_span(date(2024, 3, 4), date(2024, 3, 8)), YEAR_2025) is None


# ---------------------------------------------------------------------------
# Balance
# ---------------------------------------------------------------------------


def test_five_day_paid_leave_inside_year() -> None:
    balance = calculate_leave_balance([_span(date(2025, 3, 3), date(2025, 3, 7))], YEAR_2025, POLICY)

    assert balance.year == 2025
    assert balance.paid_allocation == 12
    assert balance.used_paid == 5
    assert balance.remaining_paid == 7
    assert balance.used_sick == 0
    assert balance.remaining_sick == 6


def test_no_spans_gives_full_allocation() -> None:
    balance = calculate_leave_balance([], YEAR_2025, POLICY)
    assert (balance.remaining_paid, balance.remaining_sick) == (12, 6)


def test_half_day_sick_leave_counts_half_per_working_day() -> None:
    spans = [
        _span(date(2025, 5, 5), date(2025, 5, 6), LeaveType.SICK_HALF_DAY),
        _span(date(2025, 6, 2), date(2025, 6, 2), LeaveType.SICK_FULL_DAY),
    ]
    balance = calculate_leave_balance(spans, YEAR_2025, POLICY)

    assert balance.used_sick == 2.0
    assert balance.remaining_sick == 4.0


def test_unapproved_and_unknown_spans_are_ignored() -> None:
    spans = [
        _span(date(2025, 3, 3), date(2025, 3, 7), manager="pending"),
        _span(date(2025, 3, 10), date(2025, 3, 14), hr="rejected"),
        _span(date(2025, 3, 17), date(2025, 3, 21), "Comp Off"),
        _span(date(2025, 3, 24), date(2025, 3, 24), hr=None, manager=None),
    ]
    balance = calculate_leave_balance(spans, YEAR_2025, POLICY)

    assert balance.used_paid == 0
    assert balance.used_sick == 0


def test_span_crossing_year_counts_only_in_year_days() -> None:
    span = _span(date(2025, 12, 29), date(2026, 1, 3))
    year_2026 = resolve_year_boundary(2026, POLICY, IST)

    assert calculate_leave_balance([span], YEAR_2025, POLICY).used_paid == 3
    assert calculate_leave_balance([span], year_2026, POLICY).used_paid == 2


def test_remaining_never_negative() -> None:
    spans = [
        _span(date(2025, 2, 3), date(2025, 2, 28)),
        _span(date(2025, 6, 2), date(2025, 6, 13), LeaveType.SICK_FULL_DAY),
    ]
    balance = calculate_leave_balance(spans, YEAR_2025, POLICY)

    assert balance.used_paid == 20
    assert balance.remaining_paid == 0
    assert balance.used_sick == 10
    assert balance.remaining_sick == 0


def test_each_year_starts_from_policy_allocation() -> None:
    """Unused 2025 leave does not raise the 2026 allocation."""
    policy = LeavePolicy(paid_leave_allocation=10, sick_leave_allocation=5)
    year_2026 = resolve_year_boundary(2026, policy, IST)

    balance = calculate_leave_balance([_span(date(2025, 3, 3), date(2025, 3, 3))], year_2026, policy)

    assert balance.paid_allocation == 10
    assert balance.remaining_paid == 10
    assert balance.sick_allocation == 5
