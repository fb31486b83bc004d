"""Service-level tests over the in-memory and SQL stores."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timedelta, timezone
from typing import TYPE_CHECKING

import pytest

from hrms_core.exceptions import AppError
from hrms_core.models.attendance import AttendanceRecord
from hrms_core.models.leave import CompanyLeavePolicy, LeaveRequest
from hrms_core.schemas.attendance import PunchRecord
from hrms_core.schemas.leave import LeaveSpan, LeaveYearResetRequest
from hrms_core.services import attendance as attendance_service
from hrms_core.services import leave as leave_service
from hrms_core.services.attendance_store import (
    AttendanceStore,
    InMemoryAttendanceStore,
    SqlAttendanceStore,
)
from hrms_core.services.feed_trigger import FeedTrigger
from hrms_core.services.leave_policy import default_leave_policy, get_leave_policy
from hrms_core.services.leave_store import InMemoryLeaveStore, LeaveStore, SqlLeaveStore
from hrms_core.services.sync_limiter import SyncRateLimiter

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

IST = timezone(timedelta(hours=5, minutes=30))
COMPANY_ID = uuid.uuid4()
DAY = date(2025, 1, 6)


def _punch_record(clock_times: list[str], status: str | None = None) -> PunchRecord:
    return PunchRecord(
        employee_code="1042",
        employee_name="Asha Rao",
        date=DAY,
        clock_times=clock_times,
        status=status,
    )


def _span(start: date, end: date, **kwargs: str | None) -> LeaveSpan:
    values: dict[str, str | None] = {"hr_approval": "approved", "manager_approval": "approved"}
    values.update(kwargs)
    return LeaveSpan(employee_code="1042", leave_type="Paid Leave", start_date=start, end_date=end, **values)


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------


async def test_store_implementations_satisfy_protocols(db_session: AsyncSession) -> None:
    assert isinstance(InMemoryAttendanceStore(), AttendanceStore)
    assert isinstance(SqlAttendanceStore(db_session), AttendanceStore)
    assert isinstance(InMemoryLeaveStore(), LeaveStore)
    assert isinstance(SqlLeaveStore(db_session), LeaveStore)


async def test_sql_attendance_store_reads_feed_row(db_session: AsyncSession) -> None:
    db_session.add(
        AttendanceRecord(
            company_id=COMPANY_ID,
            employee_code="1042",
            date=DAY,
            clock_times=["09:00", "18:00"],
            status="Present",
        )
    )
    await db_session.flush()
    store = SqlAttendanceStore(db_session)

    record = await store.get_record(COMPANY_ID, "1042", DAY)

    assert record is not None
    assert record.clock_times == ["09:00", "18:00"]
    assert record.status == "Present"
    assert await store.get_record(COMPANY_ID, "1042", date(2025, 1, 7)) is None
    assert await store.get_record(uuid.uuid4(), "1042", DAY) is None


async def test_sql_leave_store_overlap_and_start_filters(db_session: AsyncSession) -> None:
    for start, end in [
        (date(2024, 12, 30), date(2025, 1, 2)),
        (date(2025, 6, 2), date(2025, 6, 6)),
        (date(2026, 1, 5), date(2026, 1, 6)),
    ]:
        db_session.add(
            LeaveRequest(
                company_id=COMPANY_ID,
                employee_code="1042",
                leave_type="Paid Leave",
                start_date=start,
                end_date=end,
            )
        )
    await db_session.flush()
    store = SqlLeaveStore(db_session)

    overlapping = await store.list_leave_spans(COMPANY_ID, "1042", date(2025, 1, 1), date(2025, 12, 31))
    starting = await store.list_spans_starting_between(COMPANY_ID, date(2025, 1, 1), date(2025, 12, 31))

    assert [span.start_date for span in overlapping] == [date(2025, 6, 2), date(2024, 12, 30)]
    assert [span.start_date for span in starting] == [date(2025, 6, 2)]
    assert await store.get_policy_override(COMPANY_ID) is None


async def test_in_memory_leave_store_filters() -> None:
    store = InMemoryLeaveStore()
    store.seed(COMPANY_ID, _span(date(2024, 12, 30), date(2025, 1, 2)))
    store.seed(COMPANY_ID, _span(date(2026, 1, 5), date(2026, 1, 6)))
    store.seed(uuid.uuid4(), _span(date(2025, 3, 3), date(2025, 3, 3)))

    overlapping = await store.list_leave_spans(COMPANY_ID, "1042", date(2025, 1, 1), date(2025, 12, 31))
    assert [span.start_date for span in overlapping] == [date(2024, 12, 30)]
    assert await store.list_spans_starting_between(COMPANY_ID, date(2025, 1, 1), date(2025, 12, 31)) == []


# ---------------------------------------------------------------------------
# Leave policy
# ---------------------------------------------------------------------------


async def test_default_policy_from_settings() -> None:
    policy = await get_leave_policy(InMemoryLeaveStore(), COMPANY_ID)
    assert policy == default_leave_policy()
    assert policy.carry_forward is False
    assert policy.paid_leave_allocation == 12


async def test_policy_override_merges_set_fields() -> None:
    store = InMemoryLeaveStore()
    store.seed_policy(CompanyLeavePolicy(company_id=COMPANY_ID, sick_leave_allocation=8))

    policy = await get_leave_policy(store, COMPANY_ID)

    assert policy.sick_leave_allocation == 8
    assert policy.paid_leave_allocation == 12
    assert policy.year_start_month == 0


async def test_policy_override_cannot_enable_carry_forward(caplog: pytest.LogCaptureFixture) -> None:
    store = InMemoryLeaveStore()
    store.seed_policy(CompanyLeavePolicy(company_id=COMPANY_ID, carry_forward=True, max_carry_forward=5))

    policy = await get_leave_policy(store, COMPANY_ID)

    assert policy.carry_forward is False
    assert "Ignoring carry-forward override" in caplog.text


async def test_invalid_policy_override_falls_back_to_default(caplog: pytest.LogCaptureFixture) -> None:
    store = InMemoryLeaveStore()
    store.seed_policy(CompanyLeavePolicy(company_id=COMPANY_ID, year_start_month=12, paid_leave_allocation=20))

    policy = await get_leave_policy(store, COMPANY_ID)

    assert policy == default_leave_policy()
    assert "Invalid leave policy override" in caplog.text


# ---------------------------------------------------------------------------
# Attendance service
# ---------------------------------------------------------------------------


async def test_live_attendance_with_feed_disabled() -> None:
    store = InMemoryAttendanceStore()
    store.seed(COMPANY_ID, _punch_record(["09:00"]))
    feed = FeedTrigger(None, SyncRateLimiter())

    live = await attendance_service.get_live_attendance(
        store,
        feed,
        COMPANY_ID,
        "1042",
        DAY,
        now=datetime(2025, 1, 6, 11, 0, tzinfo=IST),
    )

    assert live.sync_triggered is False
    assert live.has_record is True
    assert live.is_ongoing is True
    assert live.login_hours == "02:00:00"
    assert live.out_time == datetime(2025, 1, 6, 11, 0, tzinfo=IST)
    assert live.status is None


async def test_live_attendance_evaluated_in_the_afternoon() -> None:
    store = InMemoryAttendanceStore()
    store.seed(COMPANY_ID, _punch_record(["09:00", "13:00", "14:00"], status="Absent"))
    feed = FeedTrigger(None, SyncRateLimiter())

    live = await attendance_service.get_live_attendance(
        store,
        feed,
        COMPANY_ID,
        "1042",
        DAY,
        now=datetime(2025, 1, 6, 18, 0, tzinfo=IST),
    )

    assert live.login_hours == "08:00:00"
    assert live.break_hours == "01:00:00"
    assert live.status == "Present"


async def test_trigger_sync_reports_key() -> None:
    feed = FeedTrigger(None, SyncRateLimiter())
    result = await attendance_service.trigger_sync(feed, DAY, "1042")
    assert result.triggered is False
    assert result.key == "essl_sync_2025-01-06_1042"


def test_sync_status_reports_interval() -> None:
    status = attendance_service.get_sync_status(SyncRateLimiter(interval_seconds=30))
    assert status.entries == {}
    assert status.interval_seconds == 30


# ---------------------------------------------------------------------------
# Leave service
# ---------------------------------------------------------------------------


async def test_leave_balance_defaults_to_policy_year_of_now() -> None:
    store = InMemoryLeaveStore()
    store.seed_policy(CompanyLeavePolicy(company_id=COMPANY_ID, year_start_month=3))
    store.seed(COMPANY_ID, _span(date(2026, 2, 2), date(2026, 2, 3)))

    balance = await leave_service.get_leave_balance(
        store,
        COMPANY_ID,
        "1042",
        now=datetime(2026, 2, 10, 12, 0, tzinfo=IST),
    )

    assert balance.year == 2025
    assert balance.used_paid == 2
    assert balance.remaining_paid == 10


async def test_leave_year_info_auto_reset_flag() -> None:
    info = await leave_service.get_leave_year_info(
        InMemoryLeaveStore(),
        COMPANY_ID,
        now=datetime(2026, 1, 1, 9, 0, tzinfo=IST),
    )

    assert info.year == 2026
    assert info.current_year == 2026
    assert info.should_auto_reset is True
    assert info.can_reset is False
    assert info.next_reset_date == datetime(2027, 1, 1, tzinfo=IST)


def test_summarize_spans_counts_each_flag() -> None:
    stats = leave_service.summarize_spans(
        2025,
        [
            _span(DAY, DAY),
            _span(DAY, DAY, hr_approval="Pending"),
            _span(DAY, DAY, hr_approval="rejected", manager_approval="pending"),
            _span(DAY, DAY, hr_approval=None, manager_approval=None),
        ],
    )
    assert (stats.total, stats.approved, stats.pending, stats.rejected) == (4, 1, 2, 1)


async def test_reset_without_confirmation_raises() -> None:
    with pytest.raises(AppError) as exc_info:
        await leave_service.reset_leave_year(
            InMemoryLeaveStore(),
            COMPANY_ID,
            LeaveYearResetRequest(year=2026, confirm_reset=False),
        )
    assert exc_info.value.status_code == 400
