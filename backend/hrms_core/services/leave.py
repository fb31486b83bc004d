# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from fastapi import status

from hrms_core.exceptions import AppError
from hrms_core.models.enums import ApprovalStatus
from hrms_core.schemas.leave import (
    LeaveBalanceResponse,
    LeaveStatistics,
    LeaveYearResetResponse,
    LeaveYearResponse,
)
from hrms_core.services.clock import now_utc, punch_timezone
from hrms_core.services.leave_balance import calculate_leave_balance, is_approved
from hrms_core.services.leave_policy import get_leave_policy
from hrms_core.services.leave_year import (
    calculate_leave_allocation,
    describe_leave_policy,
    policy_year_for,
    resolve_year_boundary,
    should_reset_leaves,
)

if TYPE_CHECKING:
    from hrms_core.schemas.leave import LeaveSpan, LeaveYearBoundary, LeaveYearResetRequest
    from hrms_core.services.leave_store import LeaveStore

logger = logging.getLogger(__name__)

_MIN_YEAR = 1970
_MAX_YEAR = 9998


def _validate_year(year: int) -> None:
    if not _MIN_YEAR <= year <= _MAX_YEAR:
        raise AppError(f"Year must be between {_MIN_YEAR} and {_MAX_YEAR}", status_code=status.HTTP_400_BAD_REQUEST)


# ---------------------------------------------------------------------------
# Balance
# ---------------------------------------------------------------------------


async def get_leave_balance(
    store: LeaveStore,
    company_id: uuid.UUID,
    employee_code: str,
    year: int | None = None,
    *,
    now: datetime | None = None,
) -> LeaveBalanceResponse:
    """Balance of one employee for a policy year (default: the current one)."""
    tz = punch_timezone()
    policy = await get_leave_policy(store, company_id)
    if year is None:
        year = policy_year_for((now or now_utc()).astimezone(tz).date(), policy)
    _validate_year(year)

    boundary = resolve_year_boundary(year, policy, tz)
    spans = await store.list_leave_spans(
        company_id,
        employee_code,
        boundary.year_start.date(),
        boundary.year_end.date(),
    )
    balance = calculate_leave_balance(spans, boundary, policy)

    return LeaveBalanceResponse(
        **balance.model_dump(),
        employee_code=employee_code,
        year_start=boundary.year_start,
        year_end=boundary.year_end,
        carry_forward=policy.carry_forward,
        approved_leaves=[span for span in spans if is_approved(span)],
    )


# ---------------------------------------------------------------------------
# Year-end processing
# ---------------------------------------------------------------------------


def summarize_spans(year: int, spans: list[LeaveSpan]) -> LeaveStatistics:
    """Count requests by approval outcome.

    A request is pending or rejected if either approver says so; both flags can
    apply to the same request.
    """
    stats = LeaveStatistics(year=year, total=len(spans))
    for span in spans:
        approvals = (ApprovalStatus.parse(span.hr_approval), ApprovalStatus.parse(span.manager_approval))
        if is_approved(span):
            stats.approved += 1
        if ApprovalStatus.PENDING in approvals:
            stats.pending += 1
        if ApprovalStatus.REJECTED in approvals:
            stats.rejected += 1
    return stats


async def get_leave_statistics(
    store: LeaveStore,
    company_id: uuid.UUID,
    boundary: LeaveYearBoundary,
) -> LeaveStatistics:
    """Statistics for requests starting within the policy year."""
    spans = await store.list_spans_starting_between(
        company_id,
        boundary.year_start.date(),
        boundary.year_end.date(),
    )
    return summarize_spans(boundary.year, spans)


async def get_leave_year_info(
    store: LeaveStore,
    company_id: uuid.UUID,
    year: int | None = None,
    *,
    now: datetime | None = None,
) -> LeaveYearResponse:
    """Policy-year overview: boundaries, policy, statistics and reset state."""
    tz = punch_timezone()
    now = now or now_utc()
    policy = await get_leave_policy(store, company_id)
    current_year = policy_year_for(now.astimezone(tz).date(), policy)
    year = current_year if year is None else year
    _validate_year(year)

    boundary = resolve_year_boundary(year, policy, tz)
    statistics = await get_leave_statistics(store, company_id, boundary)

    return LeaveYearResponse(
        year=year,
        current_year=current_year,
        year_start=boundary.year_start,
        year_end=boundary.year_end,
        policy=policy,
        description=describe_leave_policy(policy),
        statistics=statistics,
        can_reset=year < current_year,
        should_auto_reset=should_reset_leaves(now, policy, tz),
        next_reset_date=resolve_year_boundary(current_year + 1, policy, tz).year_start,
    )


async def reset_leave_year(
    store: LeaveStore,
    company_id: uuid.UUID,
    payload: LeaveYearResetRequest,
) -> LeaveYearResetResponse:
    """Summarise the start of a new policy year.

    Nothing is written: with no carry-forward every year starts from the policy
    allocation, so the reset only reports what the new year looks like.
    """
    if not payload.confirm_reset:
        raise AppError("Year-end reset must be confirmed", status_code=status.HTTP_400_BAD_REQUEST)
    _validate_year(payload.year)

    tz = punch_timezone()
    policy = await get_leave_policy(store, company_id)
    boundary = resolve_year_boundary(payload.year, policy, tz)
    previous = resolve_year_boundary(payload.year - 1, policy, tz)
    previous_stats = await get_leave_statistics(store, company_id, previous)

    logger.info(
        "Leave year reset for company %s: year=%d previous_approved=%d",
        company_id,
        payload.year,
        previous_stats.approved,
    )
    return LeaveYearResetResponse(
        year=payload.year,
        previous_year=payload.year - 1,
        reset_date=boundary.year_start,
        carry_forward=policy.carry_forward,
        new_allocation=calculate_leave_allocation(payload.year, policy),
        previous_year_statistics=previous_stats,
        message=f"Leave balances reset for year {payload.year}. No carry-forward from {payload.year - 1}.",
    )
