# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from sqlalchemy import select
from sqlmodel import col

from hrms_core.models.leave import CompanyLeavePolicy, LeaveRequest
from hrms_core.schemas.leave import LeaveSpan

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


def _to_leave_span(row: LeaveRequest) -> LeaveSpan:
    return LeaveSpan(
        id=row.id,
        employee_code=row.employee_code,
        leave_type=row.leave_type,
        start_date=row.start_date,
        end_date=row.end_date,
        hr_approval=row.hr_approval,
        manager_approval=row.manager_approval,
        reason=row.reason,
    )


@runtime_checkable
class LeaveStore(Protocol):
    """Read access to leave requests and per-company policy overrides."""

    async def list_leave_spans(
        self, company_id: uuid.UUID, employee_code: str, start: date, end: date
    ) -> list[LeaveSpan]:
        """Spans of one employee overlapping ``[start, end]``, any approval state."""
        ...

    async def list_spans_starting_between(self, company_id: uuid.UUID, start: date, end: date) -> list[LeaveSpan]:
        """All company spans whose start date falls in ``[start, end]``."""
        ...

    async def get_policy_override(self, company_id: uuid.UUID) -> CompanyLeavePolicy | None:
        """Company-specific policy row, if one exists."""
        ...


class InMemoryLeaveStore:
    """In-memory implementation for development and tests."""

    def __init__(self) -> None:
        self._spans: list[tuple[uuid.UUID, LeaveSpan]] = []
        self._policies: dict[uuid.UUID, CompanyLeavePolicy] = {}

    def seed(self, company_id: uuid.UUID, span: LeaveSpan) -> None:
        self._spans.append((company_id, span))

    def seed_policy(self, policy: CompanyLeavePolicy) -> None:
        self._policies[policy.company_id] = policy

    async def list_leave_spans(
        self, company_id: uuid.UUID, employee_code: str, start: date, end: date
    ) -> list[LeaveSpan]:
        return [
            span
            for owner, span in self._spans
            if owner == company_id
            and span.employee_code == employee_code
            and span.start_date <= end
            and span.end_date >= start
        ]

    async def list_spans_starting_between(self, company_id: uuid.UUID, start: date, end: date) -> list[LeaveSpan]:
        return [span for owner, span in self._spans if owner == company_id and start <= span.start_date <= end]

    async def get_policy_override(self, company_id: uuid.UUID) -> CompanyLeavePolicy | None:
        return self._policies.get(company_id)


class SqlLeaveStore:
    """Reads ``leave_request`` and ``company_leave_policy`` through an async session."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_leave_spans(
        self, company_id: uuid.UUID, employee_code: str, start: date, end: date
    ) -> list[LeaveSpan]:
        result = await self._session.execute(
            select(LeaveRequest)
            .where(
                col(LeaveRequest.company_id) == company_id,
                col(LeaveRequest.employee_code) == employee_code,
                col(LeaveRequest.start_date) <= end,
                col(LeaveRequest.end_date) >= start,
            )
            .order_by(col(LeaveRequest.start_date).desc())
        )
        return [_to_leave_span(row) for row in result.scalars().all()]

    async def list_spans_starting_between(self, company_id: uuid.UUID, start: date, end: date) -> list[LeaveSpan]:
        result = await self._session.execute(
            select(LeaveRequest).where(
                col(LeaveRequest.company_id) == company_id,
                col(LeaveRequest.start_date) >= start,
                col(LeaveRequest.start_date) <= end,
            )
        )
        return [_to_leave_span(row) for row in result.scalars().all()]

    async def get_policy_override(self, company_id: uuid.UUID) -> CompanyLeavePolicy | None:
        result = await self._session.execute(
            select(CompanyLeavePolicy).where(col(CompanyLeavePolicy.company_id) == company_id)
        )
        return result.scalar_one_or_none()
