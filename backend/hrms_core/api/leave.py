# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

from fastapi import APIRouter, Depends, Path, Query

from hrms_core.api.deps import AdminDep, AuthDep, LeaveStoreDep, validate_company_scope
from hrms_core.schemas.leave import (
    LeaveBalanceResponse,
    LeaveYearResetRequest,
    LeaveYearResetResponse,
    LeaveYearResponse,
)
from hrms_core.services import leave as leave_service

leave_balance_router = APIRouter(
    prefix="/companies/{company_id}/employees/{employee_code}/leave-balance",
    tags=["leave"],
    dependencies=[Depends(validate_company_scope)],
)

leave_year_router = APIRouter(
    prefix="/companies/{company_id}/leave-year",
    tags=["leave"],
    dependencies=[Depends(validate_company_scope)],
)


@leave_balance_router.get("", response_model=LeaveBalanceResponse)
async def get_leave_balance(
    store: LeaveStoreDep,
    auth: AuthDep,
    employee_code: str = Path(min_length=1, max_length=50),
    year: int | None = Query(default=None),
) -> LeaveBalanceResponse:
    """Used and remaining paid/sick leave for a policy year."""
    return await leave_service.get_leave_balance(store, auth.company_id, employee_code, year)


@leave_year_router.get("", response_model=LeaveYearResponse)
async def get_leave_year(
    store: LeaveStoreDep,
    auth: AdminDep,
    year: int | None = Query(default=None),
) -> LeaveYearResponse:
    """Policy-year boundaries, statistics and reset state (admin only)."""
    return await leave_service.get_leave_year_info(store, auth.company_id, year)


@leave_year_router.post("/reset", response_model=LeaveYearResetResponse)
async def reset_leave_year(
    payload: LeaveYearResetRequest,
    store: LeaveStoreDep,
    auth: AdminDep,
) -> LeaveYearResetResponse:
    """Year-end reset summary under the no-carry-forward policy (admin only)."""
    return await leave_service.reset_leave_year(store, auth.company_id, payload)
