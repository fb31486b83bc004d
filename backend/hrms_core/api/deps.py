# ruff: noqa: B008, TC003
from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import Depends, Header, Path, status

from hrms_core.db import SessionDep
from hrms_core.exceptions import AppError
from hrms_core.models.enums import Role
from hrms_core.schemas.auth import AuthContext
from hrms_core.services.attendance_store import AttendanceStore, SqlAttendanceStore
from hrms_core.services.feed_trigger import FeedTrigger, get_feed_trigger
from hrms_core.services.leave_store import LeaveStore, SqlLeaveStore
from hrms_core.services.sync_limiter import SyncRateLimiter, get_sync_limiter


async def get_auth_context(
    x_company_id: uuid.UUID = Header(),
    x_user_id: uuid.UUID = Header(),
    x_role: Role = Header(default=Role.EMPLOYEE),
) -> AuthContext:
    """Extract the request context from headers."""
    return AuthContext(company_id=x_company_id, user_id=x_user_id, role=x_role)


AuthDep = Annotated[AuthContext, Depends(get_auth_context)]


async def require_admin(
    auth: AuthDep,
) -> AuthContext:
    """Require admin role for the request."""
    if not auth.is_admin:
        raise AppError("Admin access required", status_code=status.HTTP_403_FORBIDDEN)
    return auth


AdminDep = Annotated[AuthContext, Depends(require_admin)]


async def require_hr_or_admin(
    auth: AuthDep,
) -> AuthContext:
    """Require HR or admin role for the request."""
    if not auth.is_hr_or_admin:
        raise AppError("HR or admin access required", status_code=status.HTTP_403_FORBIDDEN)
    return auth


HRDep = Annotated[AuthContext, Depends(require_hr_or_admin)]


async def validate_company_scope(
    company_id: uuid.UUID = Path(),
    auth: AuthContext = Depends(get_auth_context),
) -> AuthContext:
    """Ensure the path company_id matches the auth header company_id."""
    if company_id != auth.company_id:
        raise AppError("Company ID mismatch", status_code=status.HTTP_403_FORBIDDEN)
    return auth


def get_attendance_store(session: SessionDep) -> AttendanceStore:
    return SqlAttendanceStore(session)


def get_leave_store(session: SessionDep) -> LeaveStore:
    return SqlLeaveStore(session)


AttendanceStoreDep = Annotated[AttendanceStore, Depends(get_attendance_store)]
LeaveStoreDep = Annotated[LeaveStore, Depends(get_leave_store)]
FeedTriggerDep = Annotated[FeedTrigger, Depends(get_feed_trigger)]
SyncLimiterDep = Annotated[SyncRateLimiter, Depends(get_sync_limiter)]
