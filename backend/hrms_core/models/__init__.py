from sqlmodel import SQLModel

from hrms_core.models.attendance import AttendanceRecord
from hrms_core.models.base import CompanyScoped, TimestampMixin, UpdatedAtMixin, UUIDBase
from hrms_core.models.enums import ApprovalStatus, AttendanceStatus, LeaveBucket, LeaveType
from hrms_core.models.leave import CompanyLeavePolicy, LeaveRequest

__all__ = [
    "ApprovalStatus",
    "AttendanceRecord",
    "AttendanceStatus",
    "CompanyLeavePolicy",
    "CompanyScoped",
    "LeaveBucket",
    "LeaveRequest",
    "LeaveType",
    "SQLModel",
    "TimestampMixin",
    "UUIDBase",
    "UpdatedAtMixin",
]
