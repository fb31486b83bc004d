from __future__ import annotations

import enum


class LeaveType(enum.StrEnum):
    """Leave types as recorded by the leave-request subsystem."""

    PAID = "Paid Leave"
    SICK_HALF_DAY = "Sick Leave(HalfDay)"
    SICK_FULL_DAY = "Sick Leave(FullDay)"
    MATERNITY = "Maternity Leave"
    PATERNITY = "Paternity Leave"
    OTHER = "Other"


class ApprovalStatus(enum.StrEnum):
    """State of one side of the HR / manager dual approval."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    @classmethod
    def parse(cls, value: str | None) -> ApprovalStatus | None:
        """Case-insensitive lookup. Returns None for empty or unknown values."""
        if not value:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class AttendanceStatus(enum.StrEnum):
    """Day status labels shared with the time-clock feed."""

    PRESENT = "Present"
    HALF_DAY = "Half-day"
    ABSENT = "Absent"


class LeaveBucket(enum.StrEnum):
    """Entitlement bucket a leave type draws from."""

    PAID = "PAID"
    SICK = "SICK"


class Role(enum.StrEnum):
    """Caller role carried in the request auth context."""

    ADMIN = "admin"
    HR = "hr"
    MANAGER = "manager"
    EMPLOYEE = "employee"
