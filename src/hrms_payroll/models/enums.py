"""Closed status and type enumerations shared by models and services."""

from __future__ import annotations

from enum import Enum


class PayrollStatus(str, Enum):
    """Payroll run status values."""

    DRAFT = "draft"
    PROCESSING = "processing"
    CALCULATED = "calculated"
    APPROVED = "approved"
    PAID = "paid"
    CANCELLED = "cancelled"
    REJECTED = "rejected"
    ERROR = "error"


class EmploymentType(str, Enum):
    """Employment types known to the employee directory."""

    FULL_TIME = "full_time"
    PART_TIME = "part_time"
    CONTRACT = "contract"
    INTERN = "intern"


class AttendanceStatus(str, Enum):
    """Attendance record status values."""

    PRESENT = "present"
    LATE = "late"
    HALF_DAY = "half_day"
    ABSENT = "absent"
    ON_LEAVE = "on_leave"
    HOLIDAY = "holiday"

    @property
    def counts_as_present(self) -> bool:
        """Whether hours on a record with this status are payable."""
        return self in (AttendanceStatus.PRESENT, AttendanceStatus.LATE, AttendanceStatus.HALF_DAY)


def sql_in(enum_cls: type[Enum]) -> str:
    """Render enum values as a SQL IN list for check constraints."""
    return ", ".join(f"'{member.value}'" for member in enum_cls)
