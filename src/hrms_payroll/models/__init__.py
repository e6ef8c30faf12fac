"""ORM models."""

from hrms_payroll.models.base import Base, TimestampMixin, UpdatedAtMixin
from hrms_payroll.models.employee import AttendanceRecord, Employee
from hrms_payroll.models.enums import AttendanceStatus, EmploymentType, PayrollStatus
from hrms_payroll.models.organization import Organization
from hrms_payroll.models.payroll import PayrollRun, Payslip

__all__ = [
    "AttendanceRecord",
    "AttendanceStatus",
    "Base",
    "Employee",
    "EmploymentType",
    "Organization",
    "PayrollRun",
    "PayrollStatus",
    "Payslip",
    "TimestampMixin",
    "UpdatedAtMixin",
]
