"""Payroll services."""

from hrms_payroll.services.directory import (
    AttendanceSource,
    EmployeeDirectory,
    SqlAttendanceSource,
    SqlEmployeeDirectory,
)
from hrms_payroll.services.payroll_run_service import PayrollRunService
from hrms_payroll.services.state_machine import PayrollRunStateMachine
from hrms_payroll.services.statistics_service import PayrollStatisticsService

__all__ = [
    "AttendanceSource",
    "EmployeeDirectory",
    "PayrollRunService",
    "PayrollRunStateMachine",
    "PayrollStatisticsService",
    "SqlAttendanceSource",
    "SqlEmployeeDirectory",
]
