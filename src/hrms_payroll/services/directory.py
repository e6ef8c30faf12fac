"""Employee directory and attendance source interfaces.

The payroll core never queries HR tables directly. It reads employees and
attendance through these two protocols; the SQL-backed defaults below read
the minimal ``employee`` and ``attendance_record`` tables.
"""

from __future__ import annotations

from datetime import date
from typing import AsyncIterator, Protocol
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hrms_payroll.calculators.types import (
    AttendanceAggregate,
    AttendanceEntry,
    CompensationMode,
    EmployeeCompensation,
)
from hrms_payroll.models import AttendanceRecord, Employee, EmploymentType


class EmployeeDirectory(Protocol):
    """Source of employee compensation data."""

    async def list_active_employees(self, organization_id: UUID) -> list[EmployeeCompensation]:
        """Return active employees in a stable order."""
        ...

    async def get_employee(self, employee_id: UUID) -> EmployeeCompensation | None:
        """Return one employee, or None if unknown."""
        ...


class AttendanceSource(Protocol):
    """Source of attendance entries for a date range."""

    def iter_attendance(
        self, employee_id: UUID, start: date, end: date
    ) -> AsyncIterator[AttendanceEntry]:
        """Yield attendance entries for the employee within [start, end]."""
        ...

    async def get_attendance_aggregate(
        self, employee_id: UUID, start: date, end: date
    ) -> AttendanceAggregate:
        """Sum payable hours within [start, end]."""
        ...


def compensation_mode_for(employment_type: str) -> CompensationMode:
    """Full-time employees are salaried; every other type is paid hourly."""
    if employment_type == EmploymentType.FULL_TIME.value:
        return CompensationMode.SALARIED
    return CompensationMode.HOURLY


def to_compensation(employee: Employee) -> EmployeeCompensation:
    return EmployeeCompensation(
        employee_id=employee.employee_id,
        compensation_mode=compensation_mode_for(employee.employment_type),
        salary_amount=employee.salary_amount,
        hourly_rate=employee.hourly_rate,
        employee_number=employee.employee_number,
    )


class SqlEmployeeDirectory:
    """Employee directory backed by the ``employee`` table."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_active_employees(self, organization_id: UUID) -> list[EmployeeCompensation]:
        result = await self.session.execute(
            select(Employee)
            .where(
                Employee.organization_id == organization_id,
                Employee.is_active.is_(True),
            )
            .order_by(Employee.employee_number, Employee.employee_id)
        )
        return [to_compensation(employee) for employee in result.scalars()]

    async def get_employee(self, employee_id: UUID) -> EmployeeCompensation | None:
        employee = await self.session.get(Employee, employee_id)
        if employee is None:
            return None
        return to_compensation(employee)


class SqlAttendanceSource:
    """Attendance source backed by the ``attendance_record`` table."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def iter_attendance(
        self, employee_id: UUID, start: date, end: date
    ) -> AsyncIterator[AttendanceEntry]:
        result = await self.session.execute(
            select(AttendanceRecord)
            .where(
                AttendanceRecord.employee_id == employee_id,
                AttendanceRecord.attendance_date >= start,
                AttendanceRecord.attendance_date <= end,
            )
            .order_by(AttendanceRecord.attendance_date)
        )
        for record in result.scalars():
            yield AttendanceEntry(
                regular_hours=record.regular_hours,
                overtime_hours=record.overtime_hours,
                is_present=record.is_present,
            )

    async def get_attendance_aggregate(
        self, employee_id: UUID, start: date, end: date
    ) -> AttendanceAggregate:
        entries = [entry async for entry in self.iter_attendance(employee_id, start, end)]
        return AttendanceAggregate.from_entries(entries)
