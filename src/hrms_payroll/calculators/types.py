"""Type definitions for the payslip calculation pipeline."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable
from uuid import UUID

ZERO = Decimal("0.00")


class CompensationMode(str, Enum):
    """How an employee's basic pay is derived."""

    SALARIED = "salaried"
    HOURLY = "hourly"


@dataclass(frozen=True)
class EmployeeCompensation:
    """Compensation data supplied by the employee directory."""

    employee_id: UUID
    compensation_mode: CompensationMode
    salary_amount: Decimal | None = None  # Fixed amount per pay period
    hourly_rate: Decimal | None = None
    employee_number: str | None = None


@dataclass(frozen=True)
class AttendanceEntry:
    """One attendance record as seen by the calculator."""

    regular_hours: Decimal | None = None
    overtime_hours: Decimal | None = None
    is_present: bool = True


@dataclass(frozen=True)
class AttendanceAggregate:
    """Summed hours over a pay period."""

    regular_hours: Decimal = ZERO
    overtime_hours: Decimal = ZERO

    @classmethod
    def from_entries(cls, entries: Iterable[AttendanceEntry]) -> AttendanceAggregate:
        """Sum hours of present entries; missing hours count as zero."""
        regular = ZERO
        overtime = ZERO
        for entry in entries:
            if not entry.is_present:
                continue
            if entry.regular_hours is not None:
                regular += entry.regular_hours
            if entry.overtime_hours is not None:
                overtime += entry.overtime_hours
        return cls(regular_hours=regular, overtime_hours=overtime)


@dataclass(frozen=True)
class PayslipAdjustments:
    """Earnings and deductions sourced outside attendance; zero when absent."""

    bonus: Decimal = ZERO
    commission: Decimal = ZERO
    allowances: Decimal = ZERO
    reimbursements: Decimal = ZERO
    other_deductions: Decimal = ZERO


@dataclass(frozen=True)
class TaxRates:
    """Flat statutory tax rates applied to gross pay."""

    federal: Decimal = Decimal("0.22")
    state: Decimal = Decimal("0.05")
    social_security: Decimal = Decimal("0.062")
    medicare: Decimal = Decimal("0.0145")
    unemployment: Decimal = Decimal("0.006")


@dataclass(frozen=True)
class DeductionSchedule:
    """Benefit deductions: four flat premiums plus a percent-of-basic retirement."""

    health_insurance: Decimal = Decimal("150.00")
    dental_insurance: Decimal = Decimal("25.00")
    vision_insurance: Decimal = Decimal("10.00")
    life_insurance: Decimal = Decimal("20.00")
    retirement_rate: Decimal = Decimal("0.05")


@dataclass
class PayslipFigures:
    """Every field the calculator produces for one payslip."""

    regular_hours: Decimal = ZERO
    overtime_hours: Decimal = ZERO
    overtime_rate: Decimal = ZERO

    basic_salary: Decimal = ZERO
    overtime_pay: Decimal = ZERO
    bonus: Decimal = ZERO
    commission: Decimal = ZERO
    allowances: Decimal = ZERO
    reimbursements: Decimal = ZERO

    federal_tax: Decimal = ZERO
    state_tax: Decimal = ZERO
    social_security_tax: Decimal = ZERO
    medicare_tax: Decimal = ZERO
    unemployment_tax: Decimal = ZERO

    health_insurance: Decimal = ZERO
    dental_insurance: Decimal = ZERO
    vision_insurance: Decimal = ZERO
    life_insurance: Decimal = ZERO
    retirement_contribution: Decimal = ZERO
    other_deductions: Decimal = ZERO

    gross_pay: Decimal = ZERO
    total_taxes: Decimal = ZERO
    total_deductions: Decimal = ZERO
    net_pay: Decimal = ZERO

    def as_dict(self) -> dict[str, Any]:
        """Field name to value, in declaration order."""
        return asdict(self)
