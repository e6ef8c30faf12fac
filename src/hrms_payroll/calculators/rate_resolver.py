"""Basic pay and overtime rate resolution from compensation data."""

from __future__ import annotations

from decimal import Decimal

from hrms_payroll.calculators.money import ZERO, apply_rate, round_to_cents
from hrms_payroll.calculators.types import CompensationMode, EmployeeCompensation
from hrms_payroll.exceptions import InvalidEmployeeConfigurationError


class RateResolver:
    """Resolves basic pay and overtime rate for one employee.

    Salaried employees earn their fixed period salary regardless of hours.
    Hourly employees earn regular hours x hourly rate. Overtime is paid at
    1.5x the hourly rate; for salaried employees the hourly rate is implied
    from a standard month of 22 days x 8 hours.
    """

    OVERTIME_MULTIPLIER = Decimal("1.5")
    STANDARD_WORK_DAYS_PER_MONTH = Decimal("22")
    STANDARD_WORK_HOURS_PER_DAY = Decimal("8")

    @classmethod
    def validate(cls, compensation: EmployeeCompensation) -> None:
        """Raise if the compensation data cannot produce a payslip."""
        mode = compensation.compensation_mode
        if mode == CompensationMode.SALARIED:
            if compensation.salary_amount is None:
                raise InvalidEmployeeConfigurationError(
                    compensation.employee_id, "salaried employee has no salary amount"
                )
        elif mode == CompensationMode.HOURLY:
            if compensation.hourly_rate is None:
                raise InvalidEmployeeConfigurationError(
                    compensation.employee_id, "hourly employee has no hourly rate"
                )
        else:
            raise InvalidEmployeeConfigurationError(
                compensation.employee_id, f"unknown compensation mode {mode!r}"
            )

        for label, amount in (
            ("salary amount", compensation.salary_amount),
            ("hourly rate", compensation.hourly_rate),
        ):
            if amount is not None and amount < 0:
                raise InvalidEmployeeConfigurationError(
                    compensation.employee_id, f"{label} is negative"
                )

    @classmethod
    def basic_pay(cls, compensation: EmployeeCompensation, regular_hours: Decimal) -> Decimal:
        """Basic pay for the period."""
        cls.validate(compensation)
        if compensation.compensation_mode == CompensationMode.SALARIED:
            return round_to_cents(compensation.salary_amount)
        return apply_rate(regular_hours, compensation.hourly_rate)

    @classmethod
    def implied_hourly_rate(cls, salary_amount: Decimal) -> Decimal:
        """Hourly equivalent of a monthly salary, rounded to cents."""
        monthly_hours = cls.STANDARD_WORK_DAYS_PER_MONTH * cls.STANDARD_WORK_HOURS_PER_DAY
        return round_to_cents(salary_amount / monthly_hours)

    @classmethod
    def overtime_rate(cls, compensation: EmployeeCompensation) -> Decimal:
        """Overtime rate per hour."""
        cls.validate(compensation)
        if compensation.hourly_rate is not None:
            base_rate = compensation.hourly_rate
        elif compensation.salary_amount is not None:
            base_rate = cls.implied_hourly_rate(compensation.salary_amount)
        else:
            base_rate = ZERO
        return apply_rate(base_rate, cls.OVERTIME_MULTIPLIER)
