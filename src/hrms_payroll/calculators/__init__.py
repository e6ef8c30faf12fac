"""Payslip calculation."""

from hrms_payroll.calculators.payslip_calculator import PayslipCalculator
from hrms_payroll.calculators.rate_resolver import RateResolver
from hrms_payroll.calculators.tax_calculator import TaxBreakdown, TaxCalculator
from hrms_payroll.calculators.types import (
    AttendanceAggregate,
    AttendanceEntry,
    CompensationMode,
    DeductionSchedule,
    EmployeeCompensation,
    PayslipAdjustments,
    PayslipFigures,
    TaxRates,
)

__all__ = [
    "AttendanceAggregate",
    "AttendanceEntry",
    "CompensationMode",
    "DeductionSchedule",
    "EmployeeCompensation",
    "PayslipAdjustments",
    "PayslipCalculator",
    "PayslipFigures",
    "RateResolver",
    "TaxBreakdown",
    "TaxCalculator",
    "TaxRates",
]
