"""Payslip calculator: one employee, one pay period, pure computation."""

from __future__ import annotations

import logging

from hrms_payroll.calculators.money import ZERO, apply_rate, money_sum, to_money
from hrms_payroll.calculators.rate_resolver import RateResolver
from hrms_payroll.calculators.tax_calculator import TaxCalculator
from hrms_payroll.calculators.types import (
    AttendanceAggregate,
    DeductionSchedule,
    EmployeeCompensation,
    PayslipAdjustments,
    PayslipFigures,
    TaxRates,
)
from hrms_payroll.exceptions import NegativeNetPayError

logger = logging.getLogger(__name__)


class PayslipCalculator:
    """Derives every earning, tax and deduction field of a payslip.

    Calculation pipeline (strict order, each step rounds on its own):
    1) Basic pay (fixed salary, or regular hours x hourly rate)
    2) Overtime rate (hourly rate x 1.5, implied for salaried employees)
    3) Overtime pay (overtime hours x overtime rate)
    4) Other earnings from adjustments
    5) Gross pay
    6) Statutory taxes on gross, each rounded separately
    7) Benefit deductions, retirement as a percent of basic pay
    8) Net pay = gross - taxes - deductions

    Negative net pay is rejected unless ``allow_negative_net`` is set.
    """

    def __init__(
        self,
        tax_rates: TaxRates | None = None,
        deductions: DeductionSchedule | None = None,
        allow_negative_net: bool = False,
    ):
        self.tax_calculator = TaxCalculator(tax_rates)
        self.deductions = deductions or DeductionSchedule()
        self.allow_negative_net = allow_negative_net

    def calculate(
        self,
        compensation: EmployeeCompensation,
        attendance: AttendanceAggregate | None = None,
        adjustments: PayslipAdjustments | None = None,
    ) -> PayslipFigures:
        """Calculate a payslip.

        Raises:
            InvalidEmployeeConfigurationError: compensation data is missing.
            NegativeNetPayError: net pay is below zero and not allowed.
        """
        attendance = attendance or AttendanceAggregate()
        adjustments = adjustments or PayslipAdjustments()
        RateResolver.validate(compensation)

        figures = PayslipFigures(
            regular_hours=to_money(attendance.regular_hours),
            overtime_hours=to_money(attendance.overtime_hours),
        )

        # 1-3) Basic pay and overtime
        figures.basic_salary = RateResolver.basic_pay(compensation, attendance.regular_hours)
        figures.overtime_rate = RateResolver.overtime_rate(compensation)
        if attendance.overtime_hours > 0:
            figures.overtime_pay = apply_rate(attendance.overtime_hours, figures.overtime_rate)
        else:
            figures.overtime_pay = ZERO

        # 4-5) Other earnings and gross
        figures.bonus = to_money(adjustments.bonus)
        figures.commission = to_money(adjustments.commission)
        figures.allowances = to_money(adjustments.allowances)
        figures.reimbursements = to_money(adjustments.reimbursements)
        figures.gross_pay = money_sum(
            figures.basic_salary,
            figures.overtime_pay,
            figures.bonus,
            figures.commission,
            figures.allowances,
            figures.reimbursements,
        )

        # 6) Taxes
        taxes = self.tax_calculator.calculate(figures.gross_pay)
        figures.federal_tax = taxes.federal_tax
        figures.state_tax = taxes.state_tax
        figures.social_security_tax = taxes.social_security_tax
        figures.medicare_tax = taxes.medicare_tax
        figures.unemployment_tax = taxes.unemployment_tax
        figures.total_taxes = taxes.total

        # 7) Deductions
        schedule = self.deductions
        figures.health_insurance = to_money(schedule.health_insurance)
        figures.dental_insurance = to_money(schedule.dental_insurance)
        figures.vision_insurance = to_money(schedule.vision_insurance)
        figures.life_insurance = to_money(schedule.life_insurance)
        figures.retirement_contribution = apply_rate(
            figures.basic_salary, schedule.retirement_rate
        )
        figures.other_deductions = to_money(adjustments.other_deductions)
        figures.total_deductions = money_sum(
            figures.health_insurance,
            figures.dental_insurance,
            figures.vision_insurance,
            figures.life_insurance,
            figures.retirement_contribution,
            figures.other_deductions,
        )

        # 8) Net
        figures.net_pay = figures.gross_pay - figures.total_taxes - figures.total_deductions

        if figures.net_pay < 0 and not self.allow_negative_net:
            raise NegativeNetPayError(compensation.employee_id, figures.net_pay)
        if figures.net_pay < 0:
            logger.warning(
                "Negative net pay %s allowed for employee %s",
                figures.net_pay,
                compensation.employee_id,
            )

        return figures
