"""Read-only payroll reporting: yearly statistics, employee history, calendar."""

from __future__ import annotations

import calendar
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import extract, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from hrms_payroll.exceptions import PayrollValidationError
from hrms_payroll.models import PayrollRun, PayrollStatus, Payslip

ZERO = Decimal("0.00")

# Runs whose totals count towards statistics
PROCESSED_STATUSES = (
    PayrollStatus.CALCULATED.value,
    PayrollStatus.APPROVED.value,
    PayrollStatus.PAID.value,
)


class PayrollStatisticsService:
    """Aggregations over payroll runs and payslips."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_payroll_statistics(self, organization_id: UUID, year: int) -> dict[str, Any]:
        """Yearly totals for an organization, keyed by pay date."""
        year_start, year_end = _year_bounds(year)
        in_year = (
            PayrollRun.organization_id == organization_id,
            PayrollRun.pay_date >= year_start,
            PayrollRun.pay_date <= year_end,
        )

        result = await self.session.execute(
            select(
                PayrollRun.total_gross_pay,
                PayrollRun.total_net_pay,
                PayrollRun.total_taxes,
            ).where(*in_year, PayrollRun.status.in_(PROCESSED_STATUSES))
        )
        totals = {"total_gross_pay": ZERO, "total_net_pay": ZERO, "total_taxes": ZERO}
        for gross, net, taxes in result:
            totals["total_gross_pay"] += gross or ZERO
            totals["total_net_pay"] += net or ZERO
            totals["total_taxes"] += taxes or ZERO

        paid_run_count = await self.session.scalar(
            select(func.count())
            .select_from(PayrollRun)
            .where(*in_year, PayrollRun.status == PayrollStatus.PAID.value)
        )

        return {**totals, "paid_run_count": paid_run_count or 0, "year": year}

    async def list_employee_payslips(
        self,
        employee_id: UUID,
        year: int | None = None,
        month: int | None = None,
        start: date | None = None,
        end: date | None = None,
    ) -> list[Payslip]:
        """An employee's payslips, filtered on the run's pay period start.

        ``month`` only applies together with ``year``. ``start`` and ``end``
        bound the pay period start inclusively.
        """
        if month is not None and not 1 <= month <= 12:
            raise PayrollValidationError(f"Invalid month: {month}")
        if month is not None and year is None:
            raise PayrollValidationError("month filter requires a year")
        if start is not None and end is not None and start > end:
            raise PayrollValidationError("start must not be after end")

        stmt = (
            select(Payslip)
            .join(PayrollRun, Payslip.payroll_run_id == PayrollRun.payroll_run_id)
            .where(Payslip.employee_id == employee_id)
        )
        if year is not None:
            stmt = stmt.where(extract("year", PayrollRun.pay_period_start) == year)
        if month is not None:
            stmt = stmt.where(extract("month", PayrollRun.pay_period_start) == month)
        if start is not None:
            stmt = stmt.where(PayrollRun.pay_period_start >= start)
        if end is not None:
            stmt = stmt.where(PayrollRun.pay_period_start <= end)

        result = await self.session.execute(
            stmt.order_by(PayrollRun.pay_period_start.desc(), Payslip.created_at)
        )
        return list(result.scalars())

    async def get_payroll_calendar(self, organization_id: UUID, year: int) -> list[PayrollRun]:
        """Runs whose pay period intersects the year, earliest first."""
        year_start, year_end = _year_bounds(year)
        result = await self.session.execute(
            select(PayrollRun)
            .where(
                PayrollRun.organization_id == organization_id,
                PayrollRun.pay_period_start <= year_end,
                PayrollRun.pay_period_end >= year_start,
            )
            .order_by(PayrollRun.pay_period_start, PayrollRun.created_at)
        )
        return list(result.scalars())


def _year_bounds(year: int) -> tuple[date, date]:
    if not 1 <= year <= 9999:
        raise PayrollValidationError(f"Invalid year: {year}")
    return date(year, 1, 1), date(year, 12, calendar.monthrange(year, 12)[1])
