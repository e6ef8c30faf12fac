"""Tests for payroll statistics and reporting."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from hrms_payroll.exceptions import PayrollValidationError
from hrms_payroll.services import PayrollRunService, PayrollStatisticsService

from tests.conftest import PAY_DATE, PERIOD_END, PERIOD_START


@pytest.fixture
def runs(session) -> PayrollRunService:
    return PayrollRunService(session, document_root="/srv/payslips")


@pytest.fixture
def stats(session) -> PayrollStatisticsService:
    return PayrollStatisticsService(session)


async def create_run(runs, organization, name, start, end, pay_date):
    return await runs.create_payroll_run(
        organization_id=organization.organization_id,
        name=name,
        pay_period_start=start,
        pay_period_end=end,
        pay_date=pay_date,
    )


class TestPayrollStatistics:
    """Yearly totals."""

    async def test_totals_cover_processed_runs(
        self, runs, stats, organization, salaried_employee, hourly_attendance
    ):
        january = await create_run(
            runs, organization, "January", PERIOD_START, PERIOD_END, PAY_DATE
        )
        await runs.process_payroll_run(january.payroll_run_id)
        # Drafts do not count
        await create_run(
            runs, organization, "February", date(2024, 2, 1), date(2024, 2, 29), date(2024, 3, 5)
        )

        result = await stats.get_payroll_statistics(organization.organization_id, 2024)

        assert result["year"] == 2024
        assert result["total_gross_pay"] == Decimal("8500.00")
        assert result["total_net_pay"] == Decimal("4683.75")
        assert result["total_taxes"] == Decimal("2996.25")
        assert result["paid_run_count"] == 0

    async def test_paid_run_count(self, runs, stats, organization, salaried_employee):
        run = await create_run(runs, organization, "January", PERIOD_START, PERIOD_END, PAY_DATE)
        run_id = run.payroll_run_id
        await runs.process_payroll_run(run_id)
        await runs.approve_payroll_run(run_id)
        await runs.mark_payroll_run_paid(run_id)

        result = await stats.get_payroll_statistics(organization.organization_id, 2024)

        assert result["paid_run_count"] == 1
        assert result["total_net_pay"] == Decimal("2782.50")

    async def test_other_year_is_empty(self, runs, stats, organization, salaried_employee):
        run = await create_run(runs, organization, "January", PERIOD_START, PERIOD_END, PAY_DATE)
        await runs.process_payroll_run(run.payroll_run_id)

        result = await stats.get_payroll_statistics(organization.organization_id, 2023)

        assert result == {
            "total_gross_pay": Decimal("0.00"),
            "total_net_pay": Decimal("0.00"),
            "total_taxes": Decimal("0.00"),
            "paid_run_count": 0,
            "year": 2023,
        }


class TestEmployeePayslips:
    """Payslip history filtered on pay period start."""

    @pytest.fixture
    async def two_months(self, runs, organization, salaried_employee):
        january = await create_run(
            runs, organization, "January", PERIOD_START, PERIOD_END, PAY_DATE
        )
        february = await create_run(
            runs, organization, "February", date(2024, 2, 1), date(2024, 2, 29), date(2024, 3, 5)
        )
        await runs.process_payroll_run(january.payroll_run_id)
        await runs.process_payroll_run(february.payroll_run_id)
        return january, february

    async def test_filters(self, stats, salaried_employee, two_months):
        january, february = two_months
        employee_id = salaried_employee.employee_id

        everything = await stats.list_employee_payslips(employee_id)
        assert [p.payroll_run_id for p in everything] == [
            february.payroll_run_id,
            january.payroll_run_id,
        ]

        assert len(await stats.list_employee_payslips(employee_id, year=2024)) == 2
        assert len(await stats.list_employee_payslips(employee_id, year=2023)) == 0

        by_month = await stats.list_employee_payslips(employee_id, year=2024, month=2)
        assert [p.payroll_run_id for p in by_month] == [february.payroll_run_id]

        by_range = await stats.list_employee_payslips(
            employee_id, start=date(2024, 1, 1), end=date(2024, 1, 31)
        )
        assert [p.payroll_run_id for p in by_range] == [january.payroll_run_id]

    async def test_month_requires_year(self, stats, salaried_employee):
        with pytest.raises(PayrollValidationError):
            await stats.list_employee_payslips(salaried_employee.employee_id, month=1)

    async def test_invalid_month(self, stats, salaried_employee):
        with pytest.raises(PayrollValidationError):
            await stats.list_employee_payslips(
                salaried_employee.employee_id, year=2024, month=13
            )


class TestPayrollCalendar:
    """Runs whose pay period intersects a year."""

    async def test_calendar(self, runs, stats, organization):
        december = await create_run(
            runs, organization, "December", date(2023, 12, 1), date(2023, 12, 31), date(2024, 1, 5)
        )
        straddling = await create_run(
            runs, organization, "Straddle", date(2023, 12, 16), date(2024, 1, 15), date(2024, 1, 20)
        )
        february = await create_run(
            runs, organization, "February", date(2024, 2, 1), date(2024, 2, 29), date(2024, 3, 5)
        )

        calendar_2024 = await stats.get_payroll_calendar(organization.organization_id, 2024)
        assert [r.payroll_run_id for r in calendar_2024] == [
            straddling.payroll_run_id,
            february.payroll_run_id,
        ]

        calendar_2023 = await stats.get_payroll_calendar(organization.organization_id, 2023)
        assert [r.payroll_run_id for r in calendar_2023] == [
            december.payroll_run_id,
            straddling.payroll_run_id,
        ]

    async def test_invalid_year(self, stats, organization):
        with pytest.raises(PayrollValidationError):
            await stats.get_payroll_calendar(organization.organization_id, 0)
