"""Reporting endpoints: statistics, calendar and employee payslip history."""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query

from hrms_payroll.api.dependencies import DbSession, OrganizationId, StatisticsService
from hrms_payroll.api.schemas import (
    ErrorResponse,
    PayrollCalendarResponse,
    PayrollRunResponse,
    PayrollStatisticsResponse,
    PayslipListResponse,
    PayslipResponse,
)
from hrms_payroll.exceptions import EmployeeNotFoundError
from hrms_payroll.models import Employee

router = APIRouter(tags=["reports"])


@router.get("/statistics", response_model=PayrollStatisticsResponse)
async def get_payroll_statistics(
    service: StatisticsService,
    organization_id: OrganizationId,
    year: Annotated[int, Query(ge=1, le=9999)],
) -> PayrollStatisticsResponse:
    stats = await service.get_payroll_statistics(organization_id, year)
    return PayrollStatisticsResponse(**stats)


@router.get("/calendar", response_model=PayrollCalendarResponse)
async def get_payroll_calendar(
    service: StatisticsService,
    organization_id: OrganizationId,
    year: Annotated[int, Query(ge=1, le=9999)],
) -> PayrollCalendarResponse:
    runs = await service.get_payroll_calendar(organization_id, year)
    return PayrollCalendarResponse(
        year=year,
        items=[PayrollRunResponse.model_validate(run) for run in runs],
    )


@router.get(
    "/employees/{employee_id}/payslips",
    response_model=PayslipListResponse,
    responses={404: {"model": ErrorResponse}},
)
async def list_employee_payslips(
    db: DbSession,
    service: StatisticsService,
    organization_id: OrganizationId,
    employee_id: Annotated[UUID, Path()],
    year: Annotated[int | None, Query(ge=1, le=9999)] = None,
    month: Annotated[int | None, Query(ge=1, le=12)] = None,
    start: date | None = None,
    end: date | None = None,
) -> PayslipListResponse:
    """An employee's payslip history, filtered on pay period start."""
    employee = await db.get(Employee, employee_id)
    if employee is None or employee.organization_id != organization_id:
        raise EmployeeNotFoundError(employee_id)

    payslips = await service.list_employee_payslips(
        employee_id, year=year, month=month, start=start, end=end
    )
    return PayslipListResponse(
        items=[PayslipResponse.model_validate(p) for p in payslips],
        total=len(payslips),
    )
