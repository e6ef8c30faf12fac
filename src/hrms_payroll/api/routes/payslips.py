"""Payslip API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path

from hrms_payroll.api.dependencies import OrganizationId, RunService
from hrms_payroll.api.schemas import (
    ErrorResponse,
    PayslipAdjustmentsRequest,
    PayslipDocumentResponse,
    PayslipResponse,
)
from hrms_payroll.calculators import PayslipAdjustments
from hrms_payroll.exceptions import PayslipNotFoundError
from hrms_payroll.models import Payslip
from hrms_payroll.services import PayrollRunService

router = APIRouter(prefix="/payslips", tags=["payslips"])


async def _payslip_in_organization(
    service: PayrollRunService, payslip_id: UUID, organization_id: UUID
) -> Payslip:
    payslip = await service.get_payslip(payslip_id)
    run = await service.get_payroll_run(payslip.payroll_run_id)
    if run.organization_id != organization_id:
        raise PayslipNotFoundError(payslip_id)
    return payslip


@router.get(
    "/{payslip_id}",
    response_model=PayslipResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_payslip(
    service: RunService,
    organization_id: OrganizationId,
    payslip_id: Annotated[UUID, Path()],
) -> PayslipResponse:
    payslip = await _payslip_in_organization(service, payslip_id, organization_id)
    return PayslipResponse.model_validate(payslip)


@router.post(
    "/{payslip_id}/recalculate",
    response_model=PayslipResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def recalculate_payslip(
    service: RunService,
    organization_id: OrganizationId,
    payslip_id: Annotated[UUID, Path()],
    payload: PayslipAdjustmentsRequest | None = None,
) -> PayslipResponse:
    """Recalculate an unfinalized payslip, optionally with new adjustments."""
    await _payslip_in_organization(service, payslip_id, organization_id)
    adjustments = PayslipAdjustments(**payload.model_dump()) if payload else None
    payslip = await service.recalculate_payslip(payslip_id, adjustments)
    return PayslipResponse.model_validate(payslip)


@router.post(
    "/{payslip_id}/document",
    response_model=PayslipDocumentResponse,
    responses={404: {"model": ErrorResponse}},
)
async def generate_payslip_document(
    service: RunService,
    organization_id: OrganizationId,
    payslip_id: Annotated[UUID, Path()],
) -> PayslipDocumentResponse:
    await _payslip_in_organization(service, payslip_id, organization_id)
    path = await service.generate_payslip_document(payslip_id)
    return PayslipDocumentResponse(payslip_id=payslip_id, document_path=path)
