"""Payroll run API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, Response, status

from hrms_payroll.api.dependencies import OrganizationId, RunService
from hrms_payroll.api.schemas import (
    ActorRequest,
    ApprovalRequest,
    CancellationRequest,
    ErrorResponse,
    PayrollRunCreate,
    PayrollRunListResponse,
    PayrollRunResponse,
    PayrollRunUpdate,
    PayslipListResponse,
    PayslipResponse,
    RejectionRequest,
    ValidationReportResponse,
)
from hrms_payroll.exceptions import PayrollRunNotFoundError
from hrms_payroll.models import PayrollRun, PayrollStatus
from hrms_payroll.services import PayrollRunService

router = APIRouter(prefix="/payroll-runs", tags=["payroll-runs"])


async def _run_in_organization(
    service: PayrollRunService, payroll_run_id: UUID, organization_id: UUID
) -> PayrollRun:
    """Load a run, hiding runs of other organizations."""
    run = await service.get_payroll_run(payroll_run_id)
    if run.organization_id != organization_id:
        raise PayrollRunNotFoundError(payroll_run_id)
    return run


# ============================================================================
# Payroll run CRUD
# ============================================================================


@router.post(
    "",
    response_model=PayrollRunResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def create_payroll_run(
    service: RunService,
    organization_id: OrganizationId,
    payload: PayrollRunCreate,
) -> PayrollRunResponse:
    """Create a new payroll run in draft status."""
    run = await service.create_payroll_run(
        organization_id=organization_id,
        name=payload.name,
        description=payload.description,
        pay_period_start=payload.pay_period_start,
        pay_period_end=payload.pay_period_end,
        pay_date=payload.pay_date,
        actor=payload.created_by,
    )
    return PayrollRunResponse.model_validate(run)


@router.get("", response_model=PayrollRunListResponse)
async def list_payroll_runs(
    service: RunService,
    organization_id: OrganizationId,
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1, le=100)] = 20,
    status_filter: Annotated[PayrollStatus | None, Query(alias="status")] = None,
) -> PayrollRunListResponse:
    """List payroll runs for an organization."""
    runs, total = await service.list_payroll_runs(
        organization_id, status=status_filter, page=page, page_size=page_size
    )
    return PayrollRunListResponse(
        items=[PayrollRunResponse.model_validate(run) for run in runs],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/pending", response_model=list[PayrollRunResponse])
async def list_pending_payroll_runs(
    service: RunService,
    organization_id: OrganizationId,
) -> list[PayrollRunResponse]:
    """Runs calculated and waiting for approval."""
    runs = await service.list_pending_payroll_runs(organization_id)
    return [PayrollRunResponse.model_validate(run) for run in runs]


@router.get(
    "/{payroll_run_id}",
    response_model=PayrollRunResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_payroll_run(
    service: RunService,
    organization_id: OrganizationId,
    payroll_run_id: Annotated[UUID, Path()],
) -> PayrollRunResponse:
    run = await _run_in_organization(service, payroll_run_id, organization_id)
    return PayrollRunResponse.model_validate(run)


@router.patch(
    "/{payroll_run_id}",
    response_model=PayrollRunResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def update_payroll_run(
    service: RunService,
    organization_id: OrganizationId,
    payroll_run_id: Annotated[UUID, Path()],
    payload: PayrollRunUpdate,
) -> PayrollRunResponse:
    await _run_in_organization(service, payroll_run_id, organization_id)
    run = await service.update_payroll_run(
        payroll_run_id, **payload.model_dump(exclude_unset=True)
    )
    return PayrollRunResponse.model_validate(run)


@router.delete(
    "/{payroll_run_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def delete_payroll_run(
    service: RunService,
    organization_id: OrganizationId,
    payroll_run_id: Annotated[UUID, Path()],
) -> Response:
    await _run_in_organization(service, payroll_run_id, organization_id)
    await service.delete_payroll_run(payroll_run_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{payroll_run_id}/validation",
    response_model=ValidationReportResponse,
    responses={404: {"model": ErrorResponse}},
)
async def validate_payroll_run(
    service: RunService,
    organization_id: OrganizationId,
    payroll_run_id: Annotated[UUID, Path()],
) -> ValidationReportResponse:
    await _run_in_organization(service, payroll_run_id, organization_id)
    report = await service.validate_payroll_run(payroll_run_id)
    return ValidationReportResponse(**report)


@router.get(
    "/{payroll_run_id}/payslips",
    response_model=PayslipListResponse,
    responses={404: {"model": ErrorResponse}},
)
async def list_payroll_run_payslips(
    service: RunService,
    organization_id: OrganizationId,
    payroll_run_id: Annotated[UUID, Path()],
) -> PayslipListResponse:
    await _run_in_organization(service, payroll_run_id, organization_id)
    payslips = await service.list_payslips(payroll_run_id)
    return PayslipListResponse(
        items=[PayslipResponse.model_validate(p) for p in payslips],
        total=len(payslips),
    )


# ============================================================================
# Payroll run state transitions
# ============================================================================


@router.post(
    "/{payroll_run_id}/process",
    response_model=PayrollRunResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def process_payroll_run(
    service: RunService,
    organization_id: OrganizationId,
    payroll_run_id: Annotated[UUID, Path()],
    payload: ActorRequest | None = None,
) -> PayrollRunResponse:
    """Calculate payslips for all active employees."""
    await _run_in_organization(service, payroll_run_id, organization_id)
    actor = payload.actor if payload else None
    run = await service.process_payroll_run(payroll_run_id, actor=actor)
    return PayrollRunResponse.model_validate(run)


@router.post(
    "/{payroll_run_id}/approve",
    response_model=PayrollRunResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def approve_payroll_run(
    service: RunService,
    organization_id: OrganizationId,
    payroll_run_id: Annotated[UUID, Path()],
    payload: ApprovalRequest | None = None,
) -> PayrollRunResponse:
    await _run_in_organization(service, payroll_run_id, organization_id)
    payload = payload or ApprovalRequest()
    run = await service.approve_payroll_run(
        payroll_run_id, actor=payload.actor, comments=payload.comments
    )
    return PayrollRunResponse.model_validate(run)


@router.post(
    "/{payroll_run_id}/reject",
    response_model=PayrollRunResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def reject_payroll_run(
    service: RunService,
    organization_id: OrganizationId,
    payroll_run_id: Annotated[UUID, Path()],
    payload: RejectionRequest,
) -> PayrollRunResponse:
    await _run_in_organization(service, payroll_run_id, organization_id)
    run = await service.reject_payroll_run(payroll_run_id, payload.reason)
    return PayrollRunResponse.model_validate(run)


@router.post(
    "/{payroll_run_id}/pay",
    response_model=PayrollRunResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def mark_payroll_run_paid(
    service: RunService,
    organization_id: OrganizationId,
    payroll_run_id: Annotated[UUID, Path()],
    payload: ActorRequest | None = None,
) -> PayrollRunResponse:
    await _run_in_organization(service, payroll_run_id, organization_id)
    actor = payload.actor if payload else None
    run = await service.mark_payroll_run_paid(payroll_run_id, actor=actor)
    return PayrollRunResponse.model_validate(run)


@router.post(
    "/{payroll_run_id}/cancel",
    response_model=PayrollRunResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def cancel_payroll_run(
    service: RunService,
    organization_id: OrganizationId,
    payroll_run_id: Annotated[UUID, Path()],
    payload: CancellationRequest | None = None,
) -> PayrollRunResponse:
    await _run_in_organization(service, payroll_run_id, organization_id)
    reason = payload.reason if payload else None
    run = await service.cancel_payroll_run(payroll_run_id, reason)
    return PayrollRunResponse.model_validate(run)
