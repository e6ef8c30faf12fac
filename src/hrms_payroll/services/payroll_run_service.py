"""Payroll run service - main orchestrator for payroll operations."""

from __future__ import annotations

import logging
import re
from datetime import date, timedelta, timezone
from typing import Any
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import set_committed_value

from hrms_payroll.calculators import (
    PayslipAdjustments,
    PayslipCalculator,
)
from hrms_payroll.config import get_settings
from hrms_payroll.exceptions import (
    ConcurrentTransitionError,
    EmployeeNotFoundError,
    InvalidTransitionError,
    OrganizationNotFoundError,
    PayrollProcessingError,
    PayrollRunAlreadyExistsError,
    PayrollRunBusyError,
    PayrollRunNotFoundError,
    PayrollValidationError,
    PayslipFinalizedError,
    PayslipNotFoundError,
)
from hrms_payroll.models import Organization, PayrollRun, PayrollStatus, Payslip
from hrms_payroll.models.base import utcnow
from hrms_payroll.services.directory import (
    AttendanceSource,
    EmployeeDirectory,
    SqlAttendanceSource,
    SqlEmployeeDirectory,
)
from hrms_payroll.services.state_machine import PayrollRunStateMachine

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


class PayrollRunService:
    """Service for managing the payroll run lifecycle.

    Operations:
    - create_payroll_run / update_payroll_run / delete_payroll_run
    - process_payroll_run: calculate a payslip for every active employee
    - approve_payroll_run: finalize payslips
    - reject_payroll_run / cancel_payroll_run / mark_payroll_run_paid
    - recalculate_payslip: rerun the calculator for one unfinalized payslip
    - generate_payslip_document: assign the deliverable document path

    Every status change is a compare-and-set on (status, version). Mutating
    operations commit their own transaction.

    A process call claims the run by stamping ``processing_started_at``.
    While that claim is younger than ``processing_lease`` other process calls
    are refused with PayrollRunBusyError; an older claim is treated as
    abandoned and taken over.

    Negative net pay is stored with a warning by default (for example an
    hourly employee without attendance). Pass a strict calculator to reject
    it instead.
    """

    def __init__(
        self,
        session: AsyncSession,
        directory: EmployeeDirectory | None = None,
        attendance: AttendanceSource | None = None,
        calculator: PayslipCalculator | None = None,
        document_root: str | None = None,
        processing_lease: timedelta | None = None,
    ):
        settings = get_settings()
        self.session = session
        self.directory = directory or SqlEmployeeDirectory(session)
        self.attendance = attendance or SqlAttendanceSource(session)
        self.calculator = calculator or PayslipCalculator(allow_negative_net=True)
        self.document_root = document_root or settings.payslip_document_root
        if processing_lease is None:
            processing_lease = timedelta(seconds=settings.processing_lease_seconds)
        self.processing_lease = processing_lease

    # ===== Queries =====

    async def get_payroll_run(self, payroll_run_id: UUID) -> PayrollRun:
        """Load a payroll run, raising PayrollRunNotFoundError if missing."""
        run = await self.session.get(PayrollRun, payroll_run_id)
        if run is None:
            raise PayrollRunNotFoundError(payroll_run_id)
        return run

    async def get_payslip(self, payslip_id: UUID) -> Payslip:
        payslip = await self.session.get(Payslip, payslip_id)
        if payslip is None:
            raise PayslipNotFoundError(payslip_id)
        return payslip

    async def list_payroll_runs(
        self,
        organization_id: UUID,
        status: PayrollStatus | None = None,
        page: int = 1,
        page_size: int = 50,
    ) -> tuple[list[PayrollRun], int]:
        """List runs for an organization, newest period first.

        Returns the requested page and the total number of matching runs.
        """
        if page < 1 or page_size < 1:
            raise PayrollValidationError("page and page_size must be positive")

        criteria = [PayrollRun.organization_id == organization_id]
        if status is not None:
            criteria.append(PayrollRun.status == PayrollStatus(status).value)

        total = await self.session.scalar(
            select(func.count()).select_from(PayrollRun).where(*criteria)
        )
        result = await self.session.execute(
            select(PayrollRun)
            .where(*criteria)
            .order_by(PayrollRun.pay_period_start.desc(), PayrollRun.created_at.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        return list(result.scalars()), total or 0

    async def list_pending_payroll_runs(self, organization_id: UUID) -> list[PayrollRun]:
        """Runs waiting for approval."""
        result = await self.session.execute(
            select(PayrollRun)
            .where(
                PayrollRun.organization_id == organization_id,
                PayrollRun.status == PayrollStatus.CALCULATED.value,
            )
            .order_by(PayrollRun.pay_period_start)
        )
        return list(result.scalars())

    async def list_payslips(self, payroll_run_id: UUID) -> list[Payslip]:
        await self.get_payroll_run(payroll_run_id)
        return await self._load_payslips(payroll_run_id)

    # ===== Lifecycle =====

    async def create_payroll_run(
        self,
        organization_id: UUID,
        name: str,
        pay_period_start: date,
        pay_period_end: date,
        pay_date: date,
        description: str | None = None,
        actor: str | None = None,
    ) -> PayrollRun:
        """Create a DRAFT run for a pay period."""
        name = self._validate_name(name)
        self._validate_period(pay_period_start, pay_period_end)

        if await self.session.get(Organization, organization_id) is None:
            raise OrganizationNotFoundError(organization_id)

        await self._ensure_period_free(organization_id, pay_period_start, pay_period_end)

        run = PayrollRun(
            organization_id=organization_id,
            name=name,
            description=description,
            pay_period_start=pay_period_start,
            pay_period_end=pay_period_end,
            pay_date=pay_date,
            status=PayrollStatus.DRAFT.value,
            version=1,
        )
        self.session.add(run)
        try:
            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            raise PayrollRunAlreadyExistsError(
                organization_id, pay_period_start, pay_period_end
            ) from exc

        logger.info(
            "Created payroll run %s for %s to %s (actor=%s)",
            run.payroll_run_id,
            pay_period_start,
            pay_period_end,
            actor,
        )
        return run

    async def update_payroll_run(
        self,
        payroll_run_id: UUID,
        name: str | None = None,
        description: str | None = None,
        pay_period_start: date | None = None,
        pay_period_end: date | None = None,
        pay_date: date | None = None,
    ) -> PayrollRun:
        """Edit descriptive fields while the run is DRAFT or ERROR."""
        run = await self.get_payroll_run(payroll_run_id)
        if not PayrollRunStateMachine.can_edit(run.status):
            raise InvalidTransitionError(
                run.status, run.status, "Only draft or errored runs can be edited"
            )

        values: dict[str, Any] = {}
        if name is not None:
            values["name"] = self._validate_name(name)
        if description is not None:
            values["description"] = description
        if pay_date is not None:
            values["pay_date"] = pay_date

        new_start = pay_period_start or run.pay_period_start
        new_end = pay_period_end or run.pay_period_end
        if (new_start, new_end) != (run.pay_period_start, run.pay_period_end):
            self._validate_period(new_start, new_end)
            if await self._count_payslips(payroll_run_id):
                raise PayrollValidationError(
                    "Cannot change the pay period of a run that already has payslips"
                )
            await self._ensure_period_free(
                run.organization_id, new_start, new_end, exclude_id=payroll_run_id
            )
            values["pay_period_start"] = new_start
            values["pay_period_end"] = new_end

        if not values:
            return run

        try:
            await self._compare_and_set(run, values)
            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            raise PayrollRunAlreadyExistsError(run.organization_id, new_start, new_end) from exc
        return run

    async def delete_payroll_run(self, payroll_run_id: UUID) -> None:
        """Delete a DRAFT run that has no payslips."""
        run = await self.get_payroll_run(payroll_run_id)
        payslip_count = await self._count_payslips(payroll_run_id)
        if not PayrollRunStateMachine.can_delete(run.status, payslip_count):
            raise InvalidTransitionError(
                run.status, "deleted", "Only draft runs without payslips can be deleted"
            )
        result = await self.session.execute(
            delete(PayrollRun)
            .where(
                PayrollRun.payroll_run_id == payroll_run_id,
                PayrollRun.status == run.status,
                PayrollRun.version == run.version,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise ConcurrentTransitionError(payroll_run_id, run.status, run.version)
        self.session.expunge(run)
        await self.session.commit()
        logger.info("Deleted payroll run %s", payroll_run_id)

    async def process_payroll_run(
        self, payroll_run_id: UUID, actor: str | None = None
    ) -> PayrollRun:
        """Calculate payslips for every active employee and move to CALCULATED.

        Each payslip is committed on its own so partial progress survives a
        failure. On failure the run moves to ERROR and PayrollProcessingError
        is raised; calling again resumes with the remaining employees.

        Raises:
            PayrollRunBusyError: another call holds a live processing claim.
            ConcurrentTransitionError: the run changed while processing.
        """
        run = await self.get_payroll_run(payroll_run_id)
        await self.session.refresh(run)
        if not PayrollRunStateMachine.can_process(run.status):
            raise InvalidTransitionError(
                run.status,
                PayrollStatus.PROCESSING.value,
                "Run must be draft, processing or error to process",
            )
        if run.status == PayrollStatus.PROCESSING.value and not self._claim_expired(run):
            raise PayrollRunBusyError(
                payroll_run_id, run.status, run.version, run.processing_started_at
            )

        await self._transition(run, PayrollStatus.PROCESSING, processing_started_at=utcnow())
        await self.session.commit()
        claimed_version = run.version

        try:
            await self._calculate_missing_payslips(run)

            payslips = await self._load_payslips(payroll_run_id)
            run.apply_totals(payslips)
            await self.session.flush()
            await self._transition(
                run,
                PayrollStatus.CALCULATED,
                processed_at=utcnow(),
                processed_by=actor,
                processing_started_at=None,
            )
            await self.session.commit()
        except ConcurrentTransitionError:
            await self.session.rollback()
            raise
        except Exception as exc:
            logger.exception("Processing failed for payroll run %s", payroll_run_id)
            await self.session.rollback()
            await self._record_failure(run, claimed_version, exc)
            raise PayrollProcessingError(payroll_run_id, str(exc)) from exc

        return run

    async def approve_payroll_run(
        self,
        payroll_run_id: UUID,
        actor: str | None = None,
        comments: str | None = None,
    ) -> PayrollRun:
        """Approve a calculated run and finalize its payslips."""
        run = await self.get_payroll_run(payroll_run_id)
        if not PayrollRunStateMachine.can_approve(run.status):
            raise InvalidTransitionError(
                run.status,
                PayrollStatus.APPROVED.value,
                "Only calculated runs can be approved",
            )
        values: dict[str, Any] = {"approved_at": utcnow(), "approved_by": actor}
        if comments:
            values["notes"] = comments
        await self._transition(run, PayrollStatus.APPROVED, **values)

        for payslip in await self._load_payslips(payroll_run_id):
            payslip.is_finalized = True
        await self.session.commit()
        return run

    async def reject_payroll_run(self, payroll_run_id: UUID, reason: str) -> PayrollRun:
        """Reject a calculated run. Terminal."""
        if not reason or not reason.strip():
            raise PayrollValidationError("A rejection reason is required")
        run = await self.get_payroll_run(payroll_run_id)
        await self._transition(run, PayrollStatus.REJECTED, notes=reason)
        await self.session.commit()
        return run

    async def mark_payroll_run_paid(
        self, payroll_run_id: UUID, actor: str | None = None
    ) -> PayrollRun:
        run = await self.get_payroll_run(payroll_run_id)
        if not PayrollRunStateMachine.can_pay(run.status):
            raise InvalidTransitionError(
                run.status, PayrollStatus.PAID.value, "Only approved runs can be paid"
            )
        await self._transition(run, PayrollStatus.PAID, paid_at=utcnow(), paid_by=actor)
        await self.session.commit()
        return run

    async def cancel_payroll_run(
        self, payroll_run_id: UUID, reason: str | None = None
    ) -> PayrollRun:
        """Cancel a run that has not been approved yet."""
        run = await self.get_payroll_run(payroll_run_id)
        if not PayrollRunStateMachine.can_cancel(run.status):
            raise InvalidTransitionError(
                run.status,
                PayrollStatus.CANCELLED.value,
                "Approved, paid and closed runs cannot be cancelled",
            )
        values: dict[str, Any] = {"processing_started_at": None}
        if reason:
            values["notes"] = reason
        await self._transition(run, PayrollStatus.CANCELLED, **values)
        await self.session.commit()
        return run

    # ===== Payslips =====

    async def recalculate_payslip(
        self,
        payslip_id: UUID,
        adjustments: PayslipAdjustments | None = None,
    ) -> Payslip:
        """Recalculate one unfinalized payslip and refresh its run's totals.

        Without explicit adjustments the payslip keeps its current bonus,
        commission, allowances, reimbursements and other deductions.
        """
        payslip = await self.get_payslip(payslip_id)
        if payslip.is_finalized:
            raise PayslipFinalizedError(payslip_id)

        run = await self.get_payroll_run(payslip.payroll_run_id)
        compensation = await self.directory.get_employee(payslip.employee_id)
        if compensation is None:
            raise EmployeeNotFoundError(payslip.employee_id)

        if adjustments is None:
            adjustments = PayslipAdjustments(
                bonus=payslip.bonus,
                commission=payslip.commission,
                allowances=payslip.allowances,
                reimbursements=payslip.reimbursements,
                other_deductions=payslip.other_deductions,
            )

        attendance = await self.attendance.get_attendance_aggregate(
            payslip.employee_id, run.pay_period_start, run.pay_period_end
        )
        figures = self.calculator.calculate(compensation, attendance, adjustments)
        payslip.apply_figures(figures)
        await self.session.flush()

        run.apply_totals(await self._load_payslips(run.payroll_run_id))
        await self.session.commit()
        logger.info("Recalculated payslip %s for run %s", payslip_id, run.payroll_run_id)
        return payslip

    async def generate_payslip_document(self, payslip_id: UUID) -> str:
        """Assign the payslip's deliverable document path and return it."""
        payslip = await self.get_payslip(payslip_id)
        run = await self.get_payroll_run(payslip.payroll_run_id)
        compensation = await self.directory.get_employee(payslip.employee_id)
        if compensation is None:
            raise EmployeeNotFoundError(payslip.employee_id)

        run_name = _WHITESPACE.sub("_", run.name.strip())
        path = (
            f"{self.document_root.rstrip('/')}/"
            f"{payslip.payslip_id}_{compensation.employee_number}_{run_name}.pdf"
        )
        payslip.document_path = path
        await self.session.commit()
        return path

    # ===== Validation =====

    async def validate_payroll_run(self, payroll_run_id: UUID) -> dict[str, Any]:
        """Read-only readiness report for a run."""
        run = await self.get_payroll_run(payroll_run_id)
        errors: list[str] = []
        warnings: list[str] = []

        if run.pay_period_start > run.pay_period_end:
            errors.append("Pay period start date is after end date")

        employees = await self.directory.list_active_employees(run.organization_id)
        if not employees:
            errors.append("No active employees found for the organization")

        if run.pay_date < run.pay_period_end:
            warnings.append("Pay date is before the end of the pay period")

        return {
            "is_valid": not errors,
            "errors": errors,
            "warnings": warnings,
            "employee_count": len(employees),
        }

    # ===== Internals =====

    async def _calculate_missing_payslips(self, run: PayrollRun) -> None:
        employees = await self.directory.list_active_employees(run.organization_id)
        existing = await self._payslip_employee_ids(run.payroll_run_id)

        for compensation in employees:
            if compensation.employee_id in existing:
                logger.debug(
                    "Payslip already exists for employee %s in run %s, skipping",
                    compensation.employee_id,
                    run.payroll_run_id,
                )
                continue

            attendance = await self.attendance.get_attendance_aggregate(
                compensation.employee_id, run.pay_period_start, run.pay_period_end
            )
            figures = self.calculator.calculate(compensation, attendance)

            payslip = Payslip(
                payroll_run_id=run.payroll_run_id,
                employee_id=compensation.employee_id,
                is_finalized=False,
            )
            payslip.apply_figures(figures)

            run_id, status, version = run.payroll_run_id, run.status, run.version
            await self._hold_claim(run)
            self.session.add(payslip)
            try:
                await self.session.commit()
            except IntegrityError as exc:
                # Another call stored this employee's payslip first
                await self.session.rollback()
                raise ConcurrentTransitionError(run_id, status, version) from exc

    async def _hold_claim(self, run: PayrollRun) -> None:
        """Lock the run row and check this call still owns the processing claim."""
        version = await self.session.scalar(
            select(PayrollRun.version)
            .where(
                PayrollRun.payroll_run_id == run.payroll_run_id,
                PayrollRun.status == run.status,
            )
            .with_for_update()
        )
        if version != run.version:
            raise ConcurrentTransitionError(run.payroll_run_id, run.status, run.version)

    def _claim_expired(self, run: PayrollRun) -> bool:
        started_at = run.processing_started_at
        if started_at is None:
            return True
        if started_at.tzinfo is None:
            # SQLite returns naive datetimes
            started_at = started_at.replace(tzinfo=timezone.utc)
        return utcnow() - started_at >= self.processing_lease

    async def _record_failure(
        self, run: PayrollRun, claimed_version: int, error: Exception
    ) -> None:
        """Move a failed run to ERROR unless another call has taken it over."""
        await self.session.refresh(run)
        if run.status != PayrollStatus.PROCESSING.value or run.version != claimed_version:
            logger.warning(
                "Payroll run %s changed while processing (now %s at version %s); "
                "not recording the failure",
                run.payroll_run_id,
                run.status,
                run.version,
            )
            raise ConcurrentTransitionError(
                run.payroll_run_id, PayrollStatus.PROCESSING.value, claimed_version
            ) from error

        run_id = run.payroll_run_id
        try:
            await self._transition(
                run,
                PayrollStatus.ERROR,
                notes=f"Error processing payroll: {error}",
                processing_started_at=None,
            )
            await self.session.commit()
        except ConcurrentTransitionError:
            logger.warning("Could not mark payroll run %s as failed", run_id)
            await self.session.rollback()
            raise

    async def _transition(
        self, run: PayrollRun, to_status: PayrollStatus, **values: Any
    ) -> PayrollRun:
        """Validate and apply a status change as a compare-and-set."""
        from_status = run.status
        PayrollRunStateMachine.validate_transition(
            from_status, to_status, _transition_hint(from_status)
        )
        await self._compare_and_set(run, {"status": to_status.value, **values})
        logger.info(
            "Payroll run %s: %s -> %s", run.payroll_run_id, from_status, to_status.value
        )
        return run

    async def _compare_and_set(self, run: PayrollRun, values: dict[str, Any]) -> None:
        """Write values only if status and version are unchanged; bump version."""
        expected_status = run.status
        expected_version = run.version
        values = {**values, "version": expected_version + 1, "updated_at": utcnow()}

        result = await self.session.execute(
            update(PayrollRun)
            .where(
                PayrollRun.payroll_run_id == run.payroll_run_id,
                PayrollRun.status == expected_status,
                PayrollRun.version == expected_version,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise ConcurrentTransitionError(
                run.payroll_run_id, expected_status, expected_version
            )

        for key, value in values.items():
            set_committed_value(run, key, value)

    async def _load_payslips(self, payroll_run_id: UUID) -> list[Payslip]:
        result = await self.session.execute(
            select(Payslip)
            .where(Payslip.payroll_run_id == payroll_run_id)
            .order_by(Payslip.created_at, Payslip.payslip_id)
        )
        return list(result.scalars())

    async def _payslip_employee_ids(self, payroll_run_id: UUID) -> set[UUID]:
        result = await self.session.execute(
            select(Payslip.employee_id).where(Payslip.payroll_run_id == payroll_run_id)
        )
        return set(result.scalars())

    async def _count_payslips(self, payroll_run_id: UUID) -> int:
        count = await self.session.scalar(
            select(func.count())
            .select_from(Payslip)
            .where(Payslip.payroll_run_id == payroll_run_id)
        )
        return count or 0

    async def _ensure_period_free(
        self,
        organization_id: UUID,
        pay_period_start: date,
        pay_period_end: date,
        exclude_id: UUID | None = None,
    ) -> None:
        stmt = select(PayrollRun.payroll_run_id).where(
            PayrollRun.organization_id == organization_id,
            PayrollRun.pay_period_start == pay_period_start,
            PayrollRun.pay_period_end == pay_period_end,
        )
        if exclude_id is not None:
            stmt = stmt.where(PayrollRun.payroll_run_id != exclude_id)
        if await self.session.scalar(stmt.limit(1)) is not None:
            raise PayrollRunAlreadyExistsError(
                organization_id, pay_period_start, pay_period_end
            )

    @staticmethod
    def _validate_name(name: str) -> str:
        if not name or not name.strip():
            raise PayrollValidationError("Payroll run name is required")
        return name.strip()

    @staticmethod
    def _validate_period(pay_period_start: date, pay_period_end: date) -> None:
        if pay_period_start > pay_period_end:
            raise PayrollValidationError("Pay period start must not be after pay period end")


def _transition_hint(status: str) -> str:
    if PayrollRunStateMachine.is_terminal(status):
        return f"'{status}' is a final status"
    allowed = ", ".join(s.value for s in PayrollRunStateMachine.get_next_statuses(status))
    return f"allowed next statuses: {allowed}"
