"""Typed exceptions for payroll operations.

Every exception carries a machine-readable ``code`` so the API layer can map
it onto a response without parsing messages:

    PayrollError
    +-- PayrollValidationError            VALIDATION_ERROR
    |   +-- PayrollRunAlreadyExistsError  ALREADY_EXISTS
    |   +-- InvalidEmployeeConfigurationError
    |   +-- NegativeNetPayError
    +-- NotFoundError                     NOT_FOUND
    |   +-- PayrollRunNotFoundError
    |   +-- PayslipNotFoundError
    |   +-- EmployeeNotFoundError
    |   +-- OrganizationNotFoundError
    +-- InvalidTransitionError            INVALID_STATE
    +-- PayslipFinalizedError             INVALID_STATE
    +-- ConcurrentTransitionError         CONFLICT (retryable)
    |   +-- PayrollRunBusyError
    +-- PayrollProcessingError            PROCESSING_ERROR
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID


class PayrollError(Exception):
    """Base class for all payroll errors."""

    code: str = "PAYROLL_ERROR"
    retryable: bool = False


# ===== Validation =====


class PayrollValidationError(PayrollError):
    """Input rejected before any state change."""

    code = "VALIDATION_ERROR"


class PayrollRunAlreadyExistsError(PayrollValidationError):
    """A run already covers the exact pay period for the organization."""

    code = "ALREADY_EXISTS"

    def __init__(self, organization_id: UUID, period_start: date, period_end: date):
        self.organization_id = organization_id
        self.period_start = period_start
        self.period_end = period_end
        super().__init__(
            f"Payroll run already exists for pay period {period_start} to {period_end}"
        )


class InvalidEmployeeConfigurationError(PayrollValidationError):
    """Employee compensation data is missing or inconsistent."""

    def __init__(self, employee_id: UUID, reason: str):
        self.employee_id = employee_id
        self.reason = reason
        super().__init__(f"Invalid configuration for employee {employee_id}: {reason}")


class NegativeNetPayError(PayrollValidationError):
    """Calculated net pay fell below zero."""

    def __init__(self, employee_id: UUID, net_pay: Decimal):
        self.employee_id = employee_id
        self.net_pay = net_pay
        super().__init__(f"Negative net pay for employee {employee_id}: {net_pay}")


# ===== Not found =====


class NotFoundError(PayrollError):
    """Referenced entity does not exist."""

    code = "NOT_FOUND"
    entity = "Entity"

    def __init__(self, entity_id: UUID):
        self.entity_id = entity_id
        super().__init__(f"{self.entity} not found: {entity_id}")


class PayrollRunNotFoundError(NotFoundError):
    entity = "Payroll run"


class PayslipNotFoundError(NotFoundError):
    entity = "Payslip"


class EmployeeNotFoundError(NotFoundError):
    entity = "Employee"


class OrganizationNotFoundError(NotFoundError):
    entity = "Organization"


# ===== State guards =====


class InvalidTransitionError(PayrollError):
    """Raised when an invalid state transition is attempted."""

    code = "INVALID_STATE"

    def __init__(self, from_status: str, to_status: str, reason: str | None = None):
        self.from_status = from_status
        self.to_status = to_status
        self.reason = reason
        msg = f"Invalid transition from '{from_status}' to '{to_status}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class PayslipFinalizedError(PayrollError):
    """Finalized payslips cannot be recalculated."""

    code = "INVALID_STATE"

    def __init__(self, payslip_id: UUID):
        self.payslip_id = payslip_id
        super().__init__(f"Cannot recalculate finalized payslip {payslip_id}")


class ConcurrentTransitionError(PayrollError):
    """Another transition changed the run between read and write."""

    code = "CONFLICT"
    retryable = True

    def __init__(
        self,
        payroll_run_id: UUID,
        expected_status: str,
        expected_version: int,
        message: str | None = None,
    ):
        self.payroll_run_id = payroll_run_id
        self.expected_status = expected_status
        self.expected_version = expected_version
        super().__init__(
            message
            or f"Payroll run {payroll_run_id} changed concurrently "
            f"(expected status '{expected_status}' at version {expected_version}); retry"
        )


class PayrollRunBusyError(ConcurrentTransitionError):
    """Another call holds a live processing claim on the run."""

    def __init__(
        self, payroll_run_id: UUID, status: str, version: int, claimed_at: datetime | None
    ):
        self.claimed_at = claimed_at
        super().__init__(
            payroll_run_id,
            status,
            version,
            f"Payroll run {payroll_run_id} is already being processed "
            f"(claimed at {claimed_at}); retry later",
        )


# ===== Processing =====


class PayrollProcessingError(PayrollError):
    """Unhandled failure inside the processing loop; the run is now in ERROR."""

    code = "PROCESSING_ERROR"

    def __init__(self, payroll_run_id: UUID, message: str):
        self.payroll_run_id = payroll_run_id
        super().__init__(f"Failed to process payroll run {payroll_run_id}: {message}")
