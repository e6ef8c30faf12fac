"""Payroll run state machine with transition validation."""

from __future__ import annotations

from hrms_payroll.exceptions import InvalidTransitionError
from hrms_payroll.models.enums import PayrollStatus


class PayrollRunStateMachine:
    """State machine for payroll run status transitions.

    Allowed transitions:
    - draft -> processing, cancelled
    - processing -> processing (takeover of an expired claim), calculated,
      error, cancelled
    - error -> processing (retry), cancelled
    - calculated -> approved, rejected, cancelled
    - approved -> paid
    - paid, cancelled, rejected are terminal
    """

    VALID_TRANSITIONS: dict[PayrollStatus, frozenset[PayrollStatus]] = {
        PayrollStatus.DRAFT: frozenset({PayrollStatus.PROCESSING, PayrollStatus.CANCELLED}),
        PayrollStatus.PROCESSING: frozenset(
            {
                PayrollStatus.PROCESSING,
                PayrollStatus.CALCULATED,
                PayrollStatus.ERROR,
                PayrollStatus.CANCELLED,
            }
        ),
        PayrollStatus.ERROR: frozenset({PayrollStatus.PROCESSING, PayrollStatus.CANCELLED}),
        PayrollStatus.CALCULATED: frozenset(
            {PayrollStatus.APPROVED, PayrollStatus.REJECTED, PayrollStatus.CANCELLED}
        ),
        PayrollStatus.APPROVED: frozenset({PayrollStatus.PAID}),
        PayrollStatus.PAID: frozenset(),
        PayrollStatus.CANCELLED: frozenset(),
        PayrollStatus.REJECTED: frozenset(),
    }

    # Statuses from which processing may start or resume
    PROCESSABLE = frozenset(
        {PayrollStatus.DRAFT, PayrollStatus.PROCESSING, PayrollStatus.ERROR}
    )

    # Statuses where descriptive fields can still be edited
    EDITABLE = frozenset({PayrollStatus.DRAFT, PayrollStatus.ERROR})

    TERMINAL = frozenset(
        {PayrollStatus.PAID, PayrollStatus.CANCELLED, PayrollStatus.REJECTED}
    )

    @classmethod
    def can_transition(cls, from_status: str, to_status: str) -> bool:
        """Check if a transition is valid."""
        allowed = cls.VALID_TRANSITIONS.get(PayrollStatus(from_status), frozenset())
        return PayrollStatus(to_status) in allowed

    @classmethod
    def validate_transition(
        cls, from_status: str, to_status: str, reason: str | None = None
    ) -> None:
        """Validate a transition, raising InvalidTransitionError if invalid."""
        if not cls.can_transition(from_status, to_status):
            raise InvalidTransitionError(
                PayrollStatus(from_status).value, PayrollStatus(to_status).value, reason
            )

    @classmethod
    def can_process(cls, status: str) -> bool:
        return PayrollStatus(status) in cls.PROCESSABLE

    @classmethod
    def can_approve(cls, status: str) -> bool:
        return PayrollStatus(status) == PayrollStatus.CALCULATED

    @classmethod
    def can_pay(cls, status: str) -> bool:
        return PayrollStatus(status) == PayrollStatus.APPROVED

    @classmethod
    def can_cancel(cls, status: str) -> bool:
        return cls.can_transition(status, PayrollStatus.CANCELLED)

    @classmethod
    def can_edit(cls, status: str) -> bool:
        """Check if name, description and dates may be changed."""
        return PayrollStatus(status) in cls.EDITABLE

    @classmethod
    def can_delete(cls, status: str, payslip_count: int) -> bool:
        """Only an untouched draft may be deleted."""
        return PayrollStatus(status) == PayrollStatus.DRAFT and payslip_count == 0

    @classmethod
    def is_terminal(cls, status: str) -> bool:
        return PayrollStatus(status) in cls.TERMINAL

    @classmethod
    def get_next_statuses(cls, current_status: str) -> list[PayrollStatus]:
        """Get list of valid next statuses from current status."""
        allowed = cls.VALID_TRANSITIONS.get(PayrollStatus(current_status), frozenset())
        return sorted(allowed, key=lambda s: s.value)
