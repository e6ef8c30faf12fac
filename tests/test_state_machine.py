"""Tests for payroll run state machine."""

import pytest

from hrms_payroll.exceptions import InvalidTransitionError
from hrms_payroll.models import PayrollStatus
from hrms_payroll.services.state_machine import PayrollRunStateMachine


class TestPayrollRunStateMachine:
    """Test state machine transitions."""

    def test_valid_transitions(self):
        """Test that valid transitions are allowed."""
        assert PayrollRunStateMachine.can_transition("draft", "processing") is True
        assert PayrollRunStateMachine.can_transition("processing", "calculated") is True
        assert PayrollRunStateMachine.can_transition("calculated", "approved") is True
        assert PayrollRunStateMachine.can_transition("approved", "paid") is True

        # Resume and retry
        assert PayrollRunStateMachine.can_transition("processing", "processing") is True
        assert PayrollRunStateMachine.can_transition("processing", "error") is True
        assert PayrollRunStateMachine.can_transition("error", "processing") is True

        # Side exits
        assert PayrollRunStateMachine.can_transition("calculated", "rejected") is True
        for status in ("draft", "processing", "error", "calculated"):
            assert PayrollRunStateMachine.can_transition(status, "cancelled") is True

    def test_invalid_transitions(self):
        """Test that invalid transitions are blocked."""
        # Can't skip processing
        assert PayrollRunStateMachine.can_transition("draft", "calculated") is False
        assert PayrollRunStateMachine.can_transition("draft", "approved") is False

        # Can't pay before approval
        assert PayrollRunStateMachine.can_transition("calculated", "paid") is False

        # Approved runs can only be paid
        assert PayrollRunStateMachine.can_transition("approved", "cancelled") is False
        assert PayrollRunStateMachine.can_transition("approved", "rejected") is False

        # Can't go backwards
        assert PayrollRunStateMachine.can_transition("calculated", "processing") is False
        assert PayrollRunStateMachine.can_transition("error", "draft") is False

    @pytest.mark.parametrize("terminal", ["paid", "cancelled", "rejected"])
    def test_terminal_statuses(self, terminal):
        assert PayrollRunStateMachine.is_terminal(terminal) is True
        assert PayrollRunStateMachine.get_next_statuses(terminal) == []
        for status in PayrollStatus:
            assert PayrollRunStateMachine.can_transition(terminal, status) is False

    def test_every_status_has_an_entry(self):
        assert set(PayrollRunStateMachine.VALID_TRANSITIONS) == set(PayrollStatus)

    def test_validate_transition_raises(self):
        """Test that validate_transition raises for invalid transitions."""
        with pytest.raises(InvalidTransitionError) as exc_info:
            PayrollRunStateMachine.validate_transition("paid", "cancelled")

        assert exc_info.value.from_status == "paid"
        assert exc_info.value.to_status == "cancelled"
        assert exc_info.value.code == "INVALID_STATE"

    def test_unknown_status_rejected(self):
        with pytest.raises(ValueError):
            PayrollRunStateMachine.can_transition("preview", "approved")

    def test_guards(self):
        assert PayrollRunStateMachine.can_process("draft") is True
        assert PayrollRunStateMachine.can_process("error") is True
        assert PayrollRunStateMachine.can_process("calculated") is False

        assert PayrollRunStateMachine.can_approve("calculated") is True
        assert PayrollRunStateMachine.can_approve("processing") is False

        assert PayrollRunStateMachine.can_pay("approved") is True
        assert PayrollRunStateMachine.can_pay("calculated") is False

        assert PayrollRunStateMachine.can_cancel("error") is True
        assert PayrollRunStateMachine.can_cancel("paid") is False

        assert PayrollRunStateMachine.can_edit("draft") is True
        assert PayrollRunStateMachine.can_edit("error") is True
        assert PayrollRunStateMachine.can_edit("calculated") is False

        assert PayrollRunStateMachine.can_delete("draft", 0) is True
        assert PayrollRunStateMachine.can_delete("draft", 1) is False
        assert PayrollRunStateMachine.can_delete("cancelled", 0) is False

    def test_get_next_statuses(self):
        assert PayrollRunStateMachine.get_next_statuses("draft") == [
            PayrollStatus.CANCELLED,
            PayrollStatus.PROCESSING,
        ]
        assert PayrollRunStateMachine.get_next_statuses("approved") == [PayrollStatus.PAID]
