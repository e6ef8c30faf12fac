"""Payroll run and payslip models."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hrms_payroll.models.base import Base, TimestampMixin, UpdatedAtMixin
from hrms_payroll.models.enums import PayrollStatus, sql_in

if TYPE_CHECKING:
    from hrms_payroll.calculators.types import PayslipFigures
    from hrms_payroll.models.employee import Employee
    from hrms_payroll.models.organization import Organization

ZERO = Decimal("0.00")


def _money(precision: int = 12) -> Numeric:
    return Numeric(precision, 2)


class PayrollRun(Base, TimestampMixin, UpdatedAtMixin):
    """Batch of payslips for one organization and one pay period."""

    __tablename__ = "payroll_run"

    payroll_run_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    organization_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("organization.organization_id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    pay_period_start: Mapped[date] = mapped_column(Date, nullable=False)
    pay_period_end: Mapped[date] = mapped_column(Date, nullable=False)
    pay_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(
        String, nullable=False, default=PayrollStatus.DRAFT.value
    )

    # Aggregates over owned payslips
    total_gross_pay: Mapped[Decimal] = mapped_column(_money(15), nullable=False, default=ZERO)
    total_taxes: Mapped[Decimal] = mapped_column(_money(15), nullable=False, default=ZERO)
    total_deductions: Mapped[Decimal] = mapped_column(_money(15), nullable=False, default=ZERO)
    total_net_pay: Mapped[Decimal] = mapped_column(_money(15), nullable=False, default=ZERO)
    employee_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    processed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    processed_by: Mapped[str | None] = mapped_column(String, nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    approved_by: Mapped[str | None] = mapped_column(String, nullable=True)
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    paid_by: Mapped[str | None] = mapped_column(String, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Processing claim; cleared when the run leaves PROCESSING
    processing_started_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Bumped by every status compare-and-set
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    __table_args__ = (
        UniqueConstraint(
            "organization_id",
            "pay_period_start",
            "pay_period_end",
            name="payroll_run_org_period_unique",
        ),
        CheckConstraint(
            "pay_period_end >= pay_period_start", name="payroll_run_dates_check"
        ),
        CheckConstraint(
            f"status IN ({sql_in(PayrollStatus)})",
            name="payroll_run_status_check",
        ),
    )

    # Relationships
    organization: Mapped[Organization] = relationship(back_populates="payroll_runs")
    payslips: Mapped[list[Payslip]] = relationship(
        back_populates="payroll_run",
        order_by="Payslip.created_at",
    )

    def apply_totals(self, payslips: list[Payslip]) -> None:
        """Set run aggregates to the sums of the given payslips."""
        self.total_gross_pay = sum((p.gross_pay for p in payslips), ZERO)
        self.total_taxes = sum((p.total_taxes for p in payslips), ZERO)
        self.total_deductions = sum((p.total_deductions for p in payslips), ZERO)
        self.total_net_pay = sum((p.net_pay for p in payslips), ZERO)
        self.employee_count = len(payslips)


class Payslip(Base, TimestampMixin, UpdatedAtMixin):
    """Computed earnings, taxes, deductions and net pay for one employee in one run."""

    __tablename__ = "payslip"

    payslip_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    payroll_run_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("payroll_run.payroll_run_id", ondelete="CASCADE"),
        nullable=False,
    )
    employee_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("employee.employee_id"),
        nullable=False,
    )

    # Hours
    regular_hours: Mapped[Decimal] = mapped_column(Numeric(7, 2), nullable=False, default=ZERO)
    overtime_hours: Mapped[Decimal] = mapped_column(Numeric(7, 2), nullable=False, default=ZERO)
    overtime_rate: Mapped[Decimal] = mapped_column(_money(), nullable=False, default=ZERO)

    # Earnings
    basic_salary: Mapped[Decimal] = mapped_column(_money(), nullable=False, default=ZERO)
    overtime_pay: Mapped[Decimal] = mapped_column(_money(), nullable=False, default=ZERO)
    bonus: Mapped[Decimal] = mapped_column(_money(), nullable=False, default=ZERO)
    commission: Mapped[Decimal] = mapped_column(_money(), nullable=False, default=ZERO)
    allowances: Mapped[Decimal] = mapped_column(_money(), nullable=False, default=ZERO)
    reimbursements: Mapped[Decimal] = mapped_column(_money(), nullable=False, default=ZERO)

    # Taxes
    federal_tax: Mapped[Decimal] = mapped_column(_money(), nullable=False, default=ZERO)
    state_tax: Mapped[Decimal] = mapped_column(_money(), nullable=False, default=ZERO)
    social_security_tax: Mapped[Decimal] = mapped_column(_money(), nullable=False, default=ZERO)
    medicare_tax: Mapped[Decimal] = mapped_column(_money(), nullable=False, default=ZERO)
    unemployment_tax: Mapped[Decimal] = mapped_column(_money(), nullable=False, default=ZERO)

    # Deductions
    health_insurance: Mapped[Decimal] = mapped_column(_money(), nullable=False, default=ZERO)
    dental_insurance: Mapped[Decimal] = mapped_column(_money(), nullable=False, default=ZERO)
    vision_insurance: Mapped[Decimal] = mapped_column(_money(), nullable=False, default=ZERO)
    life_insurance: Mapped[Decimal] = mapped_column(_money(), nullable=False, default=ZERO)
    retirement_contribution: Mapped[Decimal] = mapped_column(_money(), nullable=False, default=ZERO)
    other_deductions: Mapped[Decimal] = mapped_column(_money(), nullable=False, default=ZERO)

    # Totals
    gross_pay: Mapped[Decimal] = mapped_column(_money(), nullable=False, default=ZERO)
    total_taxes: Mapped[Decimal] = mapped_column(_money(), nullable=False, default=ZERO)
    total_deductions: Mapped[Decimal] = mapped_column(_money(), nullable=False, default=ZERO)
    net_pay: Mapped[Decimal] = mapped_column(_money(), nullable=False, default=ZERO)

    is_finalized: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    document_path: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        UniqueConstraint("payroll_run_id", "employee_id", name="payslip_run_employee_unique"),
    )

    # Relationships
    payroll_run: Mapped[PayrollRun] = relationship(back_populates="payslips")
    employee: Mapped[Employee] = relationship()

    def apply_figures(self, figures: PayslipFigures) -> None:
        """Copy every calculated field onto this payslip."""
        for field_name, value in figures.as_dict().items():
            setattr(self, field_name, value)
