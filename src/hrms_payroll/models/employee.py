"""Employee directory and attendance models.

These tables belong to the surrounding HR platform. The payroll core only
reads them through the directory and attendance interfaces in
``hrms_payroll.services.directory``.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    ForeignKey,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hrms_payroll.models.base import Base, TimestampMixin
from hrms_payroll.models.enums import AttendanceStatus, EmploymentType, sql_in

if TYPE_CHECKING:
    from hrms_payroll.models.organization import Organization


class Employee(Base, TimestampMixin):
    """Employee with compensation data."""

    __tablename__ = "employee"

    employee_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    organization_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("organization.organization_id", ondelete="CASCADE"),
        nullable=False,
    )
    employee_number: Mapped[str] = mapped_column(String, nullable=False)
    first_name: Mapped[str] = mapped_column(String, nullable=False)
    last_name: Mapped[str] = mapped_column(String, nullable=False)
    employment_type: Mapped[str] = mapped_column(
        String, nullable=False, default=EmploymentType.FULL_TIME.value
    )
    salary_amount: Mapped[Decimal | None] = mapped_column(Numeric(15, 2), nullable=True)
    hourly_rate: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        UniqueConstraint(
            "organization_id", "employee_number", name="employee_org_number_unique"
        ),
        CheckConstraint(
            f"employment_type IN ({sql_in(EmploymentType)})",
            name="employee_employment_type_check",
        ),
    )

    # Relationships
    organization: Mapped[Organization] = relationship(back_populates="employees")
    attendance_records: Mapped[list[AttendanceRecord]] = relationship(
        back_populates="employee"
    )

    @property
    def full_name(self) -> str:
        """Get full name."""
        return f"{self.first_name} {self.last_name}"


class AttendanceRecord(Base, TimestampMixin):
    """Daily attendance with worked hours."""

    __tablename__ = "attendance_record"

    attendance_record_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    employee_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("employee.employee_id", ondelete="CASCADE"),
        nullable=False,
    )
    attendance_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(
        String, nullable=False, default=AttendanceStatus.PRESENT.value
    )
    regular_hours: Mapped[Decimal | None] = mapped_column(Numeric(7, 2), nullable=True)
    overtime_hours: Mapped[Decimal | None] = mapped_column(Numeric(7, 2), nullable=True)

    __table_args__ = (
        UniqueConstraint(
            "employee_id", "attendance_date", name="attendance_employee_date_unique"
        ),
        CheckConstraint(
            f"status IN ({sql_in(AttendanceStatus)})",
            name="attendance_status_check",
        ),
    )

    # Relationships
    employee: Mapped[Employee] = relationship(back_populates="attendance_records")

    @property
    def is_present(self) -> bool:
        """Check if the record contributes payable hours."""
        return AttendanceStatus(self.status).counts_as_present
