"""Organization model (tenant boundary for payroll runs)."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import String
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hrms_payroll.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from hrms_payroll.models.employee import Employee
    from hrms_payroll.models.payroll import PayrollRun


class Organization(Base, TimestampMixin):
    """Multi-tenant container."""

    __tablename__ = "organization"

    organization_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    name: Mapped[str] = mapped_column(String, nullable=False)

    # Relationships
    employees: Mapped[list[Employee]] = relationship(back_populates="organization")
    payroll_runs: Mapped[list[PayrollRun]] = relationship(back_populates="organization")
