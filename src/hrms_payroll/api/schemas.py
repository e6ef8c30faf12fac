"""Pydantic schemas for API request/response models."""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Payroll run schemas
# ============================================================================


class PayrollRunCreate(BaseModel):
    """Schema for creating a new payroll run."""

    name: str = Field(min_length=1)
    description: str | None = None
    pay_period_start: date
    pay_period_end: date
    pay_date: date
    created_by: str | None = None


class PayrollRunUpdate(BaseModel):
    """Schema for editing a draft or errored payroll run."""

    name: str | None = None
    description: str | None = None
    pay_period_start: date | None = None
    pay_period_end: date | None = None
    pay_date: date | None = None


class PayrollRunResponse(BaseModel):
    """Schema for payroll run response."""

    model_config = ConfigDict(from_attributes=True)

    payroll_run_id: UUID
    organization_id: UUID
    name: str
    description: str | None = None
    pay_period_start: date
    pay_period_end: date
    pay_date: date
    status: str
    total_gross_pay: Decimal
    total_taxes: Decimal
    total_deductions: Decimal
    total_net_pay: Decimal
    employee_count: int
    processed_at: datetime | None = None
    processed_by: str | None = None
    approved_at: datetime | None = None
    approved_by: str | None = None
    paid_at: datetime | None = None
    paid_by: str | None = None
    notes: str | None = None
    processing_started_at: datetime | None = None
    version: int
    created_at: datetime
    updated_at: datetime


class PayrollRunListResponse(BaseModel):
    """Schema for listing payroll runs."""

    items: list[PayrollRunResponse]
    total: int
    page: int
    page_size: int


# ============================================================================
# Transition schemas
# ============================================================================


class ActorRequest(BaseModel):
    """Who performs a process or pay action."""

    actor: str | None = None


class ApprovalRequest(BaseModel):
    """Schema for approval request."""

    actor: str | None = None
    comments: str | None = None


class RejectionRequest(BaseModel):
    reason: str = Field(min_length=1)


class CancellationRequest(BaseModel):
    reason: str | None = None


# ============================================================================
# Payslip schemas
# ============================================================================


class PayslipResponse(BaseModel):
    """Schema for payslip response."""

    model_config = ConfigDict(from_attributes=True)

    payslip_id: UUID
    payroll_run_id: UUID
    employee_id: UUID

    regular_hours: Decimal
    overtime_hours: Decimal
    overtime_rate: Decimal

    basic_salary: Decimal
    overtime_pay: Decimal
    bonus: Decimal
    commission: Decimal
    allowances: Decimal
    reimbursements: Decimal

    federal_tax: Decimal
    state_tax: Decimal
    social_security_tax: Decimal
    medicare_tax: Decimal
    unemployment_tax: Decimal

    health_insurance: Decimal
    dental_insurance: Decimal
    vision_insurance: Decimal
    life_insurance: Decimal
    retirement_contribution: Decimal
    other_deductions: Decimal

    gross_pay: Decimal
    total_taxes: Decimal
    total_deductions: Decimal
    net_pay: Decimal

    is_finalized: bool
    document_path: str | None = None
    created_at: datetime
    updated_at: datetime


class PayslipListResponse(BaseModel):
    items: list[PayslipResponse]
    total: int


class PayslipAdjustmentsRequest(BaseModel):
    """Externally sourced earnings and deductions for a recalculation."""

    bonus: Decimal = Field(default=Decimal("0.00"), ge=0)
    commission: Decimal = Field(default=Decimal("0.00"), ge=0)
    allowances: Decimal = Field(default=Decimal("0.00"), ge=0)
    reimbursements: Decimal = Field(default=Decimal("0.00"), ge=0)
    other_deductions: Decimal = Field(default=Decimal("0.00"), ge=0)


class PayslipDocumentResponse(BaseModel):
    payslip_id: UUID
    document_path: str


# ============================================================================
# Reporting schemas
# ============================================================================


class ValidationReportResponse(BaseModel):
    """Readiness report for a payroll run."""

    is_valid: bool
    errors: list[str]
    warnings: list[str]
    employee_count: int


class PayrollStatisticsResponse(BaseModel):
    total_gross_pay: Decimal
    total_net_pay: Decimal
    total_taxes: Decimal
    paid_run_count: int
    year: int


class PayrollCalendarResponse(BaseModel):
    year: int
    items: list[PayrollRunResponse]


# ============================================================================
# Error schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Schema for error response."""

    detail: str
    code: str | None = None
