"""Pydantic schemas for API request/response models."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from punch_payroll.services.state_machine import PeriodStatus


# ============================================================================
# Period schemas
# ============================================================================


class PeriodCreate(BaseModel):
    """Schema for creating a payroll period."""

    month: int = Field(ge=1, le=12)
    year: int = Field(ge=2000, le=2100)


class PeriodResponse(BaseModel):
    """Schema for payroll period response."""

    model_config = ConfigDict(from_attributes=True)

    payroll_period_id: UUID
    month: int
    year: int
    start_date: datetime
    end_date: datetime
    status: str
    calculated_by: str | None = None
    created_at: datetime
    updated_at: datetime


class PeriodListResponse(BaseModel):
    """Schema for listing payroll periods."""

    items: list[PeriodResponse]
    total: int


class StatusChangeRequest(BaseModel):
    """Schema for an administrative status change."""

    status: PeriodStatus


# ============================================================================
# Calculation schemas
# ============================================================================


class CalculationResponse(BaseModel):
    """Schema for the batch calculation summary."""

    processed_count: int
    anomaly_count: int
    errors: list[str]
    completed_at: datetime


# ============================================================================
# Report schemas
# ============================================================================


class ReportPeriod(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    period_id: UUID
    month: int
    year: int
    status: str
    start_date: datetime
    end_date: datetime
    calculated_by: str | None = None
    updated_at: datetime


class ReportSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    worker_id: UUID
    worker_name: str
    worker_email: str
    role: str
    regular_hours: Decimal
    overtime_hours: Decimal
    total_hours: Decimal
    hourly_rate: Decimal
    gross_pay: Decimal
    income_tax: Decimal
    social_insurance: Decimal
    net_pay: Decimal
    shift_count: int
    has_anomalies: bool
    anomaly_count: int
    generated_at: datetime


class ReportTotalsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_employees: int
    total_regular_hours: Decimal
    total_overtime_hours: Decimal
    total_gross_pay: Decimal
    total_income_tax: Decimal
    total_social_insurance: Decimal
    total_net_pay: Decimal
    employees_with_anomalies: int


class ReportResponse(BaseModel):
    """Schema for a period report."""

    model_config = ConfigDict(from_attributes=True)

    period: ReportPeriod
    summaries: list[ReportSummary]
    totals: ReportTotalsResponse


class AnomalyResponse(BaseModel):
    """Schema for a stored anomaly."""

    model_config = ConfigDict(from_attributes=True)

    payroll_anomaly_id: UUID
    payroll_summary_id: UUID
    kind: str
    occurred_at: datetime
    description: str
    source_event_id: UUID | None = None


# ============================================================================
# Error schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Schema for error responses."""

    detail: str
    code: str | None = None
