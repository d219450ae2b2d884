"""Payroll period, summary, and anomaly models."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from punch_payroll.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from punch_payroll.models.worker import Worker


# Aggregates are stored unrounded to this scale; reports round to cents.
STORAGE_SCALE = 6


class PayrollPeriod(Base, TimestampMixin):
    """A calendar-month payroll window."""

    __tablename__ = "payroll_period"

    payroll_period_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="OPEN")
    calculated_by: Mapped[str | None] = mapped_column(String, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("month", "year", name="payroll_period_month_year_unique"),
        CheckConstraint(
            "status IN ('OPEN', 'LOCKED', 'COMPLETED')",
            name="payroll_period_status_check",
        ),
        CheckConstraint("month BETWEEN 1 AND 12", name="payroll_period_month_check"),
        CheckConstraint("end_date >= start_date", name="payroll_period_dates_check"),
    )

    # Relationships
    summaries: Mapped[list[PayrollSummary]] = relationship(
        back_populates="period",
        cascade="all, delete-orphan",
    )


class PayrollSummary(Base):
    """Persisted per-worker result of one period calculation."""

    __tablename__ = "payroll_summary"

    payroll_summary_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    payroll_period_id: Mapped[UUID] = mapped_column(
        ForeignKey("payroll_period.payroll_period_id", ondelete="CASCADE"),
        nullable=False,
    )
    worker_id: Mapped[UUID] = mapped_column(
        ForeignKey("worker.worker_id", ondelete="CASCADE"),
        nullable=False,
    )
    total_regular_hours: Mapped[Decimal] = mapped_column(
        Numeric(14, STORAGE_SCALE), nullable=False, default=Decimal("0")
    )
    total_overtime_hours: Mapped[Decimal] = mapped_column(
        Numeric(14, STORAGE_SCALE), nullable=False, default=Decimal("0")
    )
    total_hours: Mapped[Decimal] = mapped_column(
        Numeric(14, STORAGE_SCALE), nullable=False, default=Decimal("0")
    )
    hourly_rate: Mapped[Decimal] = mapped_column(
        Numeric(14, STORAGE_SCALE), nullable=False, default=Decimal("0")
    )
    gross_pay: Mapped[Decimal] = mapped_column(
        Numeric(18, STORAGE_SCALE), nullable=False, default=Decimal("0")
    )
    income_tax: Mapped[Decimal] = mapped_column(
        Numeric(18, STORAGE_SCALE), nullable=False, default=Decimal("0")
    )
    social_insurance: Mapped[Decimal] = mapped_column(
        Numeric(18, STORAGE_SCALE), nullable=False, default=Decimal("0")
    )
    net_pay: Mapped[Decimal] = mapped_column(
        Numeric(18, STORAGE_SCALE), nullable=False, default=Decimal("0")
    )
    shift_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    punch_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    has_anomalies: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    anomaly_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    inputs_fingerprint: Mapped[str] = mapped_column(String(64), nullable=False)
    generated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "payroll_period_id", "worker_id", name="payroll_summary_period_worker_unique"
        ),
        CheckConstraint("anomaly_count >= 0", name="payroll_summary_anomaly_count_check"),
    )

    # Relationships
    period: Mapped[PayrollPeriod] = relationship(back_populates="summaries")
    worker: Mapped[Worker] = relationship(back_populates="summaries")
    anomalies: Mapped[list[PayrollAnomaly]] = relationship(
        back_populates="summary",
        cascade="all, delete-orphan",
        order_by="PayrollAnomaly.occurred_at",
    )


class PayrollAnomaly(Base, TimestampMixin):
    """An irregularity found in a worker's punches for a period."""

    __tablename__ = "payroll_anomaly"

    payroll_anomaly_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    payroll_summary_id: Mapped[UUID] = mapped_column(
        ForeignKey("payroll_summary.payroll_summary_id", ondelete="CASCADE"),
        nullable=False,
    )
    kind: Mapped[str] = mapped_column(String, nullable=False)
    occurred_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    source_event_id: Mapped[UUID | None] = mapped_column(nullable=True)

    __table_args__ = (
        CheckConstraint(
            "kind IN ('MISSING_IN', 'MISSING_OUT', 'EXCESSIVE_HOURS')",
            name="payroll_anomaly_kind_check",
        ),
    )

    # Relationships
    summary: Mapped[PayrollSummary] = relationship(back_populates="anomalies")
