"""Worker roster and punch event models.

Both tables are written by collaborators (roster management and the
time-clock recorder); the payroll engine only reads them.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Numeric,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from punch_payroll.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from punch_payroll.models.payroll import PayrollSummary


class Worker(Base, TimestampMixin):
    """A person who clocks in and out and may be paid hourly."""

    __tablename__ = "worker"

    worker_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    name: Mapped[str | None] = mapped_column(String, nullable=True)
    email: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    role: Mapped[str] = mapped_column(String, nullable=False, default="worker")
    hourly_rate: Mapped[Decimal | None] = mapped_column(Numeric(12, 4), nullable=True)

    # Relationships
    punches: Mapped[list[PunchEvent]] = relationship(
        back_populates="worker",
        order_by="PunchEvent.timestamp",
    )
    summaries: Mapped[list[PayrollSummary]] = relationship(back_populates="worker")

    @property
    def display_name(self) -> str:
        """Name shown on reports; falls back to the email address."""
        return self.name or self.email


class PunchEvent(Base, TimestampMixin):
    """A single clock IN or clock OUT action."""

    __tablename__ = "punch_event"

    punch_event_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    worker_id: Mapped[UUID] = mapped_column(
        ForeignKey("worker.worker_id", ondelete="CASCADE"),
        nullable=False,
    )
    kind: Mapped[str] = mapped_column(String(3), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    within_fence: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        CheckConstraint("kind IN ('IN', 'OUT')", name="punch_event_kind_check"),
        Index("ix_punch_event_worker_timestamp", "worker_id", "timestamp"),
    )

    # Relationships
    worker: Mapped[Worker] = relationship(back_populates="punches")
