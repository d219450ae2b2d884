"""ORM models."""

from punch_payroll.models.base import Base, TimestampMixin
from punch_payroll.models.payroll import (
    STORAGE_SCALE,
    PayrollAnomaly,
    PayrollPeriod,
    PayrollSummary,
)
from punch_payroll.models.worker import PunchEvent, Worker

__all__ = [
    "Base",
    "TimestampMixin",
    "STORAGE_SCALE",
    "PayrollAnomaly",
    "PayrollPeriod",
    "PayrollSummary",
    "PunchEvent",
    "Worker",
]
