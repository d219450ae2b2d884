"""Payroll services."""

from punch_payroll.services.calculation_service import (
    BatchCalculationResult,
    CalculationService,
    WorkerOutcome,
)
from punch_payroll.services.commit_service import CommitService, PersistenceError
from punch_payroll.services.period_service import (
    PeriodAlreadyExistsError,
    PeriodNotFoundError,
    PeriodService,
    month_bounds,
)
from punch_payroll.services.report_service import ExportRow, PayrollReport, ReportService
from punch_payroll.services.state_machine import (
    InvalidTransitionError,
    PeriodClosedError,
    PeriodStateMachine,
    PeriodStatus,
)

__all__ = [
    "BatchCalculationResult",
    "CalculationService",
    "CommitService",
    "ExportRow",
    "InvalidTransitionError",
    "PayrollReport",
    "PeriodAlreadyExistsError",
    "PeriodClosedError",
    "PeriodNotFoundError",
    "PeriodService",
    "PeriodStateMachine",
    "PeriodStatus",
    "PersistenceError",
    "ReportService",
    "WorkerOutcome",
    "month_bounds",
]
