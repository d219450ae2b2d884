"""Payroll calculation engine."""

from punch_payroll.calculators.daily_aggregator import DailyAggregator
from punch_payroll.calculators.engine import PayrollEngine, WorkerCalculationError
from punch_payroll.calculators.pay_calculator import PayCalculator
from punch_payroll.calculators.session_builder import SessionBuilder
from punch_payroll.calculators.types import (
    AnomalyCandidate,
    AnomalyKind,
    CalculationResult,
    DailyHours,
    PayBreakdown,
    Punch,
    PunchKind,
    WorkerInput,
    WorkSession,
)

__all__ = [
    "AnomalyCandidate",
    "AnomalyKind",
    "CalculationResult",
    "DailyAggregator",
    "DailyHours",
    "PayBreakdown",
    "PayCalculator",
    "PayrollEngine",
    "Punch",
    "PunchKind",
    "SessionBuilder",
    "WorkerCalculationError",
    "WorkerInput",
    "WorkSession",
]
