"""Payroll calculation engine - per-worker pipeline."""

from __future__ import annotations

import hashlib
import json
from datetime import timezone, tzinfo
from decimal import Decimal
from uuid import UUID

from punch_payroll.calculators.daily_aggregator import DailyAggregator
from punch_payroll.calculators.pay_calculator import PayCalculator
from punch_payroll.calculators.session_builder import SessionBuilder
from punch_payroll.calculators.types import CalculationResult, WorkerInput
from punch_payroll.config import PayrollRules


class WorkerCalculationError(Exception):
    """Raised when one worker's data cannot be calculated."""

    def __init__(self, worker_id: UUID, reason: str):
        self.worker_id = worker_id
        self.reason = reason
        super().__init__(f"Calculation failed for worker {worker_id}: {reason}")


class PayrollEngine:
    """Stateless calculation pipeline for one worker.

    Pipeline (stable order):
    1) Pair punches into sessions
    2) Aggregate sessions into days, splitting regular/overtime hours
    3) Total the days and collect anomalies
    4) Compute gross pay and statutory deductions

    Instances hold configuration only, so one can be created per call.
    """

    def __init__(
        self,
        rules: PayrollRules,
        tz: tzinfo | str = timezone.utc,
        engine_version: str = "1.0.0",
    ):
        self.rules = rules
        self.engine_version = engine_version
        self.aggregator = DailyAggregator(rules, tz)
        self.pay_calculator = PayCalculator(rules)

    def calculate_worker(self, worker: WorkerInput) -> CalculationResult:
        """Run the full pipeline, wrapping any failure in WorkerCalculationError."""
        try:
            return self._calculate(worker)
        except WorkerCalculationError:
            raise
        except (ArithmeticError, TypeError, ValueError) as e:
            raise WorkerCalculationError(worker.worker_id, str(e)) from e

    def _calculate(self, worker: WorkerInput) -> CalculationResult:
        sessions = SessionBuilder.build(worker.punches)
        days = self.aggregator.aggregate(sessions)

        total_regular = sum((d.regular_hours for d in days), Decimal("0"))
        total_overtime = sum((d.overtime_hours for d in days), Decimal("0"))
        total_hours = sum((d.total_hours for d in days), Decimal("0"))
        shift_count = sum(1 for d in days if d.total_hours > 0)

        hourly_rate = Decimal(worker.hourly_rate)
        pay = self.pay_calculator.calculate(total_regular, total_overtime, hourly_rate)

        return CalculationResult(
            worker_id=worker.worker_id,
            total_regular_hours=total_regular,
            total_overtime_hours=total_overtime,
            total_hours=total_hours,
            hourly_rate=hourly_rate,
            pay=pay,
            shift_count=shift_count,
            punch_count=len(worker.punches),
            daily_breakdown=days,
            anomalies=self.aggregator.collect_anomalies(days),
            inputs_fingerprint=self.compute_inputs_fingerprint(worker),
        )

    def compute_inputs_fingerprint(self, worker: WorkerInput) -> str:
        """Fingerprint of everything the result depends on."""
        data = {
            "engine_version": self.engine_version,
            "hourly_rate": str(worker.hourly_rate),
            "punches": sorted(
                (p.to_canonical_dict() for p in worker.punches),
                key=lambda d: (d["timestamp"], d["event_id"]),
            ),
            "rules": self.rules.to_canonical_dict(),
            "timezone": str(self.aggregator.tz),
        }
        json_str = json.dumps(data, sort_keys=True)
        return hashlib.sha256(json_str.encode()).hexdigest()
