"""Atomic per-worker persistence of calculation results."""

from __future__ import annotations

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from punch_payroll.calculators.types import CalculationResult
from punch_payroll.models import STORAGE_SCALE, PayrollAnomaly, PayrollPeriod, PayrollSummary
from punch_payroll.services.state_machine import PeriodStateMachine

STORAGE_PRECISION = Decimal(1).scaleb(-STORAGE_SCALE)


class PersistenceError(Exception):
    """Raised when a worker's results could not be written."""

    def __init__(self, worker_id: UUID, reason: str):
        self.worker_id = worker_id
        self.reason = reason
        super().__init__(f"Could not persist results for worker {worker_id}: {reason}")


def to_storage(value: Decimal) -> Decimal:
    """Quantize to the column scale so repeated runs store identical values."""
    return value.quantize(STORAGE_PRECISION, rounding=ROUND_HALF_UP)


class CommitService:
    """Writes one worker's summary and anomaly set.

    Key invariants:
    1. One payroll_summary per (period, worker), enforced by unique constraint
    2. Recalculation overwrites every aggregate field of the summary
    3. Anomalies are replaced, never merged
    4. The caller runs replace_worker_results inside a single transaction, so
       a failure leaves the previous summary and anomalies untouched
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def replace_worker_results(
        self,
        period_id: UUID,
        result: CalculationResult,
        generated_at: datetime,
    ) -> PayrollSummary:
        await self._ensure_period_open(period_id, result.worker_id)

        summary = await self._upsert_summary(period_id, result, generated_at)
        await self._replace_anomalies(summary.payroll_summary_id, result)
        await self.session.flush()
        return summary

    async def _ensure_period_open(self, period_id: UUID, worker_id: UUID) -> None:
        # Re-read inside the transaction; an admin may close the period mid-batch.
        status = await self.session.scalar(
            select(PayrollPeriod.status).where(PayrollPeriod.payroll_period_id == period_id)
        )
        if status is None:
            raise PersistenceError(worker_id, f"payroll period {period_id} no longer exists")
        if not PeriodStateMachine.can_calculate(status):
            raise PersistenceError(worker_id, f"payroll period {period_id} is {status}")

    async def _upsert_summary(
        self,
        period_id: UUID,
        result: CalculationResult,
        generated_at: datetime,
    ) -> PayrollSummary:
        existing = await self.session.execute(
            select(PayrollSummary)
            .where(
                PayrollSummary.payroll_period_id == period_id,
                PayrollSummary.worker_id == result.worker_id,
            )
            .with_for_update()
        )
        summary = existing.scalar_one_or_none()
        if summary is None:
            summary = PayrollSummary(payroll_period_id=period_id, worker_id=result.worker_id)
            self.session.add(summary)

        summary.total_regular_hours = to_storage(result.total_regular_hours)
        summary.total_overtime_hours = to_storage(result.total_overtime_hours)
        summary.total_hours = to_storage(result.total_hours)
        summary.hourly_rate = to_storage(result.hourly_rate)
        summary.gross_pay = to_storage(result.pay.gross_pay)
        summary.income_tax = to_storage(result.pay.income_tax)
        summary.social_insurance = to_storage(result.pay.social_insurance)
        summary.net_pay = to_storage(result.pay.net_pay)
        summary.shift_count = result.shift_count
        summary.punch_count = result.punch_count
        summary.has_anomalies = result.has_anomalies
        summary.anomaly_count = len(result.anomalies)
        summary.inputs_fingerprint = result.inputs_fingerprint
        summary.generated_at = generated_at

        await self.session.flush()
        return summary

    async def _replace_anomalies(self, summary_id: UUID, result: CalculationResult) -> int:
        await self.session.execute(
            delete(PayrollAnomaly).where(PayrollAnomaly.payroll_summary_id == summary_id)
        )
        self.session.add_all(
            PayrollAnomaly(
                payroll_summary_id=summary_id,
                kind=anomaly.kind.value,
                occurred_at=anomaly.occurred_at,
                description=anomaly.description,
                source_event_id=anomaly.source_event_id,
            )
            for anomaly in result.anomalies
        )
        return len(result.anomalies)
