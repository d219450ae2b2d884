"""Period calculation orchestrator."""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from punch_payroll.calculators.engine import PayrollEngine, WorkerCalculationError
from punch_payroll.calculators.types import CalculationResult, Punch, WorkerInput
from punch_payroll.config import Settings, get_settings
from punch_payroll.models import PayrollPeriod, PunchEvent, Worker
from punch_payroll.services.commit_service import CommitService, PersistenceError
from punch_payroll.services.period_service import PeriodNotFoundError
from punch_payroll.services.state_machine import PeriodClosedError, PeriodStateMachine

logger = logging.getLogger(__name__)


@dataclass
class WorkerOutcome:
    """What happened to one worker in a batch."""

    worker_id: UUID
    display_name: str
    result: CalculationResult | None = None
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.error is None


@dataclass
class BatchCalculationResult:
    """Result of calculating an entire payroll period."""

    period_id: UUID
    processed_count: int
    anomaly_count: int
    errors: list[str]
    completed_at: datetime
    outcomes: list[WorkerOutcome] = field(default_factory=list)


class CalculationService:
    """Runs the payroll engine for every payable worker in a period.

    Per worker: calculate, then commit summary and anomalies in one
    transaction. Workers are independent; a failing worker is logged and
    reported in ``errors`` while the rest of the batch continues. Workers
    run concurrently, bounded by ``calculation_concurrency``.

    Each unit of work opens its own session from the factory, so no session
    is shared between concurrent tasks.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        settings: Settings | None = None,
    ):
        self.session_factory = session_factory
        self.settings = settings or get_settings()

    def _build_engine(self) -> PayrollEngine:
        return PayrollEngine(
            rules=self.settings.rules,
            tz=self.settings.payroll_timezone,
            engine_version=self.settings.engine_version,
        )

    async def calculate(self, period_id: UUID, initiated_by: str) -> BatchCalculationResult:
        """Calculate (or recalculate) a period.

        Raises:
            PeriodNotFoundError: If the period does not exist
            PeriodClosedError: If the period is COMPLETED
        """
        engine = self._build_engine()
        async with self.session_factory() as session:
            period = await session.get(PayrollPeriod, period_id)
            if period is None:
                raise PeriodNotFoundError(period_id)
            try:
                PeriodStateMachine.ensure_can_calculate(period_id, period.status)
            except PeriodClosedError:
                logger.warning(
                    "Refused recalculation of payroll period %s (status %s)",
                    period_id,
                    period.status,
                )
                raise

            workers = await self._load_workers(session, period)

        logger.info(
            "Calculating payroll period %02d/%d for %d worker(s), initiated by %s",
            period.month,
            period.year,
            len(workers),
            initiated_by,
        )

        generated_at = datetime.now(timezone.utc)
        semaphore = asyncio.Semaphore(self.settings.calculation_concurrency)
        outcomes = await asyncio.gather(
            *(
                self._process_worker(engine, period_id, worker, generated_at, semaphore)
                for worker in workers
            )
        )

        await self._record_run(period_id, initiated_by)

        processed = [o for o in outcomes if o.success]
        anomaly_count = sum(len(o.result.anomalies) for o in processed if o.result)
        errors = [o.error for o in outcomes if o.error is not None]

        logger.info(
            "Payroll period %s calculated: %d processed, %d anomalies, %d error(s)",
            period_id,
            len(processed),
            anomaly_count,
            len(errors),
        )

        return BatchCalculationResult(
            period_id=period_id,
            processed_count=len(processed),
            anomaly_count=anomaly_count,
            errors=errors,
            completed_at=datetime.now(timezone.utc),
            outcomes=list(outcomes),
        )

    async def _process_worker(
        self,
        engine: PayrollEngine,
        period_id: UUID,
        worker: WorkerInput,
        generated_at: datetime,
        semaphore: asyncio.Semaphore,
    ) -> WorkerOutcome:
        async with semaphore:
            try:
                result = engine.calculate_worker(worker)
                await self._commit_worker(period_id, result, generated_at)
            except (WorkerCalculationError, PersistenceError) as e:
                logger.exception("Error processing worker %s", worker.worker_id)
                return WorkerOutcome(
                    worker_id=worker.worker_id,
                    display_name=worker.display_name,
                    error=f"Worker {worker.display_name}: {e.reason}",
                )
            except Exception as e:
                # Catch unexpected errors
                logger.exception("Unexpected error processing worker %s", worker.worker_id)
                return WorkerOutcome(
                    worker_id=worker.worker_id,
                    display_name=worker.display_name,
                    error=f"Worker {worker.display_name}: {e}",
                )

        return WorkerOutcome(
            worker_id=worker.worker_id,
            display_name=worker.display_name,
            result=result,
        )

    async def _commit_worker(
        self, period_id: UUID, result: CalculationResult, generated_at: datetime
    ) -> None:
        async with self.session_factory() as session:
            try:
                async with session.begin():
                    await CommitService(session).replace_worker_results(
                        period_id, result, generated_at
                    )
            except SQLAlchemyError as e:
                raise PersistenceError(result.worker_id, str(e)) from e

    async def _record_run(self, period_id: UUID, initiated_by: str) -> None:
        """Stamp the period with who ran the batch and when."""
        async with self.session_factory() as session, session.begin():
            await session.execute(
                update(PayrollPeriod)
                .where(PayrollPeriod.payroll_period_id == period_id)
                .values(calculated_by=initiated_by, updated_at=datetime.now(timezone.utc))
            )

    async def _load_workers(
        self, session: AsyncSession, period: PayrollPeriod
    ) -> list[WorkerInput]:
        """Load payable workers with their punches inside the period window."""
        worker_rows = await session.execute(
            select(Worker)
            .where(Worker.role == self.settings.payable_role)
            .order_by(Worker.email)
        )
        workers = list(worker_rows.scalars().all())
        if not workers:
            return []

        punch_rows = await session.execute(
            select(PunchEvent)
            .where(
                PunchEvent.worker_id.in_([w.worker_id for w in workers]),
                PunchEvent.timestamp >= period.start_date,
                PunchEvent.timestamp <= period.end_date,
            )
            .order_by(PunchEvent.timestamp, PunchEvent.punch_event_id)
        )
        punches_by_worker: dict[UUID, list[Punch]] = defaultdict(list)
        for event in punch_rows.scalars().all():
            punches_by_worker[event.worker_id].append(
                Punch(
                    event_id=event.punch_event_id,
                    worker_id=event.worker_id,
                    kind=event.kind,
                    timestamp=event.timestamp,
                    latitude=event.latitude,
                    longitude=event.longitude,
                )
            )

        return [
            WorkerInput(
                worker_id=w.worker_id,
                display_name=w.display_name,
                hourly_rate=w.hourly_rate if w.hourly_rate is not None else Decimal("0"),
                punches=punches_by_worker.get(w.worker_id, []),
            )
            for w in workers
        ]
