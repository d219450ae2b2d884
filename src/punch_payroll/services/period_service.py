"""Payroll period management."""

from __future__ import annotations

import calendar
import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from punch_payroll.models import PayrollPeriod
from punch_payroll.services.state_machine import PeriodStateMachine, PeriodStatus

logger = logging.getLogger(__name__)


class PeriodNotFoundError(Exception):
    """Raised when a payroll period does not exist."""

    def __init__(self, period_id: UUID):
        self.period_id = period_id
        super().__init__(f"Payroll period {period_id} not found")


class PeriodAlreadyExistsError(Exception):
    """Raised when a period for the same month and year exists."""

    def __init__(self, month: int, year: int):
        self.month = month
        self.year = year
        super().__init__(f"Payroll period {month:02d}/{year} already exists")


def month_bounds(month: int, year: int) -> tuple[datetime, datetime]:
    """First and last instant of a calendar month in UTC."""
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")
    last_day = calendar.monthrange(year, month)[1]
    start = datetime(year, month, 1, tzinfo=timezone.utc)
    end = datetime(year, month, last_day, 23, 59, 59, 999999, tzinfo=timezone.utc)
    return start, end


class PeriodService:
    """Create, list, load and administratively transition payroll periods."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_period(
        self, month: int, year: int, created_by: str | None = None
    ) -> PayrollPeriod:
        start, end = month_bounds(month, year)

        existing = await self.session.execute(
            select(PayrollPeriod.payroll_period_id).where(
                PayrollPeriod.month == month,
                PayrollPeriod.year == year,
            )
        )
        if existing.scalar_one_or_none() is not None:
            raise PeriodAlreadyExistsError(month, year)

        period = PayrollPeriod(
            month=month,
            year=year,
            start_date=start,
            end_date=end,
            status=PeriodStatus.OPEN.value,
            calculated_by=created_by,
            updated_at=datetime.now(timezone.utc),
        )
        self.session.add(period)
        try:
            await self.session.flush()
        except IntegrityError as e:
            # Lost a race with a concurrent create for the same month.
            raise PeriodAlreadyExistsError(month, year) from e

        logger.info("Created payroll period %02d/%d (%s)", month, year, period.payroll_period_id)
        return period

    async def list_periods(self) -> list[PayrollPeriod]:
        """All periods, newest first."""
        result = await self.session.execute(
            select(PayrollPeriod).order_by(
                PayrollPeriod.year.desc(), PayrollPeriod.month.desc()
            )
        )
        return list(result.scalars().all())

    async def get_period(self, period_id: UUID) -> PayrollPeriod:
        period = await self.session.get(PayrollPeriod, period_id)
        if period is None:
            raise PeriodNotFoundError(period_id)
        return period

    async def transition_status(self, period_id: UUID, to_status: str) -> PayrollPeriod:
        """Move a period to a new status (administrative action)."""
        period = await self.get_period(period_id)
        PeriodStateMachine.validate_transition(period.status, to_status)

        old_status = period.status
        period.status = PeriodStatus(to_status).value
        period.updated_at = datetime.now(timezone.utc)
        await self.session.flush()

        logger.info(
            "Payroll period %s status changed %s -> %s", period_id, old_status, to_status
        )
        return period
