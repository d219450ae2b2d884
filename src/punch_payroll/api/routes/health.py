"""Service health endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from punch_payroll.api.dependencies import AppSettings, DbSession
from punch_payroll.models import PayrollPeriod
from punch_payroll.services.state_machine import PeriodStatus

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str
    checked_at: datetime
    database: str
    engine_version: str
    payroll_timezone: str
    open_periods: int | None = None


@router.get("/health", response_model=HealthResponse)
async def health_check(db: DbSession, settings: AppSettings) -> HealthResponse:
    """Report database reachability and the calculation settings in force.

    A database failure degrades the response instead of failing it, so the
    endpoint stays usable as a liveness probe.
    """
    try:
        open_periods = await db.scalar(
            select(func.count())
            .select_from(PayrollPeriod)
            .where(PayrollPeriod.status != PeriodStatus.COMPLETED.value)
        )
    except (SQLAlchemyError, OSError):
        open_periods = None

    reachable = open_periods is not None
    return HealthResponse(
        status="healthy" if reachable else "degraded",
        checked_at=datetime.now(timezone.utc),
        database="reachable" if reachable else "unreachable",
        engine_version=settings.engine_version,
        payroll_timezone=settings.payroll_timezone,
        open_periods=open_periods,
    )
