"""Payroll period API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, HTTPException, Path, Query, status
from fastapi.responses import Response

from punch_payroll.api.dependencies import AppSettings, DbSession, SessionFactory, UserId
from punch_payroll.api.schemas import (
    AnomalyResponse,
    CalculationResponse,
    ErrorResponse,
    PeriodCreate,
    PeriodListResponse,
    PeriodResponse,
    ReportResponse,
    StatusChangeRequest,
)
from punch_payroll.services.calculation_service import CalculationService
from punch_payroll.services.period_service import (
    PeriodAlreadyExistsError,
    PeriodNotFoundError,
    PeriodService,
)
from punch_payroll.services.report_service import ReportService
from punch_payroll.services.state_machine import InvalidTransitionError, PeriodClosedError

router = APIRouter(prefix="/periods", tags=["periods"])


def _not_found(e: PeriodNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


# ============================================================================
# Period CRUD
# ============================================================================


@router.post(
    "",
    response_model=PeriodResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}},
)
async def create_period(
    db: DbSession,
    user_id: UserId,
    payload: PeriodCreate,
) -> PeriodResponse:
    """Create a payroll period for a calendar month."""
    try:
        period = await PeriodService(db).create_period(payload.month, payload.year, user_id)
    except PeriodAlreadyExistsError as e:
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    await db.commit()
    await db.refresh(period)
    return PeriodResponse.model_validate(period)


@router.get("", response_model=PeriodListResponse)
async def list_periods(db: DbSession) -> PeriodListResponse:
    """List payroll periods, newest first."""
    periods = await PeriodService(db).list_periods()
    return PeriodListResponse(
        items=[PeriodResponse.model_validate(p) for p in periods],
        total=len(periods),
    )


@router.get(
    "/{period_id}",
    response_model=ReportResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_period_report(
    db: DbSession,
    period_id: Annotated[UUID, Path()],
) -> ReportResponse:
    """Period details with committed summaries and totals."""
    try:
        report = await ReportService(db).get_report(period_id)
    except PeriodNotFoundError as e:
        raise _not_found(e)
    return ReportResponse.model_validate(report)


@router.post(
    "/{period_id}/status",
    response_model=PeriodResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def change_period_status(
    db: DbSession,
    period_id: Annotated[UUID, Path()],
    payload: StatusChangeRequest,
) -> PeriodResponse:
    """Administrative status change (lock, reopen, complete)."""
    try:
        period = await PeriodService(db).transition_status(period_id, payload.status.value)
    except PeriodNotFoundError as e:
        raise _not_found(e)
    except InvalidTransitionError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    await db.commit()
    await db.refresh(period)
    return PeriodResponse.model_validate(period)


# ============================================================================
# Calculation
# ============================================================================


@router.post(
    "/{period_id}/calculate",
    response_model=CalculationResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def calculate_period(
    factory: SessionFactory,
    settings: AppSettings,
    user_id: UserId,
    period_id: Annotated[UUID, Path()],
) -> CalculationResponse:
    """Calculate or recalculate every payable worker in the period.

    Partial failures do not fail the request; inspect ``errors``.
    """
    service = CalculationService(factory, settings)
    try:
        result = await service.calculate(period_id, user_id)
    except PeriodNotFoundError as e:
        raise _not_found(e)
    except PeriodClosedError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    return CalculationResponse(
        processed_count=result.processed_count,
        anomaly_count=result.anomaly_count,
        errors=result.errors,
        completed_at=result.completed_at,
    )


# ============================================================================
# Reporting
# ============================================================================


@router.get(
    "/{period_id}/anomalies",
    response_model=list[AnomalyResponse],
    responses={404: {"model": ErrorResponse}},
)
async def list_period_anomalies(
    db: DbSession,
    period_id: Annotated[UUID, Path()],
    worker_id: Annotated[UUID | None, Query()] = None,
) -> list[AnomalyResponse]:
    """Stored anomalies for a period, optionally for one worker."""
    try:
        anomalies = await ReportService(db).list_anomalies(period_id, worker_id)
    except PeriodNotFoundError as e:
        raise _not_found(e)
    return [AnomalyResponse.model_validate(a) for a in anomalies]


@router.get(
    "/{period_id}/export",
    response_class=Response,
    responses={404: {"model": ErrorResponse}},
)
async def export_period(
    db: DbSession,
    period_id: Annotated[UUID, Path()],
) -> Response:
    """Flat CSV export, one row per worker."""
    service = ReportService(db)
    try:
        rows = await service.export_rows(period_id)
    except PeriodNotFoundError as e:
        raise _not_found(e)

    return Response(
        content=service.render_csv(rows),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="payroll-{period_id}.csv"'},
    )
