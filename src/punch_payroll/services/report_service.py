"""Read-only period reports and flat exports.

Nothing here calculates pay; values are projected from committed
summaries and rounded for presentation.
"""

from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from punch_payroll.calculators.pay_calculator import PayCalculator
from punch_payroll.models import PayrollAnomaly, PayrollPeriod, PayrollSummary, Worker
from punch_payroll.services.period_service import PeriodNotFoundError

ZERO = Decimal("0")
HOURS_PRECISION = Decimal("0.01")

EXPORT_COLUMNS = [
    "Employee",
    "Email",
    "Role",
    "Regular Hours",
    "Overtime Hours",
    "Total Hours",
    "Hourly Rate",
    "Gross Pay",
    "Tax",
    "Social Insurance",
    "Net Pay",
    "Shift Count",
    "Anomalies",
]


def round_hours(hours: Decimal) -> Decimal:
    return hours.quantize(HOURS_PRECISION, rounding=ROUND_HALF_UP)


@dataclass
class PeriodInfo:
    period_id: UUID
    month: int
    year: int
    status: str
    start_date: datetime
    end_date: datetime
    calculated_by: str | None
    updated_at: datetime


@dataclass
class SummaryLine:
    """One worker's committed summary joined with display identity."""

    worker_id: UUID
    worker_name: str
    worker_email: str
    role: str
    regular_hours: Decimal
    overtime_hours: Decimal
    total_hours: Decimal
    hourly_rate: Decimal
    gross_pay: Decimal
    income_tax: Decimal
    social_insurance: Decimal
    net_pay: Decimal
    shift_count: int
    has_anomalies: bool
    anomaly_count: int
    generated_at: datetime


@dataclass
class ReportTotals:
    total_employees: int
    total_regular_hours: Decimal
    total_overtime_hours: Decimal
    total_gross_pay: Decimal
    total_income_tax: Decimal
    total_social_insurance: Decimal
    total_net_pay: Decimal
    employees_with_anomalies: int


@dataclass
class PayrollReport:
    period: PeriodInfo
    summaries: list[SummaryLine]
    totals: ReportTotals


@dataclass(frozen=True)
class ExportRow:
    """Flat record for downstream ingestion; every value pre-formatted."""

    employee: str
    email: str
    role: str
    regular_hours: str
    overtime_hours: str
    total_hours: str
    hourly_rate: str
    gross_pay: str
    tax: str
    social_insurance: str
    net_pay: str
    shift_count: int
    anomalies: int

    def as_csv_row(self) -> list[str | int]:
        return [
            self.employee,
            self.email,
            self.role,
            self.regular_hours,
            self.overtime_hours,
            self.total_hours,
            self.hourly_rate,
            self.gross_pay,
            self.tax,
            self.social_insurance,
            self.net_pay,
            self.shift_count,
            self.anomalies,
        ]


class ReportService:
    """Builds reports and exports from committed payroll summaries."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_report(self, period_id: UUID) -> PayrollReport:
        period = await self._get_period(period_id)
        rows = await self._load_summaries(period_id)

        cents = PayCalculator.round_to_cents
        summaries = [
            SummaryLine(
                worker_id=worker.worker_id,
                worker_name=worker.name or "Unknown",
                worker_email=worker.email,
                role=worker.role,
                regular_hours=round_hours(summary.total_regular_hours),
                overtime_hours=round_hours(summary.total_overtime_hours),
                total_hours=round_hours(summary.total_hours),
                hourly_rate=cents(summary.hourly_rate),
                gross_pay=cents(summary.gross_pay),
                income_tax=cents(summary.income_tax),
                social_insurance=cents(summary.social_insurance),
                net_pay=cents(summary.net_pay),
                shift_count=summary.shift_count,
                has_anomalies=summary.has_anomalies,
                anomaly_count=summary.anomaly_count,
                generated_at=summary.generated_at,
            )
            for summary, worker in rows
        ]

        # Totals accumulate the stored unrounded values, then round once.
        stored = [summary for summary, _ in rows]
        totals = ReportTotals(
            total_employees=len(stored),
            total_regular_hours=round_hours(
                sum((s.total_regular_hours for s in stored), ZERO)
            ),
            total_overtime_hours=round_hours(
                sum((s.total_overtime_hours for s in stored), ZERO)
            ),
            total_gross_pay=cents(sum((s.gross_pay for s in stored), ZERO)),
            total_income_tax=cents(sum((s.income_tax for s in stored), ZERO)),
            total_social_insurance=cents(sum((s.social_insurance for s in stored), ZERO)),
            total_net_pay=cents(sum((s.net_pay for s in stored), ZERO)),
            employees_with_anomalies=sum(1 for s in stored if s.has_anomalies),
        )

        return PayrollReport(
            period=PeriodInfo(
                period_id=period.payroll_period_id,
                month=period.month,
                year=period.year,
                status=period.status,
                start_date=period.start_date,
                end_date=period.end_date,
                calculated_by=period.calculated_by,
                updated_at=period.updated_at,
            ),
            summaries=summaries,
            totals=totals,
        )

    async def export_rows(self, period_id: UUID) -> list[ExportRow]:
        """One formatted row per worker, in report order."""
        report = await self.get_report(period_id)
        return [
            ExportRow(
                employee=line.worker_name,
                email=line.worker_email,
                role=line.role,
                regular_hours=f"{line.regular_hours:.2f}",
                overtime_hours=f"{line.overtime_hours:.2f}",
                total_hours=f"{line.total_hours:.2f}",
                hourly_rate=f"{line.hourly_rate:.2f}",
                gross_pay=f"{line.gross_pay:.2f}",
                tax=f"{line.income_tax:.2f}",
                social_insurance=f"{line.social_insurance:.2f}",
                net_pay=f"{line.net_pay:.2f}",
                shift_count=line.shift_count,
                anomalies=line.anomaly_count,
            )
            for line in report.summaries
        ]

    async def list_anomalies(
        self, period_id: UUID, worker_id: UUID | None = None
    ) -> list[PayrollAnomaly]:
        await self._get_period(period_id)
        query = (
            select(PayrollAnomaly)
            .join(PayrollSummary)
            .where(PayrollSummary.payroll_period_id == period_id)
            .order_by(PayrollSummary.worker_id, PayrollAnomaly.occurred_at)
        )
        if worker_id is not None:
            query = query.where(PayrollSummary.worker_id == worker_id)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    @staticmethod
    def render_csv(rows: list[ExportRow]) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(EXPORT_COLUMNS)
        for row in rows:
            writer.writerow(row.as_csv_row())
        return buffer.getvalue()

    async def _get_period(self, period_id: UUID) -> PayrollPeriod:
        period = await self.session.get(PayrollPeriod, period_id)
        if period is None:
            raise PeriodNotFoundError(period_id)
        return period

    async def _load_summaries(
        self, period_id: UUID
    ) -> list[tuple[PayrollSummary, Worker]]:
        result = await self.session.execute(
            select(PayrollSummary, Worker)
            .join(Worker, PayrollSummary.worker_id == Worker.worker_id)
            .where(PayrollSummary.payroll_period_id == period_id)
            .order_by(Worker.name, Worker.email)
        )
        return [(summary, worker) for summary, worker in result.all()]
