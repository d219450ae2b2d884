"""Buckets work sessions into calendar days and splits overtime."""

from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime, time, timezone, tzinfo
from decimal import Decimal
from zoneinfo import ZoneInfo

from punch_payroll.calculators.types import (
    AnomalyCandidate,
    AnomalyKind,
    DailyHours,
    WorkSession,
    as_utc,
)
from punch_payroll.config import PayrollRules

MS_PER_HOUR = Decimal(1000 * 60 * 60)


class DailyAggregator:
    """Groups sessions by the calendar day of their reference punch.

    A session belongs wholly to the day of its IN punch (OUT punch when
    there is no IN), so a shift crossing midnight is not split. Invalid
    sessions add no hours but stay in the day for anomaly reporting.
    """

    def __init__(self, rules: PayrollRules, tz: tzinfo | str = timezone.utc):
        self.rules = rules
        self.tz = ZoneInfo(tz) if isinstance(tz, str) else tz

    def day_of(self, session: WorkSession) -> date:
        return as_utc(session.reference_timestamp).astimezone(self.tz).date()

    def aggregate(self, sessions: list[WorkSession]) -> list[DailyHours]:
        """Return one DailyHours per day that has sessions, ascending by date."""
        by_day: dict[date, list[WorkSession]] = defaultdict(list)
        for session in sessions:
            by_day[self.day_of(session)].append(session)

        return [self._build_day(day, by_day[day]) for day in sorted(by_day)]

    def _build_day(self, day: date, sessions: list[WorkSession]) -> DailyHours:
        total_ms = sum(s.duration_ms for s in sessions if s.valid)
        total_hours = Decimal(total_ms) / MS_PER_HOUR

        threshold = self.rules.daily_overtime_threshold_hours
        regular_hours = min(total_hours, threshold)
        overtime_hours = max(Decimal("0"), total_hours - threshold)

        anomalies: set[AnomalyKind] = set()
        if total_hours > self.rules.excessive_hours_threshold:
            anomalies.add(AnomalyKind.EXCESSIVE_HOURS)

        return DailyHours(
            date=day,
            total_hours=total_hours,
            regular_hours=regular_hours,
            overtime_hours=overtime_hours,
            sessions=sessions,
            anomalies=anomalies,
        )

    def collect_anomalies(self, days: list[DailyHours]) -> list[AnomalyCandidate]:
        """Flatten session and day anomalies into result-level anomalies.

        Session anomalies come first within each day, in session order,
        followed by the day's own anomalies.
        """
        collected: list[AnomalyCandidate] = []
        for day in days:
            for session in day.sessions:
                if session.anomaly is not None:
                    collected.append(self._session_anomaly(session))

            session_kinds = {s.anomaly for s in day.sessions if s.anomaly is not None}
            for kind in sorted(day.anomalies - session_kinds, key=lambda k: k.value):
                collected.append(
                    AnomalyCandidate(
                        kind=kind,
                        occurred_at=datetime.combine(day.date, time.min, tzinfo=self.tz),
                        description=self._day_description(day, kind),
                    )
                )
        return collected

    @staticmethod
    def _session_anomaly(session: WorkSession) -> AnomalyCandidate:
        event = session.in_event if session.in_event is not None else session.out_event
        assert event is not None
        stamp = as_utc(event.timestamp)

        if session.anomaly is AnomalyKind.MISSING_OUT:
            description = f"Clock IN at {stamp.isoformat()} has no matching OUT."
        elif session.anomaly is AnomalyKind.MISSING_IN:
            description = f"Clock OUT at {stamp.isoformat()} has no matching IN."
        else:
            assert session.anomaly is not None
            description = f"Anomaly detected: {session.anomaly.value}"

        return AnomalyCandidate(
            kind=session.anomaly,
            occurred_at=stamp,
            description=description,
            source_event_id=event.event_id,
        )

    @staticmethod
    def _day_description(day: DailyHours, kind: AnomalyKind) -> str:
        if kind is AnomalyKind.EXCESSIVE_HOURS:
            hours = day.total_hours.quantize(Decimal("0.01"))
            return f"Day {day.date.isoformat()}: EXCESSIVE_HOURS worked {hours} hours."
        return f"Day {day.date.isoformat()}: {kind.value}"
