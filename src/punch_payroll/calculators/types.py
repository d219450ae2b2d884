"""Type definitions for the calculation pipeline.

Everything here is transient: built for one calculation run and thrown
away once the orchestrator has persisted its projection.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID


class PunchKind(str, Enum):
    """Punch direction."""

    IN = "IN"
    OUT = "OUT"


class AnomalyKind(str, Enum):
    """Irregularities detected in punch data."""

    MISSING_IN = "MISSING_IN"
    MISSING_OUT = "MISSING_OUT"
    EXCESSIVE_HOURS = "EXCESSIVE_HOURS"


def as_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime; naive values are taken to be UTC already."""
    if not isinstance(value, datetime):
        raise TypeError(f"Punch timestamp must be a datetime, got {type(value).__name__}")
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class Punch:
    """A recorded punch as seen by the engine (read-only input)."""

    event_id: UUID
    worker_id: UUID
    kind: PunchKind
    timestamp: datetime
    latitude: float | None = None
    longitude: float | None = None

    def to_canonical_dict(self) -> dict[str, Any]:
        """Return canonical dict for hashing (deterministic ordering)."""
        return {
            "event_id": str(self.event_id),
            "kind": PunchKind(self.kind).value,
            "timestamp": as_utc(self.timestamp).isoformat(),
        }


@dataclass
class WorkSession:
    """One IN paired with its OUT, or an unpaired punch marked invalid."""

    in_event: Punch | None
    out_event: Punch | None
    duration_ms: int = 0
    valid: bool = False
    anomaly: AnomalyKind | None = None

    def __post_init__(self) -> None:
        if self.in_event is None and self.out_event is None:
            raise ValueError("A work session needs at least one punch")
        if self.duration_ms < 0:
            raise ValueError("duration_ms must not be negative")

    @property
    def reference_timestamp(self) -> datetime:
        """Timestamp that decides which day the session belongs to."""
        event = self.in_event if self.in_event is not None else self.out_event
        assert event is not None
        return event.timestamp

    @property
    def events(self) -> list[Punch]:
        return [e for e in (self.in_event, self.out_event) if e is not None]


@dataclass
class DailyHours:
    """Hours for one calendar day."""

    date: date
    total_hours: Decimal
    regular_hours: Decimal
    overtime_hours: Decimal
    sessions: list[WorkSession] = field(default_factory=list)
    anomalies: set[AnomalyKind] = field(default_factory=set)


@dataclass(frozen=True)
class AnomalyCandidate:
    """An anomaly before persistence."""

    kind: AnomalyKind
    occurred_at: datetime
    description: str
    source_event_id: UUID | None = None


@dataclass(frozen=True)
class PayBreakdown:
    """Gross pay and statutory deductions, unrounded."""

    gross_pay: Decimal
    income_tax: Decimal
    social_insurance: Decimal

    @property
    def net_pay(self) -> Decimal:
        return self.gross_pay - self.income_tax - self.social_insurance


@dataclass
class WorkerInput:
    """A payable worker and the punches inside the period window."""

    worker_id: UUID
    display_name: str
    hourly_rate: Decimal
    punches: list[Punch] = field(default_factory=list)


@dataclass
class CalculationResult:
    """Result of calculating one worker for one period."""

    worker_id: UUID
    total_regular_hours: Decimal
    total_overtime_hours: Decimal
    total_hours: Decimal
    hourly_rate: Decimal
    pay: PayBreakdown
    shift_count: int
    punch_count: int
    daily_breakdown: list[DailyHours]
    anomalies: list[AnomalyCandidate]
    inputs_fingerprint: str

    @property
    def gross_pay(self) -> Decimal:
        return self.pay.gross_pay

    @property
    def has_anomalies(self) -> bool:
        return len(self.anomalies) > 0
