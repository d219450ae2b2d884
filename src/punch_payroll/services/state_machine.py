"""Payroll period state machine with transition validation."""

from __future__ import annotations

from enum import Enum
from uuid import UUID


class PeriodStatus(str, Enum):
    """Payroll period status values."""

    OPEN = "OPEN"
    LOCKED = "LOCKED"
    COMPLETED = "COMPLETED"


class InvalidTransitionError(Exception):
    """Raised when an invalid state transition is attempted."""

    def __init__(self, from_status: str, to_status: str, reason: str | None = None):
        self.from_status = from_status
        self.to_status = to_status
        self.reason = reason
        msg = f"Invalid transition from '{from_status}' to '{to_status}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class PeriodClosedError(Exception):
    """Raised when recalculation is attempted on a completed period."""

    def __init__(self, period_id: UUID, status: str):
        self.period_id = period_id
        self.status = status
        super().__init__(f"Payroll period {period_id} is {status} and cannot be recalculated")


class PeriodStateMachine:
    """State machine for payroll period status.

    Allowed transitions (administrative, never done by the calculation):
    - OPEN → LOCKED
    - LOCKED → OPEN
    - OPEN → COMPLETED
    - LOCKED → COMPLETED

    COMPLETED is terminal and the only status that refuses recalculation.
    """

    VALID_TRANSITIONS: dict[str, list[str]] = {
        PeriodStatus.OPEN: [PeriodStatus.LOCKED, PeriodStatus.COMPLETED],
        PeriodStatus.LOCKED: [PeriodStatus.OPEN, PeriodStatus.COMPLETED],
        PeriodStatus.COMPLETED: [],  # Terminal state
    }

    CALCULATION_ALLOWED = {
        PeriodStatus.OPEN,
        PeriodStatus.LOCKED,
    }

    @classmethod
    def can_transition(cls, from_status: str, to_status: str) -> bool:
        """Check if a transition is valid."""
        allowed = cls.VALID_TRANSITIONS.get(from_status, [])
        return to_status in allowed

    @classmethod
    def validate_transition(cls, from_status: str, to_status: str) -> None:
        """Validate a transition, raising InvalidTransitionError if invalid."""
        if to_status not in {s.value for s in PeriodStatus}:
            raise InvalidTransitionError(from_status, to_status, "unknown status")
        if not cls.can_transition(from_status, to_status):
            raise InvalidTransitionError(from_status, to_status)

    @classmethod
    def can_calculate(cls, status: str) -> bool:
        """Check if calculation is allowed in this status."""
        return status in cls.CALCULATION_ALLOWED

    @classmethod
    def ensure_can_calculate(cls, period_id: UUID, status: str) -> None:
        if not cls.can_calculate(status):
            raise PeriodClosedError(period_id, status)

    @classmethod
    def get_next_statuses(cls, current_status: str) -> list[str]:
        """Get list of valid next statuses from current status."""
        return cls.VALID_TRANSITIONS.get(current_status, [])
