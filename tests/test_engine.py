"""Unit tests for PayrollEngine.

Runs the whole per-worker pipeline on in-memory punches.
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from punch_payroll.calculators.engine import PayrollEngine, WorkerCalculationError
from punch_payroll.calculators.types import AnomalyKind, Punch
from punch_payroll.config import PayrollRules
from tests.builders import WORKER_ID, at, punch, worker_input


@pytest.fixture
def engine() -> PayrollEngine:
    return PayrollEngine(PayrollRules())


class TestCalculateWorker:
    """Test end-to-end results for one worker."""

    def test_two_days_with_overtime(self, engine):
        """8h + 10h at 10/h: 16 regular, 2 overtime, gross 190."""
        result = engine.calculate_worker(worker_input([
            punch("IN", at(2, 9)),
            punch("OUT", at(2, 17)),
            punch("IN", at(3, 8)),
            punch("OUT", at(3, 18)),
        ]))

        assert result.worker_id == WORKER_ID
        assert result.total_regular_hours == Decimal("16")
        assert result.total_overtime_hours == Decimal("2")
        assert result.total_hours == Decimal("18")
        assert result.gross_pay == Decimal("190")
        assert result.pay.income_tax == Decimal("0")
        assert result.pay.social_insurance == Decimal("0")
        assert result.shift_count == 2
        assert result.punch_count == 4
        assert [d.date for d in result.daily_breakdown] == [date(2026, 3, 2), date(2026, 3, 3)]
        assert result.has_anomalies is False

    def test_forgotten_clock_out(self, engine):
        """IN, IN, OUT: first day is unpaid and flagged, second day pays 8h."""
        result = engine.calculate_worker(worker_input([
            punch("IN", at(4, 9)),
            punch("IN", at(5, 9)),
            punch("OUT", at(5, 17)),
        ], hourly_rate="12"))

        assert result.total_hours == Decimal("8")
        assert result.gross_pay == Decimal("96")
        assert result.shift_count == 1
        assert [a.kind for a in result.anomalies] == [AnomalyKind.MISSING_OUT]
        assert result.has_anomalies is True

    def test_excessive_day_still_calculated(self, engine):
        """An 18 hour day is paid in full and flagged, not rejected."""
        result = engine.calculate_worker(worker_input([
            punch("IN", at(2, 5)),
            punch("OUT", at(2, 23)),
        ]))

        assert result.total_regular_hours == Decimal("8")
        assert result.total_overtime_hours == Decimal("10")
        assert result.gross_pay == Decimal("230")
        assert [a.kind for a in result.anomalies] == [AnomalyKind.EXCESSIVE_HOURS]
        assert result.anomalies[0].source_event_id is None
        assert result.anomalies[0].occurred_at == at(2, 0)

    def test_no_punches(self, engine):
        result = engine.calculate_worker(worker_input([]))

        assert result.total_hours == Decimal("0")
        assert result.gross_pay == Decimal("0")
        assert result.shift_count == 0
        assert result.daily_breakdown == []
        assert result.anomalies == []

    def test_deductions_applied(self, engine):
        result = engine.calculate_worker(worker_input(
            [punch("IN", at(2, 9)), punch("OUT", at(2, 17))],
            hourly_rate="150",
        ))

        assert result.pay.net_pay == Decimal("1157.34")

    def test_regular_plus_overtime_equals_total(self, engine):
        result = engine.calculate_worker(worker_input([
            punch("IN", at(2, 6, 15)),
            punch("OUT", at(2, 19, 50)),
            punch("IN", at(3, 9)),
            punch("OUT", at(3, 13, 20)),
        ]))

        assert result.total_regular_hours + result.total_overtime_hours == result.total_hours


class TestErrors:
    """Test that failures are reported per worker."""

    def test_negative_rate(self, engine):
        with pytest.raises(WorkerCalculationError) as exc_info:
            engine.calculate_worker(worker_input(
                [punch("IN", at(2, 9)), punch("OUT", at(2, 17))],
                hourly_rate="-5",
            ))

        assert exc_info.value.worker_id == WORKER_ID
        assert "negative" in exc_info.value.reason

    def test_unknown_punch_kind(self, engine):
        bad = Punch(uuid4(), WORKER_ID, "LUNCH", at(2, 12))

        with pytest.raises(WorkerCalculationError):
            engine.calculate_worker(worker_input([bad]))


class TestInputsFingerprint:
    """Test the fingerprint of calculation inputs."""

    def test_stable_regardless_of_punch_order(self, engine):
        punches = [punch("IN", at(2, 9)), punch("OUT", at(2, 17))]

        first = engine.compute_inputs_fingerprint(worker_input(punches))
        second = engine.compute_inputs_fingerprint(worker_input(list(reversed(punches))))

        assert first == second
        assert len(first) == 64

    def test_changes_with_rate(self, engine):
        punches = [punch("IN", at(2, 9)), punch("OUT", at(2, 17))]

        assert engine.compute_inputs_fingerprint(
            worker_input(punches, hourly_rate="10")
        ) != engine.compute_inputs_fingerprint(worker_input(punches, hourly_rate="11"))

    def test_changes_with_rules(self):
        punches = [punch("IN", at(2, 9)), punch("OUT", at(2, 17))]
        default = PayrollEngine(PayrollRules())
        stricter = PayrollEngine(PayrollRules(daily_overtime_threshold_hours=Decimal("7")))

        assert default.compute_inputs_fingerprint(
            worker_input(punches)
        ) != stricter.compute_inputs_fingerprint(worker_input(punches))

    def test_recorded_on_result(self, engine):
        worker = worker_input([punch("IN", at(2, 9)), punch("OUT", at(2, 17))])

        result = engine.calculate_worker(worker)

        assert result.inputs_fingerprint == engine.compute_inputs_fingerprint(worker)
