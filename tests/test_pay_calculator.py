"""Unit tests for PayCalculator."""

from decimal import Decimal

import pytest

from punch_payroll.calculators.pay_calculator import PayCalculator
from punch_payroll.config import PayrollRules


@pytest.fixture
def calc() -> PayCalculator:
    return PayCalculator(PayrollRules())


class TestGrossPay:
    """Test gross pay from hours and rate."""

    def test_regular_only(self, calc):
        assert calc.gross_pay(Decimal("8"), Decimal("0"), Decimal("10")) == Decimal("80")

    def test_overtime_at_time_and_a_half(self, calc):
        """8 regular + 2 overtime at 10/h = 80 + 30."""
        assert calc.gross_pay(Decimal("8"), Decimal("2"), Decimal("10")) == Decimal("110")

    def test_zero_rate(self, calc):
        assert calc.gross_pay(Decimal("40"), Decimal("5"), Decimal("0")) == Decimal("0")

    def test_negative_rate_rejected(self, calc):
        with pytest.raises(ValueError, match="negative"):
            calc.gross_pay(Decimal("8"), Decimal("0"), Decimal("-1"))

    def test_negative_hours_rejected(self, calc):
        with pytest.raises(ValueError):
            calc.gross_pay(Decimal("-1"), Decimal("0"), Decimal("10"))

    def test_custom_multiplier(self):
        calc = PayCalculator(PayrollRules(overtime_multiplier=Decimal("2")))

        assert calc.gross_pay(Decimal("0"), Decimal("3"), Decimal("10")) == Decimal("60")


class TestIncomeTax:
    """Test the single income tax band."""

    def test_below_threshold(self, calc):
        assert calc.income_tax(Decimal("1000")) == Decimal("0")

    def test_at_threshold(self, calc):
        assert calc.income_tax(Decimal("1047.50")) == Decimal("0")

    def test_above_threshold(self, calc):
        """(1200 - 1047.50) * 0.20 = 30.50."""
        assert calc.income_tax(Decimal("1200")) == Decimal("30.50")

    def test_large_gross(self, calc):
        assert calc.income_tax(Decimal("2000")) == Decimal("190.50")


class TestSocialInsurance:
    """Test social insurance between its two thresholds."""

    def test_below_lower(self, calc):
        assert calc.social_insurance(Decimal("1047.99")) == Decimal("0")

    def test_at_lower(self, calc):
        assert calc.social_insurance(Decimal("1048")) == Decimal("0")

    def test_between_thresholds(self, calc):
        """(2000 - 1048) * 0.08 = 76.16."""
        assert calc.social_insurance(Decimal("2000")) == Decimal("76.16")

    def test_capped_at_upper(self, calc):
        """(4189 - 1048) * 0.08 = 251.28 no matter how high gross goes."""
        assert calc.social_insurance(Decimal("5000")) == Decimal("251.28")
        assert calc.social_insurance(Decimal("50000")) == Decimal("251.28")


class TestBreakdown:
    """Test the combined breakdown."""

    def test_net_pay(self, calc):
        """150/h for 8 hours: gross 1200, tax 30.50, SI 12.16."""
        pay = calc.calculate(Decimal("8"), Decimal("0"), Decimal("150"))

        assert pay.gross_pay == Decimal("1200")
        assert pay.income_tax == Decimal("30.50")
        assert pay.social_insurance == Decimal("12.16")
        assert pay.net_pay == Decimal("1157.34")

    def test_no_deductions_under_thresholds(self, calc):
        pay = calc.calculate(Decimal("16"), Decimal("2"), Decimal("10"))

        assert pay.gross_pay == Decimal("190")
        assert pay.net_pay == Decimal("190")

    def test_values_are_unrounded(self, calc):
        """Rounding happens only when reporting."""
        pay = calc.calculate(Decimal("1") / Decimal("3"), Decimal("0"), Decimal("10"))

        assert pay.gross_pay != PayCalculator.round_to_cents(pay.gross_pay)


class TestRounding:
    """Test rounding to cents."""

    def test_round_half_up(self):
        assert PayCalculator.round_to_cents(Decimal("10.005")) == Decimal("10.01")
        assert PayCalculator.round_to_cents(Decimal("10.004")) == Decimal("10.00")

    def test_round_keeps_two_places(self):
        assert str(PayCalculator.round_to_cents(Decimal("190"))) == "190.00"
