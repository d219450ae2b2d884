"""Gross pay and statutory deductions."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from punch_payroll.calculators.types import PayBreakdown
from punch_payroll.config import PayrollRules

ZERO = Decimal("0")


class PayCalculator:
    """Converts hours into gross pay, income tax, social insurance and net.

    The gross figure is treated as one calendar month of pay. Income tax is
    a single band above a monthly threshold; social insurance applies
    between a lower and an upper monthly threshold.

    Rounding:
    - Internal values stay unrounded
    - Currency rounds to 2 decimals, ROUND_HALF_UP, only when reported
    """

    OUTPUT_PRECISION = Decimal("0.01")

    def __init__(self, rules: PayrollRules):
        self.rules = rules

    @staticmethod
    def round_to_cents(amount: Decimal) -> Decimal:
        """Round amount to 2 decimal places (cents)."""
        return amount.quantize(PayCalculator.OUTPUT_PRECISION, rounding=ROUND_HALF_UP)

    def gross_pay(
        self, regular_hours: Decimal, overtime_hours: Decimal, hourly_rate: Decimal
    ) -> Decimal:
        if hourly_rate < 0:
            raise ValueError(f"Hourly rate must not be negative: {hourly_rate}")
        if regular_hours < 0 or overtime_hours < 0:
            raise ValueError("Hours must not be negative")
        return (
            regular_hours * hourly_rate
            + overtime_hours * hourly_rate * self.rules.overtime_multiplier
        )

    def income_tax(self, gross_pay: Decimal) -> Decimal:
        threshold = self.rules.income_tax_threshold_monthly
        if gross_pay <= threshold:
            return ZERO
        return (gross_pay - threshold) * self.rules.income_tax_rate

    def social_insurance(self, gross_pay: Decimal) -> Decimal:
        lower = self.rules.social_insurance_lower_threshold_monthly
        if gross_pay <= lower:
            return ZERO
        upper = self.rules.social_insurance_upper_threshold_monthly
        return (min(gross_pay, upper) - lower) * self.rules.social_insurance_rate

    def calculate(
        self, regular_hours: Decimal, overtime_hours: Decimal, hourly_rate: Decimal
    ) -> PayBreakdown:
        gross = self.gross_pay(regular_hours, overtime_hours, hourly_rate)
        return PayBreakdown(
            gross_pay=gross,
            income_tax=self.income_tax(gross),
            social_insurance=self.social_insurance(gross),
        )
