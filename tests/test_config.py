"""Tests for settings and payroll rule loading."""

from decimal import Decimal

import pytest

from punch_payroll.config import PayrollRules, Settings


class TestPayrollRules:
    """Test rule defaults and validation."""

    def test_defaults(self):
        rules = PayrollRules()

        assert rules.daily_overtime_threshold_hours == Decimal("8.0")
        assert rules.overtime_multiplier == Decimal("1.5")
        assert rules.excessive_hours_threshold == Decimal("16.0")
        assert rules.income_tax_threshold_monthly == Decimal("1047.50")
        assert rules.social_insurance_upper_threshold_monthly == Decimal("4189.00")

    def test_rate_out_of_range(self):
        with pytest.raises(ValueError, match="income_tax_rate"):
            PayrollRules(income_tax_rate=Decimal("1.5"))

    def test_multiplier_below_one(self):
        with pytest.raises(ValueError, match="overtime_multiplier"):
            PayrollRules(overtime_multiplier=Decimal("0.5"))

    def test_inverted_social_insurance_band(self):
        with pytest.raises(ValueError):
            PayrollRules(
                social_insurance_lower_threshold_monthly=Decimal("5000"),
                social_insurance_upper_threshold_monthly=Decimal("4000"),
            )

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("DAILY_OVERTIME_THRESHOLD_HOURS", "7.5")
        monkeypatch.setenv("OVERTIME_MULTIPLIER", "2")

        rules = PayrollRules.from_env()

        assert rules.daily_overtime_threshold_hours == Decimal("7.5")
        assert rules.overtime_multiplier == Decimal("2")
        assert rules.income_tax_rate == Decimal("0.20")

    def test_from_env_rejects_garbage(self, monkeypatch):
        monkeypatch.setenv("INCOME_TAX_RATE", "twenty percent")

        with pytest.raises(ValueError, match="INCOME_TAX_RATE"):
            PayrollRules.from_env()

    def test_canonical_dict_uses_strings(self):
        canonical = PayrollRules().to_canonical_dict()

        assert canonical["income_tax_rate"] == "0.20"
        assert len(canonical) == 8


class TestSettings:
    """Test environment-driven settings."""

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///payroll.db")
        monkeypatch.setenv("CALCULATION_CONCURRENCY", "8")
        monkeypatch.setenv("PAYROLL_TIMEZONE", "Europe/London")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = Settings.from_env()

        assert settings.database_url == "sqlite+aiosqlite:///payroll.db"
        assert settings.calculation_concurrency == 8
        assert settings.payroll_timezone == "Europe/London"
        assert settings.log_level == "DEBUG"
        assert settings.PORT == settings.port

    def test_unknown_timezone_rejected(self, monkeypatch):
        monkeypatch.setenv("PAYROLL_TIMEZONE", "Mars/Olympus")

        with pytest.raises(ValueError, match="PAYROLL_TIMEZONE"):
            Settings.from_env()

    def test_concurrency_must_be_positive(self, monkeypatch):
        monkeypatch.setenv("CALCULATION_CONCURRENCY", "0")

        with pytest.raises(ValueError, match="CALCULATION_CONCURRENCY"):
            Settings.from_env()
