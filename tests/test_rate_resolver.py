"""Unit tests for money helpers and RateResolver."""

from decimal import Decimal
from uuid import uuid4

import pytest

from hrms_payroll.calculators.money import apply_rate, money_sum, round_to_cents, to_money
from hrms_payroll.calculators.rate_resolver import RateResolver
from hrms_payroll.calculators.types import CompensationMode, EmployeeCompensation
from hrms_payroll.exceptions import InvalidEmployeeConfigurationError


def salaried(amount: str | None) -> EmployeeCompensation:
    return EmployeeCompensation(
        employee_id=uuid4(),
        compensation_mode=CompensationMode.SALARIED,
        salary_amount=Decimal(amount) if amount is not None else None,
    )


def hourly(rate: str | None) -> EmployeeCompensation:
    return EmployeeCompensation(
        employee_id=uuid4(),
        compensation_mode=CompensationMode.HOURLY,
        hourly_rate=Decimal(rate) if rate is not None else None,
    )


class TestMoney:
    """Fixed-point helpers."""

    def test_round_half_up(self):
        assert round_to_cents(Decimal("0.145")) == Decimal("0.15")
        assert round_to_cents(Decimal("0.125")) == Decimal("0.13")
        assert round_to_cents(Decimal("0.1249")) == Decimal("0.12")

    def test_to_money_none_is_zero(self):
        assert to_money(None) == Decimal("0.00")
        assert to_money("12.345") == Decimal("12.35")

    def test_apply_rate_rounds_immediately(self):
        assert apply_rate(Decimal("10.00"), Decimal("0.0145")) == Decimal("0.15")

    def test_money_sum(self):
        assert money_sum(Decimal("1.10"), Decimal("2.20"), Decimal("0.05")) == Decimal("3.35")
        assert money_sum() == Decimal("0.00")


class TestBasicPay:
    """Basic pay by compensation mode."""

    def test_salaried_ignores_hours(self):
        comp = salaried("5000.00")
        assert RateResolver.basic_pay(comp, Decimal("0")) == Decimal("5000.00")
        assert RateResolver.basic_pay(comp, Decimal("200")) == Decimal("5000.00")

    def test_hourly_uses_regular_hours(self):
        assert RateResolver.basic_pay(hourly("20.00"), Decimal("160")) == Decimal("3200.00")

    def test_hourly_without_hours_is_zero(self):
        assert RateResolver.basic_pay(hourly("20.00"), Decimal("0")) == Decimal("0.00")

    def test_hourly_rounds_fractional_hours(self):
        # 7.333 * 15.55 = 114.02815
        assert RateResolver.basic_pay(hourly("15.55"), Decimal("7.333")) == Decimal("114.03")


class TestOvertimeRate:
    """Overtime rate derivation."""

    def test_hourly_rate_times_one_and_a_half(self):
        assert RateResolver.overtime_rate(hourly("20.00")) == Decimal("30.00")

    def test_salaried_uses_implied_hourly_rate(self):
        # 5000 / 176 = 28.409... -> 28.41; * 1.5 = 42.615 -> 42.62
        assert RateResolver.implied_hourly_rate(Decimal("5000.00")) == Decimal("28.41")
        assert RateResolver.overtime_rate(salaried("5000.00")) == Decimal("42.62")


class TestValidation:
    """Missing compensation data is a configuration error."""

    def test_salaried_without_salary(self):
        with pytest.raises(InvalidEmployeeConfigurationError, match="no salary amount"):
            RateResolver.validate(salaried(None))

    def test_hourly_without_rate(self):
        with pytest.raises(InvalidEmployeeConfigurationError, match="no hourly rate"):
            RateResolver.validate(hourly(None))

    def test_negative_rate(self):
        with pytest.raises(InvalidEmployeeConfigurationError, match="negative"):
            RateResolver.validate(hourly("-1.00"))

    def test_unknown_mode(self):
        comp = EmployeeCompensation(
            employee_id=uuid4(),
            compensation_mode="commission_only",  # type: ignore[arg-type]
            salary_amount=Decimal("1000.00"),
        )
        with pytest.raises(InvalidEmployeeConfigurationError, match="unknown compensation mode"):
            RateResolver.validate(comp)
