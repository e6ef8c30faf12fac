"""Unit tests for TaxCalculator."""

from decimal import Decimal

from hrms_payroll.calculators.tax_calculator import TaxCalculator
from hrms_payroll.calculators.types import TaxRates


class TestFlatTaxes:
    """Each tax is gross x rate, rounded on its own."""

    def test_standard_rates_on_5000(self):
        taxes = TaxCalculator().calculate(Decimal("5000.00"))

        assert taxes.federal_tax == Decimal("1100.00")
        assert taxes.state_tax == Decimal("250.00")
        assert taxes.social_security_tax == Decimal("310.00")
        assert taxes.medicare_tax == Decimal("72.50")
        assert taxes.unemployment_tax == Decimal("30.00")
        assert taxes.total == Decimal("1762.50")

    def test_each_tax_rounded_half_up(self):
        taxes = TaxCalculator().calculate(Decimal("10.00"))

        # 10.00 * 0.0145 = 0.145 rounds up, not to even
        assert taxes.medicare_tax == Decimal("0.15")
        assert taxes.social_security_tax == Decimal("0.62")
        assert taxes.unemployment_tax == Decimal("0.06")

    def test_total_is_sum_of_rounded_taxes(self):
        gross = Decimal("1234.57")
        taxes = TaxCalculator().calculate(gross)

        assert taxes.total == (
            taxes.federal_tax
            + taxes.state_tax
            + taxes.social_security_tax
            + taxes.medicare_tax
            + taxes.unemployment_tax
        )

    def test_zero_gross(self):
        assert TaxCalculator().calculate(Decimal("0.00")).total == Decimal("0.00")

    def test_custom_rates(self):
        rates = TaxRates(
            federal=Decimal("0.10"),
            state=Decimal("0"),
            social_security=Decimal("0"),
            medicare=Decimal("0"),
            unemployment=Decimal("0"),
        )
        taxes = TaxCalculator(rates).calculate(Decimal("999.95"))

        assert taxes.federal_tax == Decimal("100.00")
        assert taxes.total == Decimal("100.00")
