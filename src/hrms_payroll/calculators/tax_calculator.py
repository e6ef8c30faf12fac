"""Flat-rate statutory tax calculation."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from hrms_payroll.calculators.money import apply_rate, money_sum
from hrms_payroll.calculators.types import TaxRates


@dataclass(frozen=True)
class TaxBreakdown:
    """Per-tax amounts withheld from gross pay."""

    federal_tax: Decimal
    state_tax: Decimal
    social_security_tax: Decimal
    medicare_tax: Decimal
    unemployment_tax: Decimal

    @property
    def total(self) -> Decimal:
        return money_sum(
            self.federal_tax,
            self.state_tax,
            self.social_security_tax,
            self.medicare_tax,
            self.unemployment_tax,
        )


class TaxCalculator:
    """Applies each statutory rate to gross pay independently.

    Each tax is rounded to cents on its own before the total is summed, so
    the total can differ by a cent from rounding the combined rate once.
    """

    def __init__(self, rates: TaxRates | None = None):
        self.rates = rates or TaxRates()

    def calculate(self, gross_pay: Decimal) -> TaxBreakdown:
        """Compute the five statutory taxes on gross pay."""
        return TaxBreakdown(
            federal_tax=apply_rate(gross_pay, self.rates.federal),
            state_tax=apply_rate(gross_pay, self.rates.state),
            social_security_tax=apply_rate(gross_pay, self.rates.social_security),
            medicare_tax=apply_rate(gross_pay, self.rates.medicare),
            unemployment_tax=apply_rate(gross_pay, self.rates.unemployment),
        )
