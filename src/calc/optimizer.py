"""Roth conversion sizing.

The optimizer fills the client's target federal bracket: it finds the income
ceiling of the bracket taxed at the target rate and converts up to the room
left under it, never more than the source balance.
"""

from model.money import round_half_up
from tax.FederalDetails import FederalDetails


class ConversionOptimizer:
    def __init__(self, federal: FederalDetails):
        self.federal = federal

    def optimal_conversion(self, balance: int, existing_taxable_income: int, target_rate: float,
                           filing_status: str, year: int) -> int:
        """Largest conversion that keeps taxable income inside the target bracket.

        Args:
            balance: Tax-deferred balance available to convert.
            existing_taxable_income: Taxable income before the conversion.
            target_rate: Whole-percent rate of the bracket to fill (e.g. 24).
            filing_status: Filing status for the bracket lookup.
            year: Tax year for the bracket lookup.

        Returns:
            Conversion amount in cents, between 0 and ``balance``.
        """
        if balance <= 0:
            return 0
        ceiling = self.federal.bracketCeiling(target_rate, year, filing_status)
        if ceiling is None:
            return 0
        headroom = ceiling - existing_taxable_income
        if headroom <= 0:
            return 0
        return max(0, min(headroom, balance))

    def conversion_federal_tax(self, amount: int, existing_taxable_income: int,
                               filing_status: str, year: int) -> int:
        """Marginal federal tax caused by a conversion.

        Priced as tax(existing + amount) - tax(existing) so a conversion that
        spills into the next bracket is taxed at both rates.
        """
        if amount <= 0:
            return 0
        with_conversion = self.federal.taxBurden(existing_taxable_income + amount, year, filing_status)
        without = self.federal.taxBurden(existing_taxable_income, year, filing_status)
        return with_conversion.totalFederalTax - without.totalFederalTax

    @staticmethod
    def gross_down(amount: int, federal_rate: float, state_rate: float, balance: int) -> int:
        """Reduce a conversion so the IRA can also cover its own tax.

        Args:
            amount: Conversion sized as if tax were paid from outside funds.
            federal_rate: Whole-percent federal target rate.
            state_rate: Decimal state rate.
            balance: Source balance; the result is re-capped at it.
        """
        if amount <= 0:
            return 0
        reduced = round_half_up(amount * (1 - (federal_rate / 100 + state_rate)))
        return max(0, min(reduced, balance))
