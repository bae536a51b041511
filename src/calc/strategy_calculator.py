"""Strategic Roth conversion scenario.

The account is credited with the product bonus up front. Each year inside the
conversion window the optimizer sizes a conversion that fills the target
federal bracket (optionally held under the next IRMAA tier), the conversion
is moved to the Roth account and taxed, and conversions stop once the
tax-deferred balance is exhausted.
"""

import logging
from typing import List, Optional

from calc.annual_tax import AnnualTaxCalculator, YearIncome, settle_rmd
from calc.optimizer import ConversionOptimizer
from calc.strategies import get_strategy
from model.IncomeHistory import IncomeHistory
from model.SimulationInput import SimulationInput
from model.YearlyResult import YearlyResult
from model.money import round_half_up
from tax.TaxTables import TaxTables

logger = logging.getLogger(__name__)


class StrategyCalculator:
    def __init__(self, tables: TaxTables):
        self.tables = tables
        self.optimizer = ConversionOptimizer(tables.federal)

    def target_rate(self, inp: SimulationInput) -> int:
        if inp.target_bracket is not None:
            return inp.target_bracket
        return get_strategy(inp.strategy).target_bracket

    def uses_strict_irmaa(self, inp: SimulationInput) -> bool:
        if inp.strict_irmaa is not None:
            return inp.strict_irmaa
        return get_strategy(inp.strategy).strict_irmaa

    # Product hooks; the growth variant overrides these.

    def opening_balance(self, inp: SimulationInput) -> int:
        return round_half_up(inp.traditional_balance * (1 + inp.bonus_percent / 100))

    def growth_rate(self, inp: SimulationInput) -> float:
        return inp.growth_rate

    def anniversary_credit(self, inp: SimulationInput, contract_year: int, traditional: int) -> int:
        return 0

    def surrender_fields(self, inp: SimulationInput, contract_year: int, traditional: int) -> dict:
        return {}

    def conversion_amount(self, inp: SimulationInput, annual: AnnualTaxCalculator, year: int, age: int,
                          spouse_age: Optional[int], income: YearIncome, rmd: int, balance: int,
                          state_rate: float) -> int:
        """Amount to convert this year from ``balance`` (already net of the RMD)."""
        if balance <= 0 or inp.conversion_type == 'no_conversion':
            return 0
        if inp.conversion_type == 'full_conversion':
            return balance
        if inp.conversion_type == 'fixed_amount':
            return min(inp.fixed_conversion_amount, balance)

        target = self.target_rate(inp)
        existing = annual.taxable_income(year, age, spouse_age, income, rmd)
        amount = self.optimizer.optimal_conversion(balance, existing, target, inp.filing_status, year)
        if amount > 0 and self.uses_strict_irmaa(inp):
            amount = self._cap_under_irmaa_tier(inp, annual, year, age, income, rmd, amount)
        if inp.tax_payment_source == 'from_ira':
            amount = self.optimizer.gross_down(amount, target, state_rate, balance)
        return amount

    def _cap_under_irmaa_tier(self, inp: SimulationInput, annual: AnnualTaxCalculator, year: int, age: int,
                              income: YearIncome, rmd: int, amount: int) -> int:
        medicare = self.tables.medicare
        # MAGI only drives a surcharge once it is looked back on from Medicare age.
        if age + medicare.lookback_years < medicare.eligibility_age:
            return amount
        _, _, magi = annual.gross_and_magi(income, rmd)
        headroom = medicare.headroom(magi, inp.filing_status, year)
        if headroom == float('inf'):
            return amount
        limit = magi + int(headroom) - 1
        amount = max(0, min(amount, int(headroom) - 1))
        # Conversion income can also make more Social Security taxable.
        for _ in range(5):
            _, _, magi_after = annual.gross_and_magi(income, rmd + amount)
            over = magi_after - limit
            if over <= 0 or amount == 0:
                break
            amount = max(0, amount - over)
        return amount

    def calculate(self, inp: SimulationInput) -> List[YearlyResult]:
        annual = AnnualTaxCalculator(self.tables, inp)
        history = IncomeHistory()
        growth = self.growth_rate(inp) / 100
        state_rate = self.tables.state.conversionRate(inp.state, inp.state_tax_rate)
        conversion_start_age = inp.age + inp.years_to_defer_conversion
        conversion_end_age = inp.conversion_end_age if inp.conversion_end_age is not None else inp.end_age

        traditional = self.opening_balance(inp)
        roth = inp.roth_balance
        taxable = inp.taxable_balance
        cash = 0
        cumulative = 0
        complete = False
        results = []

        logger.info("Strategy run (%s, %d%% bracket): %d-%d", inp.strategy, self.target_rate(inp),
                    inp.start_year, inp.end_year)
        for index, year in enumerate(inp.years):
            age = inp.age_in(year)
            spouse_age = inp.spouse_age_in(year)
            income = annual.income(year, age, spouse_age)

            rmd = self.tables.rmd.calculate(age, traditional, inp.birth_year).rmd_amount
            traditional -= rmd
            if inp.rmd_treatment == 'reinvested':
                taxable += rmd

            conversion = 0
            conversion_tax = 0
            withheld = 0
            if not complete and conversion_start_age <= age <= conversion_end_age and traditional > 0:
                conversion = self.conversion_amount(inp, annual, year, age, spouse_age, income, rmd,
                                                    traditional, state_rate)
            if conversion > 0:
                existing = annual.taxable_income(year, age, spouse_age, income, rmd)
                federal_part = self.optimizer.conversion_federal_tax(conversion, existing, inp.filing_status, year)
                state_part = self.tables.state.conversionTax(conversion, state_rate)
                conversion_tax = round_half_up((federal_part + state_part) * inp.tax_multiplier)
                traditional -= conversion
                roth += conversion
                if inp.tax_payment_source == 'from_ira':
                    withheld = min(conversion_tax, traditional)
                    traditional -= withheld
                if traditional <= 0:
                    complete = True
                    logger.debug("Conversion complete at age %d", age)

            traditional += round_half_up(traditional * growth)
            traditional += self.anniversary_credit(inp, index + 1, traditional)
            roth += round_half_up(roth * growth)
            taxable_growth = round_half_up(taxable * growth)
            taxable += taxable_growth

            taxes = annual.taxes(year, age, spouse_age, income, rmd + conversion + withheld, taxable_growth, history)
            total_tax = taxes.total_tax
            taxable, after_tax_rmd = settle_rmd(rmd, max(0, total_tax - withheld), taxable, inp.rmd_treatment)
            if inp.rmd_treatment == 'spent':
                cumulative += after_tax_rmd
            elif inp.rmd_treatment == 'cash':
                cash += after_tax_rmd

            aca_cliff = False
            if inp.include_aca:
                aca_cliff = self.tables.aca.cliff_impact(taxes.magi, inp.household_size, inp.state, age).crosses_cliff

            traditional = max(0, traditional)
            roth = max(0, roth)
            results.append(YearlyResult(
                year=year,
                age=age,
                spouse_age=spouse_age,
                traditional_balance=traditional,
                roth_balance=roth,
                taxable_balance=taxable,
                cash_balance=cash,
                rmd_amount=rmd,
                conversion_amount=conversion,
                cumulative_distributions=cumulative,
                ss_income=income.ss_income,
                taxable_ss=taxes.taxable_ss,
                pension_income=income.pension_income,
                other_income=income.other_income,
                tax_exempt_income=income.tax_exempt_income,
                gross_income=taxes.gross_income,
                deductions=taxes.deductions,
                taxable_income=taxes.taxable_income,
                magi=taxes.magi,
                federal_tax=taxes.federal_tax,
                state_tax=taxes.state_tax,
                niit_tax=taxes.niit_tax,
                irmaa_surcharge=taxes.irmaa_surcharge,
                total_tax=total_tax,
                conversion_tax=conversion_tax,
                marginal_bracket=taxes.federal.marginalBracket,
                aca_cliff_crossed=aca_cliff,
                net_worth=traditional + roth + taxable + cash,
                **self.surrender_fields(inp, index + 1, traditional),
            ))
        return results
