"""Per-year income and tax evaluation shared by every scenario runner.

A runner decides what leaves the tax-deferred account in a year (RMD,
conversion, withholding). This module turns that into the year's income,
taxable Social Security, deductions, federal/state tax, NIIT, MAGI and the
IRMAA surcharge looked back two years through the run's IncomeHistory.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from model.FederalResult import FederalResult
from model.IncomeHistory import IncomeHistory
from model.SimulationInput import SimulationInput
from model.money import round_half_up
from tax.TaxTables import TaxTables

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class YearIncome:
    ss_income: int
    pension_income: int
    other_income: int
    tax_exempt_income: int


@dataclass(frozen=True)
class YearTaxes:
    taxable_ss: int
    gross_income: int
    deductions: int
    taxable_income: int
    magi: int
    federal: FederalResult
    federal_tax: int
    state_tax: int
    niit_tax: int
    irmaa_surcharge: int

    @property
    def total_tax(self) -> int:
        return self.federal_tax + self.state_tax + self.niit_tax + self.irmaa_surcharge


class AnnualTaxCalculator:
    def __init__(self, tables: TaxTables, inp: SimulationInput):
        self.tables = tables
        self.inp = inp

    def income(self, year: int, age: int, spouse_age: Optional[int]) -> YearIncome:
        """Income the household receives outside the tax-deferred account."""
        inp = self.inp
        ss_rules = self.tables.social_security
        ss = ss_rules.annual_benefit(inp.ss_annual_amount, inp.ss_start_age, age, inp.ss_cola_rate)
        if inp.is_joint:
            ss += ss_rules.annual_benefit(
                inp.spouse_ss_annual_amount,
                inp.spouse_ss_start_age,
                spouse_age if spouse_age is not None else age,
                inp.ss_cola_rate
            )

        years = year - (inp.income_base_year if inp.income_base_year is not None else inp.start_year)
        factor = (1 + inp.inflation_rate / 100) ** years
        pension = round_half_up(inp.pension_income * factor)
        explicit = inp.non_ssi_for(year)
        if explicit is not None:
            other, exempt = explicit.gross_taxable, explicit.tax_exempt
        else:
            other = round_half_up(inp.other_income * factor)
            exempt = round_half_up(inp.tax_exempt_income * factor)
        return YearIncome(ss_income=ss, pension_income=pension, other_income=other, tax_exempt_income=exempt)

    def gross_and_magi(self, income: YearIncome, distributions: int):
        """Return (taxable SS, gross income, MAGI) for a year's IRA distributions."""
        ordinary = distributions + income.pension_income + income.other_income
        ss = self.tables.social_security.taxable_amount(
            income.ss_income, ordinary, income.tax_exempt_income, self.inp.filing_status
        )
        gross = ordinary + ss.taxable_amount
        return ss.taxable_amount, gross, gross + income.tax_exempt_income

    def taxable_income(self, year: int, age: int, spouse_age: Optional[int], income: YearIncome,
                       distributions: int) -> int:
        """Federal taxable income for the year before any further conversion."""
        _, gross, _ = self.gross_and_magi(income, distributions)
        deductions = self.tables.federal.standardDeduction(self.inp.filing_status, year, age, spouse_age)
        return self.tables.federal.taxableIncome(gross, deductions)

    def taxes(self, year: int, age: int, spouse_age: Optional[int], income: YearIncome,
              distributions: int, investment_income: int, history: IncomeHistory) -> YearTaxes:
        """Evaluate every tax for the year and record its MAGI in ``history``.

        Args:
            year: Tax year.
            age: Client age in the year (drives deductions and IRMAA eligibility).
            spouse_age: Spouse age, or None.
            income: Non-IRA income for the year.
            distributions: Everything taxable leaving the tax-deferred account.
            investment_income: Taxable-account growth, the NIIT base.
            history: The run's MAGI history; this year's MAGI is recorded into it.
        """
        inp = self.inp
        t = self.tables
        status = inp.filing_status

        taxable_ss, gross, magi = self.gross_and_magi(income, distributions)
        deductions = t.federal.standardDeduction(status, year, age, spouse_age)
        taxable_income = t.federal.taxableIncome(gross, deductions)

        federal = t.federal.taxBurden(taxable_income, year, status)
        federal_tax = round_half_up(federal.totalFederalTax * inp.tax_multiplier)
        state = t.state.taxBurden(taxable_income, inp.state, status, inp.state_tax_rate)
        state_tax = round_half_up(state.totalStateTax * inp.tax_multiplier)

        niit_tax = 0
        if inp.include_niit:
            niit_tax = t.niit.calculate(magi, investment_income, status).tax_amount

        history.record(year, magi)
        irmaa = t.medicare.lookback_surcharge(history, year, status, age)

        logger.debug("%d age %d: gross %d taxable %d fed %d state %d niit %d irmaa %d",
                     year, age, gross, taxable_income, federal_tax, state_tax, niit_tax, irmaa.annual_surcharge)
        return YearTaxes(
            taxable_ss=taxable_ss,
            gross_income=gross,
            deductions=deductions,
            taxable_income=taxable_income,
            magi=magi,
            federal=federal,
            federal_tax=federal_tax,
            state_tax=state_tax,
            niit_tax=niit_tax,
            irmaa_surcharge=irmaa.annual_surcharge,
        )


def settle_rmd(rmd: int, tax_due: int, taxable: int, treatment: str):
    """Pay the year's tax and dispose of the RMD proceeds.

    Reinvested proceeds were already deposited in the taxable account, so the
    whole tax comes out of it. Otherwise tax is paid from the proceeds first and
    any shortfall from the taxable account.

    Returns:
        (taxable balance, after-tax RMD kept outside the taxable account)
    """
    if treatment == 'reinvested':
        return max(0, taxable - tax_due), 0
    after_tax_rmd = max(0, rmd - tax_due)
    shortfall = max(0, tax_due - rmd)
    return max(0, taxable - shortfall), after_tax_rmd
