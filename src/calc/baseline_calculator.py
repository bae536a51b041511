"""Baseline ("do nothing") scenario.

No conversions. Required distributions are taken once the owner reaches the
start age for their birth year and the after-tax proceeds are spent,
reinvested in the taxable account, or held as cash.
"""

import logging
from typing import List

from calc.annual_tax import AnnualTaxCalculator, settle_rmd
from model.IncomeHistory import IncomeHistory
from model.SimulationInput import SimulationInput
from model.YearlyResult import YearlyResult
from model.money import round_half_up
from tax.TaxTables import TaxTables

logger = logging.getLogger(__name__)


class BaselineCalculator:
    def __init__(self, tables: TaxTables):
        self.tables = tables

    def calculate(self, inp: SimulationInput) -> List[YearlyResult]:
        annual = AnnualTaxCalculator(self.tables, inp)
        history = IncomeHistory()
        growth = inp.baseline_growth_rate / 100

        traditional = inp.traditional_balance
        roth = inp.roth_balance
        taxable = inp.taxable_balance
        cash = 0
        cumulative = 0
        results = []

        logger.info("Baseline run: %d-%d, RMD treatment %s", inp.start_year, inp.end_year, inp.rmd_treatment)
        for year in inp.years:
            age = inp.age_in(year)
            spouse_age = inp.spouse_age_in(year)

            rmd = self.tables.rmd.calculate(age, traditional, inp.birth_year).rmd_amount
            traditional -= rmd
            if inp.rmd_treatment == 'reinvested':
                taxable += rmd

            traditional += round_half_up(traditional * growth)
            roth += round_half_up(roth * growth)
            taxable_growth = round_half_up(taxable * growth)
            taxable += taxable_growth

            income = annual.income(year, age, spouse_age)
            taxes = annual.taxes(year, age, spouse_age, income, rmd, taxable_growth, history)
            total_tax = taxes.total_tax

            taxable, after_tax_rmd = settle_rmd(rmd, total_tax, taxable, inp.rmd_treatment)
            if inp.rmd_treatment == 'spent':
                cumulative += after_tax_rmd
            elif inp.rmd_treatment == 'cash':
                cash += after_tax_rmd

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
                marginal_bracket=taxes.federal.marginalBracket,
                net_worth=traditional + roth + taxable + cash,
            ))
        return results
