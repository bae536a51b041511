"""Widow penalty: the extra tax a surviving spouse pays once the household
files as single, measured year by year against a married estimate."""

import logging
from dataclasses import replace
from typing import List, Optional

from calc.baseline_calculator import BaselineCalculator
from calc.inflation import adjust_for_inflation
from model.Analysis import WidowAnalysisResult, WidowTaxImpact
from model.SimulationInput import SimulationInput
from model.YearlyResult import YearlyResult
from model.errors import InvalidInputError
from model.money import round_half_up
from tax.TaxTables import TaxTables

logger = logging.getLogger(__name__)

SPOUSE_LIFE_EXPECTANCY = 85
MIN_YEARS_TO_DEATH = 5
DEFAULT_YEARS_TO_DEATH = 15
RECOMMEND_INCREASE_ABOVE_JUMP = 5


def default_death_year(inp: SimulationInput) -> int:
    if inp.spouse_birth_year is not None:
        return max(inp.start_year + MIN_YEARS_TO_DEATH, inp.spouse_birth_year + SPOUSE_LIFE_EXPECTANCY)
    return inp.start_year + DEFAULT_YEARS_TO_DEATH


def widow_input(inp: SimulationInput, death_year: int, last_married: Optional[YearlyResult]) -> SimulationInput:
    """The survivor's inputs from the death year on, opening with the last married balances."""
    balances = {}
    if last_married is not None:
        balances = dict(
            traditional_balance=last_married.traditional_balance,
            roth_balance=last_married.roth_balance,
            taxable_balance=last_married.taxable_balance,
        )
    return replace(
        inp,
        filing_status='single',
        age=inp.age_in(death_year),
        spouse_age=None,
        spouse_birth_year=None,
        spouse_ss_annual_amount=0,
        start_year=death_year,
        projection_years=inp.end_year - death_year,
        income_base_year=inp.income_base_year if inp.income_base_year is not None else inp.start_year,
        household_size=1,
        **balances
    )


def widow_tax_impact(tables: TaxTables, year: int, age: int, spouse_age: Optional[int],
                     married_income: int, widow_income: int) -> WidowTaxImpact:
    federal = tables.federal
    married_taxable = federal.taxableIncome(
        married_income, federal.standardDeduction('married_filing_jointly', year, age, spouse_age))
    widow_taxable = federal.taxableIncome(widow_income, federal.standardDeduction('single', year, age))
    married = federal.taxBurden(married_taxable, year, 'married_filing_jointly')
    widow = federal.taxBurden(widow_taxable, year, 'single')
    return WidowTaxImpact(
        year=year,
        age=age,
        married_tax=married.totalFederalTax,
        widow_tax=widow.totalFederalTax,
        additional_tax=widow.totalFederalTax - married.totalFederalTax,
        married_bracket=married.marginalBracket,
        widow_bracket=widow.marginalBracket,
        bracket_jump=widow.marginalBracket - married.marginalBracket,
    )


def analyze_widow_penalty(tables: TaxTables, inp: SimulationInput,
                          death_year: Optional[int] = None) -> WidowAnalysisResult:
    """Compare married and single-filer federal tax after the spouse's death.

    The married estimate adds the lost spousal Social Security, inflated from
    the first projection year, back onto the survivor's income.
    """
    if inp.filing_status != 'married_filing_jointly':
        raise InvalidInputError("Widow analysis only applies to married filing jointly")
    death_year = death_year if death_year is not None else default_death_year(inp)
    if death_year < inp.start_year:
        raise InvalidInputError(f"Death year {death_year} is before the first projection year {inp.start_year}")

    baseline = BaselineCalculator(tables)
    married_years = [y for y in baseline.calculate(inp) if y.year < death_year]

    widow_years: List[YearlyResult] = []
    if death_year <= inp.end_year:
        survivor = widow_input(inp, death_year, married_years[-1] if married_years else None)
        widow_years = baseline.calculate(survivor)
    logger.info("Widow analysis: %d married years, %d widow years from %d",
                len(married_years), len(widow_years), death_year)

    impacts = []
    for row in widow_years:
        spouse_ss = adjust_for_inflation(inp.spouse_ss_annual_amount, row.year - inp.start_year, inp.inflation_rate)
        impacts.append(widow_tax_impact(
            tables, row.year, row.age, inp.spouse_age_in(row.year),
            married_income=row.gross_income + spouse_ss,
            widow_income=row.gross_income,
        ))

    total = sum(i.additional_tax for i in impacts)
    average_jump = sum(i.bracket_jump for i in impacts) / len(impacts) if impacts else 0.0
    recommended = round_half_up(total / len(impacts)) if impacts and average_jump > RECOMMEND_INCREASE_ABOVE_JUMP else 0

    return WidowAnalysisResult(
        death_year=death_year,
        married_years=married_years,
        widow_years=widow_years,
        impacts=impacts,
        total_additional_tax=total,
        average_bracket_jump=average_jump,
        recommended_conversion_increase=recommended,
    )
