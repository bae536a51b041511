"""Guaranteed-income (GI) annuity strategy and its baseline.

The strategy run moves through four phases, each entered once and in order:

1. conversion  - fill the chosen federal bracket with Roth conversions for a
                 fixed number of years
2. purchase    - the whole Roth balance buys the annuity; the product bonus is
                 credited to the income base, the account value, or both
3. deferral    - the income base rolls up (simple or compound) and the rider
                 fee is charged; the base and payout percent lock in the last
                 deferral year
4. income      - a fixed lifetime payment of locked base x payout percent,
                 tax-free because it comes from the Roth; payments continue
                 after the account value is exhausted

The baseline buys the same product inside the tax-deferred account at the
same age with no conversions, so its identical payments are ordinary income.
Guaranteed withdrawals satisfy the required distributions on the contract
itself. IRA money held outside the contract (the strategy's unconverted
remainder, or the baseline IRA before purchase) takes RMDs as usual.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional

from calc.annual_tax import AnnualTaxCalculator, settle_rmd
from calc.optimizer import ConversionOptimizer
from calc.products import GIProduct, gi_product
from model.GuaranteedIncome import GIComparisonMetrics, GIMetrics, GIYearData
from model.IncomeHistory import IncomeHistory
from model.SimulationInput import SimulationInput
from model.YearlyResult import YearlyResult
from model.money import round_half_up
from tax.TaxTables import TaxTables

logger = logging.getLogger(__name__)


@dataclass
class AnnuityContract:
    """Mutable annuity state for one run."""
    product: GIProduct
    account_value: int = 0
    income_base: int = 0
    original_income_base: int = 0
    payout_percent: float = 0.0
    annual_income: int = 0
    locked: bool = False
    total_rider_fees: int = 0
    roll_up_option: Optional[str] = None

    def purchase(self, amount: int, bonus_percent: float) -> int:
        """Fund the contract and credit the bonus; returns the bonus amount."""
        applies_to = self.product.bonus_applies_to
        bonus = round_half_up(amount * bonus_percent / 100) if applies_to else 0
        self.account_value = amount + (bonus if applies_to in ('accountValue', 'both') else 0)
        self.income_base = amount + (bonus if applies_to in ('incomeBase', 'both') else 0)
        self.original_income_base = self.income_base
        return bonus

    def credit_interest(self, rate: float):
        self.account_value += round_half_up(self.account_value * rate / 100)

    def roll_up(self, deferral_year: int) -> int:
        terms = self.product.roll_up_terms(deferral_year, self.roll_up_option)
        if terms is None:
            return 0
        rate, roll_up_type = terms
        basis = self.original_income_base if roll_up_type == 'simple' else self.income_base
        amount = round_half_up(basis * rate / 100)
        self.income_base += amount
        return amount

    def charge_rider_fee(self) -> int:
        p = self.product
        basis = self.income_base if p.rider_fee_applies_to == 'incomeBase' else self.account_value
        fee = round_half_up(basis * p.rider_fee / 100)
        if p.rider_fee_deducted_from == 'incomeBase':
            fee = min(fee, self.income_base)
            self.income_base -= fee
        else:
            fee = min(fee, self.account_value)
            self.account_value -= fee
        self.total_rider_fees += fee
        return fee

    def lock(self, income_age: int, payout_type: str, payout_option: str):
        self.payout_percent = self.product.payout_percent(income_age, payout_type, payout_option)
        self.annual_income = round_half_up(self.income_base * self.payout_percent / 100)
        self.locked = True

    def withdraw(self) -> int:
        """Pay the guaranteed income; the account value floors at zero, the payment does not."""
        self.account_value = max(0, self.account_value - self.annual_income)
        return self.annual_income


@dataclass
class GIRun:
    years: List[YearlyResult]
    gi_years: List[GIYearData]
    metrics: GIMetrics
    conversion_taxes: List[int] = field(default_factory=list)


class GuaranteedIncomeCalculator:
    def __init__(self, tables: TaxTables):
        self.tables = tables
        self.optimizer = ConversionOptimizer(tables.federal)

    @staticmethod
    def phase_ages(inp: SimulationInput):
        """(purchase age, income start age); income starts at least a year after purchase."""
        purchase_age = inp.age + inp.gi_conversion_years
        return purchase_age, max(inp.income_start_age, purchase_age + 1)

    @staticmethod
    def phase_for(age: int, purchase_age: int, income_age: int) -> str:
        if age < purchase_age:
            return 'conversion'
        if age == purchase_age:
            return 'purchase'
        if age < income_age:
            return 'deferral'
        return 'income'

    def calculate_strategy(self, inp: SimulationInput) -> GIRun:
        return self._run(inp, convert=True)

    def calculate_baseline(self, inp: SimulationInput) -> GIRun:
        return self._run(inp, convert=False)

    def _run(self, inp: SimulationInput, convert: bool) -> GIRun:
        product = gi_product(inp.product_id)
        annual = AnnualTaxCalculator(self.tables, inp)
        history = IncomeHistory()
        purchase_age, income_age = self.phase_ages(inp)
        growth = (inp.growth_rate if convert else inp.baseline_growth_rate) / 100
        state_rate = self.tables.state.conversionRate(inp.state, inp.state_tax_rate)
        contract = AnnuityContract(product=product, roll_up_option=inp.roll_up_option)

        traditional = inp.traditional_balance
        roth = inp.roth_balance
        taxable = inp.taxable_balance
        cash = 0
        cumulative_rmd = 0
        purchase_amount = 0
        bonus_amount = 0
        cumulative_net = 0
        lifetime_gross = 0
        first_net = None
        depletion_age = None
        deferral_year = 0
        years: List[YearlyResult] = []
        gi_years: List[GIYearData] = []
        conversion_taxes: List[int] = []

        label = 'strategy' if convert else 'baseline'
        logger.info("Guaranteed-income %s run for %s: purchase at %d, income at %d",
                    label, product.product_id, purchase_age, income_age)
        for year in inp.years:
            age = inp.age_in(year)
            spouse_age = inp.spouse_age_in(year)
            phase = self.phase_for(age, purchase_age, income_age)
            income = annual.income(year, age, spouse_age)

            conversion = 0
            conversion_tax = 0
            roll_up = 0
            rider_fee = 0
            payment = 0
            income_tax = 0
            withheld = 0

            # IRA money outside the contract takes its RMD before anything else.
            rmd = 0
            if (convert or phase == 'conversion') and traditional > 0:
                rmd = self.tables.rmd.calculate(age, traditional, inp.birth_year).rmd_amount
                traditional -= rmd
                if inp.rmd_treatment == 'reinvested':
                    taxable += rmd
            distributions = rmd

            if phase == 'conversion':
                if convert and traditional > 0:
                    existing = annual.taxable_income(year, age, spouse_age, income, rmd)
                    conversion = self.optimizer.optimal_conversion(
                        traditional, existing, inp.gi_conversion_bracket, inp.filing_status, year)
                    if inp.tax_payment_source == 'from_ira':
                        conversion = self.optimizer.gross_down(conversion, inp.gi_conversion_bracket, state_rate, traditional)
                    if conversion > 0:
                        federal_part = self.optimizer.conversion_federal_tax(conversion, existing, inp.filing_status, year)
                        conversion_tax = round_half_up(
                            (federal_part + self.tables.state.conversionTax(conversion, state_rate)) * inp.tax_multiplier)
                        traditional -= conversion
                        roth += conversion
                        if inp.tax_payment_source == 'from_ira':
                            withheld = min(conversion_tax, traditional)
                            traditional -= withheld
                        distributions += conversion + withheld

            elif phase == 'purchase':
                if convert:
                    purchase_amount, roth = roth, 0
                else:
                    purchase_amount, traditional = traditional, 0
                bonus_amount = contract.purchase(purchase_amount, inp.bonus_percent)
                contract.credit_interest(growth * 100)
                if age == income_age - 1:
                    contract.lock(income_age, inp.payout_type, inp.payout_option)

            elif phase == 'deferral':
                deferral_year += 1
                contract.credit_interest(growth * 100)
                roll_up = contract.roll_up(deferral_year)
                rider_fee = contract.charge_rider_fee()
                if age == income_age - 1:
                    contract.lock(income_age, inp.payout_type, inp.payout_option)

            else:
                if not contract.locked:
                    contract.lock(income_age, inp.payout_type, inp.payout_option)
                payment = contract.withdraw()
                contract.credit_interest(growth * 100)
                if contract.account_value == 0 and depletion_age is None:
                    depletion_age = age
                if not convert:
                    distributions += payment
                    income_tax = self._marginal_income_tax(annual, year, age, spouse_age, income, payment)

            # Before purchase both accounts grow; afterwards the annuity replaces
            # the Roth (strategy) or the IRA (baseline).
            if phase == 'conversion' or convert:
                traditional += round_half_up(traditional * growth)
            if phase == 'conversion' or not convert:
                roth += round_half_up(roth * growth)
            if phase != 'conversion':
                if convert:
                    roth = contract.account_value
                else:
                    traditional = contract.account_value

            taxable_growth = round_half_up(taxable * growth)
            taxable += taxable_growth
            taxes = annual.taxes(year, age, spouse_age, income, distributions, taxable_growth, history)
            total_tax = taxes.total_tax
            # Tax on the baseline's annuity payment is withheld from the payment itself.
            taxable, after_tax_rmd = settle_rmd(rmd, max(0, total_tax - income_tax - withheld), taxable,
                                                inp.rmd_treatment)
            if inp.rmd_treatment == 'spent':
                cumulative_rmd += after_tax_rmd
            elif inp.rmd_treatment == 'cash':
                cash += after_tax_rmd

            net_payment = payment - income_tax
            if phase == 'income':
                lifetime_gross += payment
                cumulative_net += net_payment
                if first_net is None:
                    first_net = net_payment
            conversion_taxes.append(conversion_tax)

            traditional = max(0, traditional)
            roth = max(0, roth)
            years.append(YearlyResult(
                year=year,
                age=age,
                spouse_age=spouse_age,
                traditional_balance=traditional,
                roth_balance=roth,
                taxable_balance=taxable,
                cash_balance=cash,
                rmd_amount=rmd,
                conversion_amount=conversion,
                cumulative_distributions=cumulative_rmd,
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
                net_worth=traditional + roth + taxable + cash,
            ))
            gi_years.append(GIYearData(
                year=year,
                age=age,
                phase=phase,
                traditional_balance=traditional,
                roth_balance=roth,
                conversion_amount=conversion,
                conversion_tax=conversion_tax,
                purchase_amount=purchase_amount if phase == 'purchase' else 0,
                bonus_amount=bonus_amount if phase == 'purchase' else 0,
                account_value=contract.account_value,
                income_base=contract.income_base,
                roll_up_amount=roll_up,
                rider_fee=rider_fee,
                guaranteed_income_gross=payment,
                income_tax=income_tax,
                guaranteed_income_net=net_payment,
                cumulative_income_net=cumulative_net,
            ))

        metrics = GIMetrics(
            product_id=product.product_id,
            purchase_age=purchase_age,
            income_start_age=income_age,
            purchase_amount=purchase_amount,
            bonus_amount=bonus_amount,
            income_base_at_income_age=contract.income_base if contract.locked else 0,
            payout_percent=contract.payout_percent,
            annual_income_gross=contract.annual_income,
            annual_income_net=first_net if first_net is not None else 0,
            lifetime_income_gross=lifetime_gross,
            lifetime_income_net=cumulative_net,
            total_conversion_tax=sum(conversion_taxes),
            total_rider_fees=contract.total_rider_fees,
            depletion_age=depletion_age,
        )
        return GIRun(years=years, gi_years=gi_years, metrics=metrics, conversion_taxes=conversion_taxes)

    def _marginal_income_tax(self, annual: AnnualTaxCalculator, year: int, age: int, spouse_age: Optional[int],
                             income, payment: int) -> int:
        """Federal and state tax attributable to an annuity payment drawn from the IRA."""
        inp = annual.inp
        federal = self.tables.federal
        state = self.tables.state

        def fed_and_state(distributions):
            taxable_income = annual.taxable_income(year, age, spouse_age, income, distributions)
            fed = round_half_up(federal.taxBurden(taxable_income, year, inp.filing_status).totalFederalTax * inp.tax_multiplier)
            st = round_half_up(state.taxBurden(taxable_income, inp.state, inp.filing_status,
                                               inp.state_tax_rate).totalStateTax * inp.tax_multiplier)
            return fed + st

        return fed_and_state(payment) - fed_and_state(0)

    @staticmethod
    def compare(strategy: GIMetrics, baseline: GIMetrics) -> GIComparisonMetrics:
        annual_advantage = strategy.annual_income_net - baseline.annual_income_net
        lifetime_advantage = strategy.lifetime_income_net - baseline.lifetime_income_net
        break_even_years = None
        break_even_age = None
        if annual_advantage > 0:
            break_even_years = strategy.total_conversion_tax / annual_advantage
            break_even_age = strategy.income_start_age + math.ceil(break_even_years)
        percent = 0.0
        if baseline.lifetime_income_net > 0:
            percent = lifetime_advantage / baseline.lifetime_income_net * 100
        return GIComparisonMetrics(
            annual_income_advantage=annual_advantage,
            lifetime_income_advantage=lifetime_advantage,
            tax_free_wealth_created=lifetime_advantage,
            break_even_years=break_even_years,
            break_even_age=break_even_age,
            percent_improvement=percent,
        )
