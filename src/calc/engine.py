"""Simulation orchestrator.

Selects the baseline/strategy pair for the client's product, runs both over
the same horizon and reduces the two year arrays into the summary scalars
(break-even age, lifetime tax savings, heir benefit) and SummaryMetrics.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from calc.baseline_calculator import BaselineCalculator
from calc.growth_calculator import GrowthCalculator
from calc.guaranteed_income_calculator import GuaranteedIncomeCalculator
from calc.products import product_category
from calc.strategy_calculator import StrategyCalculator
from model.SimulationInput import SimulationInput
from model.YearlyResult import (
    DistributionSummary,
    HeirSummary,
    IrmaaSummary,
    SimulationResult,
    SummaryMetrics,
    WealthSummary,
    YearlyResult,
)
from model.errors import ConfigurationMissingError
from model.money import round_half_up
from tax.TaxTables import TaxTables

logger = logging.getLogger(__name__)

DEFAULT_HEIR_TAX_RATE = 40


@dataclass(frozen=True)
class Legacy:
    gross: int
    tax: int
    net: int


def calculate_legacy(final_balance: int, account_type: str, heir_tax_rate: float) -> Legacy:
    """What heirs receive from an account; Roth balances pass tax-free.

    Args:
        final_balance: Ending balance in cents.
        account_type: 'traditional' or 'roth'.
        heir_tax_rate: Whole-percent rate heirs pay on inherited traditional balances.
    """
    if account_type == 'roth':
        return Legacy(gross=final_balance, tax=0, net=final_balance)
    tax = round_half_up(final_balance * heir_tax_rate / 100)
    return Legacy(gross=final_balance, tax=tax, net=final_balance - tax)


def calculate_break_even_age(baseline: List[YearlyResult], strategy: List[YearlyResult]) -> Optional[int]:
    """First age at which the strategy's net worth exceeds the baseline's, else None."""
    for b, s in zip(baseline, strategy):
        if s.net_worth > b.net_worth:
            return s.age
    return None


def calculate_tax_savings(baseline: List[YearlyResult], strategy: List[YearlyResult]) -> int:
    return sum(y.total_tax for y in baseline) - sum(y.total_tax for y in strategy)


def calculate_heir_benefit(baseline: List[YearlyResult], strategy: List[YearlyResult],
                           heir_tax_rate: float = DEFAULT_HEIR_TAX_RATE) -> int:
    """Heir tax avoided: baseline heir tax on the IRA minus the strategy's on its remainder."""
    if not baseline or not strategy:
        return 0
    baseline_tax = calculate_legacy(baseline[-1].traditional_balance, 'traditional', heir_tax_rate).tax
    strategy_tax = (calculate_legacy(strategy[-1].traditional_balance, 'traditional', heir_tax_rate).tax
                    + calculate_legacy(strategy[-1].roth_balance, 'roth', heir_tax_rate).tax)
    return baseline_tax - strategy_tax


def calculate_summary_metrics(baseline: List[YearlyResult], strategy: List[YearlyResult],
                              heir_tax_rate: float = DEFAULT_HEIR_TAX_RATE) -> SummaryMetrics:
    """Lifetime distributions, IRMAA, heir outcome and total wealth for both scenarios.

    Baseline distributions are gross RMDs whatever the RMD treatment; strategy
    distributions are conversions plus any RMDs. Heirs are taxed on the
    traditional balance only.
    """
    base_dist = sum(y.rmd_amount for y in baseline)
    strat_dist = sum(y.conversion_amount + y.rmd_amount for y in strategy)
    base_dist_tax = sum(y.federal_tax + y.state_tax for y in baseline)
    strat_dist_tax = sum(y.federal_tax + y.state_tax for y in strategy)
    base_irmaa = sum(y.irmaa_surcharge for y in baseline)
    strat_irmaa = sum(y.irmaa_surcharge for y in strategy)

    last_base = baseline[-1]
    last_strat = strategy[-1]
    base_final = last_base.traditional_balance + last_base.roth_balance
    strat_final = last_strat.traditional_balance + last_strat.roth_balance
    base_legacy_tax = calculate_legacy(last_base.traditional_balance, 'traditional', heir_tax_rate).tax
    strat_legacy_tax = calculate_legacy(last_strat.traditional_balance, 'traditional', heir_tax_rate).tax

    base_total_dist = base_dist + base_final
    strat_total_dist = strat_dist + strat_final
    base_costs = base_dist_tax + base_legacy_tax + base_irmaa
    strat_costs = strat_dist_tax + strat_legacy_tax + strat_irmaa
    base_wealth = base_total_dist - base_costs
    strat_wealth = strat_total_dist - strat_costs
    increase = strat_wealth - base_wealth

    return SummaryMetrics(
        distributions=DistributionSummary(
            baseline=base_dist,
            strategy=strat_dist,
            baseline_tax=base_dist_tax,
            strategy_tax=strat_dist_tax,
            baseline_after_tax=base_dist - base_dist_tax,
            strategy_after_tax=0,
        ),
        irmaa=IrmaaSummary(baseline=base_irmaa, strategy=strat_irmaa),
        heirs=HeirSummary(
            baseline_gross=base_final,
            strategy_gross=strat_final,
            baseline_tax=base_legacy_tax,
            strategy_tax=strat_legacy_tax,
            baseline_net=base_final - base_legacy_tax,
            strategy_net=strat_final - strat_legacy_tax,
        ),
        wealth=WealthSummary(
            baseline_total_distributions=base_total_dist,
            strategy_total_distributions=strat_total_dist,
            baseline_total_costs=base_costs,
            strategy_total_costs=strat_costs,
            baseline_lifetime_wealth=base_wealth,
            strategy_lifetime_wealth=strat_wealth,
            increase_amount=increase,
            increase_percent=round_half_up(increase / base_wealth * 100) if base_wealth > 0 else 0,
        ),
    )


class SimulationEngine:
    """Runs the baseline/strategy pair that matches the client's product."""

    def __init__(self, tables: TaxTables):
        self.tables = tables
        self.baseline = BaselineCalculator(tables)
        self.runners = {
            'standard': StrategyCalculator(tables),
            'growth': GrowthCalculator(tables),
        }
        self.guaranteed_income = GuaranteedIncomeCalculator(tables)

    @classmethod
    def for_input(cls, inp: SimulationInput) -> 'SimulationEngine':
        return cls(TaxTables.load(inp.end_year))

    def run(self, inp: SimulationInput) -> SimulationResult:
        if inp.end_year > self.tables.final_year:
            raise ConfigurationMissingError(
                f"Tax tables loaded through {self.tables.final_year}; projection runs to {inp.end_year}")
        category = product_category(inp.product_id)
        logger.info("Simulating %s (%s) from %d to %d", inp.name or 'client', category, inp.start_year, inp.end_year)
        if category == 'guaranteed_income':
            return self._run_guaranteed_income(inp)

        baseline = self.baseline.calculate(inp)
        strategy = self.runners[category].calculate(inp)
        return self._result(inp, baseline, strategy)

    def _result(self, inp: SimulationInput, baseline: List[YearlyResult], strategy: List[YearlyResult],
                **extra) -> SimulationResult:
        return SimulationResult(
            baseline=baseline,
            strategy=strategy,
            break_even_age=calculate_break_even_age(baseline, strategy),
            total_tax_savings=calculate_tax_savings(baseline, strategy),
            heir_benefit=calculate_heir_benefit(baseline, strategy, inp.heir_tax_rate),
            metrics=calculate_summary_metrics(baseline, strategy, inp.heir_tax_rate),
            **extra
        )

    def _run_guaranteed_income(self, inp: SimulationInput) -> SimulationResult:
        strategy = self.guaranteed_income.calculate_strategy(inp)
        baseline = self.guaranteed_income.calculate_baseline(inp)
        return self._result(
            inp,
            baseline.years,
            strategy.years,
            gi_metrics=strategy.metrics,
            gi_year_data=strategy.gi_years,
            gi_baseline_metrics=baseline.metrics,
            gi_baseline_year_data=baseline.gi_years,
            gi_comparison=GuaranteedIncomeCalculator.compare(strategy.metrics, baseline.metrics),
        )


def run_simulation(inp: SimulationInput, tables: Optional[TaxTables] = None) -> SimulationResult:
    """Convenience entry point: load tables for the horizon and run once."""
    engine = SimulationEngine(tables) if tables is not None else SimulationEngine.for_input(inp)
    return engine.run(inp)
