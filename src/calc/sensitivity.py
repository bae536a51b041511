"""Sensitivity analysis: re-run the full simulation under fixed
growth-rate / tax-multiplier combinations and report the spread of outcomes."""

import logging
from dataclasses import replace
from typing import List

from calc.breakeven import analyze_break_even
from calc.engine import SimulationEngine
from model.Analysis import SensitivityOutcome, SensitivityResult, SensitivityScenario, SensitivitySummary
from model.SimulationInput import SimulationInput
from model.money import format_whole_dollars

logger = logging.getLogger(__name__)

SCENARIOS = (
    SensitivityScenario('Base Case', 6, 1.0),
    SensitivityScenario('Low Growth', 4, 1.0),
    SensitivityScenario('High Growth', 8, 1.0),
    SensitivityScenario('Higher Taxes', 6, 1.2),
    SensitivityScenario('Lower Taxes', 6, 0.8),
    SensitivityScenario('Pessimistic', 4, 1.2),
    SensitivityScenario('Optimistic', 8, 0.8),
)


def scenario_input(inp: SimulationInput, scenario: SensitivityScenario) -> SimulationInput:
    return replace(
        inp,
        growth_rate=scenario.growth_rate,
        baseline_growth_rate=scenario.growth_rate,
        tax_multiplier=scenario.tax_multiplier,
    )


def run_sensitivity_analysis(engine: SimulationEngine, inp: SimulationInput,
                             scenarios=SCENARIOS) -> SensitivityResult:
    outcomes: List[SensitivityOutcome] = []
    for scenario in scenarios:
        result = engine.run(scenario_input(inp, scenario))
        breakeven = analyze_break_even(result.baseline, result.strategy)
        outcomes.append(SensitivityOutcome(
            scenario=scenario,
            ending_wealth=result.strategy[-1].net_worth if result.strategy else 0,
            break_even_age=breakeven.simple_break_even_age,
            total_tax_savings=result.total_tax_savings,
        ))
        logger.debug("Sensitivity %s: wealth %d, break-even %s",
                     scenario.name, outcomes[-1].ending_wealth, outcomes[-1].break_even_age)

    ages = [o.break_even_age for o in outcomes if o.break_even_age is not None]
    wealth = [o.ending_wealth for o in outcomes]
    return SensitivityResult(
        outcomes=outcomes,
        break_even_min=min(ages) if ages else None,
        break_even_max=max(ages) if ages else None,
        wealth_min=min(wealth) if wealth else 0,
        wealth_max=max(wealth) if wealth else 0,
    )


def format_sensitivity_summary(result: SensitivityResult) -> SensitivitySummary:
    ranked = sorted(result.outcomes, key=lambda o: o.ending_wealth, reverse=True)

    if result.break_even_min is None:
        break_even_range = 'Never breaks even in any scenario'
    elif result.break_even_min == result.break_even_max:
        break_even_range = f"Age {result.break_even_min}"
    else:
        break_even_range = f"Age {result.break_even_min} - {result.break_even_max}"

    return SensitivitySummary(
        best_case=ranked[0].scenario.name if ranked else '',
        worst_case=ranked[-1].scenario.name if ranked else '',
        break_even_range=break_even_range,
        wealth_range=f"{format_whole_dollars(result.wealth_min)} - {format_whole_dollars(result.wealth_max)}",
    )
