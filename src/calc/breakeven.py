"""Break-even analysis over a baseline/strategy pair of year arrays."""

from typing import List, Optional

from model.Analysis import BreakevenAnalysis, CrossoverPoint
from model.YearlyResult import YearlyResult

STRATEGY_AHEAD = 'strategy_ahead'
BASELINE_AHEAD = 'baseline_ahead'


def find_crossovers(baseline: List[YearlyResult], strategy: List[YearlyResult]) -> List[CrossoverPoint]:
    """Every year the lead in net worth changes hands.

    The comparison starts with the baseline ahead, so a strategy that leads in
    its first year records a crossover in that year.
    """
    crossovers = []
    last = BASELINE_AHEAD
    for b, s in zip(baseline, strategy):
        difference = s.net_worth - b.net_worth
        direction = STRATEGY_AHEAD if difference > 0 else BASELINE_AHEAD
        if direction != last:
            crossovers.append(CrossoverPoint(year=s.year, age=s.age, direction=direction, difference=difference))
        last = direction
    return crossovers


def _sustained(crossovers: List[CrossoverPoint]) -> Optional[CrossoverPoint]:
    for i, point in enumerate(crossovers):
        if point.direction != STRATEGY_AHEAD:
            continue
        if not any(later.direction == BASELINE_AHEAD for later in crossovers[i + 1:]):
            return point
    return None


def analyze_break_even(baseline: List[YearlyResult], strategy: List[YearlyResult]) -> BreakevenAnalysis:
    """Simple break-even is the first time the strategy pulls ahead; sustained
    break-even is the first time it pulls ahead and stays ahead."""
    crossovers = find_crossovers(baseline, strategy)
    simple = next((c for c in crossovers if c.direction == STRATEGY_AHEAD), None)
    sustained = _sustained(crossovers)
    net_benefit = 0
    if baseline and strategy:
        net_benefit = strategy[-1].net_worth - baseline[-1].net_worth

    return BreakevenAnalysis(
        simple_break_even_age=simple.age if simple else None,
        simple_break_even_year=simple.year if simple else None,
        sustained_break_even_age=sustained.age if sustained else None,
        sustained_break_even_year=sustained.year if sustained else None,
        crossovers=crossovers,
        net_benefit=net_benefit,
    )
