"""Run every conversion strategy for one client and pick the best."""

import logging
from dataclasses import replace
from typing import Dict

from calc.engine import SimulationEngine
from calc.products import product_category
from calc.strategies import all_strategies, strategy_priority
from model.Analysis import StrategyComparison, StrategyMetrics
from model.SimulationInput import SimulationInput
from model.YearlyResult import SimulationResult
from model.errors import InvalidInputError

logger = logging.getLogger(__name__)


def strategy_metrics(key: str, result: SimulationResult) -> StrategyMetrics:
    return StrategyMetrics(
        strategy=key,
        ending_wealth=result.strategy[-1].net_worth if result.strategy else 0,
        tax_savings=result.total_tax_savings,
        break_even_age=result.break_even_age,
        total_irmaa=sum(y.irmaa_surcharge for y in result.strategy),
        heir_benefit=result.heir_benefit,
        total_conversions=sum(y.conversion_amount for y in result.strategy),
    )


def compare_strategies(engine: SimulationEngine, inp: SimulationInput) -> StrategyComparison:
    """Simulate each configured strategy with the client's other inputs held fixed.

    The best strategy has the highest ending net worth; ties go to the lower
    lifetime IRMAA, then to the earlier strategy in the preference order.

    Raises:
        InvalidInputError: for guaranteed-income products, whose conversion
            schedule is not driven by the strategy table.
    """
    if product_category(inp.product_id) == 'guaranteed_income':
        raise InvalidInputError("Strategy comparison does not apply to guaranteed-income products")

    priority = strategy_priority()
    results: Dict[str, SimulationResult] = {}
    metrics: Dict[str, StrategyMetrics] = {}
    for key in all_strategies():
        variant = replace(
            inp,
            strategy=key,
            target_bracket=None,
            strict_irmaa=None,
            conversion_type='optimized_amount',
        )
        results[key] = engine.run(variant)
        metrics[key] = strategy_metrics(key, results[key])

    def rank(key):
        m = metrics[key]
        order = priority.index(key) if key in priority else len(priority)
        return (-m.ending_wealth, m.total_irmaa, order)

    best = min(metrics, key=rank)
    logger.info("Best strategy: %s (ending wealth %d)", best, metrics[best].ending_wealth)
    return StrategyComparison(results=results, metrics=metrics, best_strategy=best)
