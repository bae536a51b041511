import os
import sys
import pytest
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))
from dataclasses import replace
from calc.engine import SimulationEngine
from calc.multi_strategy import compare_strategies
from calc.strategies import all_strategies
from model.errors import InvalidInputError


def test_compares_every_strategy(tables, married_client):
    comparison = compare_strategies(SimulationEngine(tables), married_client)
    assert set(comparison.metrics) == set(all_strategies())
    best = comparison.metrics[comparison.best_strategy]
    assert best.ending_wealth == max(m.ending_wealth for m in comparison.metrics.values())
    for key, m in comparison.metrics.items():
        assert m.strategy == key
        assert m.ending_wealth == comparison.results[key].strategy[-1].net_worth
        assert m.total_conversions == sum(y.conversion_amount for y in comparison.results[key].strategy)


def test_strategy_table_overrides_client_election(tables, married_client):
    comparison = compare_strategies(SimulationEngine(tables), replace(married_client, conversion_type='no_conversion'))
    assert comparison.metrics['aggressive'].total_conversions > 0
    # Wider bracket converts faster
    assert (comparison.results['aggressive'].strategy[0].conversion_amount
            >= comparison.results['conservative'].strategy[0].conversion_amount)


def test_guaranteed_income_products_rejected(tables, single_client):
    with pytest.raises(InvalidInputError):
        compare_strategies(SimulationEngine(tables), replace(single_client, product_id='athene-ascent-pro-10'))
