import os
import sys
import pytest
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))
from dataclasses import replace
from calc.baseline_calculator import BaselineCalculator
from calc.engine import (
    SimulationEngine,
    calculate_break_even_age,
    calculate_heir_benefit,
    calculate_legacy,
    run_simulation,
)
from calc.strategy_calculator import StrategyCalculator
from model.errors import ConfigurationMissingError
from tax.TaxTables import TaxTables


def test_end_to_end_single_filer(tables, single_client):
    result = run_simulation(single_client, tables)
    assert len(result.baseline) == len(result.strategy) == 29
    assert [b.year for b in result.baseline] == [s.year for s in result.strategy]
    assert result.break_even_age == calculate_break_even_age(result.baseline, result.strategy)
    assert result.total_tax_savings == sum(y.total_tax for y in result.baseline) - sum(y.total_tax for y in result.strategy)
    assert result.gi_metrics is None
    # Everything converted early, so heirs inherit a tax-free Roth
    assert result.strategy[-1].traditional_balance == 0
    assert result.heir_benefit == calculate_legacy(result.baseline[-1].traditional_balance, 'traditional', 40).tax


def test_summary_metrics(tables, single_client):
    result = run_simulation(single_client, tables)
    m = result.metrics
    assert m.distributions.baseline == sum(y.rmd_amount for y in result.baseline)
    assert m.distributions.strategy == sum(y.conversion_amount + y.rmd_amount for y in result.strategy)
    assert m.irmaa.strategy == sum(y.irmaa_surcharge for y in result.strategy)
    assert m.heirs.strategy_tax == 0
    assert m.wealth.increase_amount == m.wealth.strategy_lifetime_wealth - m.wealth.baseline_lifetime_wealth


def test_runs_are_idempotent(tables, single_client):
    engine = SimulationEngine(tables)
    first = engine.run(single_client)
    second = engine.run(single_client)
    assert first.baseline == second.baseline
    assert first.strategy == second.strategy


def test_irmaa_history_is_per_run(tables, married_client):
    # A strategy run in between must not change what the baseline looks back on
    baseline = BaselineCalculator(tables)
    alone = baseline.calculate(married_client)
    StrategyCalculator(tables).calculate(married_client)
    again = baseline.calculate(married_client)
    assert alone == again


def test_product_dispatch(tables, single_client):
    engine = SimulationEngine(tables)
    growth = engine.run(replace(single_client, product_id='fia'))
    assert growth.strategy[0].surrender_charge_percent == 9
    gi = engine.run(replace(single_client, product_id='athene-ascent-pro-10', gi_conversion_years=3))
    assert gi.gi_metrics is not None
    assert gi.gi_comparison is not None
    assert len(gi.gi_year_data) == len(gi.strategy)


def test_unknown_product_raises(tables, single_client):
    with pytest.raises(ConfigurationMissingError):
        SimulationEngine(tables).run(replace(single_client, product_id='no-such-product'))


def test_tables_must_cover_horizon(single_client):
    engine = SimulationEngine(TaxTables.load(2030))
    with pytest.raises(ConfigurationMissingError):
        engine.run(single_client)


def test_legacy():
    assert calculate_legacy(1000000, 'roth', 40).net == 1000000
    legacy = calculate_legacy(1000000, 'traditional', 40)
    assert legacy.tax == 400000
    assert legacy.net == 600000


def test_heir_benefit_empty():
    assert calculate_heir_benefit([], []) == 0
