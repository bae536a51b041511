"""Tests for the console renderers."""

import os
import sys
from dataclasses import replace

import pytest

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', 'src'))

from calc.breakeven import analyze_break_even
from calc.engine import SimulationEngine
from calc.multi_strategy import compare_strategies
from calc.widow import analyze_widow_penalty
from model.Analysis import SensitivityOutcome, SensitivityResult, SensitivityScenario
from model.field_metadata import FIELD_METADATA, get_field_info, get_short_name, wrap_header
from model.YearlyResult import YearlyResult
from render.renderers import (
    BreakevenRenderer,
    CustomRenderer,
    GuaranteedIncomeRenderer,
    ProjectionRenderer,
    RENDERER_REGISTRY,
    SensitivityRenderer,
    StrategiesRenderer,
    SummaryRenderer,
    WidowRenderer,
    dollars,
    parse_year_range,
)


@pytest.fixture
def result(tables, single_client):
    return SimulationEngine(tables).run(single_client)


def test_registry_modes():
    assert set(RENDERER_REGISTRY) == {'projection', 'summary', 'gi', 'strategies', 'sensitivity', 'breakeven', 'widow'}


def test_every_result_field_has_metadata():
    assert set(FIELD_METADATA) == set(YearlyResult.__dataclass_fields__)


def test_field_kinds():
    assert get_field_info('total_tax').summable
    assert not get_field_info('net_worth').summable
    assert not get_field_info('age').summable
    assert get_short_name('not_a_field') == 'not_a_field'
    assert get_field_info('not_a_field') is None


def test_wrap_header():
    assert wrap_header('Taxable Income', 20) == ['Taxable Income']
    assert wrap_header('Taxable Income', 8) == ['Taxable', 'Income']


class TestParseYearRange:
    rows = [YearlyResult(year=y, age=60 + y - 2026) for y in range(2026, 2041)]

    def test_full_range(self):
        assert parse_year_range('2028-2032', self.rows) == (2028, 2032)

    def test_open_end(self):
        assert parse_year_range('2030-', self.rows) == (2030, 2040)

    def test_open_start(self):
        assert parse_year_range('-2030', self.rows) == (2026, 2030)

    def test_single_year(self):
        assert parse_year_range('2031', self.rows) == (2031, 2031)


def test_dollars():
    assert dollars(123456, 10) == '    $1,235'
    assert dollars(None, 5) == '  N/A'


def test_projection_respects_year_range(result, capsys):
    ProjectionRenderer(2028, 2030).render(result)
    out = capsys.readouterr().out
    assert 'PROJECTION (STRATEGY)' in out
    assert '  2028' in out
    assert '  2030' in out
    assert '  2027 ' not in out
    assert '  2031 ' not in out
    assert 'TOTAL' in out


def test_custom_renderer_totals_only_flows(result, capsys):
    CustomRenderer('Taxes', ['federal_tax', 'net_worth'], 2026, 2026, scenario='baseline').render(result)
    out = capsys.readouterr().out
    total_line = next(line for line in out.splitlines() if line.strip().startswith('TOTAL'))
    assert '$1,534' in total_line
    assert total_line.count('$') == 1


def test_summary(result, capsys):
    SummaryRenderer().render(result)
    out = capsys.readouterr().out
    assert 'CONVERSION STRATEGY SUMMARY' in out
    assert 'Break-even age' in out
    assert 'Lifetime wealth' in out


def test_gi_renderer_without_gi_product(result, capsys):
    GuaranteedIncomeRenderer().render(result)
    assert 'not a guaranteed-income annuity' in capsys.readouterr().out


def test_gi_renderer(tables, single_client, capsys):
    gi = SimulationEngine(tables).run(replace(single_client, product_id='athene-ascent-pro-10', gi_conversion_years=3,
                                                income_start_age=70))
    GuaranteedIncomeRenderer().render(gi)
    out = capsys.readouterr().out
    assert 'GUARANTEED INCOME PROJECTION' in out
    for phase in ('conversion', 'purchase', 'deferral', 'income'):
        assert phase in out


def test_strategies_marks_best(tables, single_client, capsys):
    comparison = compare_strategies(SimulationEngine(tables), single_client)
    StrategiesRenderer().render(comparison)
    out = capsys.readouterr().out
    assert f"*{comparison.best_strategy}" in out
    assert f"Best strategy: {comparison.best_strategy}" in out


def test_sensitivity(capsys):
    outcomes = [SensitivityOutcome(SensitivityScenario('Base Case', 6, 1.0), 100000, 70, 5000)]
    SensitivityRenderer().render(SensitivityResult(outcomes, 70, 70, 100000, 100000))
    out = capsys.readouterr().out
    assert 'Base Case' in out
    assert 'Age 70' in out


def test_breakeven(result, capsys):
    BreakevenRenderer().render(analyze_break_even(result.baseline, result.strategy))
    out = capsys.readouterr().out
    assert 'Simple break-even age' in out
    assert 'Sustained break-even age' in out


def test_widow(tables, married_client, capsys):
    WidowRenderer().render(analyze_widow_penalty(tables, married_client, death_year=2030))
    out = capsys.readouterr().out
    assert 'SPOUSE DIES 2030' in out
    assert 'Total additional tax' in out
