import os
import sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))
from dataclasses import replace
from calc.growth_calculator import GrowthCalculator
from model.money import round_half_up


def test_surrender_schedule_reported(tables, single_client):
    inp = replace(single_client, product_id='equitrust-marketedge-bonus', conversion_type='no_conversion')
    rows = GrowthCalculator(tables).calculate(inp)
    assert [r.surrender_charge_percent for r in rows[:11]] == [10, 9, 8, 7, 6, 5, 4, 3, 2, 1, 0]
    for row in rows:
        expected = row.traditional_balance - round_half_up(row.traditional_balance * row.surrender_charge_percent / 100)
        assert row.surrender_value == expected


def test_client_schedule_overrides_product(tables, single_client):
    inp = replace(single_client, product_id='fia', surrender_schedule=(5, 5))
    rows = GrowthCalculator(tables).calculate(inp)
    assert [r.surrender_charge_percent for r in rows[:3]] == [5, 5, 0]


def test_anniversary_bonus_first_three_years(tables, single_client):
    inp = replace(single_client, product_id='fia', conversion_type='no_conversion', anniversary_bonus_percent=5)
    rows = GrowthCalculator(tables).calculate(inp)
    # 275,000 grown 7% then credited 5%
    assert rows[0].traditional_balance == 30896250
    for prev, row in zip(rows[:2], rows[1:3]):
        grown = prev.traditional_balance + round_half_up(prev.traditional_balance * 0.07)
        assert row.traditional_balance == grown + round_half_up(grown * 5 / 100)
    prev, row = rows[2], rows[3]
    assert row.traditional_balance == prev.traditional_balance + round_half_up(prev.traditional_balance * 0.07)


def test_no_anniversary_bonus_by_default(tables, single_client):
    calc = GrowthCalculator(tables)
    inp = replace(single_client, product_id='fia')
    assert calc.anniversary_terms(inp) == (0, 0)
    assert calc.anniversary_credit(inp, 1, 10000000) == 0
