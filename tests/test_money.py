import os
import sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))
from calc.inflation import adjust_for_inflation, deflate, inflation_factor
from model.money import (
    cents_to_dollars,
    dollars_to_cents,
    format_axis_value,
    format_currency,
    format_whole_dollars,
    round_half_up,
)


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(2.4999) == 2
    assert round_half_up(-2.5) == -2
    assert round_half_up(0) == 0


def test_cent_conversions():
    assert cents_to_dollars(12345) == 123.45
    assert dollars_to_cents(123.45) == 12345
    assert dollars_to_cents(0.5) == 50


def test_format_currency():
    assert format_currency(123456) == '$1,234.56'
    assert format_currency(-123456) == '-$1,234.56'
    assert format_currency(0) == '$0.00'


def test_format_whole_dollars():
    assert format_whole_dollars(123456) == '$1,235'
    assert format_whole_dollars(-5000000) == '-$50,000'


def test_format_axis_value():
    assert format_axis_value(150000000) == '$1.5M'
    assert format_axis_value(35000000) == '$350K'
    assert format_axis_value(90000) == '$900'


def test_inflation():
    assert inflation_factor(0) == 1
    assert adjust_for_inflation(100000, 1, 2.5) == 102500
    assert adjust_for_inflation(100000, 10, 0) == 100000
    assert deflate(102500, 1, 2.5) == 100000
