import os
import sys
import pytest
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))
from calc.optimizer import ConversionOptimizer


@pytest.fixture
def optimizer(tables):
    return ConversionOptimizer(tables.federal)


def test_zero_balance_converts_nothing(optimizer):
    assert optimizer.optimal_conversion(0, 1000000, 24, 'single', 2026) == 0


def test_fills_target_bracket(optimizer):
    # 24% bracket tops out at $197,000 for a single filer in 2026
    assert optimizer.optimal_conversion(50000000, 5000000, 24, 'single', 2026) == 14700000


def test_never_exceeds_balance(optimizer):
    assert optimizer.optimal_conversion(10000000, 5000000, 24, 'single', 2026) == 10000000


def test_no_headroom_above_ceiling(optimizer):
    assert optimizer.optimal_conversion(10000000, 20000000, 24, 'single', 2026) == 0


def test_unknown_target_rate_converts_nothing(optimizer):
    assert optimizer.optimal_conversion(10000000, 0, 25, 'single', 2026) == 0


def test_amount_bounded_for_many_inputs(optimizer):
    for balance in (0, 100, 5000000, 90000000):
        for existing in (0, 1475000, 10300000, 30000000):
            amount = optimizer.optimal_conversion(balance, existing, 22, 'married_filing_jointly', 2026)
            assert 0 <= amount <= balance
            assert existing + amount <= max(existing, 20600000)


def test_conversion_tax_of_nothing_is_zero(optimizer):
    assert optimizer.conversion_federal_tax(0, 5000000, 'single', 2026) == 0


def test_conversion_tax_inside_one_bracket(optimizer):
    assert optimizer.conversion_federal_tax(1000000, 5000000, 'single', 2026) == 220000


def test_conversion_tax_spanning_brackets(optimizer):
    # $3,000 at 22% and $7,000 at 24%
    assert optimizer.conversion_federal_tax(1000000, 10000000, 'single', 2026) == 66000 + 168000


def test_conversion_tax_is_monotone(optimizer):
    taxes = [optimizer.conversion_federal_tax(a, 3000000, 'single', 2026) for a in range(0, 40000000, 500000)]
    assert taxes == sorted(taxes)


def test_gross_down():
    assert ConversionOptimizer.gross_down(1000000, 24, 0.0495, 50000000) == 710500
    assert ConversionOptimizer.gross_down(1000000, 24, 0.0, 500000) == 500000
    assert ConversionOptimizer.gross_down(0, 24, 0.05, 500000) == 0
