"""Pytest configuration for the roth-conversion-planner test suite."""

import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

from model.SimulationInput import SimulationInput
from tax.TaxTables import TaxTables

# Configure pytest-asyncio so the MCP server tests can run coroutine tests
pytest_plugins = ('pytest_asyncio',)

START_YEAR = 2026


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "asyncio: mark test as an async test"
    )


@pytest.fixture(scope="session")
def tables():
    """Tax tables loaded once through a horizon long enough for every test client."""
    return TaxTables.load(START_YEAR + 50)


@pytest.fixture
def single_client():
    """62-year-old single Texan with a $250,000 IRA and $50,000 taxable account."""
    return SimulationInput(
        filing_status='single',
        age=62,
        birth_year=START_YEAR - 62,
        start_year=START_YEAR,
        projection_years=28,
        end_age=90,
        state='TX',
        traditional_balance=25000000,
        taxable_balance=5000000,
        bonus_percent=10,
        growth_rate=7,
        baseline_growth_rate=7,
        ss_start_age=67,
        ss_annual_amount=2400000,
        other_income=3000000,
        income_base_year=START_YEAR,
        strategy='moderate',
        target_bracket=24,
        conversion_end_age=90,
    )


@pytest.fixture
def married_client():
    """Married couple, 66 and 64, in Illinois with a $600,000 IRA."""
    return SimulationInput(
        filing_status='married_filing_jointly',
        age=66,
        birth_year=START_YEAR - 66,
        start_year=START_YEAR,
        projection_years=24,
        end_age=90,
        state='IL',
        spouse_age=64,
        spouse_birth_year=START_YEAR - 64,
        traditional_balance=60000000,
        taxable_balance=10000000,
        bonus_percent=0,
        growth_rate=6,
        baseline_growth_rate=6,
        ss_start_age=67,
        ss_annual_amount=3000000,
        spouse_ss_start_age=67,
        spouse_ss_annual_amount=2000000,
        other_income=2000000,
        income_base_year=START_YEAR,
        household_size=2,
        strategy='moderate',
        target_bracket=24,
        conversion_end_age=90,
    )
