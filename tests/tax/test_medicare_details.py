import math
import os
import sys
import pytest
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../../src')))
from tax.MedicareDetails import MedicareDetails
from model.IncomeHistory import IncomeHistory
from model.errors import ConfigurationMissingError


@pytest.fixture(scope='module')
def medicare():
    return MedicareDetails(2030)


def test_tier_zero_has_no_surcharge(medicare):
    result = medicare.irmaa(5000000, 'single', 2026)
    assert result.tier == 0
    assert result.annual_surcharge == 0


def test_tiers_are_cliffs(medicare):
    below = medicare.irmaa(10599999, 'single', 2026)
    at = medicare.irmaa(10600000, 'single', 2026)
    assert below.tier == 0
    assert at.tier == 1
    assert at.annual_surcharge == 104880


def test_joint_thresholds(medicare):
    assert medicare.irmaa(10600000, 'married_filing_jointly', 2026).tier == 0
    assert medicare.irmaa(21200000, 'married_filing_jointly', 2026).tier == 1


def test_surcharge_monotone_in_magi(medicare):
    surcharges = [medicare.irmaa(m, 'single', 2026).annual_surcharge
                  for m in range(0, 60000000, 1000000)]
    assert surcharges == sorted(surcharges)


def test_headroom(medicare):
    assert medicare.headroom(10000000, 'single', 2026) == 600000
    assert medicare.headroom(60000000, 'single', 2026) == math.inf


def test_lookback_uses_income_two_years_earlier(medicare):
    history = IncomeHistory()
    history.record(2026, 20000000)
    history.record(2028, 1000000)
    result = medicare.lookback_surcharge(history, 2028, 'single', 67)
    assert result.tier == 4
    assert result.annual_surcharge == 579000


def test_lookback_before_medicare_age(medicare):
    history = IncomeHistory()
    history.record(2026, 20000000)
    assert medicare.lookback_surcharge(history, 2028, 'single', 64).annual_surcharge == 0


def test_lookback_without_history(medicare):
    result = medicare.lookback_surcharge(IncomeHistory(), 2027, 'single', 70)
    assert result.tier == 0
    assert result.annual_surcharge == 0


def test_tiers_projected_to_final_year(medicare):
    assert len(medicare.get_tiers(2030)) == len(medicare.get_tiers(2026))
    with pytest.raises(ConfigurationMissingError):
        medicare.get_tiers(2031)
