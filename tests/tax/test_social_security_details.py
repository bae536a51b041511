import os
import sys
import pytest
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../../src')))
from tax.SocialSecurityDetails import SocialSecurityDetails
from model.errors import ConfigurationMissingError


@pytest.fixture(scope='module')
def ss():
    return SocialSecurityDetails()


def test_below_lower_threshold_is_untaxed(ss):
    result = ss.taxable_amount(2400000, 1000000, 0, 'single')
    assert result.taxable_amount == 0
    assert result.taxable_percent == 0
    assert result.provisional_income == 2200000


def test_between_thresholds_taxes_half_the_excess(ss):
    result = ss.taxable_amount(2400000, 2000000, 0, 'single')
    assert result.taxable_amount == 350000
    assert result.taxable_percent == 50


def test_above_upper_threshold_caps_at_85_percent(ss):
    result = ss.taxable_amount(2400000, 5000000, 0, 'single')
    assert result.taxable_amount == 2040000
    assert result.taxable_percent == 85


def test_tax_exempt_interest_counts_toward_provisional_income(ss):
    without = ss.taxable_amount(2400000, 1000000, 0, 'single')
    with_interest = ss.taxable_amount(2400000, 1000000, 1000000, 'single')
    assert without.taxable_amount == 0
    assert with_interest.taxable_amount > 0


def test_joint_thresholds_are_higher(ss):
    single = ss.taxable_amount(3000000, 2500000, 0, 'single')
    joint = ss.taxable_amount(3000000, 2500000, 0, 'married_filing_jointly')
    assert joint.taxable_amount < single.taxable_amount


def test_no_benefits_nothing_taxable(ss):
    assert ss.taxable_amount(0, 10000000, 0, 'single').taxable_amount == 0


def test_unknown_filing_status_raises(ss):
    with pytest.raises(ConfigurationMissingError):
        ss.taxable_amount(100, 100, 0, 'widow')


def test_annual_benefit_applies_cola(ss):
    assert ss.annual_benefit(2400000, 67, 66) == 0
    assert ss.annual_benefit(2400000, 67, 67) == 2400000
    assert ss.annual_benefit(2400000, 67, 68) == 2448000
    assert ss.annual_benefit(2400000, 67, 68, cola_rate=0) == 2400000
