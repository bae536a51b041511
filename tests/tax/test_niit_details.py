import os
import sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../../src')))
from tax.NiitDetails import NiitDetails


def test_below_threshold_no_tax():
    result = NiitDetails().calculate(15000000, 1000000, 'single')
    assert not result.applies
    assert result.tax_amount == 0
    assert result.threshold_excess == 0


def test_taxes_lesser_of_nii_and_excess():
    niit = NiitDetails()
    result = niit.calculate(25000000, 1000000, 'single')
    assert result.applies
    assert result.tax_amount == 38000
    assert result.threshold_excess == 5000000

    # Excess smaller than investment income
    result = niit.calculate(20100000, 1000000, 'single')
    assert result.tax_amount == 3800


def test_joint_threshold():
    result = NiitDetails().calculate(25000000, 1000000, 'married_filing_jointly')
    assert not result.applies
