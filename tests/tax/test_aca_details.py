import os
import sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../../src')))
from tax.AcaDetails import AcaDetails


def test_poverty_level():
    aca = AcaDetails()
    assert aca.poverty_level(1) == 1558000
    assert aca.poverty_level(2) == 2106000
    assert aca.poverty_level(1, 'AK') == 1946000
    assert aca.poverty_level(0) == 1558000


def test_cliff_amount():
    assert AcaDetails().cliff_amount(1) == 6232000


def test_crossing_the_cliff():
    aca = AcaDetails()
    result = aca.cliff_impact(7000000, 1, 'TX', 60)
    assert result.applies
    assert result.crosses_cliff
    assert result.estimated_subsidy_loss == 1200000

    under = aca.cliff_impact(6000000, 1, 'TX', 60)
    assert under.applies
    assert not under.crosses_cliff
    assert under.estimated_subsidy_loss == 0


def test_medicare_age_is_outside_aca():
    result = AcaDetails().cliff_impact(9000000, 1, 'TX', 65)
    assert not result.applies
    assert not result.crosses_cliff
    assert result.estimated_subsidy_loss == 0
