"""Result records returned by the tax-law modules in ``tax``."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class StateResult:
    totalStateTax: int
    marginalRate: float
    effectiveRate: float = 0.0


@dataclass
class RmdResult:
    rmd_required: bool
    rmd_amount: int
    distribution_period: Optional[float] = None


@dataclass
class SocialSecurityTaxResult:
    taxable_amount: int
    taxable_percent: int
    provisional_income: int


@dataclass
class NiitResult:
    applies: bool
    tax_amount: int
    threshold_excess: int


@dataclass
class IrmaaResult:
    tier: int
    monthly_part_b: int
    monthly_part_d: int
    annual_surcharge: int


@dataclass
class AcaResult:
    applies: bool
    crosses_cliff: bool
    cliff_amount: int
    percent_of_fpl: float
    estimated_subsidy_loss: int
