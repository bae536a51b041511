from dataclasses import dataclass
from typing import Optional

PHASES = ('conversion', 'purchase', 'deferral', 'income')


@dataclass(frozen=True)
class GIYearData:
    """Annuity-specific state for one year of a guaranteed-income run."""
    year: int
    age: int
    phase: str

    # Conversion phase
    traditional_balance: int = 0
    roth_balance: int = 0
    conversion_amount: int = 0
    conversion_tax: int = 0

    # Purchase / annuity values
    purchase_amount: int = 0
    bonus_amount: int = 0
    account_value: int = 0
    income_base: int = 0
    roll_up_amount: int = 0
    rider_fee: int = 0

    # Income phase
    guaranteed_income_gross: int = 0
    income_tax: int = 0
    guaranteed_income_net: int = 0
    cumulative_income_net: int = 0


@dataclass
class GIMetrics:
    product_id: str
    purchase_age: int
    income_start_age: int
    purchase_amount: int
    bonus_amount: int
    income_base_at_income_age: int
    payout_percent: float
    annual_income_gross: int
    annual_income_net: int
    lifetime_income_gross: int
    lifetime_income_net: int
    total_conversion_tax: int
    total_rider_fees: int
    depletion_age: Optional[int] = None


@dataclass
class GIComparisonMetrics:
    annual_income_advantage: int
    lifetime_income_advantage: int
    tax_free_wealth_created: int
    break_even_years: Optional[float]
    break_even_age: Optional[int]
    percent_improvement: float
