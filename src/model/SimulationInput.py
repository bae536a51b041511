from dataclasses import dataclass, field
from typing import Optional, Tuple

FILING_STATUSES = (
    'single',
    'married_filing_jointly',
    'married_filing_separately',
    'head_of_household',
)

RMD_TREATMENTS = ('spent', 'reinvested', 'cash')

CONVERSION_TYPES = ('optimized_amount', 'full_conversion', 'fixed_amount', 'no_conversion')


@dataclass(frozen=True)
class NonSsiIncome:
    """Explicit non-Social-Security income for a single calendar year (cents)."""
    year: int
    gross_taxable: int
    tax_exempt: int = 0


@dataclass(frozen=True)
class SimulationInput:
    """Fully resolved, immutable client snapshot consumed by every runner.

    Monetary fields are integer cents. Rates are whole percentages (``24`` is
    24%) except ``tax_multiplier`` which is a plain factor.
    """

    filing_status: str
    age: int
    birth_year: int
    start_year: int
    projection_years: int
    end_age: int
    state: str = 'TX'
    state_tax_rate: Optional[float] = None

    spouse_age: Optional[int] = None
    spouse_birth_year: Optional[int] = None

    # Accounts
    traditional_balance: int = 0
    roth_balance: int = 0
    taxable_balance: int = 0

    # Growth
    bonus_percent: float = 10.0
    growth_rate: float = 7.0
    baseline_growth_rate: float = 7.0
    inflation_rate: float = 2.5

    # Social Security
    ss_start_age: int = 67
    ss_annual_amount: int = 0
    spouse_ss_start_age: int = 67
    spouse_ss_annual_amount: int = 0
    ss_cola_rate: float = 2.0

    # Other income
    other_income: int = 0
    pension_income: int = 0
    tax_exempt_income: int = 0
    non_ssi_income: Tuple[NonSsiIncome, ...] = field(default_factory=tuple)
    income_base_year: Optional[int] = None

    # Conversion election
    strategy: str = 'moderate'
    target_bracket: Optional[int] = None
    strict_irmaa: Optional[bool] = None
    conversion_type: str = 'optimized_amount'
    fixed_conversion_amount: int = 0
    tax_payment_source: str = 'from_taxable'
    years_to_defer_conversion: int = 0
    conversion_end_age: Optional[int] = None

    # Outcome settings
    heir_tax_rate: float = 40.0
    rmd_treatment: str = 'reinvested'
    include_niit: bool = True
    include_aca: bool = False
    household_size: int = 1
    tax_multiplier: float = 1.0

    # Product
    product_id: Optional[str] = None
    anniversary_bonus_percent: Optional[float] = None
    anniversary_bonus_years: Optional[int] = None
    surrender_schedule: Optional[Tuple[float, ...]] = None
    payout_type: str = 'individual'
    payout_option: str = 'level'
    roll_up_option: Optional[str] = None
    income_start_age: int = 65
    gi_conversion_years: int = 5
    gi_conversion_bracket: int = 24

    name: str = ''
    spouse_name: str = ''

    @property
    def end_year(self) -> int:
        return self.start_year + self.projection_years

    @property
    def years(self) -> range:
        return range(self.start_year, self.end_year + 1)

    @property
    def is_joint(self) -> bool:
        return self.filing_status == 'married_filing_jointly'

    def age_in(self, year: int) -> int:
        return self.age + (year - self.start_year)

    def spouse_age_in(self, year: int) -> Optional[int]:
        if self.spouse_age is None:
            return None
        return self.spouse_age + (year - self.start_year)

    def non_ssi_for(self, year: int) -> Optional[NonSsiIncome]:
        for entry in self.non_ssi_income:
            if entry.year == year:
                return entry
        return None
