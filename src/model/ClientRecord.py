"""Client record as captured by the advisor forms, and its normalization.

The record is flat and carries both the current field names and the legacy
aliases older records were saved with. ``to_simulation_input`` resolves every
alias and default once so the engine never sees an optional-fallback chain.
"""

import hashlib
import json
from datetime import date
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from calc.products import growth_products
from model.errors import InvalidInputError
from model.SimulationInput import NonSsiIncome, SimulationInput

FilingStatus = Literal['single', 'married_filing_jointly', 'married_filing_separately', 'head_of_household']

DEFAULT_OTHER_INCOME = 500000
DEFAULT_HEIR_TAX_RATE = 40
DEFAULT_PROJECTION_YEARS = 30

# Fields that change the simulation output. Display-only fields are excluded
# so renaming a client does not invalidate a cached projection.
HASHED_FIELDS = (
    'filing_status', 'age', 'spouse_age', 'date_of_birth', 'spouse_dob', 'state', 'state_tax_rate',
    'qualified_account_value', 'traditional_ira', 'roth_ira', 'taxable_accounts',
    'bonus_percent', 'rate_of_return', 'growth_rate', 'baseline_comparison_rate', 'inflation_rate',
    'anniversary_bonus_percent', 'anniversary_bonus_years',
    'ssi_payout_age', 'ss_start_age', 'ssi_annual_amount', 'ss_self',
    'spouse_ssi_payout_age', 'spouse_ssi_annual_amount', 'ss_spouse',
    'pension', 'other_income', 'gross_taxable_non_ssi', 'tax_exempt_non_ssi', 'non_ssi_income',
    'strategy', 'constraint_type', 'max_tax_rate', 'tax_payment_source', 'conversion_type',
    'fixed_conversion_amount', 'years_to_defer_conversion', 'start_age', 'end_age', 'projection_years',
    'heir_tax_rate', 'heir_bracket', 'rmd_treatment', 'include_niit', 'include_aca', 'household_size',
    'blueprint_type', 'surrender_schedule', 'payout_type', 'payout_option', 'income_start_age',
    'roll_up_option', 'gi_conversion_years', 'gi_conversion_bracket',
)


class NonSsiIncomeEntry(BaseModel):
    year: int
    age: Optional[int] = None
    gross_taxable: int = Field(ge=0, default=0)
    tax_exempt: int = Field(ge=0, default=0)


class ClientRecord(BaseModel):
    """Validated client record. Money in cents, rates as whole percentages."""

    model_config = ConfigDict(extra='ignore')

    filing_status: FilingStatus
    name: str = ''
    age: Optional[int] = Field(default=None, ge=18, le=100)
    date_of_birth: Optional[date] = None
    spouse_name: str = ''
    spouse_age: Optional[int] = Field(default=None, ge=18, le=100)
    spouse_dob: Optional[date] = None
    state: str = Field(default='TX', min_length=2, max_length=2)
    state_tax_rate: Optional[float] = Field(default=None, ge=0, le=20)

    # Accounts
    qualified_account_value: Optional[int] = Field(default=None, ge=0)
    traditional_ira: Optional[int] = Field(default=None, ge=0)
    roth_ira: int = Field(default=0, ge=0)
    taxable_accounts: int = Field(default=0, ge=0)

    # Product
    blueprint_type: Optional[str] = None
    bonus_percent: Optional[float] = Field(default=None, ge=0, le=100)
    rate_of_return: Optional[float] = Field(default=None, ge=0, le=30)
    growth_rate: Optional[float] = Field(default=None, ge=0, le=30)
    baseline_comparison_rate: Optional[float] = Field(default=None, ge=0, le=30)
    anniversary_bonus_percent: Optional[float] = Field(default=None, ge=0, le=100)
    anniversary_bonus_years: Optional[int] = Field(default=None, ge=0, le=10)
    surrender_schedule: Optional[List[float]] = None
    inflation_rate: float = Field(default=2.5, ge=0, le=20)

    # Social Security
    ssi_payout_age: Optional[int] = Field(default=None, ge=62, le=70)
    ss_start_age: Optional[int] = Field(default=None, ge=62, le=70)
    ssi_annual_amount: Optional[int] = Field(default=None, ge=0)
    ss_self: Optional[int] = Field(default=None, ge=0)
    spouse_ssi_payout_age: Optional[int] = Field(default=None, ge=62, le=70)
    spouse_ssi_annual_amount: Optional[int] = Field(default=None, ge=0)
    ss_spouse: Optional[int] = Field(default=None, ge=0)

    # Other income
    pension: int = Field(default=0, ge=0)
    other_income: Optional[int] = Field(default=None, ge=0)
    gross_taxable_non_ssi: Optional[int] = Field(default=None, ge=0)
    tax_exempt_non_ssi: int = Field(default=0, ge=0)
    non_ssi_income: List[NonSsiIncomeEntry] = Field(default_factory=list)

    # Conversion election
    strategy: Literal['conservative', 'moderate', 'aggressive', 'irmaa_safe'] = 'moderate'
    constraint_type: Literal['bracket_ceiling', 'irmaa_threshold', 'fixed_amount', 'none'] = 'bracket_ceiling'
    max_tax_rate: Optional[int] = Field(default=None, ge=10, le=37)
    tax_payment_source: Literal['from_ira', 'from_taxable'] = 'from_taxable'
    conversion_type: Literal['optimized_amount', 'full_conversion', 'fixed_amount', 'no_conversion'] = 'optimized_amount'
    fixed_conversion_amount: int = Field(default=0, ge=0)
    years_to_defer_conversion: int = Field(default=0, ge=0, le=40)
    start_age: Optional[int] = Field(default=None, ge=18, le=120)
    end_age: Optional[int] = Field(default=None, ge=55, le=120)
    projection_years: Optional[int] = Field(default=None, ge=1, le=80)

    # Outcome settings
    heir_tax_rate: Optional[float] = Field(default=None, ge=0, le=100)
    heir_bracket: Optional[str] = None
    rmd_treatment: Literal['spent', 'reinvested', 'cash'] = 'reinvested'
    include_niit: bool = True
    include_aca: bool = False
    household_size: Optional[int] = Field(default=None, ge=1, le=12)

    # Guaranteed income
    payout_type: Literal['individual', 'joint'] = 'individual'
    payout_option: Literal['level', 'increasing'] = 'level'
    roll_up_option: Optional[Literal['simple', 'compound']] = None
    income_start_age: int = Field(default=65, ge=55, le=80)
    gi_conversion_years: int = Field(default=5, ge=1, le=15)
    gi_conversion_bracket: int = Field(default=24, ge=10, le=37)

    @model_validator(mode='after')
    def _check_ages(self):
        if self.age is None and self.date_of_birth is None:
            raise ValueError('either age or date_of_birth is required')
        if self.age is not None and self.end_age is not None and self.end_age <= self.age:
            raise ValueError(f'end_age ({self.end_age}) must be greater than age ({self.age})')
        return self

    @classmethod
    def from_dict(cls, data: dict) -> 'ClientRecord':
        """Validate a raw record, converting pydantic errors into InvalidInputError."""
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            messages = [f"{'.'.join(str(p) for p in err['loc']) or 'record'}: {err['msg']}" for err in e.errors()]
            raise InvalidInputError('; '.join(messages)) from e

    def input_hash(self) -> str:
        """Stable SHA-256 over the fields that affect simulation output."""
        data = self.model_dump(mode='json', include=set(HASHED_FIELDS))
        encoded = json.dumps(data, sort_keys=True, separators=(',', ':'))
        return hashlib.sha256(encoded.encode('utf-8')).hexdigest()

    def heir_rate(self) -> float:
        if self.heir_tax_rate is not None and self.heir_tax_rate > 0:
            return self.heir_tax_rate
        if self.heir_bracket:
            return float(int(self.heir_bracket))
        return DEFAULT_HEIR_TAX_RATE

    def to_simulation_input(self, start_year: Optional[int] = None) -> SimulationInput:
        """Resolve aliases and defaults into an immutable SimulationInput."""
        start_year = start_year if start_year is not None else date.today().year

        if self.age is not None:
            age = self.age
            birth_year = self.date_of_birth.year if self.date_of_birth else start_year - age
        else:
            birth_year = self.date_of_birth.year
            age = start_year - birth_year

        spouse_age = self.spouse_age
        spouse_birth_year = None
        if self.spouse_dob is not None:
            spouse_birth_year = self.spouse_dob.year
            if spouse_age is None:
                spouse_age = start_year - spouse_birth_year
        elif spouse_age is not None:
            spouse_birth_year = start_year - spouse_age

        if self.end_age is not None:
            end_age = self.end_age
            projection_years = end_age - age
        else:
            projection_years = self.projection_years or DEFAULT_PROJECTION_YEARS
            end_age = age + projection_years
        if projection_years <= 0:
            raise InvalidInputError(f'end_age ({end_age}) must be greater than age ({age})')

        growth_rate = next(r for r in (self.rate_of_return, self.growth_rate, 7.0) if r is not None)
        baseline_rate = self.baseline_comparison_rate if self.baseline_comparison_rate is not None else growth_rate

        bonus_percent = self.bonus_percent
        if bonus_percent is None:
            product = growth_products().get(self.blueprint_type) if self.blueprint_type else None
            bonus_percent = product.bonus_percent if product else 10.0

        other_income = self.gross_taxable_non_ssi
        if other_income is None and self.non_ssi_income:
            other_income = self.non_ssi_income[0].gross_taxable
        if other_income is None:
            other_income = self.other_income if self.other_income is not None else DEFAULT_OTHER_INCOME

        target_bracket = self.max_tax_rate if self.constraint_type == 'bracket_ceiling' else None
        conversion_type = self.conversion_type
        if self.constraint_type == 'fixed_amount' and self.fixed_conversion_amount > 0:
            conversion_type = 'fixed_amount'

        years_to_defer = self.years_to_defer_conversion
        if self.start_age is not None:
            years_to_defer = max(years_to_defer, self.start_age - age)

        surrender_schedule = tuple(self.surrender_schedule) if self.surrender_schedule else None

        return SimulationInput(
            filing_status=self.filing_status,
            age=age,
            birth_year=birth_year,
            start_year=start_year,
            projection_years=projection_years,
            end_age=end_age,
            state=self.state.upper(),
            state_tax_rate=self.state_tax_rate,
            spouse_age=spouse_age,
            spouse_birth_year=spouse_birth_year,
            traditional_balance=next(v for v in (self.qualified_account_value, self.traditional_ira, 0) if v is not None),
            roth_balance=self.roth_ira,
            taxable_balance=self.taxable_accounts,
            bonus_percent=bonus_percent,
            growth_rate=growth_rate,
            baseline_growth_rate=baseline_rate,
            inflation_rate=self.inflation_rate,
            ss_start_age=next(v for v in (self.ssi_payout_age, self.ss_start_age, 67) if v is not None),
            ss_annual_amount=next(v for v in (self.ssi_annual_amount, self.ss_self, 0) if v is not None),
            spouse_ss_start_age=self.spouse_ssi_payout_age or 67,
            spouse_ss_annual_amount=next(v for v in (self.spouse_ssi_annual_amount, self.ss_spouse, 0) if v is not None),
            other_income=other_income,
            pension_income=self.pension,
            tax_exempt_income=self.tax_exempt_non_ssi,
            non_ssi_income=tuple(NonSsiIncome(e.year, e.gross_taxable, e.tax_exempt) for e in self.non_ssi_income),
            income_base_year=start_year,
            strategy=self.strategy,
            target_bracket=target_bracket,
            strict_irmaa=True if self.constraint_type == 'irmaa_threshold' else None,
            conversion_type=conversion_type,
            fixed_conversion_amount=self.fixed_conversion_amount,
            tax_payment_source=self.tax_payment_source,
            years_to_defer_conversion=years_to_defer,
            conversion_end_age=end_age,
            heir_tax_rate=self.heir_rate(),
            rmd_treatment=self.rmd_treatment,
            include_niit=self.include_niit,
            include_aca=self.include_aca,
            household_size=self.household_size or (2 if self.filing_status == 'married_filing_jointly' else 1),
            product_id=self.blueprint_type,
            anniversary_bonus_percent=self.anniversary_bonus_percent,
            anniversary_bonus_years=self.anniversary_bonus_years,
            surrender_schedule=surrender_schedule,
            payout_type=self.payout_type,
            payout_option=self.payout_option,
            roll_up_option=self.roll_up_option,
            income_start_age=self.income_start_age,
            gi_conversion_years=self.gi_conversion_years,
            gi_conversion_bracket=self.gi_conversion_bracket,
            name=self.name,
            spouse_name=self.spouse_name,
        )
