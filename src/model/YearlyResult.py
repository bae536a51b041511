from dataclasses import dataclass, field, asdict
from typing import Dict, List, Optional

from model.GuaranteedIncome import GIComparisonMetrics, GIMetrics, GIYearData


@dataclass(frozen=True)
class YearlyResult:
    """One projected calendar year of one scenario. All money in cents."""
    year: int
    age: int
    spouse_age: Optional[int] = None

    # Balances (end of year)
    traditional_balance: int = 0
    roth_balance: int = 0
    taxable_balance: int = 0
    cash_balance: int = 0

    # Movements
    rmd_amount: int = 0
    conversion_amount: int = 0
    cumulative_distributions: int = 0

    # Income
    ss_income: int = 0
    taxable_ss: int = 0
    pension_income: int = 0
    other_income: int = 0
    tax_exempt_income: int = 0
    gross_income: int = 0
    deductions: int = 0
    taxable_income: int = 0
    magi: int = 0

    # Taxes
    federal_tax: int = 0
    state_tax: int = 0
    niit_tax: int = 0
    irmaa_surcharge: int = 0
    total_tax: int = 0
    conversion_tax: int = 0
    marginal_bracket: float = 0.0

    # Product
    surrender_charge_percent: float = 0.0
    surrender_value: Optional[int] = None
    aca_cliff_crossed: bool = False

    net_worth: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class DistributionSummary:
    baseline: int = 0
    strategy: int = 0
    baseline_tax: int = 0
    strategy_tax: int = 0
    baseline_after_tax: int = 0
    strategy_after_tax: int = 0


@dataclass
class IrmaaSummary:
    baseline: int = 0
    strategy: int = 0


@dataclass
class HeirSummary:
    baseline_gross: int = 0
    strategy_gross: int = 0
    baseline_tax: int = 0
    strategy_tax: int = 0
    baseline_net: int = 0
    strategy_net: int = 0


@dataclass
class WealthSummary:
    baseline_total_distributions: int = 0
    strategy_total_distributions: int = 0
    baseline_total_costs: int = 0
    strategy_total_costs: int = 0
    baseline_lifetime_wealth: int = 0
    strategy_lifetime_wealth: int = 0
    increase_amount: int = 0
    increase_percent: float = 0.0


@dataclass
class SummaryMetrics:
    distributions: DistributionSummary = field(default_factory=DistributionSummary)
    irmaa: IrmaaSummary = field(default_factory=IrmaaSummary)
    heirs: HeirSummary = field(default_factory=HeirSummary)
    wealth: WealthSummary = field(default_factory=WealthSummary)


@dataclass
class SimulationResult:
    """Paired baseline/strategy projections plus the derived scalars."""
    baseline: List[YearlyResult]
    strategy: List[YearlyResult]
    break_even_age: Optional[int] = None
    total_tax_savings: int = 0
    heir_benefit: int = 0
    metrics: Optional[SummaryMetrics] = None
    # Guaranteed-income runs only
    gi_metrics: Optional[GIMetrics] = None
    gi_year_data: Optional[List[GIYearData]] = None
    gi_baseline_metrics: Optional[GIMetrics] = None
    gi_baseline_year_data: Optional[List[GIYearData]] = None
    gi_comparison: Optional[GIComparisonMetrics] = None

    def get_year(self, year: int) -> Dict[str, YearlyResult]:
        """Return the baseline and strategy rows for a calendar year."""
        rows = {}
        for label, results in (('baseline', self.baseline), ('strategy', self.strategy)):
            for r in results:
                if r.year == year:
                    rows[label] = r
        return rows

    def to_dict(self) -> dict:
        return asdict(self)
