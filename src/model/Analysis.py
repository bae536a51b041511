"""Result records for the comparison analyses built on top of the engine."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from model.YearlyResult import SimulationResult, YearlyResult


# Multi-strategy

@dataclass
class StrategyMetrics:
    strategy: str
    ending_wealth: int
    tax_savings: int
    break_even_age: Optional[int]
    total_irmaa: int
    heir_benefit: int
    total_conversions: int


@dataclass
class StrategyComparison:
    results: Dict[str, SimulationResult]
    metrics: Dict[str, StrategyMetrics]
    best_strategy: str


# Sensitivity

@dataclass(frozen=True)
class SensitivityScenario:
    name: str
    growth_rate: float
    tax_multiplier: float


@dataclass
class SensitivityOutcome:
    scenario: SensitivityScenario
    ending_wealth: int
    break_even_age: Optional[int]
    total_tax_savings: int


@dataclass
class SensitivityResult:
    outcomes: List[SensitivityOutcome]
    break_even_min: Optional[int]
    break_even_max: Optional[int]
    wealth_min: int
    wealth_max: int


@dataclass
class SensitivitySummary:
    best_case: str
    worst_case: str
    break_even_range: str
    wealth_range: str


# Breakeven

@dataclass
class CrossoverPoint:
    year: int
    age: int
    direction: str
    difference: int


@dataclass
class BreakevenAnalysis:
    simple_break_even_age: Optional[int]
    simple_break_even_year: Optional[int]
    sustained_break_even_age: Optional[int]
    sustained_break_even_year: Optional[int]
    crossovers: List[CrossoverPoint] = field(default_factory=list)
    net_benefit: int = 0


# Widow penalty

@dataclass
class WidowTaxImpact:
    year: int
    age: int
    married_tax: int
    widow_tax: int
    additional_tax: int
    married_bracket: float
    widow_bracket: float
    bracket_jump: float


@dataclass
class WidowAnalysisResult:
    death_year: int
    married_years: List[YearlyResult]
    widow_years: List[YearlyResult]
    impacts: List[WidowTaxImpact]
    total_additional_tax: int
    average_bracket_jump: float
    recommended_conversion_increase: int
