"""Renderer classes for displaying simulation results.

This module contains renderer classes that handle the presentation logic
for the different simulation outputs. Each renderer takes one result object
(a SimulationResult or one of the analysis results) and prints a console
report. All amounts arrive in cents and are shown in whole dollars.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional

from calc.sensitivity import format_sensitivity_summary
from model.Analysis import BreakevenAnalysis, SensitivityResult, StrategyComparison, WidowAnalysisResult
from model.YearlyResult import SimulationResult, YearlyResult
from model.field_metadata import get_field_info, get_short_name, wrap_header
from model.money import format_whole_dollars


def format_multiline_headers(columns: List[tuple], year_width: int = 6) -> tuple[List[str], str]:
    """Format column headers with multi-line wrapping support.

    Args:
        columns: List of (header_text, width) tuples for each column
        year_width: Width of the Year column (default 6)

    Returns:
        Tuple of (list of header lines, separator line)
    """
    wrapped_headers = []
    for header, width in columns:
        lines = wrap_header(header, width)
        wrapped_headers.append((lines, width))

    max_lines = max(len(lines) for lines, _ in wrapped_headers) if wrapped_headers else 1

    # Pad at the top so the last header line sits on the separator
    for lines, _ in wrapped_headers:
        while len(lines) < max_lines:
            lines.insert(0, "")

    header_lines = []
    for line_idx in range(max_lines):
        label = 'Year' if line_idx == max_lines - 1 else ''
        header_line = f"  {label:<{year_width}}"
        for lines, width in wrapped_headers:
            header_line += f" {lines[line_idx]:>{width}}"
        header_lines.append(header_line)

    sep_line = f"  {'-' * year_width}"
    for _, width in wrapped_headers:
        sep_line += f" {'-' * width}"

    return header_lines, sep_line


def dollars(cents: Optional[int], width: int) -> str:
    """Right-align cents as whole dollars in a column of ``width``."""
    if cents is None:
        return f"{'N/A':>{width}}"
    return f"{format_whole_dollars(cents):>{width}}"


def banner(title: str, width: int) -> None:
    print()
    print("=" * width)
    print(f"{title:^{width}}")
    print("=" * width)


def parse_year_range(year_range: str, rows: List[YearlyResult]) -> tuple:
    """Parse a year range string into start and end years.

    Args:
        year_range: String in format 'startYear-endYear', 'startYear-', or '-endYear'
        rows: Projection rows that supply the default first and last years

    Returns:
        Tuple of (start_year, end_year)
    """
    if '-' not in year_range:
        year = int(year_range)
        return (year, year)

    parts = year_range.split('-')
    start_year = int(parts[0]) if parts[0] else rows[0].year
    end_year = int(parts[1]) if parts[1] else rows[-1].year
    return (start_year, end_year)


class BaseRenderer(ABC):
    """Abstract base class for all renderers."""

    @abstractmethod
    def render(self, data: Any) -> None:
        """Render the data to output."""
        pass


class CustomRenderer(BaseRenderer):
    """A year-by-year table of any YearlyResult fields for one scenario.

    Flows (taxes, distributions, income) are totalled at the bottom; balances,
    ages and rates are not.
    """

    # Maximum width for a column header before wrapping
    MAX_HEADER_WIDTH = 14

    def __init__(self, title: str, fields: List[str], start_year: int = None, end_year: int = None,
                 scenario: str = 'strategy', show_totals: bool = True):
        """
        Args:
            title: The title to display at the top of the table
            fields: YearlyResult field names to display as columns
            start_year: First year to display (defaults to the first projected year)
            end_year: Last year to display (defaults to the last projected year)
            scenario: 'baseline' or 'strategy'
            show_totals: Whether to show a totals row at the bottom
        """
        self.title = title
        self.fields = fields
        self.start_year = start_year
        self.end_year = end_year
        self.scenario = scenario
        self.show_totals = show_totals

    def _get_column_width(self, field: str) -> int:
        short_name = get_short_name(field)
        if len(short_name) > self.MAX_HEADER_WIDTH:
            wrapped = wrap_header(short_name, self.MAX_HEADER_WIDTH)
            return max(max(len(line) for line in wrapped), 12)
        return max(len(short_name) + 2, 12)

    def _format_value(self, value: Any, field: str, width: int) -> str:
        info = get_field_info(field)
        kind = info.kind if info else 'money'
        if value is None:
            return f"{'N/A':>{width}}"
        if kind == 'flag' or isinstance(value, bool):
            return f"{'Yes' if value else 'No':>{width}}"
        if kind == 'rate':
            return f"{value:>{width - 1}.1f}%"
        if kind == 'count':
            return f"{value:>{width}}"
        return dollars(value, width)

    def rows(self, data: SimulationResult) -> List[YearlyResult]:
        rows = data.baseline if self.scenario == 'baseline' else data.strategy
        start = self.start_year if self.start_year is not None else rows[0].year
        end = self.end_year if self.end_year is not None else rows[-1].year
        return [r for r in rows if start <= r.year <= end]

    def render(self, data: SimulationResult) -> None:
        col_widths = {field: self._get_column_width(field) for field in self.fields}
        year_width = 6
        total_width = year_width + 2 + sum(col_widths.values()) + len(self.fields)
        total_width = max(total_width, len(self.title) + 10)

        banner(f"{self.title.upper()} ({self.scenario.upper()})", total_width)
        print()
        header_lines, sep = format_multiline_headers(
            [(get_short_name(f), col_widths[f]) for f in self.fields], year_width)
        for line in header_lines:
            print(line)
        print(sep)

        totals = {field: 0 for field in self.fields}
        rows = self.rows(data)
        for yr in rows:
            row = f"  {yr.year:<{year_width}}"
            for field in self.fields:
                value = getattr(yr, field, None)
                row += f" {self._format_value(value, field, col_widths[field])}"
                info = get_field_info(field)
                if info is not None and info.summable and value is not None:
                    totals[field] += value
            print(row)

        if self.show_totals and rows:
            print(sep)
            total_row = f"  {'TOTAL':<{year_width}}"
            for field in self.fields:
                info = get_field_info(field)
                width = col_widths[field]
                if info is not None and info.summable:
                    total_row += f" {dollars(totals[field], width)}"
                else:
                    total_row += f" {'':>{width}}"
            print(total_row)

        print()
        print("=" * total_width)
        print()


PROJECTION_FIELDS = [
    'age',
    'traditional_balance',
    'roth_balance',
    'taxable_balance',
    'rmd_amount',
    'conversion_amount',
    'gross_income',
    'total_tax',
    'irmaa_surcharge',
    'marginal_bracket',
    'net_worth',
]


class ProjectionRenderer(CustomRenderer):
    """Year-by-year balances, distributions and taxes."""

    def __init__(self, start_year: int = None, end_year: int = None, scenario: str = 'strategy'):
        super().__init__('Projection', PROJECTION_FIELDS, start_year, end_year, scenario)


class SummaryRenderer(BaseRenderer):
    """Lifetime comparison of the strategy against the baseline."""

    WIDTH = 78

    def _line(self, label: str, baseline: int, strategy: int) -> None:
        print(f"  {label:<30} {dollars(baseline, 14)} {dollars(strategy, 14)} {dollars(strategy - baseline, 14)}")

    def render(self, data: SimulationResult) -> None:
        banner('CONVERSION STRATEGY SUMMARY', self.WIDTH)
        print()
        last_base = data.baseline[-1]
        last_strat = data.strategy[-1]
        break_even = str(data.break_even_age) if data.break_even_age is not None else 'Never'
        print(f"  {'Break-even age:':<40} {break_even:>18}")
        print(f"  {'Lifetime tax savings:':<40} {dollars(data.total_tax_savings, 18)}")
        print(f"  {'Heir benefit:':<40} {dollars(data.heir_benefit, 18)}")

        print()
        print(f"  {'':<30} {'Baseline':>14} {'Strategy':>14} {'Difference':>14}")
        print(f"  {'-' * 30} {'-' * 14} {'-' * 14} {'-' * 14}")
        self._line('Ending traditional', last_base.traditional_balance, last_strat.traditional_balance)
        self._line('Ending Roth', last_base.roth_balance, last_strat.roth_balance)
        self._line('Ending net worth', last_base.net_worth, last_strat.net_worth)

        m = data.metrics
        if m is not None:
            self._line('Distributions', m.distributions.baseline, m.distributions.strategy)
            self._line('Tax on distributions', m.distributions.baseline_tax, m.distributions.strategy_tax)
            self._line('IRMAA surcharges', m.irmaa.baseline, m.irmaa.strategy)
            self._line('Heir tax', m.heirs.baseline_tax, m.heirs.strategy_tax)
            self._line('Net to heirs', m.heirs.baseline_net, m.heirs.strategy_net)
            self._line('Lifetime wealth', m.wealth.baseline_lifetime_wealth, m.wealth.strategy_lifetime_wealth)
            print()
            print(f"  {'Lifetime wealth increase:':<40} {dollars(m.wealth.increase_amount, 18)}"
                  f" ({m.wealth.increase_percent}%)")
        print()
        print("=" * self.WIDTH)
        print()


class GuaranteedIncomeRenderer(BaseRenderer):
    """Phase-by-phase annuity table and the Roth-versus-IRA income comparison."""

    WIDTH = 132

    def render(self, data: SimulationResult) -> None:
        if data.gi_year_data is None:
            print("No guaranteed-income data: the client's product is not a guaranteed-income annuity")
            return

        banner('GUARANTEED INCOME PROJECTION (ROTH)', self.WIDTH)
        print()
        print(f"  {'Year':<6} {'Age':>4} {'Phase':<11} {'Conversion':>12} {'Conv Tax':>11} {'Account':>13}"
              f" {'Income Base':>13} {'Roll-Up':>11} {'Rider Fee':>10} {'Income':>11} {'Cumulative':>13}")
        print(f"  {'-' * 6} {'-' * 4} {'-' * 11} {'-' * 12} {'-' * 11} {'-' * 13}"
              f" {'-' * 13} {'-' * 11} {'-' * 10} {'-' * 11} {'-' * 13}")
        for g in data.gi_year_data:
            print(f"  {g.year:<6} {g.age:>4} {g.phase:<11} {dollars(g.conversion_amount, 12)}"
                  f" {dollars(g.conversion_tax, 11)} {dollars(g.account_value, 13)} {dollars(g.income_base, 13)}"
                  f" {dollars(g.roll_up_amount, 11)} {dollars(g.rider_fee, 10)}"
                  f" {dollars(g.guaranteed_income_net, 11)} {dollars(g.cumulative_income_net, 13)}")

        strategy = data.gi_metrics
        baseline = data.gi_baseline_metrics
        print()
        print(f"  {'':<34} {'Traditional':>16} {'Roth':>16}")
        print(f"  {'-' * 34} {'-' * 16} {'-' * 16}")
        print(f"  {'Purchase age':<34} {baseline.purchase_age:>16} {strategy.purchase_age:>16}")
        print(f"  {'Income start age':<34} {baseline.income_start_age:>16} {strategy.income_start_age:>16}")
        print(f"  {'Purchase amount':<34} {dollars(baseline.purchase_amount, 16)} {dollars(strategy.purchase_amount, 16)}")
        print(f"  {'Income base at income age':<34} {dollars(baseline.income_base_at_income_age, 16)}"
              f" {dollars(strategy.income_base_at_income_age, 16)}")
        print(f"  {'Payout percent':<34} {baseline.payout_percent:>15.2f}% {strategy.payout_percent:>15.2f}%")
        print(f"  {'Annual income (gross)':<34} {dollars(baseline.annual_income_gross, 16)}"
              f" {dollars(strategy.annual_income_gross, 16)}")
        print(f"  {'Annual income (net)':<34} {dollars(baseline.annual_income_net, 16)}"
              f" {dollars(strategy.annual_income_net, 16)}")
        print(f"  {'Lifetime income (net)':<34} {dollars(baseline.lifetime_income_net, 16)}"
              f" {dollars(strategy.lifetime_income_net, 16)}")
        print(f"  {'Conversion tax paid':<34} {dollars(baseline.total_conversion_tax, 16)}"
              f" {dollars(strategy.total_conversion_tax, 16)}")

        cmp = data.gi_comparison
        if cmp is not None:
            print()
            print(f"  {'Annual income advantage:':<40} {dollars(cmp.annual_income_advantage, 16)}")
            print(f"  {'Lifetime income advantage:':<40} {dollars(cmp.lifetime_income_advantage, 16)}")
            print(f"  {'Tax-free wealth created:':<40} {dollars(cmp.tax_free_wealth_created, 16)}")
            age = str(cmp.break_even_age) if cmp.break_even_age is not None else 'Never'
            print(f"  {'Conversion tax recovered by age:':<40} {age:>16}")
            print(f"  {'Improvement:':<40} {cmp.percent_improvement:>15.1f}%")
        print()
        print("=" * self.WIDTH)
        print()


class StrategiesRenderer(BaseRenderer):
    """Side-by-side outcomes of every conversion strategy."""

    WIDTH = 104

    def render(self, data: StrategyComparison) -> None:
        banner('STRATEGY COMPARISON', self.WIDTH)
        print()
        print(f"  {'Strategy':<14} {'Ending Wealth':>15} {'Tax Savings':>14} {'Break-Even':>11}"
              f" {'IRMAA':>12} {'Heir Benefit':>14} {'Conversions':>15}")
        print(f"  {'-' * 14} {'-' * 15} {'-' * 14} {'-' * 11} {'-' * 12} {'-' * 14} {'-' * 15}")
        for key, m in data.metrics.items():
            marker = '*' if key == data.best_strategy else ' '
            age = str(m.break_even_age) if m.break_even_age is not None else 'Never'
            print(f" {marker}{key:<14} {dollars(m.ending_wealth, 15)} {dollars(m.tax_savings, 14)} {age:>11}"
                  f" {dollars(m.total_irmaa, 12)} {dollars(m.heir_benefit, 14)} {dollars(m.total_conversions, 15)}")
        print()
        print(f"  Best strategy: {data.best_strategy}")
        print("=" * self.WIDTH)
        print()


class SensitivityRenderer(BaseRenderer):
    """Outcome spread across the growth and tax-rate scenarios."""

    WIDTH = 84

    def render(self, data: SensitivityResult) -> None:
        banner('SENSITIVITY ANALYSIS', self.WIDTH)
        print()
        print(f"  {'Scenario':<16} {'Growth':>7} {'Tax x':>6} {'Ending Wealth':>16} {'Break-Even':>11} {'Tax Savings':>16}")
        print(f"  {'-' * 16} {'-' * 7} {'-' * 6} {'-' * 16} {'-' * 11} {'-' * 16}")
        for o in data.outcomes:
            age = str(o.break_even_age) if o.break_even_age is not None else 'Never'
            print(f"  {o.scenario.name:<16} {o.scenario.growth_rate:>6}% {o.scenario.tax_multiplier:>6.1f}"
                  f" {dollars(o.ending_wealth, 16)} {age:>11} {dollars(o.total_tax_savings, 16)}")
        summary = format_sensitivity_summary(data)
        print()
        print(f"  {'Best case:':<20} {summary.best_case}")
        print(f"  {'Worst case:':<20} {summary.worst_case}")
        print(f"  {'Break-even range:':<20} {summary.break_even_range}")
        print(f"  {'Wealth range:':<20} {summary.wealth_range}")
        print("=" * self.WIDTH)
        print()


class BreakevenRenderer(BaseRenderer):
    """Every change of lead between the scenarios plus both break-even ages."""

    WIDTH = 60

    def render(self, data: BreakevenAnalysis) -> None:
        banner('BREAK-EVEN ANALYSIS', self.WIDTH)
        print()
        simple = str(data.simple_break_even_age) if data.simple_break_even_age is not None else 'Never'
        sustained = str(data.sustained_break_even_age) if data.sustained_break_even_age is not None else 'Never'
        print(f"  {'Simple break-even age:':<36} {simple:>18}")
        print(f"  {'Sustained break-even age:':<36} {sustained:>18}")
        print(f"  {'Net benefit at end of projection:':<36} {dollars(data.net_benefit, 18)}")
        if data.crossovers:
            print()
            print(f"  {'Year':<6} {'Age':>4} {'Leader':<16} {'Difference':>16}")
            print(f"  {'-' * 6} {'-' * 4} {'-' * 16} {'-' * 16}")
            for c in data.crossovers:
                leader = 'strategy' if c.direction == 'strategy_ahead' else 'baseline'
                print(f"  {c.year:<6} {c.age:>4} {leader:<16} {dollars(c.difference, 16)}")
        print("=" * self.WIDTH)
        print()


class WidowRenderer(BaseRenderer):
    """Single-filer tax increase after the death of a spouse."""

    WIDTH = 88

    def render(self, data: WidowAnalysisResult) -> None:
        banner(f"WIDOW PENALTY (SPOUSE DIES {data.death_year})", self.WIDTH)
        print()
        print(f"  {'Year':<6} {'Age':>4} {'Married Tax':>14} {'Single Tax':>14} {'Additional':>14}"
              f" {'Married %':>10} {'Single %':>10}")
        print(f"  {'-' * 6} {'-' * 4} {'-' * 14} {'-' * 14} {'-' * 14} {'-' * 10} {'-' * 10}")
        for i in data.impacts:
            print(f"  {i.year:<6} {i.age:>4} {dollars(i.married_tax, 14)} {dollars(i.widow_tax, 14)}"
                  f" {dollars(i.additional_tax, 14)} {i.married_bracket:>9.0f}% {i.widow_bracket:>9.0f}%")
        print()
        print(f"  {'Total additional tax:':<40} {dollars(data.total_additional_tax, 18)}")
        print(f"  {'Average bracket jump (points):':<40} {data.average_bracket_jump:>18.1f}")
        print(f"  {'Recommended extra annual conversion tax:':<40} "
              f"{dollars(data.recommended_conversion_increase, 18)}")
        print("=" * self.WIDTH)
        print()


# Registry mapping mode names to renderer classes
RENDERER_REGISTRY = {
    'projection': ProjectionRenderer,
    'summary': SummaryRenderer,
    'gi': GuaranteedIncomeRenderer,
    'strategies': StrategiesRenderer,
    'sensitivity': SensitivityRenderer,
    'breakeven': BreakevenRenderer,
    'widow': WidowRenderer,
}
