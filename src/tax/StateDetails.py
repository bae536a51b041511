import os
import json
import logging
from typing import Optional

from model.TaxResults import StateResult
from model.errors import ConfigurationMissingError
from model.money import round_half_up

logger = logging.getLogger(__name__)


class StateDetails:
    """State income tax by jurisdiction.

    Each state is one of three modes: ``none``, ``flat`` (top rate applied to
    all taxable income) or ``progressive``. Progressive states with a bracket
    table in the reference file are walked bracket by bracket; the others are
    taxed at their top rate.
    """

    def __init__(self):
        ref_path = os.path.normpath(os.path.join(os.path.dirname(__file__), '..', '..', 'reference', 'state-details.json'))
        with open(ref_path, 'r') as f:
            data = json.load(f)
        self.states = data.get('states', {})
        self.brackets = data.get('brackets', {})
        self._warned = set()
        if not self.states:
            raise ValueError("state-details.json must contain a 'states' table")

    def _state(self, state: str) -> dict:
        info = self.states.get((state or '').upper())
        if info is None:
            raise ConfigurationMissingError(f"No state tax data for '{state}'")
        return info

    def _bracket_table(self, state: str, filing_status: str) -> Optional[list]:
        tables = self.brackets.get(state.upper())
        if not tables:
            return None
        column = 'joint' if filing_status == 'married_filing_jointly' else 'single'
        return tables.get(column)

    def taxBurden(self, taxable_income: int, state: str, filing_status: str = 'single',
                  override_rate: Optional[float] = None) -> StateResult:
        """Calculate state tax on taxable income (cents).

        Args:
            taxable_income: Income after deductions.
            state: Two-letter jurisdiction code.
            filing_status: Selects the joint or single bracket column.
            override_rate: A whole-percent rate that bypasses the jurisdiction lookup.

        Returns:
            StateResult with total tax, marginal rate and effective rate.
        """
        income = max(0, taxable_income)
        if override_rate is not None:
            tax = round_half_up(income * override_rate / 100)
            return self._result(tax, override_rate if income > 0 else 0, income)

        info = self._state(state)
        if info['type'] == 'none' or income == 0:
            return StateResult(totalStateTax=0, marginalRate=0, effectiveRate=0.0)

        table = self._bracket_table(state, filing_status) if info['type'] == 'progressive' else None
        if table is None:
            if info['type'] == 'progressive' and state.upper() not in self._warned:
                self._warned.add(state.upper())
                logger.warning("No bracket table for %s, taxing at top rate %.2f%%", state, info['topRate'])
            tax = round_half_up(income * info['topRate'] / 100)
            return self._result(tax, info['topRate'], income)

        remaining = income
        lower = 0
        total = 0
        marginal = 0
        for b in table:
            if remaining <= 0:
                break
            width = remaining if b['maxIncome'] is None else b['maxIncome'] - lower
            taxable = min(remaining, width)
            tax = round_half_up(taxable * b['rate'] / 100)
            if tax > 0:
                total += tax
                marginal = b['rate']
            remaining -= taxable
            if b['maxIncome'] is not None:
                lower = b['maxIncome']
        return self._result(total, marginal, income)

    @staticmethod
    def _result(tax: int, marginal: float, income: int) -> StateResult:
        effective = (tax / income) * 100 if income > 0 else 0.0
        return StateResult(totalStateTax=tax, marginalRate=marginal, effectiveRate=effective)

    def conversionRate(self, state: str, override_rate: Optional[float] = None) -> float:
        """Decimal state rate used to price and gross down a Roth conversion."""
        if override_rate is not None:
            return override_rate / 100
        info = self._state(state)
        return info.get('conversionRate', info['topRate']) / 100

    @staticmethod
    def conversionTax(amount: int, rate: float) -> int:
        """State tax on a conversion at a decimal rate."""
        if amount <= 0:
            return 0
        return round_half_up(amount * rate)

    def hasIncomeTax(self, state: str) -> bool:
        return self._state(state)['type'] != 'none'
