import json
import os

from model.TaxResults import NiitResult
from model.errors import ConfigurationMissingError
from model.money import round_half_up


class NiitDetails:
    """Net Investment Income Tax: a surtax on investment income above a MAGI threshold."""

    def __init__(self):
        ref_path = os.path.join(os.path.dirname(__file__), '../../reference/niit.json')
        with open(ref_path, 'r') as f:
            data = json.load(f)
        self.rate = data["rate"]
        self.thresholds = data["thresholds"]

    def calculate(self, magi: int, net_investment_income: int, filing_status: str) -> NiitResult:
        """Tax the lesser of net investment income and MAGI over the threshold."""
        if filing_status not in self.thresholds:
            raise ConfigurationMissingError(f"No NIIT threshold for filing status '{filing_status}'")
        excess = magi - self.thresholds[filing_status]
        if excess <= 0 or net_investment_income <= 0:
            return NiitResult(applies=False, tax_amount=0, threshold_excess=max(0, excess))
        taxable = min(net_investment_income, excess)
        return NiitResult(applies=True, tax_amount=round_half_up(taxable * self.rate / 100), threshold_excess=excess)
