import json
import os

from model.TaxResults import RmdResult
from model.errors import ConfigurationMissingError
from model.money import round_half_up


class RmdDetails:
    """Required Minimum Distribution rules.

    The start age follows the SECURE Act tiers keyed on birth year and the
    amount uses the IRS Uniform Lifetime Table. Both are loaded from
    ``reference/rmd-details.json``.
    """

    def __init__(self):
        ref_path = os.path.join(os.path.dirname(__file__), '../../reference/rmd-details.json')
        with open(ref_path, 'r') as f:
            data = json.load(f)

        self.start_age_tiers = data.get("startAgeTiers", [])
        if not self.start_age_tiers:
            raise ValueError("rmd-details.json must contain a 'startAgeTiers' array")
        self.max_table_age = data.get("maxTableAge", 120)
        self.periods = {int(age): period for age, period in data.get("uniformLifetime", {}).items()}

    def start_age(self, birth_year: int) -> int:
        """Age at which distributions become mandatory for someone born in ``birth_year``."""
        for tier in self.start_age_tiers:
            if tier["maxBirthYear"] is None or birth_year <= tier["maxBirthYear"]:
                return tier["startAge"]
        raise ConfigurationMissingError(f"No RMD start age tier covers birth year {birth_year}")

    def distribution_period(self, age: int) -> float:
        """Uniform Lifetime Table divisor, with ages past the table capped at its last row."""
        lookup_age = min(age, self.max_table_age)
        if lookup_age not in self.periods:
            raise ConfigurationMissingError(f"No distribution period for age {age}")
        return self.periods[lookup_age]

    def calculate(self, age: int, balance: int, birth_year: int) -> RmdResult:
        """Calculate the RMD for a beginning-of-year balance.

        Args:
            age: Account owner's age during the distribution year.
            balance: Beginning-of-year tax-deferred balance in cents.
            birth_year: Owner's birth year, selects the start age tier.

        Returns:
            RmdResult; the amount never exceeds the balance.
        """
        if age < self.start_age(birth_year) or balance <= 0:
            return RmdResult(rmd_required=False, rmd_amount=0, distribution_period=None)
        period = self.distribution_period(age)
        amount = min(round_half_up(balance / period), balance)
        return RmdResult(rmd_required=True, rmd_amount=amount, distribution_period=period)
