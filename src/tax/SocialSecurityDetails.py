import json
import os

from model.TaxResults import SocialSecurityTaxResult
from model.errors import ConfigurationMissingError
from model.money import round_half_up


class SocialSecurityDetails:
    """Social Security benefit projection and the taxable-benefit formula.

    The provisional-income thresholds have never been indexed for inflation,
    so the reference file carries ``annualIncrease: 0`` and the same thresholds
    apply to every projected year.
    """

    def __init__(self):
        """Load thresholds and the default cost-of-living rate from the reference file."""
        ref_path = os.path.join(os.path.dirname(__file__), '../../reference/social-security.json')
        with open(ref_path, 'r') as f:
            data = json.load(f)

        self.thresholds = data.get("thresholds", {})
        if not self.thresholds:
            raise ValueError("social-security.json must contain a 'thresholds' table")
        self.annual_increase = data.get("annualIncrease", 0)
        self.default_cola_rate = data.get("defaultColaRate", 2.0)

    def get_thresholds(self, filing_status: str) -> dict:
        """Return the lower/upper provisional-income thresholds and base amount.

        Args:
            filing_status: One of the four federal filing statuses.

        Returns:
            Dictionary with lower, upper and baseAmount in cents.
        """
        if filing_status not in self.thresholds:
            raise ConfigurationMissingError(f"No Social Security thresholds for filing status '{filing_status}'")
        return self.thresholds[filing_status]

    def taxable_amount(self, benefits: int, other_income: int, tax_exempt_interest: int,
                       filing_status: str) -> SocialSecurityTaxResult:
        """Calculate the taxable portion of Social Security benefits.

        Provisional income is other income plus tax-exempt interest plus half
        the benefits. Below the lower threshold nothing is taxable; between the
        thresholds up to 50% is taxable; above the upper threshold up to 85%.

        Args:
            benefits: Total annual benefits received.
            other_income: All other income that counts toward provisional income.
            tax_exempt_interest: Tax-exempt interest for the year.
            filing_status: Filing status, selects the thresholds.

        Returns:
            SocialSecurityTaxResult with the taxable amount, the tier percent and provisional income.
        """
        t = self.get_thresholds(filing_status)
        half_benefits = round_half_up(benefits * 0.5)
        provisional = other_income + tax_exempt_interest + half_benefits

        if benefits <= 0 or provisional <= t["lower"]:
            return SocialSecurityTaxResult(taxable_amount=0, taxable_percent=0, provisional_income=provisional)

        if provisional <= t["upper"]:
            excess = provisional - t["lower"]
            taxable = min(round_half_up(excess * 0.5), half_benefits)
            return SocialSecurityTaxResult(taxable_amount=taxable, taxable_percent=50, provisional_income=provisional)

        excess_over_upper = provisional - t["upper"]
        first_tier = min(t["baseAmount"], half_benefits)
        taxable = min(round_half_up(excess_over_upper * 0.85) + first_tier, round_half_up(benefits * 0.85))
        return SocialSecurityTaxResult(taxable_amount=taxable, taxable_percent=85, provisional_income=provisional)

    def annual_benefit(self, annual_amount: int, start_age: int, age: int, cola_rate: float = None) -> int:
        """Benefit paid at ``age`` for a claim of ``annual_amount`` starting at ``start_age``.

        Args:
            annual_amount: First-year annual benefit in cents.
            start_age: Claiming age.
            age: Age in the projected year.
            cola_rate: Whole-percent cost-of-living adjustment; defaults to the reference rate.

        Returns:
            The annual benefit, 0 before the claiming age.
        """
        if annual_amount <= 0 or age < start_age:
            return 0
        rate = self.default_cola_rate if cola_rate is None else cola_rate
        return round_half_up(annual_amount * (1 + rate / 100) ** (age - start_age))
