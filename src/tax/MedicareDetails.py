import json
import logging
import math
import os

from model.IncomeHistory import IncomeHistory
from model.TaxResults import IrmaaResult
from model.errors import ConfigurationMissingError

logger = logging.getLogger(__name__)


class MedicareDetails:
    """Medicare IRMAA surcharge tiers and the two-year income lookback.

    Tiers are cliffs: a MAGI one cent over a tier's lower bound owes that
    tier's full surcharge. The surcharge for year Y is based on the MAGI
    recorded for year Y-2 and only applies once the beneficiary is 65.
    """

    def __init__(self, final_year: int):
        """Load the tier table and project it through ``final_year``.

        Args:
            final_year: Last year to generate tiers for (inclusive).
        """
        self.final_year = final_year
        self.tiers_by_year = {}
        self.base_part_b_by_year = {}
        self._load_and_build_tiers()

    def _load_and_build_tiers(self):
        ref_path = os.path.join(os.path.dirname(__file__), '../../reference/irmaa.json')
        with open(ref_path, 'r') as f:
            data = json.load(f)

        tax_years = data.get("taxYears", [])
        if not tax_years:
            raise ValueError("irmaa.json must contain a 'taxYears' array with at least one entry")
        self.annual_increase = data.get("annualIncrease", 0)
        self.eligibility_age = data.get("eligibilityAge", 65)
        self.lookback_years = data.get("lookbackYears", 2)

        tax_years = sorted(tax_years, key=lambda x: x["year"])
        for i in range(1, len(tax_years)):
            if tax_years[i]["year"] != tax_years[i-1]["year"] + 1:
                raise ValueError(f"Tax years must be sequential. Gap found between {tax_years[i-1]['year']} and {tax_years[i]['year']}")

        for year_data in tax_years:
            self.tiers_by_year[year_data["year"]] = [dict(t) for t in year_data["tiers"]]
            self.base_part_b_by_year[year_data["year"]] = year_data["basePartB"]

        last_year = tax_years[-1]["year"]
        tiers = self.tiers_by_year[last_year]
        year = last_year + 1
        while year <= self.final_year:
            factor = (1 + self.annual_increase) ** (year - last_year)
            self.tiers_by_year[year] = [
                dict(t, singleLower=round(t["singleLower"] * factor), jointLower=round(t["jointLower"] * factor))
                for t in tiers
            ]
            self.base_part_b_by_year[year] = self.base_part_b_by_year[last_year]
            year += 1

    def get_tiers(self, year: int) -> list:
        if year not in self.tiers_by_year:
            raise ConfigurationMissingError(f"No IRMAA tiers available for year {year}")
        return self.tiers_by_year[year]

    @staticmethod
    def _lower(tier: dict, filing_status: str) -> int:
        return tier["jointLower"] if filing_status == 'married_filing_jointly' else tier["singleLower"]

    def irmaa(self, magi: int, filing_status: str, year: int) -> IrmaaResult:
        """Calculate the IRMAA tier and annual surcharge for a MAGI.

        Args:
            magi: Modified adjusted gross income in cents.
            filing_status: Only married filing jointly uses the joint thresholds.
            year: Surcharge year.

        Returns:
            IrmaaResult with tier, monthly Part B/D premiums and the annual surcharge above the base premium.
        """
        tiers = self.get_tiers(year)
        current = tiers[0]
        for tier in tiers:
            if magi >= self._lower(tier, filing_status):
                current = tier
        base_part_b = self.base_part_b_by_year.get(year, tiers[0]["partB"])
        surcharge = ((current["partB"] - base_part_b) + current["partD"]) * 12
        return IrmaaResult(
            tier=current["tier"],
            monthly_part_b=current["partB"],
            monthly_part_d=current["partD"],
            annual_surcharge=surcharge
        )

    def headroom(self, magi: int, filing_status: str, year: int) -> float:
        """Distance from ``magi`` to the next tier threshold (infinity in the top tier)."""
        for tier in self.get_tiers(year):
            lower = self._lower(tier, filing_status)
            if lower > magi:
                return lower - magi
        return math.inf

    def lookback_surcharge(self, history: IncomeHistory, year: int, filing_status: str, age: int) -> IrmaaResult:
        """Surcharge for ``year`` priced on the MAGI recorded ``lookback_years`` earlier.

        Args:
            history: The run's MAGI history.
            year: Surcharge year.
            filing_status: Filing status in the surcharge year.
            age: Beneficiary age in the surcharge year.

        Returns:
            IrmaaResult; tier 0 with no surcharge before Medicare age or when
            the lookback year precedes the projection.
        """
        if age < self.eligibility_age:
            return IrmaaResult(tier=0, monthly_part_b=0, monthly_part_d=0, annual_surcharge=0)
        lookback_year = year - self.lookback_years
        magi = history.magi_for(lookback_year)
        if magi is None:
            logger.debug("No MAGI recorded for %d; no IRMAA surcharge in %d", lookback_year, year)
            return IrmaaResult(tier=0, monthly_part_b=0, monthly_part_d=0, annual_surcharge=0)
        return self.irmaa(magi, filing_status, year)
