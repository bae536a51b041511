import json
import logging
import os
from typing import Optional
from model.FederalResult import BracketTax, FederalResult
from model.errors import ConfigurationMissingError
from model.money import round_half_up

logger = logging.getLogger(__name__)

class FederalDetails:
	def __init__(self, final_year: int, inflation_rate: Optional[float] = None):
		"""
		final_year: last year to generate brackets for (inclusive)
		inflation_rate: bracket indexing rate, e.g. 0.027; defaults to the reference file's annualIncrease
		"""
		self.final_year = final_year
		self.inflation_rate = inflation_rate
		self.brackets_by_year = {}
		self.deductions_by_year = {}
		self._load_and_build_brackets()

	def _load_and_build_brackets(self):
		# Load initial brackets from JSON
		ref_path = os.path.join(os.path.dirname(__file__), '../../reference/federal-details.json')
		with open(ref_path, 'r') as f:
			data = json.load(f)

		tax_years = data.get("taxYears", [])
		if not tax_years:
			raise ValueError("federal-details.json must contain a 'taxYears' array with at least one entry")
		if self.inflation_rate is None:
			self.inflation_rate = data.get("annualIncrease", 0.0)
		round_to = data.get("roundTo", 100)

		tax_years = sorted(tax_years, key=lambda x: x["year"])
		for i in range(1, len(tax_years)):
			if tax_years[i]["year"] != tax_years[i-1]["year"] + 1:
				raise ValueError(f"Tax years must be sequential. Gap found between {tax_years[i-1]['year']} and {tax_years[i]['year']}")

		for year_data in tax_years:
			year = year_data["year"]
			self.brackets_by_year[year] = {
				status: [{"maxIncome": b["maxIncome"], "rate": b["rate"]} for b in brackets]
				for status, brackets in year_data["brackets"].items()
			}
			self.deductions_by_year[year] = {
				"standardDeduction": dict(year_data["standardDeduction"]),
				"seniorAdditional": dict(year_data.get("seniorAdditionalDeduction", {}))
			}

		# Index bounds from the last specified year; each projected bound is
		# rounded to a whole dollar from the base, never compounded on a rounded value.
		last_year = tax_years[-1]["year"]
		base_brackets = self.brackets_by_year[last_year]
		base_deductions = self.deductions_by_year[last_year]

		def inflate(amount, years):
			if amount is None:
				return None
			return round_half_up(amount * (1 + self.inflation_rate) ** years / round_to) * round_to

		year = last_year + 1
		while year <= self.final_year:
			offset = year - last_year
			self.brackets_by_year[year] = {
				status: [{"maxIncome": inflate(b["maxIncome"], offset), "rate": b["rate"]} for b in brackets]
				for status, brackets in base_brackets.items()
			}
			self.deductions_by_year[year] = {
				key: {status: inflate(amount, offset) for status, amount in values.items()}
				for key, values in base_deductions.items()
			}
			year += 1

		logger.debug("Federal brackets loaded for %d-%d at %.1f%% indexing", tax_years[0]["year"], self.final_year, self.inflation_rate * 100)

	def brackets(self, year: int, filing_status: str) -> list:
		"""Ordered brackets for a year and filing status; the top bracket has maxIncome None."""
		if year not in self.brackets_by_year:
			raise ConfigurationMissingError(f"No tax brackets available for year {year}")
		by_status = self.brackets_by_year[year]
		if filing_status not in by_status:
			raise ConfigurationMissingError(f"No tax brackets for filing status '{filing_status}' in {year}")
		return by_status[filing_status]

	def taxBurden(self, income: int, year: int, filing_status: str = 'single') -> FederalResult:
		"""
		Progressive federal tax on taxable income (cents).

		Each bracket's slice is rounded on its own, so the total is the sum of
		rounded slices rather than a rounded sum. The marginal bracket is the
		last bracket that produced tax (0 when no tax is owed).
		"""
		brackets = self.brackets(year, filing_status)
		remaining = max(0, income)
		lower = 0
		total = 0
		breakdown = []
		for b in brackets:
			if remaining <= 0:
				break
			width = remaining if b["maxIncome"] is None else b["maxIncome"] - lower
			taxable = min(remaining, width)
			tax = round_half_up(taxable * b["rate"] / 100)
			if tax > 0:
				total += tax
				breakdown.append(BracketTax(rate=b["rate"], taxableAmount=taxable, tax=tax))
			remaining -= taxable
			if b["maxIncome"] is not None:
				lower = b["maxIncome"]

		effective = (total / income) * 100 if income > 0 else 0.0
		marginal = breakdown[-1].rate if breakdown else 0
		return FederalResult(totalFederalTax=total, marginalBracket=marginal, effectiveRate=effective, bracketBreakdown=breakdown)

	def bracketCeiling(self, rate: float, year: int, filing_status: str) -> Optional[int]:
		"""Upper bound of the bracket taxed at ``rate``, or None when no bracket has that rate."""
		for b in self.brackets(year, filing_status):
			if b["rate"] == rate:
				return b["maxIncome"]
		return None

	def standardDeduction(self, filing_status: str, year: int, age: int = 0, spouse_age: Optional[int] = None) -> int:
		"""
		Standard deduction including the additional amount for filers aged 65+.

		Single and head-of-household filers get the single additional amount for
		themselves. Married filers get the married additional amount for each
		spouse aged 65 or older.
		"""
		if year not in self.deductions_by_year:
			raise ConfigurationMissingError(f"No deduction data available for year {year}")
		d = self.deductions_by_year[year]
		if filing_status not in d["standardDeduction"]:
			raise ConfigurationMissingError(f"No standard deduction for filing status '{filing_status}' in {year}")
		deduction = d["standardDeduction"][filing_status]
		additional = d["seniorAdditional"].get(filing_status, 0)
		if filing_status in ('married_filing_jointly', 'married_filing_separately'):
			seniors = (1 if age >= 65 else 0) + (1 if spouse_age is not None and spouse_age >= 65 else 0)
			deduction += additional * seniors
		elif age >= 65:
			deduction += additional
		return deduction

	@staticmethod
	def taxableIncome(gross_income: int, deductions: int) -> int:
		return max(0, gross_income - deductions)
