import json
import os
from model.FederalResult import FederalResult

FILING_STATUSES = ("single", "married", "married_separately", "head_of_household")

class FederalDetails:
	def __init__(self, inflation_rate: float, final_year: int):
		"""
		inflation_rate: e.g., 0.03 for 3% inflation
		final_year: last year to generate brackets for (inclusive)
		"""
		self.inflation_rate = inflation_rate
		self.final_year = final_year
		self.brackets_by_year = {}
		self.deductions_by_year = {}
		self.allowance_value = 0.0
		self._load_and_build_brackets()

	def _load_and_build_brackets(self):
		ref_path = os.path.join(os.path.dirname(__file__), '../../reference/federal-details.json')
		with open(ref_path, 'r') as f:
			data = json.load(f)

		tax_years = data.get("taxYears", [])
		if not tax_years:
			raise ValueError("federal-details.json must contain a 'taxYears' array with at least one entry")
		self.allowance_value = data.get("allowanceValue", 0.0)

		tax_years = sorted(tax_years, key=lambda x: x["year"])

		for i in range(1, len(tax_years)):
			if tax_years[i]["year"] != tax_years[i-1]["year"] + 1:
				raise ValueError(f"Tax years must be sequential. Gap found between {tax_years[i-1]['year']} and {tax_years[i]['year']}")

		for year_data in tax_years:
			year = year_data["year"]
			by_status = {}
			for status in FILING_STATUSES:
				if status not in year_data.get("brackets", {}):
					raise ValueError(f"federal-details.json year {year} has no brackets for filing status '{status}'")
				brackets = []
				for b in year_data["brackets"][status]:
					rate = b["rate"]
					if rate > 1:
						rate = rate / 100.0
					brackets.append({
						"maxIncome": b["maxIncome"],
						"rate": rate,
						"baseAmount": b["baseAmount"]
					})
				by_status[status] = brackets
			self.brackets_by_year[year] = by_status
			self.deductions_by_year[year] = dict(year_data.get("standardDeduction", {}))

		# Years past the last specified one are inflated from it
		last_specified_year = tax_years[-1]["year"]
		brackets = self.brackets_by_year[last_specified_year]
		deductions = self.deductions_by_year[last_specified_year]
		year = last_specified_year + 1
		while year <= self.final_year:
			brackets = {
				status: [
					{
						"maxIncome": b["maxIncome"] * (1 + self.inflation_rate),
						"rate": b["rate"],
						"baseAmount": b["baseAmount"] * (1 + self.inflation_rate)
					}
					for b in status_brackets
				]
				for status, status_brackets in brackets.items()
			}
			self.brackets_by_year[year] = brackets
			deductions = {status: amount * (1 + self.inflation_rate) for status, amount in deductions.items()}
			self.deductions_by_year[year] = dict(deductions)
			year += 1

	def brackets(self, year: int, filing_status: str = "single") -> list:
		"""Return the list of {maxIncome, rate, baseAmount} brackets for a year and filing status."""
		if year not in self.brackets_by_year:
			raise ValueError(f"No tax brackets available for year {year}")
		by_status = self.brackets_by_year[year]
		if filing_status not in by_status:
			raise ValueError(f"Unknown filing status '{filing_status}'")
		return by_status[filing_status]

	def taxBurden(self, income: float, year: int, filing_status: str = "single") -> FederalResult:
		"""
		Returns a FederalResult with the total federal tax, marginal bracket and effective rate
		for a given annual taxable income, year and filing status.
		"""
		brackets = self.brackets(year, filing_status)
		income = max(0.0, income)
		floor = 0.0
		for b in brackets:
			if income <= b["maxIncome"]:
				total_tax = b["baseAmount"] + (income - floor) * b["rate"]
				effective = total_tax / income if income > 0 else 0.0
				return FederalResult(totalFederalTax=total_tax, marginalBracket=b["rate"], effectiveRate=effective)
			floor = b["maxIncome"]
		raise ValueError("Income exceeds all bracket definitions.")

	def standardDeduction(self, year: int, filing_status: str = "single") -> float:
		if year not in self.deductions_by_year:
			raise ValueError(f"No deduction data available for year {year}")
		deductions = self.deductions_by_year[year]
		if filing_status not in deductions:
			raise ValueError(f"Unknown filing status '{filing_status}'")
		return deductions[filing_status]

	def taxableIncome(self, annual_income: float, year: int, filing_status: str = "single", allowances: int = 0) -> float:
		"""Annual income less the standard deduction and withholding allowances, floored at zero."""
		reduction = self.standardDeduction(year, filing_status) + allowances * self.allowance_value
		return max(0.0, annual_income - reduction)
