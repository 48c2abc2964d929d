import json
import os


class SocialSecurityDetails:
    """Holds Social Security statutory details and computes contributions.

    Loads statutory values from reference file and builds year-by-year data.
    For years beyond those specified in the JSON, the wage base is projected
    using the annualIncreaseMaximum rate.
    """

    def __init__(self, inflation_rate: float, final_year: int):
        """Initialize by loading from reference file and building year data.

        Args:
            inflation_rate: Annual increase rate for projecting future years.
            final_year: Last year to generate data for (inclusive).
        """
        self.inflation_rate = inflation_rate
        self.final_year = final_year
        self.data_by_year = {}
        self._load_and_build_data()

    def _load_and_build_data(self):
        ref_path = os.path.join(os.path.dirname(__file__), '../../reference/social-security.json')
        with open(ref_path, 'r') as f:
            data = json.load(f)

        tax_years = data.get("taxYears", [])
        if not tax_years:
            raise ValueError("social-security.json must contain a 'taxYears' array with at least one entry")

        self.annual_increase = data.get("annualIncreaseMaximum", self.inflation_rate)

        tax_years = sorted(tax_years, key=lambda x: x["year"])
        for i in range(1, len(tax_years)):
            if tax_years[i]["year"] != tax_years[i-1]["year"] + 1:
                raise ValueError(f"Tax years must be sequential. Gap found between {tax_years[i-1]['year']} and {tax_years[i]['year']}")

        for year_data in tax_years:
            self.data_by_year[year_data["year"]] = {
                "maximumTaxedIncome": year_data.get("maximumTaxedIncome", 0),
                "employeePortion": year_data.get("employeePortion", 0),
            }

        last_specified_year = tax_years[-1]["year"]
        current_data = dict(self.data_by_year[last_specified_year])
        year = last_specified_year + 1
        while year <= self.final_year:
            # Only the wage base grows; the rate stays the same
            current_data = {
                "maximumTaxedIncome": current_data["maximumTaxedIncome"] * (1 + self.annual_increase),
                "employeePortion": current_data["employeePortion"],
            }
            self.data_by_year[year] = dict(current_data)
            year += 1

    def get_data_for_year(self, year: int) -> dict:
        """Return {maximumTaxedIncome, employeePortion} for a tax year."""
        if year not in self.data_by_year:
            raise ValueError(f"No Social Security data available for year {year}")
        return self.data_by_year[year]

    def total_contribution(self, gross_income: float, year: int) -> float:
        """Annual Social Security tax on gross income, capped at the wage base."""
        data = self.get_data_for_year(year)
        return min(gross_income, data["maximumTaxedIncome"]) * data["employeePortion"]

    def per_period_contribution(self, gross_pay: float, periods_per_year: int, year: int) -> float:
        """Social Security withheld from one paycheck.

        The taxable amount is capped at the per-period share of the wage base,
        so a paycheck never withholds more than maximumTaxedIncome / periods.
        """
        data = self.get_data_for_year(year)
        per_period_base = data["maximumTaxedIncome"] / periods_per_year
        return min(gross_pay, per_period_base) * data["employeePortion"]

    def rate(self, year: int) -> float:
        return self.get_data_for_year(year)["employeePortion"]
