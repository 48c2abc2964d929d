import json
import os


class MedicareDetails:
    """Holds Medicare statutory details and computes contributions.

    Constructed with statutory values loaded from reference files. Calculation
    methods accept variable program inputs (e.g., gross income).
    """

    def __init__(self, medicare_rate: float, surcharge_threshold: float, surcharge_rate: float):
        """Initialize with statutory details.

        Args:
            medicare_rate: The base Medicare tax rate.
            surcharge_threshold: Annual income above which the surcharge applies.
            surcharge_rate: The additional Medicare surcharge rate.
        """
        self.medicare_rate = medicare_rate
        self.surcharge_threshold = surcharge_threshold
        self.surcharge_rate = surcharge_rate

    @classmethod
    def from_reference(cls) -> 'MedicareDetails':
        """Build from reference/flat-tax-details.json."""
        ref_path = os.path.join(os.path.dirname(__file__), '../../reference/flat-tax-details.json')
        with open(ref_path, 'r') as f:
            data = json.load(f)
        return cls(
            medicare_rate=data["medicare"],
            surcharge_threshold=data["surchargeThreshold"],
            surcharge_rate=data["surchargeRate"],
        )

    def base_contribution(self, medicare_base: float) -> float:
        """Calculate the base Medicare contribution.

        Args:
            medicare_base: Wages subject to Medicare (gross pay less Section 125 deductions).

        Returns:
            The base Medicare charge.
        """
        return medicare_base * self.medicare_rate

    def surcharge(self, gross_income: float) -> float:
        """Calculate the Medicare surcharge if applicable.

        Args:
            gross_income: Annual gross income.

        Returns:
            The surcharge amount (0 if below threshold).
        """
        if gross_income > self.surcharge_threshold:
            return (gross_income - self.surcharge_threshold) * self.surcharge_rate
        return 0

    def total_contribution(self, medicare_base: float, gross_income: float) -> float:
        """Calculate total Medicare contribution including surcharge.

        Args:
            medicare_base: Wages subject to Medicare.
            gross_income: Annual gross income (used for the surcharge).

        Returns:
            The total Medicare contribution.
        """
        return self.base_contribution(medicare_base) + self.surcharge(gross_income)

    def per_period_contribution(self, gross_pay: float, periods_per_year: int) -> float:
        """Medicare withheld from one paycheck.

        The surcharge is computed on annualized gross pay and spread evenly
        across the pay periods.
        """
        annual_gross = gross_pay * periods_per_year
        return self.base_contribution(gross_pay) + self.surcharge(annual_gross) / periods_per_year
