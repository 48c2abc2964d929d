"""Required minimum distribution projection using the IRS Uniform Lifetime Table."""

import json
import os
from dataclasses import dataclass

from calc.pay_schedule import parse_number


@dataclass
class RetirementInputs:
    account_balance: float = 1_000_000.0
    current_age: int = 73
    expected_return_percent: float = 5.0
    tax_rate_percent: float = 22.0
    projection_years: int = 20

    @classmethod
    def from_spec(cls, spec: dict) -> 'RetirementInputs':
        data = spec.get('retirement') or {}
        return cls(
            account_balance=parse_number(data.get('accountBalance'), 1_000_000.0),
            current_age=int(parse_number(data.get('currentAge'), 73)),
            expected_return_percent=parse_number(data.get('expectedReturnPercent'), 5.0),
            tax_rate_percent=parse_number(data.get('taxRatePercent'), 22.0),
            projection_years=int(parse_number(data.get('projectionYears'), 20)),
        )


class RMDCalculator:
    def __init__(self):
        ref_path = os.path.join(os.path.dirname(__file__), '../../reference/rmd-uniform-lifetime.json')
        with open(ref_path, 'r') as f:
            data = json.load(f)
        table = data.get('uniformLifetime', {})
        if not table:
            raise ValueError("rmd-uniform-lifetime.json must contain a 'uniformLifetime' table")
        self.table = {int(age): period for age, period in table.items()}
        self.min_age = min(self.table)
        self.max_age = max(self.table)
        self.start_age = data.get('rmdStartAge', 73)

    def distribution_period(self, age: int) -> float:
        """Divisor for an age; ages outside the table use its first or last entry."""
        age = max(self.min_age, min(age, self.max_age))
        return self.table[age]

    def rmd(self, balance: float, age: int) -> float:
        if age < self.start_age:
            return 0.0
        return balance / self.distribution_period(age)

    def calculate(self, inputs: RetirementInputs) -> dict:
        tax_rate = inputs.tax_rate_percent / 100
        current_rmd = self.rmd(inputs.account_balance, inputs.current_age)
        tax_on_rmd = current_rmd * tax_rate

        projection = []
        balance = inputs.account_balance
        cumulative_rmd = 0.0
        cumulative_tax = 0.0
        for year in range(inputs.projection_years + 1):
            age = inputs.current_age + year
            period = self.distribution_period(age)
            rmd = self.rmd(balance, age)
            tax = rmd * tax_rate
            cumulative_rmd += rmd
            cumulative_tax += tax
            projection.append({
                'year': year,
                'age': age,
                'balance': balance,
                'distributionPeriod': period,
                'rmd': rmd,
                'tax': tax,
                'afterTax': rmd - tax,
                'rmdPercent': rmd / balance * 100 if balance > 0 else 0.0,
                'cumulativeRmd': cumulative_rmd,
                'cumulativeTax': cumulative_tax,
            })
            balance = max(0.0, (balance - rmd) * (1 + inputs.expected_return_percent / 100))

        return {
            'rmdStartAge': self.start_age,
            'distributionPeriod': self.distribution_period(inputs.current_age),
            'currentRmd': current_rmd,
            'taxOnRmd': tax_on_rmd,
            'afterTaxRmd': current_rmd - tax_on_rmd,
            'projection': projection,
            'finalBalance': projection[-1]['balance'],
            'totalRmds': cumulative_rmd,
            'totalTaxes': cumulative_tax,
        }
