"""FIRE (financial independence, retire early) projection from paycheck savings."""

from dataclasses import dataclass
from typing import List, Optional

from calc.employer_match import EmployerMatchCalculator, MatchPolicy
from calc.pay_schedule import pay_periods_per_year, parse_number
from model.PaycheckResult import Deduction

FIRE_RETIREMENT_LABELS = ('401(k)', '401k', '403(b)', '403b', '457(b)', '457b',
                          'roth 401(k)', 'roth 401k', 'roth ira', 'ira')
LEAN_FIRE_FACTOR = 0.6
FAT_FIRE_FACTOR = 1.5
COAST_FIRE_AGE = 65
MAX_YEARS = 100
MAX_PROJECTION_YEARS = 50

SAVINGS_RATE_INSIGHTS = (
    (50, "Extreme Saver! You're on the fast track to FIRE."),
    (30, "Great savings rate. FIRE is very achievable."),
    (20, "Solid savings rate. Keep pushing higher if possible."),
    (10, "Average savings rate. Consider increasing contributions."),
)
LOW_SAVINGS_INSIGHT = "Low savings rate. Review expenses or increase income."


@dataclass
class FireInputs:
    current_age: int = 30
    current_savings: float = 50000.0
    annual_expenses: float = 50000.0
    expected_return_percent: float = 7.0
    safe_withdrawal_rate_percent: float = 4.0

    @classmethod
    def from_spec(cls, spec: dict) -> 'FireInputs':
        data = spec.get('fire') or {}
        return cls(
            current_age=int(parse_number(data.get('currentAge'), 30)),
            current_savings=parse_number(data.get('currentSavings'), 50000.0),
            annual_expenses=parse_number(data.get('annualExpenses'), 50000.0),
            expected_return_percent=parse_number(data.get('expectedReturnPercent'), 7.0),
            safe_withdrawal_rate_percent=parse_number(data.get('safeWithdrawalRatePercent'), 4.0),
        )


def is_fire_retirement(label: str) -> bool:
    lower = (label or '').lower()
    return any(r in lower for r in FIRE_RETIREMENT_LABELS)


def is_savings_deduction(label: str) -> bool:
    lower = (label or '').lower()
    return is_fire_retirement(label) or 'hsa' in lower or 'savings' in lower


def years_to_target(target: float, current: float, annual_contribution: float,
                    return_percent: float) -> Optional[int]:
    """Whole years of compounding plus contributions until current reaches target.

    Returns None when the target cannot be reached within 100 years.
    """
    if current >= target:
        return 0
    if annual_contribution <= 0 and return_percent <= 0:
        return None
    rate = return_percent / 100
    portfolio = current
    years = 0
    while portfolio < target and years < MAX_YEARS:
        portfolio = portfolio * (1 + rate) + annual_contribution
        years += 1
    return None if years >= MAX_YEARS else years


def savings_rate_insight(savings_rate: float) -> str:
    for threshold, message in SAVINGS_RATE_INSIGHTS:
        if savings_rate >= threshold:
            return message
    return LOW_SAVINGS_INSIGHT


class FireCalculator:
    def __init__(self, inputs: FireInputs, match_policy: Optional[MatchPolicy] = None):
        self.inputs = inputs
        self.match_policy = match_policy if match_policy is not None else MatchPolicy()

    def annual_savings(self, gross_pay: float, pay_frequency: str,
                       pre_tax_deductions: List[Deduction], post_tax_deductions: List[Deduction]) -> dict:
        """Savings per paycheck and per year, employer match included in the annual total."""
        periods = pay_periods_per_year(pay_frequency)
        pre_tax_savings = sum(d.amount(gross_pay) for d in pre_tax_deductions if is_savings_deduction(d.name))
        post_tax_savings = sum(d.amount(gross_pay) for d in post_tax_deductions if is_savings_deduction(d.name))

        # Only pre-tax retirement lines count toward the match here
        retirement = sum(d.amount(gross_pay) for d in pre_tax_deductions if is_fire_retirement(d.name))
        employee_percent = retirement / gross_pay * 100 if gross_pay > 0 else 0.0
        employer = EmployerMatchCalculator(self.match_policy).match_for_percent(gross_pay, employee_percent)
        employer_annual = employer['total'] * periods

        per_paycheck = pre_tax_savings + post_tax_savings
        annual = per_paycheck * periods + employer_annual
        annual_gross = gross_pay * periods
        return {
            'periodsPerYear': periods,
            'savingsPerPaycheck': per_paycheck,
            'employerMatchAnnual': employer_annual,
            'annualSavings': annual,
            'savingsRate': annual / annual_gross * 100 if annual_gross > 0 else 0.0,
        }

    def calculate(self, gross_pay: float, net_pay: float, pay_frequency: str,
                  pre_tax_deductions: List[Deduction], post_tax_deductions: List[Deduction]) -> dict:
        inputs = self.inputs
        savings = self.annual_savings(gross_pay, pay_frequency, pre_tax_deductions, post_tax_deductions)
        annual_savings = savings['annualSavings']

        swr = inputs.safe_withdrawal_rate_percent / 100
        if swr <= 0:
            raise ValueError("Safe withdrawal rate must be greater than 0")
        fire_number = inputs.annual_expenses / swr
        lean_fire_number = fire_number * LEAN_FIRE_FACTOR
        fat_fire_number = fire_number * FAT_FIRE_FACTOR

        def years_and_age(target: float) -> tuple:
            years = years_to_target(target, inputs.current_savings, annual_savings, inputs.expected_return_percent)
            return years, (inputs.current_age + years if years is not None else None)

        years_to_fire, fire_age = years_and_age(fire_number)
        years_to_lean, lean_age = years_and_age(lean_fire_number)
        years_to_fat, fat_age = years_and_age(fat_fire_number)

        coast_years = COAST_FIRE_AGE - inputs.current_age
        if coast_years > 0:
            coast_fire_number = fire_number / (1 + inputs.expected_return_percent / 100) ** coast_years
        else:
            coast_fire_number = fire_number

        horizon = MAX_PROJECTION_YEARS if years_to_fat is None else min(years_to_fat + 5, MAX_PROJECTION_YEARS)
        projection = []
        portfolio = inputs.current_savings
        for year in range(horizon + 1):
            projection.append({'year': year, 'age': inputs.current_age + year, 'portfolio': portfolio})
            portfolio = portfolio * (1 + inputs.expected_return_percent / 100) + annual_savings

        return {
            **savings,
            'annualNet': net_pay * savings['periodsPerYear'],
            'fireNumber': fire_number,
            'leanFireNumber': lean_fire_number,
            'fatFireNumber': fat_fire_number,
            'yearsToFire': years_to_fire,
            'yearsToLeanFire': years_to_lean,
            'yearsToFatFire': years_to_fat,
            'fireAge': fire_age,
            'leanFireAge': lean_age,
            'fatFireAge': fat_age,
            'coastFireNumber': coast_fire_number,
            'coastFireReached': inputs.current_savings >= coast_fire_number,
            'progressPercent': min(inputs.current_savings / fire_number * 100, 100.0) if fire_number > 0 else 100.0,
            'insight': savings_rate_insight(savings['savingsRate']),
            'projection': projection,
        }
